"""Habit scores.

``habit_score`` rates the last 30 days on a 0-100 scale: up to 80 points
for the share of expected repetitions that were done, plus up to 20 for
the current streak measured against the same expectation.

``recent_completion_score`` is a 0-1 activity signal used to sort habits
by recent activity. It combines recency, frequency and spread of
completions over 30 days.
"""

import math
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional

from ..domain.schedule import HabitSchedule
from ..models.enums import HabitTrackingType
from ..utils.dates import today as local_today
from .completion import completed_count, is_completed, repeats_per_day, tracking_type
from .recurrence import active_days, effective_pattern
from .streaks import current_streak

SCORE_WINDOW_DAYS = 30
BASE_POINTS = 80.0
STREAK_POINTS = 20.0

RECENT_WINDOW_DAYS = 30
RECENCY_WEIGHT = 0.4
FREQUENCY_WEIGHT = 0.35
CONSISTENCY_WEIGHT = 0.25
CONSISTENCY_PERIODS = 6
CONSISTENCY_PERIOD_DAYS = 5


@dataclass(frozen=True)
class ScoreBreakdown:
    """Components of a habit score."""

    total_score: int
    base_score: int
    streak_bonus: int
    expected_count: int
    actual_count: int
    completion_ratio: float
    current_streak_days: int
    window_days: int
    streak_ratio: float

    @classmethod
    def empty(cls, window_days: int = 0) -> "ScoreBreakdown":
        return cls(0, 0, 0, 0, 0, 0.0, 0, window_days, 0.0)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _done_units(schedule: HabitSchedule, day: date, required: int) -> int:
    if (
        not schedule.is_bad_habit
        and tracking_type(schedule, day) == HabitTrackingType.REPETITIONS
    ):
        return min(completed_count(schedule, day), required)
    return required if is_completed(schedule, day) else 0


def score_breakdown(
    schedule: HabitSchedule,
    today: Optional[date] = None,
    window_days: int = SCORE_WINDOW_DAYS,
) -> ScoreBreakdown:
    """Full breakdown of :func:`habit_score`."""
    today = today or local_today()
    window_start = max(schedule.start_date, today - timedelta(days=window_days))
    span = max(0, (today - window_start).days)
    if effective_pattern(schedule, today) is None:
        return ScoreBreakdown.empty(span)

    expected = actual = 0
    for day in active_days(schedule, window_start, today, today):
        if schedule.is_skipped(day):
            continue
        required = repeats_per_day(schedule, day)
        expected += required
        actual += _done_units(schedule, day, required)
    if expected == 0:
        return ScoreBreakdown.empty(span)

    ratio = min(1.0, actual / expected)
    base = ratio * BASE_POINTS
    streak_days = current_streak(schedule, today, today)
    streak_ratio = min(1.0, streak_days / expected)
    bonus = streak_ratio * STREAK_POINTS
    total = min(100, max(0, _round_half_up(base + bonus)))
    return ScoreBreakdown(
        total_score=total,
        base_score=_round_half_up(base),
        streak_bonus=_round_half_up(bonus),
        expected_count=expected,
        actual_count=actual,
        completion_ratio=actual / expected,
        current_streak_days=streak_days,
        window_days=span,
        streak_ratio=streak_ratio,
    )


def habit_score(
    schedule: HabitSchedule,
    today: Optional[date] = None,
    window_days: int = SCORE_WINDOW_DAYS,
) -> int:
    """Score from 0 to 100 for the trailing window."""
    return score_breakdown(schedule, today, window_days).total_score


def recent_completion_score(
    schedule: HabitSchedule,
    reference: Optional[date] = None,
    window_days: int = RECENT_WINDOW_DAYS,
) -> float:
    """Activity score in ``[0, 1]`` for the ``window_days`` before ``reference``."""
    reference = reference or local_today()
    window_start = reference - timedelta(days=window_days)
    recent = [d for d in schedule.completed_days if window_start <= d <= reference]
    if not recent:
        return 0.0

    days_since_last = (reference - max(recent)).days
    recency = max(0.0, (window_days - days_since_last) / window_days)
    frequency = min(1.0, len(recent) / window_days)

    active_periods = 0
    for index in range(CONSISTENCY_PERIODS):
        period_start = window_start + timedelta(days=index * CONSISTENCY_PERIOD_DAYS)
        period_end = period_start + timedelta(days=CONSISTENCY_PERIOD_DAYS - 1)
        if any(period_start <= d <= period_end for d in recent):
            active_periods += 1
    consistency = active_periods / CONSISTENCY_PERIODS

    return (
        recency * RECENCY_WEIGHT
        + frequency * FREQUENCY_WEIGHT
        + consistency * CONSISTENCY_WEIGHT
    )
