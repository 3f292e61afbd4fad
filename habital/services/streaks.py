"""Streak calculations over active days.

A streak counts consecutive *active* days that were completed; days the
habit is not scheduled neither extend nor break it. Skipped days are
neutral, and an open day at or after ``today`` never breaks a streak:
the user still has time to complete it.
"""

from datetime import date, timedelta
from typing import Optional

from ..domain.schedule import HabitSchedule
from ..utils.dates import today as local_today
from .completion import is_completed
from .recurrence import effective_pattern, is_active

EVERY_DAY_LOOKBACK_DAYS = 500
PATTERN_LOOKBACK_DAYS = 90
LONGEST_STREAK_WINDOW_DAYS = 365


def current_streak(
    schedule: HabitSchedule,
    reference: date,
    today: Optional[date] = None,
    every_day_lookback: int = EVERY_DAY_LOOKBACK_DAYS,
    pattern_lookback: int = PATTERN_LOOKBACK_DAYS,
) -> int:
    """Completed active days in a row, counting back from ``reference``."""
    today = today or local_today()
    pattern = effective_pattern(schedule, reference)
    if pattern is None:
        return 0
    lookback = every_day_lookback if pattern.is_every_day else pattern_lookback
    floor = max(schedule.start_date, reference - timedelta(days=lookback))

    streak = 0
    day = reference
    while day >= floor:
        if is_active(schedule, day, today):
            if is_completed(schedule, day):
                streak += 1
            elif day >= today or schedule.is_skipped(day):
                pass
            else:
                break
        day -= timedelta(days=1)
    return streak


def longest_streak(
    schedule: HabitSchedule,
    today: Optional[date] = None,
    window_days: int = LONGEST_STREAK_WINDOW_DAYS,
) -> int:
    """Longest run of completed active days within the last ``window_days``."""
    today = today or local_today()
    day = max(schedule.start_date, today - timedelta(days=window_days))
    best = run = 0
    while day <= today:
        if is_active(schedule, day, today):
            if is_completed(schedule, day):
                run += 1
                best = max(best, run)
            elif not (day >= today or schedule.is_skipped(day)):
                run = 0
        day += timedelta(days=1)
    return best
