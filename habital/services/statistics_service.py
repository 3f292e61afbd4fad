"""Per-habit statistics backed by the store.

Loads a habit's schedule snapshot in a short transaction and hands it to
the pure calculators in :mod:`recurrence`, :mod:`streaks` and
:mod:`scoring`. Windows and lookbacks come from the ``statistics``
section of the YAML defaults.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Dict, List, Optional

from ..core.database import Database
from ..core.defaults_loader import get_statistic
from ..domain.errors import HabitNotFound
from ..domain.schedule import HabitSchedule
from ..infrastructure.repositories import SqlAlchemyHabitRepository
from ..models.enums import HabitIntensity
from ..models.habit_aggregate import schedule_from_habit
from ..utils.dates import today as local_today
from . import completion, recurrence, scoring, streaks
from .completion import completion_percentage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HabitStats:
    """Everything the stats view shows for one habit."""

    habit_id: int
    name: str
    current_streak: int
    longest_streak: int
    best_streak_ever: int
    total_completions: int
    score: scoring.ScoreBreakdown
    recent_score: float
    next_occurrence: str
    overdue_days: Optional[int]


@dataclass(frozen=True)
class IntensityStats:
    """Plan adherence of all habits sharing one intensity level."""

    intensity: HabitIntensity
    habit_count: int
    expected: int
    completed: int
    current_streak: int
    best_streak: int

    @property
    def success_rate(self) -> float:
        return self.completed / self.expected if self.expected else 0.0

    @property
    def weighted_rate(self) -> float:
        return self.success_rate * self.intensity.multiplier


class StatisticsService:
    def __init__(
        self,
        database: Database,
        timezone: Optional[str] = None,
        horizon_days: int = recurrence.DEFAULT_HORIZON_DAYS,
    ):
        self.database = database
        self.timezone = timezone
        self.horizon_days = horizon_days
        self.score_window = get_statistic("score_window_days", scoring.SCORE_WINDOW_DAYS)
        self.recent_window = get_statistic("recent_window_days", scoring.RECENT_WINDOW_DAYS)
        self.every_day_lookback = get_statistic(
            "every_day_streak_lookback_days", streaks.EVERY_DAY_LOOKBACK_DAYS
        )
        self.pattern_lookback = get_statistic(
            "pattern_streak_lookback_days", streaks.PATTERN_LOOKBACK_DAYS
        )
        self.longest_window = get_statistic(
            "longest_streak_window_days", streaks.LONGEST_STREAK_WINDOW_DAYS
        )

    def today(self) -> date:
        return local_today(self.timezone)

    def schedule(self, habit_id: int) -> HabitSchedule:
        with self.database.session_scope() as session:
            habit = SqlAlchemyHabitRepository(session).get_by_id(habit_id)
            if habit is None:
                raise HabitNotFound(habit_id)
            return schedule_from_habit(habit)

    # --- Calculators over a snapshot ---

    def streak_of(self, schedule: HabitSchedule, reference: Optional[date] = None) -> int:
        today = self.today()
        return streaks.current_streak(
            schedule,
            reference or today,
            today,
            every_day_lookback=self.every_day_lookback,
            pattern_lookback=self.pattern_lookback,
        )

    def breakdown_of(self, schedule: HabitSchedule) -> scoring.ScoreBreakdown:
        return scoring.score_breakdown(schedule, self.today(), self.score_window)

    def recent_score_of(self, schedule: HabitSchedule, reference: Optional[date] = None) -> float:
        return scoring.recent_completion_score(
            schedule, reference or self.today(), self.recent_window
        )

    def next_occurrence_of(self, schedule: HabitSchedule, from_day: Optional[date] = None) -> str:
        today = self.today()
        return recurrence.next_occurrence_text(
            schedule, from_day or today, self.horizon_days, today
        )

    # --- By id ---

    def current_streak(self, habit_id: int, reference: Optional[date] = None) -> int:
        return self.streak_of(self.schedule(habit_id), reference)

    def longest_streak(self, habit_id: int) -> int:
        return streaks.longest_streak(self.schedule(habit_id), self.today(), self.longest_window)

    def habit_score(self, habit_id: int) -> int:
        return self.breakdown_of(self.schedule(habit_id)).total_score

    def score_breakdown(self, habit_id: int) -> scoring.ScoreBreakdown:
        return self.breakdown_of(self.schedule(habit_id))

    def recent_completion_score(self, habit_id: int, reference: Optional[date] = None) -> float:
        return self.recent_score_of(self.schedule(habit_id), reference)

    def next_occurrence_text(self, habit_id: int, from_day: Optional[date] = None) -> str:
        return self.next_occurrence_of(self.schedule(habit_id), from_day)

    def overdue_days(self, habit_id: int, day: Optional[date] = None) -> Optional[int]:
        today = self.today()
        return recurrence.overdue_days(self.schedule(habit_id), day or today, today)

    def completion_percentage(self, day: Optional[date] = None, list_id: Optional[int] = None) -> float:
        """Share of the habits active on ``day`` that are completed, 0-100."""
        with self.database.session_scope() as session:
            habits = SqlAlchemyHabitRepository(session).list_habits(list_id=list_id)
            schedules: List[HabitSchedule] = [schedule_from_habit(h) for h in habits]
        return completion_percentage(schedules, day or self.today(), self.today())

    def habit_stats(self, habit_id: int) -> HabitStats:
        with self.database.session_scope() as session:
            habit = SqlAlchemyHabitRepository(session).get_by_id(habit_id)
            if habit is None:
                raise HabitNotFound(habit_id)
            schedule = schedule_from_habit(habit)
            best = habit.best_streak_ever or 0
            total = habit.total_completions or 0

        today = self.today()
        current = self.streak_of(schedule)
        longest = streaks.longest_streak(schedule, today, self.longest_window)
        logger.debug("Computed stats for habit %s", habit_id)
        return HabitStats(
            habit_id=habit_id,
            name=schedule.name,
            current_streak=current,
            longest_streak=longest,
            best_streak_ever=max(best, longest, current),
            total_completions=total,
            score=self.breakdown_of(schedule),
            recent_score=self.recent_score_of(schedule),
            next_occurrence=self.next_occurrence_of(schedule),
            overdue_days=recurrence.overdue_days(schedule, today, today),
        )

    def intensity_breakdown(
        self, start: date, end: Optional[date] = None
    ) -> List[IntensityStats]:
        """Expected versus completed occurrences per intensity level.

        Every active day of a habit counts its required repeats as expected
        occurrences, all of them completed when the day is. Levels without
        non-archived habits are omitted.
        """
        today = self.today()
        end = end or today
        grouped: Dict[HabitIntensity, List[HabitSchedule]] = {}
        with self.database.session_scope() as session:
            for habit in SqlAlchemyHabitRepository(session).list_habits():
                grouped.setdefault(habit.intensity, []).append(schedule_from_habit(habit))

        results = []
        for intensity in sorted(grouped):
            schedules = grouped[intensity]
            expected = completed = 0
            for schedule in schedules:
                for day in recurrence.active_days(schedule, start, end, today):
                    repeats = completion.repeats_per_day(schedule, day)
                    expected += repeats
                    if completion.is_completed(schedule, day):
                        completed += repeats
            results.append(
                IntensityStats(
                    intensity=intensity,
                    habit_count=len(schedules),
                    expected=expected,
                    completed=completed,
                    current_streak=max(self.streak_of(s) for s in schedules),
                    best_streak=max(
                        streaks.longest_streak(s, today, self.longest_window) for s in schedules
                    ),
                )
            )
        logger.debug("Computed intensity breakdown for %d level(s)", len(results))
        return results
