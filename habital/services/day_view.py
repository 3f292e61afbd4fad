"""Per-day habit list: what the main screen shows for one date.

Views are computed from schedule snapshots and memoised in the shared
:class:`DerivedStateCache`; the cache is kept fresh by the
:class:`CacheInvalidator` listening on the event bus.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from ..core.database import Database
from ..domain.schedule import HabitSchedule
from ..infrastructure.repositories import SqlAlchemyHabitRepository
from ..models.enums import HabitSortOption
from ..models.habit_aggregate import schedule_from_habit
from . import recurrence
from .completion import completion_progress, completion_status_text, is_completed
from .derived_cache import CacheKey, DerivedStateCache
from .sorting import sort_rows
from .statistics_service import StatisticsService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HabitRow:
    habit_id: int
    name: str
    icon: Optional[str]
    color: Optional[str]
    is_bad_habit: bool
    is_archived: bool
    habit_list_id: Optional[int]
    # Custom-order position in the viewed scope
    position: int
    is_active: bool
    is_completed: bool
    is_skipped: bool
    progress: float
    status_text: str
    current_streak: int
    score: int
    recent_score: float
    next_occurrence: str
    overdue_days: Optional[int]


class DayViewService:
    """Builds and caches the sorted habit rows for a day."""

    def __init__(
        self,
        database: Database,
        cache: DerivedStateCache,
        statistics: StatisticsService,
    ):
        self.database = database
        self.cache = cache
        self.statistics = statistics

    def habits_for_day(
        self,
        day: Optional[date] = None,
        list_id: Optional[int] = None,
        archived: bool = False,
        sort_option: HabitSortOption = HabitSortOption.CUSTOM,
        active_only: bool = False,
    ) -> List[HabitRow]:
        """Rows for ``day``: archived habits only when ``archived`` is set.

        Habits that start after ``day`` are left out. ``active_only``
        further keeps the habits that are due (or carried over) that day.
        """
        day = day or self.statistics.today()
        key = CacheKey(day, list_id, archived, HabitSortOption.parse(sort_option))
        rows = self.cache.get_or_compute(key, lambda: self._build(key))
        if active_only:
            return [row for row in rows if row.is_active]
        return list(rows)

    def _build(self, key: CacheKey) -> List[HabitRow]:
        with self.database.session_scope() as session:
            repo = SqlAlchemyHabitRepository(session)
            habits = repo.list_habits(
                list_id=key.list_id,
                include_archived=key.archived,
                archived_only=key.archived,
            )
            entries = [
                (schedule_from_habit(h), h.icon, h.color, h.habit_list_id,
                 h.list_order if key.list_id is not None else h.order)
                for h in habits
                if h.start_date <= key.day
            ]

        rows = [self._row(s, icon, color, list_id, position, key.day)
                for s, icon, color, list_id, position in entries]
        logger.debug("Built day view %s with %d rows", key, len(rows))
        return sort_rows(rows, key.sort_option)

    def _row(
        self,
        schedule: HabitSchedule,
        icon: Optional[str],
        color: Optional[str],
        list_id: Optional[int],
        position: int,
        day: date,
    ) -> HabitRow:
        today = self.statistics.today()
        stats = self.statistics
        return HabitRow(
            habit_id=schedule.habit_id,
            name=schedule.name,
            icon=icon,
            color=color,
            is_bad_habit=schedule.is_bad_habit,
            is_archived=schedule.is_archived,
            habit_list_id=list_id,
            position=position or 0,
            is_active=recurrence.is_active(schedule, day, today),
            is_completed=is_completed(schedule, day),
            is_skipped=schedule.is_skipped(day),
            progress=completion_progress(schedule, day),
            status_text=completion_status_text(schedule, day),
            current_streak=stats.streak_of(schedule, day),
            score=stats.breakdown_of(schedule).total_score,
            recent_score=stats.recent_score_of(schedule, day),
            next_occurrence=stats.next_occurrence_of(schedule, day),
            overdue_days=recurrence.overdue_days(schedule, day, today),
        )
