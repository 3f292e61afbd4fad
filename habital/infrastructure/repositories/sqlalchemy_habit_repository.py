"""SQLAlchemy implementation of HabitRepository."""

import logging
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from habital.models.habit import Habit
from habital.models.repeat_pattern import RepeatPattern

logger = logging.getLogger(__name__)

_LOAD_OPTIONS = (
    selectinload(Habit.repeat_patterns).selectinload(RepeatPattern.daily_goal),
    selectinload(Habit.repeat_patterns).selectinload(RepeatPattern.weekly_goal),
    selectinload(Habit.repeat_patterns).selectinload(RepeatPattern.monthly_goal),
    selectinload(Habit.completions),
)


class SqlAlchemyHabitRepository:
    """Concrete HabitRepository backed by a SQLAlchemy session."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get_by_id(self, habit_id: int) -> Optional[Habit]:
        """Look up a habit by primary key, with schedule and log loaded."""
        result = self._session.execute(
            select(Habit).options(*_LOAD_OPTIONS).where(Habit.id == habit_id)
        )
        return result.scalar_one_or_none()

    def list_habits(
        self,
        list_id: Optional[int] = None,
        include_archived: bool = False,
        archived_only: bool = False,
    ) -> List[Habit]:
        """List habits in custom order."""
        stmt = select(Habit).options(*_LOAD_OPTIONS)
        if list_id is not None:
            stmt = stmt.where(Habit.habit_list_id == list_id)
        if archived_only:
            stmt = stmt.where(Habit.is_archived.is_(True))
        elif not include_archived:
            stmt = stmt.where(Habit.is_archived.is_(False))
        if list_id is not None:
            stmt = stmt.order_by(Habit.list_order, Habit.id)
        else:
            stmt = stmt.order_by(Habit.order, Habit.id)
        return list(self._session.execute(stmt).scalars().all())

    def add(self, habit: Habit) -> Habit:
        """Stage a habit and flush to assign its ID."""
        self._session.add(habit)
        self._session.flush()
        logger.debug("Added habit %s (%s)", habit.id, habit.name)
        return habit

    def delete(self, habit: Habit) -> None:
        self._session.delete(habit)
        self._session.flush()

    def count_archived(self) -> int:
        result = self._session.execute(
            select(func.count(Habit.id)).where(Habit.is_archived.is_(True))
        )
        return int(result.scalar() or 0)
