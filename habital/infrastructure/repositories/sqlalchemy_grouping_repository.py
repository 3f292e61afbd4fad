"""SQLAlchemy implementations of the list, category and preference repositories."""

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from habital.models.habit_list import HabitCategory, HabitList
from habital.models.preference import Preference

logger = logging.getLogger(__name__)


class SqlAlchemyHabitListRepository:
    """Concrete HabitListRepository backed by a SQLAlchemy session."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get_by_id(self, list_id: int) -> Optional[HabitList]:
        result = self._session.execute(select(HabitList).where(HabitList.id == list_id))
        return result.scalar_one_or_none()

    def all(self) -> List[HabitList]:
        result = self._session.execute(
            select(HabitList).order_by(HabitList.order, HabitList.id)
        )
        return list(result.scalars().all())

    def add(self, habit_list: HabitList) -> HabitList:
        self._session.add(habit_list)
        self._session.flush()
        return habit_list

    def delete(self, habit_list: HabitList) -> None:
        """Detach the list's habits, then remove the list."""
        for habit in list(habit_list.habits):
            habit.habit_list = None
            habit.list_order = 0
        self._session.delete(habit_list)
        self._session.flush()


class SqlAlchemyCategoryRepository:
    """Concrete CategoryRepository backed by a SQLAlchemy session."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get_by_id(self, category_id: int) -> Optional[HabitCategory]:
        result = self._session.execute(
            select(HabitCategory).where(HabitCategory.id == category_id)
        )
        return result.scalar_one_or_none()

    def all(self) -> List[HabitCategory]:
        result = self._session.execute(
            select(HabitCategory).order_by(HabitCategory.order, HabitCategory.id)
        )
        return list(result.scalars().all())

    def add(self, category: HabitCategory) -> HabitCategory:
        self._session.add(category)
        self._session.flush()
        return category

    def delete(self, category: HabitCategory) -> None:
        for habit in list(category.habits):
            habit.category = None
        self._session.delete(category)
        self._session.flush()


class SqlAlchemyPreferenceRepository:
    """Concrete PreferenceRepository backed by the ``preferences`` table."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get_value(self, key: str) -> Optional[str]:
        row = self._session.get(Preference, key)
        return row.value if row is not None else None

    def set_value(self, key: str, value: Optional[str]) -> None:
        row = self._session.get(Preference, key)
        if row is None:
            self._session.add(Preference(key=key, value=value))
        else:
            row.value = value
        self._session.flush()
        logger.debug("Preference %s set to %r", key, value)
