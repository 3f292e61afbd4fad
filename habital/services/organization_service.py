"""Habit lists and categories: CRUD with a contiguous display order."""

from typing import Any, List, Optional, Sequence, Type, Union

import structlog
from sqlalchemy.orm import Session

from ..core.database import Database
from ..domain.errors import CategoryNotFound, HabitListNotFound
from ..domain.events import EventBus, ForceCalendarUpdate
from ..infrastructure.repositories import (
    SqlAlchemyCategoryRepository,
    SqlAlchemyHabitListRepository,
)
from ..models.habit_list import HabitCategory, HabitList
from . import ordering

logger = structlog.get_logger(__name__)

Group = Union[HabitList, HabitCategory]
GroupRepository = Union[SqlAlchemyHabitListRepository, SqlAlchemyCategoryRepository]

GROUP_FIELDS = ("name", "icon", "color")


class _GroupService:
    """Shared create/rename/reorder/delete logic for lists and categories."""

    model: Type[Group]
    repository: Type[GroupRepository]
    not_found: Type[Exception]
    kind: str

    def __init__(self, database: Database, bus: EventBus):
        self.database = database
        self.bus = bus

    def all(self) -> List[Group]:
        with self.database.session_scope() as session:
            return self.repository(session).all()

    def get(self, group_id: int) -> Group:
        with self.database.session_scope() as session:
            return self._load(session, group_id)

    def create(self, name: str, icon: Optional[str] = None, color: Optional[str] = None) -> Group:
        """Create a group at the end of the order."""
        with self.database.session_scope() as session:
            repo = self.repository(session)
            group = self.model(name=name.strip(), icon=icon, color=color, order=len(repo.all()))
            repo.add(group)
        logger.info(f"{self.kind}_created", group_id=group.id, name=group.name)
        return group

    def update(self, group_id: int, **changes: Any) -> Group:
        unknown = set(changes) - set(GROUP_FIELDS)
        if unknown:
            raise TypeError(f"Cannot update field(s): {', '.join(sorted(unknown))}")
        with self.database.session_scope() as session:
            group = self._load(session, group_id)
            for key, value in changes.items():
                setattr(group, key, value.strip() if key == "name" and value else value)
        logger.info(f"{self.kind}_updated", group_id=group_id, changed=sorted(changes))
        return group

    def delete(self, group_id: int) -> None:
        """Delete a group; its habits stay, detached from it."""
        with self.database.session_scope() as session:
            repo = self.repository(session)
            repo.delete(self._load(session, group_id))
            ordering.compact(repo.all())
        logger.info(f"{self.kind}_deleted", group_id=group_id)
        self.bus.publish(ForceCalendarUpdate(reason=f"{self.kind} {group_id} deleted"))

    def move(self, from_index: int, to_index: int) -> List[int]:
        with self.database.session_scope() as session:
            ordered = ordering.move(self.repository(session).all(), from_index, to_index)
            return [g.id for g in ordered]

    def arrange(self, group_ids: Sequence[int]) -> List[int]:
        with self.database.session_scope() as session:
            ordered = ordering.arrange(self.repository(session).all(), list(group_ids))
            return [g.id for g in ordered]

    def _load(self, session: Session, group_id: int) -> Group:
        group = self.repository(session).get_by_id(group_id)
        if group is None:
            raise self.not_found(group_id)
        return group


class HabitListService(_GroupService):
    """User-defined lists (the tabs habits are grouped under)."""

    model = HabitList
    repository = SqlAlchemyHabitListRepository
    not_found = HabitListNotFound
    kind = "habit_list"


class CategoryService(_GroupService):
    model = HabitCategory
    repository = SqlAlchemyCategoryRepository
    not_found = CategoryNotFound
    kind = "category"
