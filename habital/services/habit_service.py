"""Habit lifecycle: create, edit, schedule changes, ordering and archiving.

Each public method runs in one ``session_scope`` transaction and
publishes its events on the bus only after the commit succeeded.

Two ordered scopes are maintained for the non-archived habits:
``order`` across all habits, and ``list_order`` inside each list.
Both are renumbered to ``0..N-1`` after every structural change.
"""

from datetime import date
from typing import Any, Iterable, List, Optional, Sequence, Tuple

import structlog
from sqlalchemy.orm import Session

from ..core.database import Database
from ..domain.errors import CategoryNotFound, HabitListNotFound, HabitNotFound
from ..domain.events import (
    EventBus,
    HabitCreated,
    HabitDeleted,
    HabitsReordered,
    HabitUpdated,
)
from ..infrastructure.repositories import (
    SqlAlchemyCategoryRepository,
    SqlAlchemyHabitListRepository,
    SqlAlchemyHabitRepository,
)
from ..models.enums import HabitIntensity
from ..models.habit import Habit
from ..models.habit_aggregate import HabitAggregate
from ..models.repeat_pattern import RepeatPattern
from ..utils.dates import today as local_today
from . import ordering

logger = structlog.get_logger(__name__)

LIST_SCOPE = "list_order"
GLOBAL_SCOPE = "order"

# Plain attributes update_habit may change
EDITABLE_FIELDS = (
    "name",
    "habit_description",
    "icon",
    "color",
    "is_bad_habit",
    "intensity_level",
    "start_date",
    "category_id",
)


class HabitService:
    """Application service for everything that changes a habit's identity or place."""

    def __init__(self, database: Database, bus: EventBus, timezone: Optional[str] = None):
        self.database = database
        self.bus = bus
        self.timezone = timezone

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_habit(self, habit_id: int) -> Habit:
        with self.database.session_scope() as session:
            return self._load(session, habit_id)

    def list_habits(
        self,
        list_id: Optional[int] = None,
        include_archived: bool = False,
        archived_only: bool = False,
    ) -> List[Habit]:
        """Habits in custom order; ``list_order`` when a list is given."""
        with self.database.session_scope() as session:
            return SqlAlchemyHabitRepository(session).list_habits(
                list_id=list_id,
                include_archived=include_archived,
                archived_only=archived_only,
            )

    def archived_count(self) -> int:
        with self.database.session_scope() as session:
            return SqlAlchemyHabitRepository(session).count_archived()

    # ------------------------------------------------------------------
    # Create / edit / delete
    # ------------------------------------------------------------------

    def create_habit(
        self,
        name: str,
        pattern: RepeatPattern,
        start_date: Optional[date] = None,
        habit_list_id: Optional[int] = None,
        category_id: Optional[int] = None,
        description: Optional[str] = None,
        icon: Optional[str] = None,
        color: Optional[str] = None,
        is_bad_habit: bool = False,
        intensity: int = HabitIntensity.LIGHT.value,
    ) -> Habit:
        """Create a habit with its first schedule version.

        The habit is appended at the end of the global order and of its
        list. The pattern's ``effective_from`` defaults to the start date.
        """
        start = start_date or local_today(self.timezone)
        with self.database.session_scope() as session:
            repo = SqlAlchemyHabitRepository(session)
            self._check_list(session, habit_list_id)
            self._check_category(session, category_id)

            habit = Habit(
                name=name.strip(),
                habit_description=description,
                icon=icon,
                color=color,
                start_date=start,
                is_bad_habit=is_bad_habit,
                intensity_level=HabitIntensity.from_level(intensity).value,
                habit_list_id=habit_list_id,
                category_id=category_id,
                order=len(repo.list_habits()),
                list_order=(
                    len(repo.list_habits(list_id=habit_list_id))
                    if habit_list_id is not None
                    else 0
                ),
                is_archived=False,
                best_streak_ever=0,
                total_completions=0,
            )
            if pattern.effective_from is None:
                pattern.effective_from = start
            HabitAggregate(habit).add_pattern(pattern)
            repo.add(habit)
            event = HabitCreated(habit_id=habit.id, name=habit.name, habit_list_id=habit_list_id)

        logger.info("habit_created", habit_id=habit.id, name=habit.name, list_id=habit_list_id)
        self.bus.publish(event)
        return habit

    def update_habit(self, habit_id: int, **changes: Any) -> Habit:
        """Change plain fields; see ``EDITABLE_FIELDS``."""
        unknown = set(changes) - set(EDITABLE_FIELDS)
        if unknown:
            raise TypeError(f"Cannot update field(s): {', '.join(sorted(unknown))}")
        with self.database.session_scope() as session:
            habit = self._load(session, habit_id)
            if "category_id" in changes:
                self._check_category(session, changes["category_id"])
            if "intensity_level" in changes:
                changes["intensity_level"] = HabitIntensity.from_level(
                    changes["intensity_level"]
                ).value
            if "name" in changes and changes["name"] is not None:
                changes["name"] = changes["name"].strip()
            changed = [k for k, v in changes.items() if getattr(habit, k) != v]
            for key in changed:
                setattr(habit, key, changes[key])

        if changed:
            logger.info("habit_updated", habit_id=habit_id, changed=changed)
            self.bus.publish(HabitUpdated(habit_id=habit_id, changed=tuple(changed)))
        return habit

    def change_schedule(
        self, habit_id: int, pattern: RepeatPattern, effective_from: Optional[date] = None
    ) -> Habit:
        """Append a schedule version; one already effective that day is replaced.

        Days before ``effective_from`` keep being evaluated with the older
        versions.
        """
        if effective_from is not None:
            pattern.effective_from = effective_from
        elif pattern.effective_from is None:
            pattern.effective_from = local_today(self.timezone)
        with self.database.session_scope() as session:
            habit = self._load(session, habit_id)
            HabitAggregate(habit).add_pattern(pattern)
            session.flush()

        logger.info(
            "habit_schedule_changed", habit_id=habit_id, effective_from=str(pattern.effective_from)
        )
        self.bus.publish(HabitUpdated(habit_id=habit_id, changed=("repeat_patterns",)))
        return habit

    def delete_habit(self, habit_id: int) -> None:
        """Remove a habit with its schedule and history, closing the gap it leaves."""
        with self.database.session_scope() as session:
            repo = SqlAlchemyHabitRepository(session)
            habit = self._load(session, habit_id)
            list_id = habit.habit_list_id
            repo.delete(habit)
            self._compact_scopes(session, [list_id])

        logger.info("habit_deleted", habit_id=habit_id, list_id=list_id)
        self.bus.publish(HabitDeleted(habit_id=habit_id, habit_list_id=list_id))

    # ------------------------------------------------------------------
    # Ordering
    # ------------------------------------------------------------------

    def move_habit(self, from_index: int, to_index: int, list_id: Optional[int] = None) -> List[int]:
        """Move one position within a scope; returns the new id sequence."""
        with self.database.session_scope() as session:
            habits = self._scope(session, list_id)
            ordered = ordering.move(habits, from_index, to_index, attr=self._attr(list_id))
            ids = [h.id for h in ordered]
        return self._reordered(list_id, ids)

    def arrange_habits(self, habit_ids: Sequence[int], list_id: Optional[int] = None) -> List[int]:
        """Apply a complete id sequence to a scope."""
        with self.database.session_scope() as session:
            habits = self._scope(session, list_id)
            ordered = ordering.arrange(habits, list(habit_ids), attr=self._attr(list_id))
            ids = [h.id for h in ordered]
        return self._reordered(list_id, ids)

    def move_to_list(self, habit_id: int, list_id: Optional[int]) -> Habit:
        """Move a habit to another list (or out of any list), appended at the end."""
        with self.database.session_scope() as session:
            habit = self._load(session, habit_id)
            self._check_list(session, list_id)
            old_list = habit.habit_list_id
            if old_list == list_id:
                return habit
            if list_id is not None and not habit.is_archived:
                habit.list_order = len(self._scope(session, list_id))
            habit.habit_list_id = list_id
            session.flush()
            self._compact_scopes(session, [old_list, list_id])

        logger.info("habit_moved_to_list", habit_id=habit_id, old_list=old_list, new_list=list_id)
        self.bus.publish(HabitUpdated(habit_id=habit_id, changed=("habit_list_id",)))
        return habit

    # ------------------------------------------------------------------
    # Archiving
    # ------------------------------------------------------------------

    def archive_habit(self, habit_id: int) -> Habit:
        return self._set_archived([habit_id], True)[0][0]

    def unarchive_habit(self, habit_id: int) -> Habit:
        return self._set_archived([habit_id], False)[0][0]

    def toggle_archive(self, habit_id: int) -> Habit:
        habit = self.get_habit(habit_id)
        return self._set_archived([habit_id], not habit.is_archived)[0][0]

    def archive_all(self, list_id: Optional[int] = None) -> int:
        """Archive every active habit (of one list, if given); returns the count."""
        ids = [h.id for h in self.list_habits(list_id=list_id)]
        return len(self._set_archived(ids, True)[1])

    def unarchive_all(self) -> int:
        ids = [h.id for h in self.list_habits(archived_only=True)]
        return len(self._set_archived(ids, False)[1])

    def _set_archived(
        self, habit_ids: Sequence[int], archived: bool
    ) -> Tuple[List[Habit], List[Habit]]:
        """Returns ``(requested habits, habits whose flag actually changed)``."""
        changed: List[Habit] = []
        if not habit_ids:
            return [], changed
        with self.database.session_scope() as session:
            habits = [self._load(session, habit_id) for habit_id in habit_ids]
            touched_lists = set()
            for habit in habits:
                if bool(habit.is_archived) == archived:
                    continue
                if not archived:
                    # Restored habits go to the end of both scopes
                    habit.order = len(self._scope(session, None))
                    if habit.habit_list_id is not None:
                        habit.list_order = len(self._scope(session, habit.habit_list_id))
                habit.is_archived = archived
                session.flush()
                touched_lists.add(habit.habit_list_id)
                changed.append(habit)
            if changed:
                self._compact_scopes(session, touched_lists)

        for habit in changed:
            logger.info("habit_archive_changed", habit_id=habit.id, archived=archived)
            self.bus.publish(HabitUpdated(habit_id=habit.id, changed=("is_archived",)))
        return habits, changed

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _attr(list_id: Optional[int]) -> str:
        return GLOBAL_SCOPE if list_id is None else LIST_SCOPE

    @staticmethod
    def _scope(session: Session, list_id: Optional[int]) -> List[Habit]:
        return SqlAlchemyHabitRepository(session).list_habits(list_id=list_id)

    def _compact_scopes(self, session: Session, list_ids: Iterable[Optional[int]]) -> None:
        session.flush()
        ordering.compact(self._scope(session, None), GLOBAL_SCOPE)
        for list_id in {i for i in list_ids if i is not None}:
            ordering.compact(self._scope(session, list_id), LIST_SCOPE)

    def _reordered(self, list_id: Optional[int], ids: List[int]) -> List[int]:
        logger.info("habits_reordered", list_id=list_id, habit_ids=ids)
        self.bus.publish(HabitsReordered(habit_list_id=list_id, habit_ids=tuple(ids)))
        return ids

    @staticmethod
    def _load(session: Session, habit_id: int) -> Habit:
        habit = SqlAlchemyHabitRepository(session).get_by_id(habit_id)
        if habit is None:
            raise HabitNotFound(habit_id)
        return habit

    @staticmethod
    def _check_list(session: Session, list_id: Optional[int]) -> None:
        if list_id is not None and SqlAlchemyHabitListRepository(session).get_by_id(list_id) is None:
            raise HabitListNotFound(list_id)

    @staticmethod
    def _check_category(session: Session, category_id: Optional[int]) -> None:
        if (
            category_id is not None
            and SqlAlchemyCategoryRepository(session).get_by_id(category_id) is None
        ):
            raise CategoryNotFound(category_id)
