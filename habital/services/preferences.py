"""Durable UI preferences stored in the ``preferences`` table."""

import logging
from typing import Optional

from ..core.database import Database
from ..domain.events import EventBus, TabBarListSelectionChanged
from ..infrastructure.repositories import SqlAlchemyPreferenceRepository
from ..models.enums import HabitSortOption

logger = logging.getLogger(__name__)

SELECTED_LIST_INDEX = "selectedListIndex"
HABIT_SORT_OPTION = "habitSortOption"


class PreferenceStore:
    """Typed access to the known preference keys.

    Unreadable stored values fall back to the key's default instead of
    failing.
    """

    def __init__(self, database: Database, bus: EventBus):
        self.database = database
        self.bus = bus

    def _get(self, key: str) -> Optional[str]:
        with self.database.session_scope() as session:
            return SqlAlchemyPreferenceRepository(session).get_value(key)

    def _set(self, key: str, value: Optional[str]) -> None:
        with self.database.session_scope() as session:
            SqlAlchemyPreferenceRepository(session).set_value(key, value)

    @property
    def selected_list_index(self) -> int:
        raw = self._get(SELECTED_LIST_INDEX)
        if raw is None:
            return 0
        try:
            return max(0, int(raw))
        except ValueError:
            logger.warning("Ignoring unreadable %s value %r", SELECTED_LIST_INDEX, raw)
            return 0

    @selected_list_index.setter
    def selected_list_index(self, index: int) -> None:
        if index < 0:
            raise ValueError(f"List index must be non-negative, got {index}")
        self._set(SELECTED_LIST_INDEX, str(index))
        self.bus.publish(TabBarListSelectionChanged(selected_list_index=index))

    @property
    def habit_sort_option(self) -> HabitSortOption:
        raw = self._get(HABIT_SORT_OPTION)
        return HabitSortOption.default() if raw is None else HabitSortOption.parse(raw)

    @habit_sort_option.setter
    def habit_sort_option(self, option: HabitSortOption) -> None:
        self._set(HABIT_SORT_OPTION, HabitSortOption(option).value)
