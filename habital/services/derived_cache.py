"""Derived-state cache for day views.

One cache, keyed by ``(date, list_id, archived, sort_option)``,
replaces per-view dictionaries. It is invalidated only through the event
bus (see :class:`CacheInvalidator`), so every view observes the same
freshness.
"""

import logging
from datetime import date
from typing import Any, Callable, Dict, NamedTuple, Optional

from ..domain.events import (
    CalendarConstraintsChanged,
    EventBus,
    ForceCalendarUpdate,
    HabitCompleted,
    HabitCreated,
    HabitDeleted,
    HabitIntervalCompleted,
    HabitsReordered,
    HabitToggled,
    HabitUpdated,
)
from ..models.enums import HabitSortOption

logger = logging.getLogger(__name__)


class CacheKey(NamedTuple):
    day: date
    list_id: Optional[int]
    archived: bool
    sort_option: HabitSortOption


class DerivedStateCache:
    """Bounded map of computed day views."""

    def __init__(self, max_entries: int = 256) -> None:
        self._entries: Dict[CacheKey, Any] = {}
        self._max_entries = max_entries
        self.hits = 0
        self.misses = 0

    def get_or_compute(self, key: CacheKey, compute: Callable[[], Any]) -> Any:
        if key in self._entries:
            self.hits += 1
            return self._entries[key]
        self.misses += 1
        value = compute()
        if len(self._entries) >= self._max_entries:
            # Drop the oldest entry; dicts keep insertion order
            self._entries.pop(next(iter(self._entries)))
        self._entries[key] = value
        return value

    def invalidate_all(self) -> None:
        if self._entries:
            logger.debug("Derived cache cleared (%d entries)", len(self._entries))
        self._entries.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)


class CacheInvalidator:
    """Subscribes a :class:`DerivedStateCache` to model-change events.

    Every model change clears the whole cache: rows also carry values
    measured against today (score, next occurrence).
    """

    def __init__(self, cache: DerivedStateCache) -> None:
        self._cache = cache

    def register(self, bus: EventBus) -> None:
        for event_type in (
            HabitCreated,
            HabitUpdated,
            HabitDeleted,
            HabitsReordered,
            HabitToggled,
            HabitCompleted,
            HabitIntervalCompleted,
            CalendarConstraintsChanged,
            ForceCalendarUpdate,
        ):
            bus.subscribe(event_type, self.on_model_changed)

    def on_model_changed(self, event: Any) -> None:
        self._cache.invalidate_all()
