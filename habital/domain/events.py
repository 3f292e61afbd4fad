"""Domain events for habit tracking.

Defines event types and a lightweight synchronous EventBus so that
presentation layers and the derived-state cache can react to model
changes without the services knowing about them.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence, Type

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Habit lifecycle
# ---------------------------------------------------------------------------


@dataclass
class HabitCreated:
    """Emitted after a new habit is persisted."""

    habit_id: int
    name: str
    habit_list_id: Optional[int]
    timestamp: datetime = field(default_factory=_utcnow)


@dataclass
class HabitUpdated:
    """Emitted after a habit's fields, schedule, list or archive state change."""

    habit_id: int
    changed: Sequence[str] = ()
    timestamp: datetime = field(default_factory=_utcnow)


@dataclass
class HabitDeleted:
    """Emitted after a habit and its history are removed."""

    habit_id: int
    habit_list_id: Optional[int]
    timestamp: datetime = field(default_factory=_utcnow)


@dataclass
class HabitsReordered:
    """Emitted after the custom order of a scope is renumbered."""

    habit_list_id: Optional[int]
    habit_ids: Sequence[int]
    timestamp: datetime = field(default_factory=_utcnow)


# ---------------------------------------------------------------------------
# Completions
# ---------------------------------------------------------------------------


@dataclass
class HabitToggled:
    """Emitted after any completion mutation for one habit and day."""

    habit_id: int
    date: date
    was_completed: bool
    is_completed: bool
    timestamp: datetime = field(default_factory=_utcnow)


@dataclass
class HabitCompleted:
    """Emitted when a day transitions from open to completed."""

    habit_id: int
    date: date
    timestamp: datetime = field(default_factory=_utcnow)


@dataclass
class HabitIntervalCompleted:
    """Emitted when a follow-up interval habit is completed.

    The due dates after ``date`` shift, so cached views from that day on
    are stale.
    """

    habit_id: int
    date: date
    days_interval: int
    timestamp: datetime = field(default_factory=_utcnow)


# ---------------------------------------------------------------------------
# UI state
# ---------------------------------------------------------------------------


@dataclass
class TabBarListSelectionChanged:
    """Emitted when the selected list index preference changes."""

    selected_list_index: int
    timestamp: datetime = field(default_factory=_utcnow)


@dataclass
class CalendarConstraintsChanged:
    """Emitted when the visible calendar range or its filters change."""

    start: Optional[date] = None
    end: Optional[date] = None
    timestamp: datetime = field(default_factory=_utcnow)


@dataclass
class ForceCalendarUpdate:
    """Emitted to ask every subscriber to drop derived state and redraw."""

    reason: str = ""
    timestamp: datetime = field(default_factory=_utcnow)


# ---------------------------------------------------------------------------
# EventBus
# ---------------------------------------------------------------------------

EventHandler = Callable[[Any], None]


class EventBus:
    """Simple in-process synchronous event bus.

    Subscribers register for a specific event type. When that event is
    published, all registered handlers are invoked in subscription order.
    A failing handler logs the error but does not prevent remaining
    handlers from running.
    """

    def __init__(self) -> None:
        self._subscribers: Dict[Type, List[EventHandler]] = {}

    def subscribe(self, event_type: Type, handler: EventHandler) -> None:
        """Register *handler* for *event_type*."""
        self._subscribers.setdefault(event_type, []).append(handler)

    def unsubscribe(self, event_type: Type, handler: EventHandler) -> None:
        """Remove *handler* for *event_type* if registered."""
        handlers = self._subscribers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def publish(self, event: Any) -> None:
        """Dispatch *event* to all registered handlers for its type."""
        handlers = list(self._subscribers.get(type(event), []))
        for handler in handlers:
            try:
                handler(event)
            except Exception:
                logger.exception(
                    "Event handler %s failed for %s",
                    getattr(handler, "__name__", handler),
                    type(event).__name__,
                )

    def handler_count(self, event_type: Type) -> int:
        return len(self._subscribers.get(event_type, []))
