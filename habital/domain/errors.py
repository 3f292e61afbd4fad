"""
Typed domain errors for Habital.

Persistence failures and lookups of missing entities surface as these
errors instead of being printed and swallowed, so callers (CLI, tests,
embedding applications) can tell failure modes apart.
"""

from datetime import date
from typing import Optional


class DomainError(Exception):
    """Base class for all domain-specific errors."""


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


class HabitNotFound(DomainError):
    """Habit with the given ID does not exist."""

    def __init__(self, habit_id: int) -> None:
        self.habit_id = habit_id
        super().__init__(f"Habit {habit_id} not found")


class HabitListNotFound(DomainError):
    """Habit list with the given ID does not exist."""

    def __init__(self, list_id: int) -> None:
        self.list_id = list_id
        super().__init__(f"Habit list {list_id} not found")


class CategoryNotFound(DomainError):
    """Category with the given ID does not exist."""

    def __init__(self, category_id: int) -> None:
        self.category_id = category_id
        super().__init__(f"Category {category_id} not found")


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class InvalidScheduleError(DomainError, ValueError):
    """A recurrence rule was built from invalid input.

    Only raised while constructing or validating rules. Evaluating a
    stored rule never raises; malformed stored rules count as inactive.
    """


class InvalidOrderError(DomainError, ValueError):
    """A reorder request does not describe a permutation of its scope."""


class InvalidCompletionValue(DomainError, ValueError):
    """A logged duration or quantity is negative."""

    def __init__(self, field: str, value: int) -> None:
        self.field = field
        self.value = value
        super().__init__(f"{field} must be >= 0, got {value}")


class DuplicateCompletion(DomainError):
    """A second completion row was added for the same habit and day."""

    def __init__(self, habit_id: Optional[int], day: date) -> None:
        self.habit_id = habit_id
        self.day = day
        super().__init__(f"Habit {habit_id} already has a completion for {day}")


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------


class PersistenceError(DomainError):
    """Reading from or writing to the local store failed.

    The failed transaction has already been rolled back when this is raised.
    """

    def __init__(self, operation: str, cause: Optional[BaseException] = None) -> None:
        self.operation = operation
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Persistence failure during {operation}{detail}")
