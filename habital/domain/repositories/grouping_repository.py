"""Protocols for habit lists, categories and preferences."""

from typing import List, Optional, Protocol, runtime_checkable


@runtime_checkable
class HabitListRepository(Protocol):
    """Repository interface for HabitList entity access."""

    def get_by_id(self, list_id: int) -> Optional[object]:
        """Look up a habit list by primary key."""
        ...

    def all(self) -> List[object]:
        """All habit lists in display order."""
        ...

    def add(self, habit_list: object) -> object:
        """Stage a new list and flush so it receives an ID."""
        ...

    def delete(self, habit_list: object) -> None:
        """Remove a list; its habits become list-less."""
        ...


@runtime_checkable
class CategoryRepository(Protocol):
    """Repository interface for HabitCategory entity access."""

    def get_by_id(self, category_id: int) -> Optional[object]:
        ...

    def all(self) -> List[object]:
        ...

    def add(self, category: object) -> object:
        ...

    def delete(self, category: object) -> None:
        ...


@runtime_checkable
class PreferenceRepository(Protocol):
    """Repository interface for the key-value preference rows."""

    def get_value(self, key: str) -> Optional[str]:
        """Stored text for ``key``, or None when unset."""
        ...

    def set_value(self, key: str, value: Optional[str]) -> None:
        """Insert or update the text stored under ``key``."""
        ...
