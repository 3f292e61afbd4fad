"""HabitRepository protocol: defines habit persistence contract."""

from typing import List, Optional, Protocol, runtime_checkable


@runtime_checkable
class HabitRepository(Protocol):
    """Repository interface for Habit entity access."""

    def get_by_id(self, habit_id: int) -> Optional[object]:
        """Look up a habit by primary key.

        Args:
            habit_id: The habit's internal ID.

        Returns:
            The Habit object (patterns and completions loaded), or None.
        """
        ...

    def list_habits(
        self,
        list_id: Optional[int] = None,
        include_archived: bool = False,
        archived_only: bool = False,
    ) -> List[object]:
        """List habits, optionally restricted to one habit list.

        Args:
            list_id: Restrict to habits of this list; None means all lists.
            include_archived: Also return archived habits.
            archived_only: Return only archived habits.

        Returns:
            Habits ordered by their custom order, then ID.
        """
        ...

    def add(self, habit: object) -> object:
        """Stage a new habit and flush so it receives an ID."""
        ...

    def delete(self, habit: object) -> None:
        """Remove a habit together with its patterns and completions."""
        ...

    def count_archived(self) -> int:
        """Number of archived habits."""
        ...
