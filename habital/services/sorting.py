"""Ordering of day-view rows by the selected :class:`HabitSortOption`.

Whatever the option, habits active on the day come first and bad habits
come after good ones. Name comparisons are case-insensitive and break
ties for the metric-based options.
"""

from typing import Callable, Dict, List, Sequence, Tuple

from ..models.enums import HabitSortOption


def _name(row) -> str:
    return (row.name or "").casefold()


def _rank(row) -> Tuple[bool, bool]:
    return (not row.is_active, bool(row.is_bad_habit))


_KEYS: Dict[HabitSortOption, Callable] = {
    HabitSortOption.ASCENDING: lambda row: (_name(row),),
    HabitSortOption.CUSTOM: lambda row: (row.position, row.habit_id),
    HabitSortOption.STREAK: lambda row: (-row.current_streak, _name(row)),
    HabitSortOption.RECENT_COMPLETION: lambda row: (-row.recent_score, _name(row)),
    # Incomplete first, only among active habits
    HabitSortOption.COMPLETION: lambda row: (
        bool(row.is_completed) if row.is_active else False,
        _name(row),
    ),
}


def sort_rows(rows: Sequence, option: HabitSortOption) -> List:
    """Return ``rows`` ordered for display."""
    option = HabitSortOption.parse(option)
    if option == HabitSortOption.DESCENDING:
        # Descending by name while keeping the active/bad-habit grouping
        ordered = sorted(rows, key=_name, reverse=True)
        return sorted(ordered, key=_rank)
    key = _KEYS[option]
    return sorted(rows, key=lambda row: (_rank(row), key(row)))
