"""Custom-order maintenance for habits, lists and categories.

Every ordered scope keeps its positions as a gap-free ``0..N-1``
sequence. These helpers operate on any objects exposing ``id`` and a
position attribute (``order`` by default).
"""

from typing import List, Sequence, TypeVar

from ..domain.errors import InvalidOrderError

T = TypeVar("T")


def sorted_by_position(items: Sequence[T], attr: str = "order") -> List[T]:
    return sorted(items, key=lambda item: (getattr(item, attr) or 0, item.id or 0))


def renumber(items: Sequence[T], attr: str = "order") -> List[T]:
    """Assign ``0..N-1`` following the items' current sequence."""
    for position, item in enumerate(items):
        setattr(item, attr, position)
    return list(items)


def compact(items: Sequence[T], attr: str = "order") -> List[T]:
    """Sort by current position and close any gaps or duplicates."""
    return renumber(sorted_by_position(items, attr), attr)


def move(items: Sequence[T], from_index: int, to_index: int, attr: str = "order") -> List[T]:
    """Move the item at ``from_index`` to ``to_index`` and renumber."""
    ordered = sorted_by_position(items, attr)
    size = len(ordered)
    if not (0 <= from_index < size and 0 <= to_index < size):
        raise InvalidOrderError(
            f"Cannot move from {from_index} to {to_index} in a scope of {size}"
        )
    item = ordered.pop(from_index)
    ordered.insert(to_index, item)
    return renumber(ordered, attr)


def arrange(items: Sequence[T], ordered_ids: Sequence[int], attr: str = "order") -> List[T]:
    """Apply an explicit id sequence; it must be a permutation of the scope."""
    by_id = {item.id: item for item in items}
    if len(ordered_ids) != len(by_id) or set(ordered_ids) != set(by_id):
        raise InvalidOrderError(
            f"Order {list(ordered_ids)} is not a permutation of {sorted(by_id)}"
        )
    return renumber([by_id[i] for i in ordered_ids], attr)


def is_contiguous(positions: Sequence[int]) -> bool:
    """True when ``positions`` is exactly ``0..N-1`` in some order."""
    return sorted(positions) == list(range(len(positions)))
