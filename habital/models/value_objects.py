"""Domain value objects for recurrence day selections.

Goals store their selected days as plain boolean lists. These wrappers
validate the shape once, at the edge, and give callers a readable way to
build them from day numbers or weekday names.
"""

from __future__ import annotations

from typing import Iterable, Iterator, List, Sequence, Tuple, Union

from ..domain.errors import InvalidScheduleError

WEEKDAY_NAMES = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)

_WEEKDAY_ALIASES = {
    name[:3].lower(): index for index, name in enumerate(WEEKDAY_NAMES)
}

DayRef = Union[int, str]


def weekday_index(day: DayRef) -> int:
    """Resolve a weekday reference (0-6, Monday first, or a name) to an index."""
    if isinstance(day, str):
        key = day.strip().lower()[:3]
        if key not in _WEEKDAY_ALIASES:
            raise InvalidScheduleError(f"Unknown weekday {day!r}")
        return _WEEKDAY_ALIASES[key]
    if isinstance(day, bool) or not isinstance(day, int) or not 0 <= day <= 6:
        raise InvalidScheduleError(f"Weekday index must be 0-6, got {day!r}")
    return day


class _DayFlags:
    """Immutable tuple of day flags with a validated length."""

    __slots__ = ("_flags",)

    def __init__(self, flags: Iterable[bool]) -> None:
        values = tuple(bool(f) for f in flags)
        self._check_length(len(values))
        if not any(values):
            raise InvalidScheduleError(
                f"{type(self).__name__} needs at least one selected day"
            )
        object.__setattr__(self, "_flags", values)

    def _check_length(self, length: int) -> None:
        raise NotImplementedError

    @property
    def flags(self) -> Tuple[bool, ...]:
        return self._flags

    def to_list(self) -> List[bool]:
        """Plain list form, as stored on the goal rows."""
        return list(self._flags)

    # --- Immutability ---

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable; cannot set {name!r}")

    # --- Equality and hashing ---

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._flags == other._flags

    def __hash__(self) -> int:
        return hash((type(self).__name__, self._flags))

    # --- Container protocol ---

    def __len__(self) -> int:
        return len(self._flags)

    def __iter__(self) -> Iterator[bool]:
        return iter(self._flags)

    def __getitem__(self, index: int) -> bool:
        return self._flags[index]


class WeekdaySelection(_DayFlags):
    """Seven flags, Monday first."""

    __slots__ = ()

    def _check_length(self, length: int) -> None:
        if length != 7:
            raise InvalidScheduleError(f"Weekday selection needs 7 flags, got {length}")

    @classmethod
    def from_days(cls, *days: DayRef) -> WeekdaySelection:
        """Build from weekday indexes or names, e.g. ``("mon", "wed", "fri")``."""
        selected = {weekday_index(d) for d in days}
        return cls(i in selected for i in range(7))

    @property
    def selected_days(self) -> Tuple[int, ...]:
        return tuple(i for i, flag in enumerate(self._flags) if flag)

    def __repr__(self) -> str:
        names = ", ".join(WEEKDAY_NAMES[i][:3] for i in self.selected_days)
        return f"WeekdaySelection({names})"


class WeekRotation(_DayFlags):
    """A multi-week rotation: 7 flags per week, Monday first.

    Week ``k`` of the rotation applies to the days in the ``k``-th block of
    seven days counted from the rule's anchor, cycling through the weeks.
    """

    __slots__ = ()

    def _check_length(self, length: int) -> None:
        if length == 0 or length % 7:
            raise InvalidScheduleError(
                f"Week rotation needs a positive multiple of 7 flags, got {length}"
            )

    @classmethod
    def from_weeks(cls, weeks: Sequence[Union[WeekdaySelection, Sequence[bool]]]) -> WeekRotation:
        flags: List[bool] = []
        for week in weeks:
            week_flags = list(week)
            if len(week_flags) != 7:
                raise InvalidScheduleError(
                    f"Each rotation week needs 7 flags, got {len(week_flags)}"
                )
            flags.extend(bool(f) for f in week_flags)
        return cls(flags)

    @property
    def week_count(self) -> int:
        return len(self._flags) // 7

    def week(self, index: int) -> Tuple[bool, ...]:
        start = (index % self.week_count) * 7
        return self._flags[start : start + 7]

    def __repr__(self) -> str:
        return f"WeekRotation(weeks={self.week_count})"


class MonthDaySelection(_DayFlags):
    """31 flags, index 0 is the first day of the month."""

    __slots__ = ()

    def _check_length(self, length: int) -> None:
        if length != 31:
            raise InvalidScheduleError(f"Month day selection needs 31 flags, got {length}")

    @classmethod
    def from_days(cls, *days: int) -> MonthDaySelection:
        """Build from day-of-month numbers (1-31)."""
        for d in days:
            if isinstance(d, bool) or not isinstance(d, int) or not 1 <= d <= 31:
                raise InvalidScheduleError(f"Day of month must be 1-31, got {d!r}")
        selected = set(days)
        return cls((i + 1) in selected for i in range(31))

    @property
    def selected_days(self) -> Tuple[int, ...]:
        return tuple(i + 1 for i, flag in enumerate(self._flags) if flag)

    def __repr__(self) -> str:
        days = ", ".join(str(d) for d in self.selected_days)
        return f"MonthDaySelection({days})"
