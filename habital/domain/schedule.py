"""ORM-free snapshot of a habit's schedule and completion log.

The recurrence, streak and score calculations work on these plain
objects so they can be exercised without a database. Rule fields are
kept exactly as stored (no validation); evaluation decides what is
malformed.
"""

from __future__ import annotations

import bisect
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, Iterator, List, Optional, Tuple, Union

from ..models.enums import HabitTrackingType


@dataclass(frozen=True)
class DailyRule:
    every_day: bool = False
    days_interval: int = 0
    specific_days: Tuple[bool, ...] = ()


@dataclass(frozen=True)
class WeeklyRule:
    every_week: bool = False
    week_interval: int = 0
    specific_days: Tuple[bool, ...] = ()


@dataclass(frozen=True)
class MonthlyRule:
    every_month: bool = False
    month_interval: int = 0
    specific_days: Tuple[bool, ...] = ()


Rule = Union[DailyRule, WeeklyRule, MonthlyRule]


@dataclass(frozen=True)
class PatternVersion:
    """One version of a habit's schedule, effective from a day onwards."""

    effective_from: date
    rule: Optional[Rule]
    follow_up: bool = False
    tracking_type: HabitTrackingType = HabitTrackingType.REPETITIONS
    repeats_per_day: int = 1
    duration: int = 0
    target_quantity: int = 0
    quantity_unit: Optional[str] = None

    @property
    def required_repeats(self) -> int:
        return max(1, self.repeats_per_day or 1)

    @property
    def is_every_day(self) -> bool:
        return isinstance(self.rule, DailyRule) and self.rule.every_day

    @property
    def is_interval_follow_up(self) -> bool:
        """Follow-up rule counted in days since the last completion."""
        return (
            self.follow_up
            and isinstance(self.rule, DailyRule)
            and not self.rule.every_day
            and not self.rule.specific_days
            and self.rule.days_interval > 0
        )


class PatternTimeline:
    """Pattern versions sorted by ``effective_from`` with O(log n) lookup.

    When two versions share an ``effective_from`` the one listed last
    wins, so appending a replacement for the same day supersedes it.
    """

    def __init__(self, versions: Iterable[PatternVersion] = ()) -> None:
        by_day: Dict[date, PatternVersion] = {}
        for version in versions:
            by_day[version.effective_from] = version
        self._days: List[date] = sorted(by_day)
        self._versions: List[PatternVersion] = [by_day[d] for d in self._days]

    def at(self, day: date) -> Optional[PatternVersion]:
        """Version governing ``day``: latest ``effective_from`` <= day."""
        index = bisect.bisect_right(self._days, day)
        if index == 0:
            return None
        return self._versions[index - 1]

    @property
    def first(self) -> Optional[PatternVersion]:
        return self._versions[0] if self._versions else None

    @property
    def latest(self) -> Optional[PatternVersion]:
        return self._versions[-1] if self._versions else None

    def __len__(self) -> int:
        return len(self._versions)

    def __iter__(self) -> Iterator[PatternVersion]:
        return iter(self._versions)

    def __bool__(self) -> bool:
        return bool(self._versions)


@dataclass(frozen=True)
class DayRecord:
    """Logged state of one day."""

    completed: bool = False
    skipped: bool = False
    repetitions: int = 0
    duration: int = 0
    quantity: int = 0


@dataclass
class HabitSchedule:
    """Everything the calculations need to know about one habit."""

    start_date: date
    timeline: PatternTimeline
    records: Dict[date, DayRecord] = field(default_factory=dict)
    is_bad_habit: bool = False
    is_archived: bool = False
    habit_id: Optional[int] = None
    name: str = ""

    def __post_init__(self) -> None:
        self._completed_days: List[date] = sorted(
            d for d, r in self.records.items() if r.completed
        )

    def record(self, day: date) -> DayRecord:
        return self.records.get(day, _EMPTY_RECORD)

    def has_completion(self, day: date) -> bool:
        """Raw completed flag of the day's row."""
        return self.record(day).completed

    def is_skipped(self, day: date) -> bool:
        return self.record(day).skipped

    @property
    def completed_days(self) -> List[date]:
        return list(self._completed_days)

    def last_completion_before(self, day: date) -> Optional[date]:
        """Most recent completed day strictly before ``day``."""
        index = bisect.bisect_left(self._completed_days, day)
        if index == 0:
            return None
        return self._completed_days[index - 1]

    def first_completion_between(self, start: date, end: date) -> Optional[date]:
        """Earliest completed day in ``[start, end]``."""
        index = bisect.bisect_left(self._completed_days, start)
        if index < len(self._completed_days) and self._completed_days[index] <= end:
            return self._completed_days[index]
        return None

    def last_completed_day(self) -> Optional[date]:
        return self._completed_days[-1] if self._completed_days else None


_EMPTY_RECORD = DayRecord()
