"""
HabitAggregate: aggregate root enforcing completion and schedule invariants.

All mutations to a Habit's completion log and schedule history go through
this aggregate so that domain rules (one completion row per day, one goal
per pattern, one pattern per effective day, denormalised counters) are
enforced in a single place.
"""

from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Dict, List, Optional

from ..domain.errors import DuplicateCompletion, InvalidCompletionValue, InvalidScheduleError
from ..domain.schedule import (
    DailyRule,
    DayRecord,
    HabitSchedule,
    MonthlyRule,
    PatternTimeline,
    PatternVersion,
    WeeklyRule,
)
from ..services.completion import is_completed, reaches_target
from ..utils.dates import day_key
from .completion import Completion
from .enums import HabitTrackingType
from .habit import Habit
from .repeat_pattern import RepeatPattern


def _flags(values) -> tuple:
    return tuple(bool(v) for v in (values or ()))


def pattern_version(pattern: RepeatPattern) -> PatternVersion:
    """Snapshot a stored pattern. Missing goals yield a rule of ``None``."""
    rule = None
    if pattern.daily_goal is not None:
        goal = pattern.daily_goal
        rule = DailyRule(bool(goal.every_day), int(goal.days_interval or 0), _flags(goal.specific_days))
    elif pattern.weekly_goal is not None:
        goal = pattern.weekly_goal
        rule = WeeklyRule(bool(goal.every_week), int(goal.week_interval or 0), _flags(goal.specific_days))
    elif pattern.monthly_goal is not None:
        goal = pattern.monthly_goal
        rule = MonthlyRule(bool(goal.every_month), int(goal.month_interval or 0), _flags(goal.specific_days))
    return PatternVersion(
        effective_from=pattern.effective_from,
        rule=rule,
        follow_up=bool(pattern.follow_up),
        tracking_type=pattern.tracking_type or HabitTrackingType.REPETITIONS,
        repeats_per_day=int(pattern.repeats_per_day or 1),
        duration=int(pattern.duration or 0),
        target_quantity=int(pattern.target_quantity or 0),
        quantity_unit=pattern.quantity_unit,
    )


def schedule_from_habit(habit: Habit) -> HabitSchedule:
    """Build the ORM-free schedule snapshot of a habit."""
    # Stable order so a later-created pattern wins a tie on effective_from
    patterns = sorted(
        (p for p in habit.repeat_patterns if p.effective_from is not None),
        key=lambda p: (p.effective_from, p.id or 0),
    )
    records = {
        c.day: DayRecord(
            completed=bool(c.completed),
            skipped=bool(c.skipped),
            repetitions=int(c.repetitions or 0),
            duration=int(c.duration or 0),
            quantity=int(c.quantity or 0),
        )
        for c in habit.completions
    }
    return HabitSchedule(
        start_date=habit.start_date,
        timeline=PatternTimeline(pattern_version(p) for p in patterns),
        records=records,
        is_bad_habit=bool(habit.is_bad_habit),
        is_archived=bool(habit.is_archived),
        habit_id=habit.id,
        name=habit.name or "",
    )


@dataclass(frozen=True)
class ToggleOutcome:
    """Result of one completion mutation."""

    day: date
    was_completed: bool
    is_completed: bool
    interval_follow_up: bool = False

    @property
    def became_completed(self) -> bool:
        return self.is_completed and not self.was_completed


class HabitAggregate:
    """Aggregate root wrapping a Habit, its patterns and its completions.

    Invariants enforced:
    - Every Completion belongs to this habit.
    - At most one Completion row per calendar day.
    - Every RepeatPattern owns exactly one goal.
    - At most one RepeatPattern per effective_from day.
    """

    def __init__(self, habit: Habit) -> None:
        self._habit = habit
        self._rows: Dict[date, Completion] = {}
        for row in habit.completions:
            if row.habit_id is not None and habit.id is not None and row.habit_id != habit.id:
                raise ValueError(
                    f"Completion habit_id={row.habit_id} does not match habit id={habit.id}"
                )
            if row.day in self._rows:
                raise DuplicateCompletion(habit.id, row.day)
            self._rows[row.day] = row

    # --- Read-only properties ---

    @property
    def habit(self) -> Habit:
        return self._habit

    @property
    def habit_id(self) -> Optional[int]:
        return self._habit.id

    @property
    def name(self) -> str:
        return self._habit.name

    def completion_on(self, day: date) -> Optional[Completion]:
        return self._rows.get(day)

    def schedule(self) -> HabitSchedule:
        return schedule_from_habit(self._habit)

    # --- Schedule commands ---

    def add_pattern(self, pattern: RepeatPattern) -> RepeatPattern:
        """Append a schedule version; an existing version for the same day is replaced."""
        goals = [
            g for g in (pattern.daily_goal, pattern.weekly_goal, pattern.monthly_goal)
            if g is not None
        ]
        if len(goals) != 1:
            raise InvalidScheduleError(
                f"A repeat pattern needs exactly one goal, got {len(goals)}"
            )
        if pattern.effective_from is None:
            raise InvalidScheduleError("A repeat pattern needs an effective_from day")
        if pattern.repeats_per_day is not None and pattern.repeats_per_day < 1:
            raise InvalidScheduleError("repeats_per_day must be at least 1")
        for existing in list(self._habit.repeat_patterns):
            if existing.effective_from == pattern.effective_from:
                self._habit.repeat_patterns.remove(existing)
        self._habit.repeat_patterns.append(pattern)
        return pattern

    # --- Completion commands ---

    def toggle(
        self,
        day: date,
        minutes: Optional[int] = None,
        quantity: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> ToggleOutcome:
        """Toggle the day according to the governing pattern's tracking type.

        Single repetition: flip done/undone. Several repetitions: add one,
        and clear the day once the limit was already reached. Duration and
        quantity: set the given amount (0 clears), or flip between the
        target and nothing when no amount is given.
        """
        schedule = self.schedule()
        pattern = schedule.timeline.at(day) or schedule.timeline.first
        kind = pattern.tracking_type if pattern else HabitTrackingType.REPETITIONS
        row = self._row_for(day)
        row.skipped = False

        if kind == HabitTrackingType.DURATION:
            target = pattern.duration if pattern else 0
            if minutes is None:
                minutes = 0 if row.duration and row.duration >= target else target
            if minutes < 0:
                raise InvalidCompletionValue("duration", minutes)
            row.duration = minutes
        elif kind == HabitTrackingType.QUANTITY:
            target = pattern.target_quantity if pattern else 0
            if quantity is None:
                quantity = 0 if row.quantity and row.quantity >= target else target
            if quantity < 0:
                raise InvalidCompletionValue("quantity", quantity)
            row.quantity = quantity
        else:
            required = pattern.required_repeats if pattern else 1
            current = row.repetitions or (1 if row.completed else 0)
            row.repetitions = 0 if current >= required else current + 1

        return self._settle(day, row, schedule, pattern, now)

    def force_complete(self, day: date, now: Optional[datetime] = None) -> ToggleOutcome:
        """Fill the day up to its target regardless of its current state."""
        schedule = self.schedule()
        pattern = schedule.timeline.at(day) or schedule.timeline.first
        row = self._row_for(day)
        row.skipped = False
        if pattern is not None:
            row.repetitions = pattern.required_repeats
            if pattern.tracking_type == HabitTrackingType.DURATION:
                row.duration = max(row.duration or 0, pattern.duration, 1)
            elif pattern.tracking_type == HabitTrackingType.QUANTITY:
                row.quantity = max(row.quantity or 0, pattern.target_quantity, 1)
        else:
            row.repetitions = 1
        return self._settle(day, row, schedule, pattern, now)

    def clear_day(self, day: date) -> ToggleOutcome:
        """Remove everything logged for ``day``, including a skip."""
        schedule = self.schedule()
        pattern = schedule.timeline.at(day) or schedule.timeline.first
        row = self._row_for(day)
        row.skipped = False
        row.repetitions = row.duration = row.quantity = 0
        return self._settle(day, row, schedule, pattern, None)

    def skip(self, day: date) -> Completion:
        """Mark ``day`` as skipped, discarding anything logged for it."""
        row = self._row_for(day)
        if row.completed:
            self._habit.total_completions = max(0, (self._habit.total_completions or 0) - 1)
        row.completed = False
        row.repetitions = row.duration = row.quantity = 0
        row.skipped = True
        self._refresh_last_completion()
        return row

    def unskip(self, day: date) -> None:
        row = self._rows.get(day)
        if row is None or not row.skipped:
            return
        row.skipped = False
        if row.is_empty:
            self._remove_row(day)

    def update_best_streak(self, streak: int) -> bool:
        """Raise ``best_streak_ever`` to ``streak`` if it is higher."""
        if streak > (self._habit.best_streak_ever or 0):
            self._habit.best_streak_ever = streak
            return True
        return False

    def recount_total_completions(self) -> int:
        self._habit.total_completions = sum(1 for r in self._rows.values() if r.completed)
        return self._habit.total_completions

    # --- Private helpers ---

    def _row_for(self, day: date) -> Completion:
        row = self._rows.get(day)
        if row is None:
            row = Completion(
                day=day,
                day_key=day_key(day),
                completed=False,
                skipped=False,
                repetitions=0,
                duration=0,
                quantity=0,
            )
            self._habit.completions.append(row)
            self._rows[day] = row
        return row

    def _remove_row(self, day: date) -> None:
        row = self._rows.pop(day, None)
        if row is not None and row in self._habit.completions:
            self._habit.completions.remove(row)

    def _settle(
        self,
        day: date,
        row: Completion,
        before: HabitSchedule,
        pattern: Optional[PatternVersion],
        now: Optional[datetime],
    ) -> ToggleOutcome:
        was_completed = is_completed(before, day)
        was_flagged = bool(before.record(day).completed)

        row.completed = reaches_target(
            pattern,
            row.repetitions or 0,
            row.duration or 0,
            row.quantity or 0,
            bool(self._habit.is_bad_habit),
        )
        if row.completed or row.repetitions or row.duration or row.quantity:
            row.logged_at = now or datetime.now(timezone.utc)
        if row.is_empty:
            self._remove_row(day)

        delta = int(bool(row.completed)) - int(was_flagged)
        self._habit.total_completions = max(0, (self._habit.total_completions or 0) + delta)
        self._refresh_last_completion()

        after = self.schedule()
        return ToggleOutcome(
            day=day,
            was_completed=was_completed,
            is_completed=is_completed(after, day),
            interval_follow_up=bool(pattern and pattern.is_interval_follow_up),
        )

    def _refresh_last_completion(self) -> None:
        days: List[date] = [d for d, r in self._rows.items() if r.completed]
        self._habit.last_completion_date = max(days) if days else None
