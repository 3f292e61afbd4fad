"""Completion semantics per tracking type.

A day's outcome depends on the pattern that governs it: repetitions are
compared to ``repeats_per_day``, durations to the target minutes and
quantities to the target amount. Bad habits invert the repetition rule:
the day is a success while fewer slips than the limit were logged.
"""

from datetime import date
from typing import Iterable, Optional

from ..domain.schedule import HabitSchedule, PatternVersion
from ..models.enums import HabitTrackingType
from .recurrence import effective_pattern, is_active

DEFAULT_QUANTITY_UNIT = "items"


def _pattern_for(schedule: HabitSchedule, day: date) -> Optional[PatternVersion]:
    return effective_pattern(schedule, day) or schedule.timeline.first


def repeats_per_day(schedule: HabitSchedule, day: date) -> int:
    """Required repetitions on ``day``; 1 when no pattern applies."""
    pattern = effective_pattern(schedule, day)
    return pattern.required_repeats if pattern else 1


def tracking_type(schedule: HabitSchedule, day: date) -> HabitTrackingType:
    pattern = _pattern_for(schedule, day)
    return pattern.tracking_type if pattern else HabitTrackingType.REPETITIONS


def completed_count(schedule: HabitSchedule, day: date) -> int:
    """Repetitions logged on ``day``."""
    record = schedule.record(day)
    if record.repetitions:
        return record.repetitions
    return 1 if record.completed else 0


def reaches_target(pattern: Optional[PatternVersion], repetitions: int,
                   duration: int, quantity: int, is_bad_habit: bool = False) -> bool:
    """Whether logged amounts meet the pattern's target for one day.

    For bad habits this answers "was the slip limit reached", which is
    what a logged row's ``completed`` flag records.
    """
    kind = pattern.tracking_type if pattern else HabitTrackingType.REPETITIONS
    if kind == HabitTrackingType.DURATION:
        target = pattern.duration if pattern else 0
        return duration > 0 and duration >= target
    if kind == HabitTrackingType.QUANTITY:
        target = pattern.target_quantity if pattern else 0
        return quantity > 0 and quantity >= target
    required = pattern.required_repeats if pattern else 1
    if is_bad_habit:
        return repetitions > 0
    return repetitions >= required


def is_completed(schedule: HabitSchedule, day: date) -> bool:
    """Whether ``day`` counts as done for this habit."""
    pattern = _pattern_for(schedule, day)
    record = schedule.record(day)
    count = completed_count(schedule, day)
    if schedule.is_bad_habit and tracking_type(schedule, day) == HabitTrackingType.REPETITIONS:
        return count < repeats_per_day(schedule, day)
    return reaches_target(pattern, count, record.duration, record.quantity)


def completion_progress(schedule: HabitSchedule, day: date) -> float:
    """Progress towards the day's target in ``[0, 1]``."""
    pattern = _pattern_for(schedule, day)
    kind = pattern.tracking_type if pattern else HabitTrackingType.REPETITIONS
    record = schedule.record(day)
    if kind == HabitTrackingType.DURATION:
        target = pattern.duration if pattern else 0
        done, goal = record.duration, target
    elif kind == HabitTrackingType.QUANTITY:
        target = pattern.target_quantity if pattern else 0
        done, goal = record.quantity, target
    else:
        done, goal = completed_count(schedule, day), repeats_per_day(schedule, day)
    if goal <= 0:
        return 1.0 if done > 0 else 0.0
    return min(1.0, done / goal)


def format_duration(minutes: int) -> str:
    """``45m``, ``1h`` or ``1h30m``."""
    if minutes < 60:
        return f"{minutes}m"
    hours, mins = divmod(minutes, 60)
    return f"{hours}h{mins}m" if mins else f"{hours}h"


def completion_status_text(schedule: HabitSchedule, day: date) -> str:
    """Short progress text such as ``2/3``, ``15m/1h`` or ``3/5 pages``."""
    pattern = _pattern_for(schedule, day)
    kind = pattern.tracking_type if pattern else HabitTrackingType.REPETITIONS
    record = schedule.record(day)
    if kind == HabitTrackingType.DURATION:
        target = pattern.duration if pattern else 0
        return f"{format_duration(record.duration)}/{format_duration(target)}"
    if kind == HabitTrackingType.QUANTITY:
        target = pattern.target_quantity if pattern else 0
        unit = (pattern.quantity_unit if pattern else None) or DEFAULT_QUANTITY_UNIT
        return f"{record.quantity}/{target} {unit}"
    return f"{completed_count(schedule, day)}/{repeats_per_day(schedule, day)}"


def completion_percentage(
    schedules: Iterable[HabitSchedule], day: date, today: Optional[date] = None
) -> float:
    """Percentage (0-100) of habits active on ``day`` that are completed."""
    active = [s for s in schedules if not s.is_archived and is_active(s, day, today)]
    if not active:
        return 0.0
    done = sum(1 for s in active if is_completed(s, day))
    return done / len(active) * 100.0
