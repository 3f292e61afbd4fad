"""Builders for repeat patterns.

Each builder validates its input and returns an unsaved
:class:`~habital.models.repeat_pattern.RepeatPattern` with exactly one
goal attached. :func:`parse_schedule` turns the compact text form used
by the CLI into the same objects.

Text forms::

    daily                 every day
    every:3               every 3 days
    days:mon,wed,fri      selected weekdays every week
    rotation:mon,tue|fri  multi-week weekday rotation (weeks split by "|")
    weekly:mon,thu/2      selected weekdays every 2nd ISO week
    monthly:1,15,31/3     selected days of month every 3rd month
"""

from datetime import date
from typing import Iterable, Optional, Sequence, Union

from ..domain.errors import InvalidScheduleError
from ..models.enums import HabitTrackingType
from ..models.repeat_pattern import DailyGoal, MonthlyGoal, RepeatPattern, WeeklyGoal
from ..models.value_objects import DayRef, MonthDaySelection, WeekdaySelection, WeekRotation


def _pattern(
    effective_from: date,
    follow_up: bool = False,
    tracking_type: Union[HabitTrackingType, str] = HabitTrackingType.REPETITIONS,
    repeats_per_day: int = 1,
    duration: int = 0,
    target_quantity: int = 0,
    quantity_unit: Optional[str] = None,
) -> RepeatPattern:
    kind = HabitTrackingType(tracking_type)
    if repeats_per_day < 1:
        raise InvalidScheduleError("repeats_per_day must be at least 1")
    if kind == HabitTrackingType.DURATION and duration <= 0:
        raise InvalidScheduleError("Duration tracking needs a target duration in minutes")
    if kind == HabitTrackingType.QUANTITY and target_quantity <= 0:
        raise InvalidScheduleError("Quantity tracking needs a positive target quantity")
    return RepeatPattern(
        effective_from=effective_from,
        follow_up=follow_up,
        tracking_type=kind,
        repeats_per_day=repeats_per_day,
        duration=duration,
        target_quantity=target_quantity,
        quantity_unit=quantity_unit,
    )


def _interval(value: int, what: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise InvalidScheduleError(f"{what} interval must be a positive integer, got {value!r}")
    return value


def every_day(effective_from: date, **options) -> RepeatPattern:
    pattern = _pattern(effective_from, **options)
    pattern.daily_goal = DailyGoal(every_day=True, days_interval=0)
    return pattern


def every_n_days(interval: int, effective_from: date, **options) -> RepeatPattern:
    pattern = _pattern(effective_from, **options)
    pattern.daily_goal = DailyGoal(every_day=False, days_interval=_interval(interval, "Day"))
    return pattern


def on_weekdays(
    days: Union[WeekdaySelection, Iterable[DayRef]], effective_from: date, **options
) -> RepeatPattern:
    """Selected weekdays, every week (a one-week daily rotation)."""
    selection = days if isinstance(days, WeekdaySelection) else WeekdaySelection.from_days(*days)
    return rotation(WeekRotation(selection), effective_from, **options)


def rotation(weeks: WeekRotation, effective_from: date, **options) -> RepeatPattern:
    pattern = _pattern(effective_from, **options)
    pattern.daily_goal = DailyGoal(
        every_day=False, days_interval=0, specific_days=weeks.to_list()
    )
    return pattern


def weekly(
    days: Union[WeekdaySelection, Iterable[DayRef]],
    effective_from: date,
    week_interval: int = 1,
    **options,
) -> RepeatPattern:
    selection = days if isinstance(days, WeekdaySelection) else WeekdaySelection.from_days(*days)
    interval = _interval(week_interval, "Week")
    pattern = _pattern(effective_from, **options)
    pattern.weekly_goal = WeeklyGoal(
        every_week=interval == 1, week_interval=interval, specific_days=selection.to_list()
    )
    return pattern


def monthly(
    days: Union[MonthDaySelection, Iterable[int]],
    effective_from: date,
    month_interval: int = 1,
    **options,
) -> RepeatPattern:
    selection = days if isinstance(days, MonthDaySelection) else MonthDaySelection.from_days(*days)
    interval = _interval(month_interval, "Month")
    pattern = _pattern(effective_from, **options)
    pattern.monthly_goal = MonthlyGoal(
        every_month=interval == 1, month_interval=interval, specific_days=selection.to_list()
    )
    return pattern


# ---------------------------------------------------------------------------
# Text form
# ---------------------------------------------------------------------------


def _split_interval(body: str) -> Sequence[str]:
    if "/" in body:
        days, interval = body.rsplit("/", 1)
        return days, interval
    return body, "1"


def _parse_int(raw: str, what: str) -> int:
    try:
        return int(raw.strip())
    except ValueError:
        raise InvalidScheduleError(f"{what} must be a number, got {raw!r}") from None


def _names(raw: str) -> Sequence[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]


def parse_schedule(text: str, effective_from: date, **options) -> RepeatPattern:
    """Build a pattern from its compact text form (see module docstring)."""
    kind, _, body = text.strip().partition(":")
    kind = kind.lower()
    if kind == "daily" and not body:
        return every_day(effective_from, **options)
    if kind == "every":
        return every_n_days(_parse_int(body, "Day interval"), effective_from, **options)
    if kind == "days":
        return on_weekdays(_names(body), effective_from, **options)
    if kind == "rotation":
        weeks = [WeekdaySelection.from_days(*_names(week)) for week in body.split("|")]
        return rotation(WeekRotation.from_weeks(weeks), effective_from, **options)
    if kind == "weekly":
        days, interval = _split_interval(body)
        return weekly(
            _names(days), effective_from, _parse_int(interval, "Week interval"), **options
        )
    if kind == "monthly":
        days, interval = _split_interval(body)
        numbers = [_parse_int(d, "Day of month") for d in _names(days)]
        return monthly(
            numbers, effective_from, _parse_int(interval, "Month interval"), **options
        )
    raise InvalidScheduleError(f"Unknown schedule {text!r}")
