"""Calendar-day helpers: day keys, normalisation and relative labels.

Every scheduling decision works on calendar days (``datetime.date``).
Datetimes are converted to a local day in the configured timezone once,
at the edge, through :func:`normalize_day`.
"""

import calendar
from datetime import date, datetime, timedelta
from typing import Iterator, Optional, Union
from zoneinfo import ZoneInfo

from ..models.value_objects import WEEKDAY_NAMES

MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

DayLike = Union[date, datetime]


def normalize_day(value: DayLike, tz: Optional[str] = None) -> date:
    """Return the local calendar day for a date or datetime.

    Naive datetimes are taken as already local. Aware datetimes are
    converted to ``tz`` (when given) before the day is taken.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None and tz:
            value = value.astimezone(ZoneInfo(tz))
        return value.date()
    return value


def today(tz: Optional[str] = None) -> date:
    """Current local calendar day."""
    if tz:
        return datetime.now(ZoneInfo(tz)).date()
    return date.today()


def day_key(value: DayLike, tz: Optional[str] = None) -> str:
    """Stable ``YYYY-MM-DD`` key for a day."""
    return normalize_day(value, tz).strftime("%Y-%m-%d")


def parse_day_key(key: str) -> date:
    """Inverse of :func:`day_key`."""
    return datetime.strptime(key, "%Y-%m-%d").date()


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield each day from ``start`` to ``end`` inclusive."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def monday_of(day: date) -> date:
    """First day (Monday) of the ISO week containing ``day``."""
    return day - timedelta(days=day.weekday())


def weeks_between(start: date, end: date) -> int:
    """Number of ISO week boundaries crossed from ``start`` to ``end``."""
    return (monday_of(end) - monday_of(start)).days // 7


def months_between(start: date, end: date) -> int:
    return (end.year - start.year) * 12 + (end.month - start.month)


def days_in_month(day: date) -> int:
    return calendar.monthrange(day.year, day.month)[1]


def relative_day_label(target: date, reference: date) -> str:
    """Human label for ``target`` seen from ``reference``.

    Today / Tomorrow / Yesterday, the weekday name within the coming week,
    "Last <weekday>" within the past week, otherwise "dd. Month".
    """
    diff = (target - reference).days
    if diff == 0:
        return "Today"
    if diff == 1:
        return "Tomorrow"
    if diff == -1:
        return "Yesterday"
    if 2 <= diff <= 7:
        return WEEKDAY_NAMES[target.weekday()]
    if -7 <= diff <= -2:
        return f"Last {WEEKDAY_NAMES[target.weekday()]}"
    return f"{target.day:02d}. {MONTH_NAMES[target.month - 1]}"
