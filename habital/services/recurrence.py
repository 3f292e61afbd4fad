"""
Recurrence evaluation: is a habit due on a given day, and when next?

Pure functions over a :class:`~habital.domain.schedule.HabitSchedule`.
Nothing here raises on malformed stored rules: a pattern without a goal,
a bitset of the wrong length or a zero interval simply makes the habit
inactive for the days it governs.

Interval and rotation arithmetic is anchored at the later of the habit's
start date and the governing pattern's ``effective_from``.
"""

import logging
from datetime import date, timedelta
from typing import Iterator, Optional

from ..domain.schedule import (
    DailyRule,
    HabitSchedule,
    MonthlyRule,
    PatternVersion,
    WeeklyRule,
)
from ..utils.dates import (
    days_in_month,
    months_between,
    relative_day_label,
    today as local_today,
    weeks_between,
)

logger = logging.getLogger(__name__)

NOT_SCHEDULED = "Not scheduled"
DEFAULT_HORIZON_DAYS = 366
# Upper bound on how far back a follow-up scan looks for a missed due day
FOLLOW_UP_LOOKBACK_DAYS = 366


# ---------------------------------------------------------------------------
# Pattern selection
# ---------------------------------------------------------------------------


def effective_pattern(schedule: HabitSchedule, day: date) -> Optional[PatternVersion]:
    """Pattern version governing ``day`` (latest effective_from <= day)."""
    return schedule.timeline.at(day)


def _anchor(schedule: HabitSchedule, pattern: PatternVersion) -> date:
    return max(schedule.start_date, pattern.effective_from)


# ---------------------------------------------------------------------------
# Regular (non follow-up) activity
# ---------------------------------------------------------------------------


def _rotation_active(flags, anchor: date, day: date) -> bool:
    if not flags or len(flags) % 7:
        return False
    week_count = len(flags) // 7
    week_in_cycle = ((day - anchor).days // 7) % week_count
    return bool(flags[week_in_cycle * 7 + day.weekday()])


def _daily_active(rule: DailyRule, anchor: date, day: date, follow_up: bool) -> bool:
    if rule.every_day:
        return True
    if rule.specific_days:
        return _rotation_active(rule.specific_days, anchor, day)
    if rule.days_interval and rule.days_interval > 0:
        if follow_up:
            # Re-anchored on each completion, see _interval_follow_up_active
            return False
        return (day - anchor).days % rule.days_interval == 0
    return False


def _weekly_active(rule: WeeklyRule, anchor: date, day: date) -> bool:
    flags = rule.specific_days
    if len(flags) != 7 or not flags[day.weekday()]:
        return False
    if rule.every_week:
        return True
    if rule.week_interval and rule.week_interval > 0:
        return weeks_between(anchor, day) % rule.week_interval == 0
    return False


def _monthly_active(rule: MonthlyRule, anchor: date, day: date) -> bool:
    flags = rule.specific_days
    if len(flags) != 31:
        return False
    if not rule.every_month:
        if not rule.month_interval or rule.month_interval <= 0:
            return False
        if months_between(anchor, day) % rule.month_interval != 0:
            return False
    if flags[day.day - 1]:
        return True
    last_day = days_in_month(day)
    # Days 29-31 fall back to the last day of shorter months
    return day.day == last_day and last_day < 31 and any(flags[last_day:])


def is_regularly_active(schedule: HabitSchedule, pattern: PatternVersion, day: date) -> bool:
    """Whether ``pattern`` schedules ``day``, ignoring follow-up carry-over."""
    anchor = _anchor(schedule, pattern)
    if day < anchor:
        return False
    rule = pattern.rule
    if isinstance(rule, DailyRule):
        return _daily_active(rule, anchor, day, pattern.follow_up)
    if isinstance(rule, WeeklyRule):
        return _weekly_active(rule, anchor, day)
    if isinstance(rule, MonthlyRule):
        return _monthly_active(rule, anchor, day)
    return False


# ---------------------------------------------------------------------------
# Follow-up
# ---------------------------------------------------------------------------


def _interval_due_date(schedule: HabitSchedule, pattern: PatternVersion, day: date) -> date:
    """First due day of an interval follow-up rule as seen from ``day``."""
    anchor = _anchor(schedule, pattern)
    last = schedule.last_completion_before(day)
    if last is None:
        return anchor
    return max(anchor, last + timedelta(days=pattern.rule.days_interval))


def _interval_follow_up_active(
    schedule: HabitSchedule, pattern: PatternVersion, day: date, today: date
) -> bool:
    interval = pattern.rule.days_interval
    if day <= today:
        return day >= _interval_due_date(schedule, pattern, day)

    # Future days: project the cycle forward from the most likely base
    anchor = _anchor(schedule, pattern)
    if schedule.has_completion(today) or is_active(schedule, today, today):
        base = today
    else:
        base = schedule.last_completion_before(today) or anchor
    base = max(base, anchor)
    return day >= base and (day - base).days % interval == 0


def first_missed_due(
    schedule: HabitSchedule, pattern: PatternVersion, day: date
) -> Optional[date]:
    """Earliest regular due day before ``day`` left undone since the last completion."""
    anchor = _anchor(schedule, pattern)
    if pattern.is_interval_follow_up:
        due = _interval_due_date(schedule, pattern, day)
        return due if due < day else None

    last = schedule.last_completion_before(day)
    begin = anchor if last is None else max(anchor, last + timedelta(days=1))
    begin = max(begin, day - timedelta(days=FOLLOW_UP_LOOKBACK_DAYS))
    current = begin
    while current < day:
        if (
            is_regularly_active(schedule, pattern, current)
            and not schedule.is_skipped(current)
        ):
            return current
        current += timedelta(days=1)
    return None


def _active_by_follow_up(
    schedule: HabitSchedule, pattern: PatternVersion, day: date, today: date
) -> bool:
    if schedule.has_completion(day):
        return True
    if pattern.is_every_day or day < _anchor(schedule, pattern):
        return False
    if pattern.is_interval_follow_up:
        return _interval_follow_up_active(schedule, pattern, day, today)
    if day > today:
        return False
    return first_missed_due(schedule, pattern, day) is not None


# ---------------------------------------------------------------------------
# Public queries
# ---------------------------------------------------------------------------


def is_active(schedule: HabitSchedule, day: date, today: Optional[date] = None) -> bool:
    """Whether the habit is due (or carried over by follow-up) on ``day``."""
    if day < schedule.start_date:
        return False
    pattern = schedule.timeline.at(day)
    if pattern is None:
        return False
    if is_regularly_active(schedule, pattern, day):
        return True
    if pattern.follow_up:
        return _active_by_follow_up(schedule, pattern, day, today or local_today())
    return False


def active_days(
    schedule: HabitSchedule, start: date, end: date, today: Optional[date] = None
) -> Iterator[date]:
    """Yield the active days in ``[start, end]``."""
    current = max(start, schedule.start_date)
    while current <= end:
        if is_active(schedule, current, today):
            yield current
        current += timedelta(days=1)


def overdue_days(
    schedule: HabitSchedule, day: date, today: Optional[date] = None
) -> Optional[int]:
    """Days since the earliest missed due day of a follow-up habit.

    ``None`` when the governing pattern has no follow-up or nothing is
    overdue.
    """
    pattern = schedule.timeline.at(day)
    if pattern is None or not pattern.follow_up or day < schedule.start_date:
        return None
    missed = first_missed_due(schedule, pattern, day)
    if missed is None:
        return None
    return (day - missed).days


def next_occurrence(
    schedule: HabitSchedule,
    from_day: date,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
    today: Optional[date] = None,
) -> Optional[date]:
    """First day in ``[from_day, from_day + horizon)`` that is active and still open."""
    today = today or local_today()
    for offset in range(max(0, horizon_days)):
        day = from_day + timedelta(days=offset)
        if schedule.has_completion(day) or schedule.is_skipped(day):
            continue
        if is_active(schedule, day, today):
            return day
    return None


def next_occurrence_text(
    schedule: HabitSchedule,
    from_day: date,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
    today: Optional[date] = None,
) -> str:
    """Label for the next open occurrence, e.g. "Today" or "05. March"."""
    if schedule.is_archived or not schedule.timeline:
        return NOT_SCHEDULED
    upcoming = next_occurrence(schedule, from_day, horizon_days, today)
    if upcoming is None:
        logger.debug(
            "No occurrence of habit %s within %d days of %s",
            schedule.habit_id,
            horizon_days,
            from_day,
        )
        return NOT_SCHEDULED
    return relative_day_label(upcoming, from_day)
