"""
Tests for calendar-day helpers.
"""

from datetime import date, datetime, timedelta, timezone

import pytest

from habital.utils.dates import (
    day_key,
    days_in_month,
    iter_days,
    monday_of,
    months_between,
    normalize_day,
    parse_day_key,
    relative_day_label,
    weeks_between,
)

WED = date(2024, 3, 6)


class TestDayKeys:
    def test_round_trip(self):
        assert day_key(WED) == "2024-03-06"
        assert parse_day_key("2024-03-06") == WED

    def test_aware_datetime_uses_timezone(self):
        late_utc = datetime(2024, 3, 6, 23, 30, tzinfo=timezone.utc)
        assert day_key(late_utc) == "2024-03-06"
        assert day_key(late_utc, "Europe/Berlin") == "2024-03-07"

    def test_naive_datetime_is_local(self):
        assert normalize_day(datetime(2024, 3, 6, 23, 59), "Asia/Tokyo") == WED


class TestCalendarArithmetic:
    def test_iter_days_inclusive(self):
        assert list(iter_days(WED, WED + timedelta(days=2)))[-1] == date(2024, 3, 8)
        assert list(iter_days(WED, WED - timedelta(days=1))) == []

    def test_weeks(self):
        assert monday_of(WED) == date(2024, 3, 4)
        # Sunday to the following Monday crosses one week boundary
        assert weeks_between(date(2024, 3, 10), date(2024, 3, 11)) == 1

    def test_months(self):
        assert months_between(date(2023, 11, 30), date(2024, 2, 1)) == 3
        assert days_in_month(date(2024, 2, 10)) == 29


class TestRelativeDayLabel:
    @pytest.mark.parametrize(
        "offset,label",
        [
            (0, "Today"),
            (1, "Tomorrow"),
            (-1, "Yesterday"),
            (2, "Friday"),
            (-2, "Last Monday"),
            (7, "Wednesday"),
            (10, "16. March"),
            (-8, "27. February"),
        ],
    )
    def test_labels(self, offset, label):
        assert relative_day_label(WED + timedelta(days=offset), WED) == label
