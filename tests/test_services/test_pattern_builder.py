"""
Tests for repeat-pattern builders and the compact schedule text form.
"""

from datetime import date

import pytest

from habital.domain.errors import InvalidScheduleError
from habital.models.enums import HabitTrackingType
from habital.models.value_objects import WeekdaySelection, WeekRotation
from habital.services import pattern_builder

DAY = date(2024, 1, 1)


class TestBuilders:
    def test_every_day(self):
        pattern = pattern_builder.every_day(DAY)
        assert pattern.daily_goal.every_day is True
        assert pattern.weekly_goal is None and pattern.monthly_goal is None
        assert pattern.effective_from == DAY

    def test_every_n_days(self):
        pattern = pattern_builder.every_n_days(3, DAY, follow_up=True)
        assert pattern.daily_goal.days_interval == 3
        assert pattern.follow_up is True

    def test_on_weekdays_is_one_week_rotation(self):
        pattern = pattern_builder.on_weekdays(["mon", "fri"], DAY)
        assert pattern.daily_goal.specific_days == [True, False, False, False, True, False, False]

    def test_rotation(self):
        weeks = WeekRotation.from_weeks(
            [WeekdaySelection.from_days("mon"), WeekdaySelection.from_days("tue")]
        )
        pattern = pattern_builder.rotation(weeks, DAY)
        assert len(pattern.daily_goal.specific_days) == 14

    def test_weekly_interval(self):
        pattern = pattern_builder.weekly([0, 3], DAY, week_interval=2)
        goal = pattern.weekly_goal
        assert goal.every_week is False and goal.week_interval == 2
        assert goal.specific_days[0] and goal.specific_days[3]

    def test_monthly(self):
        pattern = pattern_builder.monthly([1, 31], DAY)
        assert pattern.monthly_goal.every_month is True
        assert pattern.monthly_goal.specific_days[30] is True

    def test_duration_needs_target(self):
        with pytest.raises(InvalidScheduleError):
            pattern_builder.every_day(DAY, tracking_type=HabitTrackingType.DURATION)

    def test_repeats_must_be_positive(self):
        with pytest.raises(InvalidScheduleError):
            pattern_builder.every_day(DAY, repeats_per_day=0)

    @pytest.mark.parametrize("interval", [0, -2, True])
    def test_bad_interval(self, interval):
        with pytest.raises(InvalidScheduleError):
            pattern_builder.every_n_days(interval, DAY)

    def test_empty_selection(self):
        with pytest.raises(InvalidScheduleError):
            pattern_builder.on_weekdays([], DAY)


class TestParseSchedule:
    def test_daily(self):
        assert pattern_builder.parse_schedule("daily", DAY).daily_goal.every_day

    def test_every(self):
        assert pattern_builder.parse_schedule("every:4", DAY).daily_goal.days_interval == 4

    def test_days(self):
        goal = pattern_builder.parse_schedule("days:mon,wed,fri", DAY).daily_goal
        assert goal.specific_days == [True, False, True, False, True, False, False]

    def test_rotation(self):
        goal = pattern_builder.parse_schedule("rotation:mon,tue|fri", DAY).daily_goal
        assert len(goal.specific_days) == 14
        assert goal.specific_days[7 + 4] is True

    def test_weekly_with_interval(self):
        goal = pattern_builder.parse_schedule("weekly:mon,thu/2", DAY).weekly_goal
        assert goal.week_interval == 2

    def test_weekly_default_interval(self):
        goal = pattern_builder.parse_schedule("weekly:sat", DAY).weekly_goal
        assert goal.every_week is True

    def test_monthly(self):
        goal = pattern_builder.parse_schedule("monthly:1,15,31/3", DAY).monthly_goal
        assert goal.month_interval == 3
        assert [i + 1 for i, f in enumerate(goal.specific_days) if f] == [1, 15, 31]

    def test_options_pass_through(self):
        pattern = pattern_builder.parse_schedule(
            "daily",
            DAY,
            tracking_type=HabitTrackingType.QUANTITY,
            target_quantity=10,
            quantity_unit="pages",
        )
        assert pattern.tracking_type == HabitTrackingType.QUANTITY
        assert pattern.quantity_unit == "pages"

    @pytest.mark.parametrize(
        "text", ["hourly", "every:x", "days:funday", "monthly:32", "weekly:mon/0"]
    )
    def test_invalid(self, text):
        with pytest.raises(InvalidScheduleError):
            pattern_builder.parse_schedule(text, DAY)
