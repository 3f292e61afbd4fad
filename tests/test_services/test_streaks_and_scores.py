"""
Tests for streaks, the 0-100 habit score and the recent-activity score.
"""

from datetime import date, timedelta

import pytest

from habital.domain.schedule import DailyRule, PatternVersion
from habital.services.scoring import habit_score, recent_completion_score, score_breakdown
from habital.services.streaks import current_streak, longest_streak

JAN_1 = date(2024, 1, 1)


def days(start, count):
    return [start + timedelta(days=i) for i in range(count)]


def every_day():
    return PatternVersion(JAN_1, DailyRule(every_day=True))


def mon_wed_fri():
    return PatternVersion(JAN_1, DailyRule(specific_days=(1, 0, 1, 0, 1, 0, 0)))


class TestCurrentStreak:
    def test_unbroken_run(self, make_schedule):
        schedule = make_schedule(JAN_1, every_day(), done=days(JAN_1, 10))
        today = date(2024, 1, 10)
        assert current_streak(schedule, today, today) == 10

    def test_open_today_does_not_break(self, make_schedule):
        schedule = make_schedule(JAN_1, every_day(), done=days(JAN_1, 10))
        today = date(2024, 1, 11)
        assert current_streak(schedule, today, today) == 10

    def test_gap_breaks(self, make_schedule):
        done = [d for d in days(JAN_1, 10) if d != date(2024, 1, 5)]
        schedule = make_schedule(JAN_1, every_day(), done=done)
        today = date(2024, 1, 10)
        assert current_streak(schedule, today, today) == 5

    def test_skip_is_neutral(self, make_schedule):
        done = [d for d in days(JAN_1, 10) if d != date(2024, 1, 5)]
        schedule = make_schedule(JAN_1, every_day(), done=done, skipped=[date(2024, 1, 5)])
        today = date(2024, 1, 10)
        assert current_streak(schedule, today, today) == 9

    def test_only_active_days_count(self, make_schedule):
        # Mon 1, Wed 3, Fri 5, Mon 8
        done = [date(2024, 1, 1), date(2024, 1, 3), date(2024, 1, 5), date(2024, 1, 8)]
        schedule = make_schedule(JAN_1, mon_wed_fri(), done=done)
        today = date(2024, 1, 9)
        assert current_streak(schedule, today, today) == 4

    def test_no_pattern(self, make_schedule):
        schedule = make_schedule(JAN_1)
        assert current_streak(schedule, JAN_1, JAN_1) == 0

    def test_lookback_caps_the_scan(self, make_schedule):
        schedule = make_schedule(JAN_1, every_day(), done=days(JAN_1, 40))
        today = date(2024, 2, 9)
        assert current_streak(schedule, today, today, every_day_lookback=10) == 11


class TestLongestStreak:
    def test_longest_run_in_window(self, make_schedule):
        done = days(JAN_1, 7) + days(date(2024, 1, 10), 3)
        schedule = make_schedule(JAN_1, every_day(), done=done)
        assert longest_streak(schedule, date(2024, 1, 20)) == 7

    def test_empty(self, make_schedule):
        schedule = make_schedule(JAN_1, every_day())
        assert longest_streak(schedule, date(2024, 1, 20)) == 0


class TestHabitScore:
    def test_perfect_month(self, make_schedule):
        schedule = make_schedule(JAN_1, every_day(), done=days(JAN_1, 31))
        today = date(2024, 1, 31)
        breakdown = score_breakdown(schedule, today)
        assert breakdown.expected_count == 31
        assert breakdown.actual_count == 31
        assert breakdown.total_score == 100

    def test_nothing_done(self, make_schedule):
        schedule = make_schedule(JAN_1, every_day())
        assert habit_score(schedule, date(2024, 1, 31)) == 0

    def test_second_half_done(self, make_schedule):
        schedule = make_schedule(JAN_1, every_day(), done=days(date(2024, 1, 17), 15))
        breakdown = score_breakdown(schedule, date(2024, 1, 31))
        # 15/31 * 80 + 15/31 * 20
        assert breakdown.total_score == 48
        assert breakdown.current_streak_days == 15

    def test_skipped_days_are_not_expected(self, make_schedule):
        schedule = make_schedule(
            JAN_1, every_day(), done=days(JAN_1, 30), skipped=[date(2024, 1, 31)]
        )
        breakdown = score_breakdown(schedule, date(2024, 1, 31))
        assert breakdown.expected_count == 30
        assert breakdown.total_score == 100

    def test_window_clamped_to_start(self, make_schedule):
        start = date(2024, 1, 25)
        schedule = make_schedule(
            start, PatternVersion(start, DailyRule(every_day=True)), done=days(start, 7)
        )
        breakdown = score_breakdown(schedule, date(2024, 1, 31))
        assert breakdown.expected_count == 7
        assert breakdown.total_score == 100

    def test_no_pattern_scores_zero(self, make_schedule):
        schedule = make_schedule(JAN_1)
        assert score_breakdown(schedule, JAN_1).total_score == 0


class TestRecentCompletionScore:
    def test_no_completions(self, make_schedule):
        schedule = make_schedule(JAN_1, every_day())
        assert recent_completion_score(schedule, date(2024, 1, 31)) == 0.0

    def test_single_completion_today(self, make_schedule):
        today = date(2024, 1, 31)
        schedule = make_schedule(JAN_1, every_day(), done=[today])
        # Full recency, 1/30 frequency, outside the six 5-day periods
        assert recent_completion_score(schedule, today) == pytest.approx(0.4 + 0.35 / 30)

    def test_daily_completions_score_high(self, make_schedule):
        today = date(2024, 1, 31)
        schedule = make_schedule(JAN_1, every_day(), done=days(JAN_1, 31))
        assert recent_completion_score(schedule, today) == pytest.approx(1.0)
