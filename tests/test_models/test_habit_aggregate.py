"""
Tests for HabitAggregate invariants on transient (unsaved) habits.
"""

from datetime import date

import pytest

from habital.domain.errors import DuplicateCompletion, InvalidScheduleError
from habital.models.completion import Completion
from habital.models.habit import Habit
from habital.models.habit_aggregate import HabitAggregate, schedule_from_habit
from habital.models.repeat_pattern import DailyGoal, RepeatPattern, WeeklyGoal
from habital.services import pattern_builder

START = date(2024, 1, 1)


def make_habit(*patterns, bad=False):
    habit = Habit(name="Read", start_date=START, is_bad_habit=bad)
    habit.repeat_patterns.extend(patterns or [pattern_builder.every_day(START)])
    return habit


class TestConstruction:
    def test_duplicate_rows_rejected(self):
        habit = make_habit()
        habit.completions.extend([Completion(day=START), Completion(day=START)])
        with pytest.raises(DuplicateCompletion):
            HabitAggregate(habit)

    def test_snapshot(self):
        habit = make_habit()
        schedule = schedule_from_habit(habit)
        assert schedule.name == "Read"
        assert schedule.timeline.at(START).is_every_day


class TestAddPattern:
    def test_needs_exactly_one_goal(self):
        aggregate = HabitAggregate(make_habit())
        pattern = RepeatPattern(effective_from=date(2024, 2, 1), repeats_per_day=1)
        with pytest.raises(InvalidScheduleError):
            aggregate.add_pattern(pattern)
        pattern.daily_goal = DailyGoal(every_day=True)
        pattern.weekly_goal = WeeklyGoal(every_week=True, specific_days=[True] * 7)
        with pytest.raises(InvalidScheduleError):
            aggregate.add_pattern(pattern)

    def test_needs_effective_day(self):
        aggregate = HabitAggregate(make_habit())
        pattern = RepeatPattern(repeats_per_day=1)
        pattern.daily_goal = DailyGoal(every_day=True)
        with pytest.raises(InvalidScheduleError):
            aggregate.add_pattern(pattern)

    def test_same_day_replaces(self):
        habit = make_habit()
        aggregate = HabitAggregate(habit)
        replacement = pattern_builder.every_n_days(2, START)
        aggregate.add_pattern(replacement)
        assert habit.repeat_patterns == [replacement]


class TestToggle:
    def test_creates_and_removes_row(self):
        habit = make_habit()
        aggregate = HabitAggregate(habit)
        outcome = aggregate.toggle(START)
        assert outcome.became_completed
        assert aggregate.completion_on(START).completed is True
        assert habit.total_completions == 1
        assert habit.last_completion_date == START

        aggregate.toggle(START)
        assert aggregate.completion_on(START) is None
        assert habit.completions == []
        assert habit.total_completions == 0
        assert habit.last_completion_date is None

    def test_one_row_per_day(self):
        habit = make_habit(pattern_builder.every_day(START, repeats_per_day=3))
        aggregate = HabitAggregate(habit)
        for _ in range(3):
            aggregate.toggle(START)
        assert len(habit.completions) == 1
        assert habit.completions[0].repetitions == 3

    def test_skip_then_unskip(self):
        habit = make_habit()
        aggregate = HabitAggregate(habit)
        aggregate.toggle(START)
        aggregate.skip(START)
        assert habit.total_completions == 0
        assert aggregate.completion_on(START).skipped is True
        aggregate.unskip(START)
        assert aggregate.completion_on(START) is None


class TestCounters:
    def test_best_streak_only_rises(self):
        habit = make_habit()
        aggregate = HabitAggregate(habit)
        assert aggregate.update_best_streak(4) is True
        assert aggregate.update_best_streak(2) is False
        assert habit.best_streak_ever == 4

    def test_recount(self):
        habit = make_habit()
        aggregate = HabitAggregate(habit)
        aggregate.toggle(START)
        aggregate.toggle(date(2024, 1, 2))
        habit.total_completions = 99
        assert aggregate.recount_total_completions() == 2
