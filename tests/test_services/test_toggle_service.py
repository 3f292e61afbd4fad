"""
Tests for HabitToggleService: toggle semantics per tracking type, skips,
denormalised counters and completion events.
"""

from datetime import date, timedelta

import pytest

from habital.domain.errors import HabitNotFound, InvalidCompletionValue
from habital.domain.events import HabitCompleted, HabitIntervalCompleted, HabitToggled
from habital.models.enums import HabitTrackingType
from habital.services import pattern_builder
from habital.services.habit_service import HabitService
from habital.services.toggle_service import HabitToggleService

START = date(2024, 1, 1)


@pytest.fixture
def habits(database, bus):
    return HabitService(database, bus)


@pytest.fixture
def toggles(database, bus):
    return HabitToggleService(database, bus)


def completion_rows(habits, habit_id):
    return {c.day: c for c in habits.get_habit(habit_id).completions}


class TestSingleRepetition:
    def test_toggle_twice_restores_state(self, habits, toggles):
        habit = habits.create_habit("Read", pattern_builder.every_day(START), start_date=START)
        first = toggles.toggle(habit.id, START)
        second = toggles.toggle(habit.id, START)
        assert first.is_completed is True
        assert second.is_completed is False
        assert completion_rows(habits, habit.id) == {}
        assert habits.get_habit(habit.id).total_completions == 0

    def test_counters(self, habits, toggles):
        habit = habits.create_habit("Read", pattern_builder.every_day(START), start_date=START)
        for offset in range(3):
            toggles.toggle(habit.id, START + timedelta(days=offset))
        stored = habits.get_habit(habit.id)
        assert stored.total_completions == 3
        assert stored.last_completion_date == START + timedelta(days=2)
        assert stored.best_streak_ever >= 3

    def test_unknown_habit(self, toggles):
        with pytest.raises(HabitNotFound):
            toggles.toggle(7, START)


class TestMultipleRepetitions:
    def test_increments_then_clears(self, habits, toggles):
        habit = habits.create_habit(
            "Water", pattern_builder.every_day(START, repeats_per_day=3), start_date=START
        )
        outcomes = [toggles.toggle(habit.id, START) for _ in range(4)]
        assert [o.is_completed for o in outcomes] == [False, False, True, False]
        assert completion_rows(habits, habit.id) == {}

    def test_partial_progress_is_stored(self, habits, toggles):
        habit = habits.create_habit(
            "Water", pattern_builder.every_day(START, repeats_per_day=3), start_date=START
        )
        toggles.toggle(habit.id, START)
        row = completion_rows(habits, habit.id)[START]
        assert row.repetitions == 1
        assert row.completed is False


class TestDurationAndQuantity:
    def test_duration_set_and_clear(self, habits, toggles):
        pattern = pattern_builder.every_day(
            START, tracking_type=HabitTrackingType.DURATION, duration=30
        )
        habit = habits.create_habit("Run", pattern, start_date=START)
        assert toggles.toggle(habit.id, START, minutes=10).is_completed is False
        assert toggles.toggle(habit.id, START, minutes=45).is_completed is True
        assert completion_rows(habits, habit.id)[START].duration == 45
        assert toggles.toggle(habit.id, START, minutes=0).is_completed is False
        assert completion_rows(habits, habit.id) == {}

    def test_quantity_without_amount_flips(self, habits, toggles):
        pattern = pattern_builder.every_day(
            START, tracking_type=HabitTrackingType.QUANTITY, target_quantity=5
        )
        habit = habits.create_habit("Pages", pattern, start_date=START)
        assert toggles.toggle(habit.id, START).is_completed is True
        assert toggles.toggle(habit.id, START).is_completed is False

    def test_negative_amount(self, habits, toggles):
        pattern = pattern_builder.every_day(
            START, tracking_type=HabitTrackingType.QUANTITY, target_quantity=5
        )
        habit = habits.create_habit("Pages", pattern, start_date=START)
        with pytest.raises(InvalidCompletionValue):
            toggles.toggle(habit.id, START, quantity=-1)


class TestSkip:
    def test_skip_discards_completion(self, habits, toggles):
        habit = habits.create_habit("Read", pattern_builder.every_day(START), start_date=START)
        toggles.toggle(habit.id, START)
        outcome = toggles.skip(habit.id, START)
        assert outcome.was_completed is True
        assert outcome.is_completed is False
        row = completion_rows(habits, habit.id)[START]
        assert row.skipped is True and row.completed is False
        assert habits.get_habit(habit.id).total_completions == 0

    def test_unskip_removes_empty_row(self, habits, toggles):
        habit = habits.create_habit("Read", pattern_builder.every_day(START), start_date=START)
        toggles.skip(habit.id, START)
        toggles.unskip(habit.id, START)
        assert completion_rows(habits, habit.id) == {}

    def test_toggle_clears_skip(self, habits, toggles):
        habit = habits.create_habit("Read", pattern_builder.every_day(START), start_date=START)
        toggles.skip(habit.id, START)
        toggles.toggle(habit.id, START)
        row = completion_rows(habits, habit.id)[START]
        assert row.skipped is False and row.completed is True


class TestEvents:
    def test_toggle_and_completed_events(self, habits, toggles, recorded_events):
        habit = habits.create_habit("Read", pattern_builder.every_day(START), start_date=START)
        recorded_events.clear()
        toggles.toggle(habit.id, START)
        assert [type(e) for e in recorded_events] == [HabitToggled, HabitCompleted]
        assert recorded_events[0].date == START

    def test_uncompleting_emits_only_toggled(self, habits, toggles, recorded_events):
        habit = habits.create_habit("Read", pattern_builder.every_day(START), start_date=START)
        toggles.toggle(habit.id, START)
        recorded_events.clear()
        toggles.toggle(habit.id, START)
        assert [type(e) for e in recorded_events] == [HabitToggled]
        assert recorded_events[0].was_completed is True

    def test_interval_follow_up_event(self, habits, toggles, recorded_events):
        pattern = pattern_builder.every_n_days(3, START, follow_up=True)
        habit = habits.create_habit("Water plants", pattern, start_date=START)
        recorded_events.clear()
        toggles.toggle(habit.id, START)
        interval = [e for e in recorded_events if isinstance(e, HabitIntervalCompleted)]
        assert len(interval) == 1
        assert interval[0].days_interval == 3

    def test_force_complete_and_clear(self, habits, toggles):
        habit = habits.create_habit(
            "Water", pattern_builder.every_day(START, repeats_per_day=4), start_date=START
        )
        assert toggles.force_complete(habit.id, START).is_completed is True
        assert completion_rows(habits, habit.id)[START].repetitions == 4
        assert toggles.clear_day(habit.id, START).is_completed is False
        assert completion_rows(habits, habit.id) == {}
