"""Tests for the tracking, intensity and sort enumerations."""

import pytest

from habital.models.enums import HabitIntensity, HabitSortOption, HabitTrackingType, QuantityUnit


class TestHabitTrackingType:
    def test_labels(self):
        assert HabitTrackingType.DURATION.title == "Duration"
        assert HabitTrackingType.REPETITIONS.unit == "times"
        assert HabitTrackingType("quantity") is HabitTrackingType.QUANTITY


class TestHabitIntensity:
    @pytest.mark.parametrize(
        "level,multiplier", [(1, 1.0), (2, 1.5), (3, 2.0), (4, 3.0)]
    )
    def test_multipliers(self, level, multiplier):
        assert HabitIntensity(level).multiplier == multiplier

    def test_from_level_clamps(self):
        assert HabitIntensity.from_level(0) is HabitIntensity.LIGHT
        assert HabitIntensity.from_level(9) is HabitIntensity.EXTREME
        assert HabitIntensity.HIGH.title == "High"


class TestHabitSortOption:
    def test_default(self):
        assert HabitSortOption.default() is HabitSortOption.CUSTOM

    def test_parse(self):
        assert HabitSortOption.parse("recentCompletion") is HabitSortOption.RECENT_COMPLETION
        assert HabitSortOption.parse("nonsense") is HabitSortOption.CUSTOM
        assert HabitSortOption.parse(None) is HabitSortOption.CUSTOM

    def test_titles(self):
        assert HabitSortOption.COMPLETION.title == "Incomplete First"


class TestQuantityUnit:
    def test_display_name(self):
        assert QuantityUnit.GLASSES.display_name == "Glasses"
