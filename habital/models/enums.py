"""Enumerations shared by models, services and the CLI."""

import enum


class HabitTrackingType(str, enum.Enum):
    """How progress on a habit is measured for a single day."""

    REPETITIONS = "repetitions"
    DURATION = "duration"
    QUANTITY = "quantity"

    @property
    def title(self) -> str:
        return {
            HabitTrackingType.REPETITIONS: "Times",
            HabitTrackingType.DURATION: "Duration",
            HabitTrackingType.QUANTITY: "Amount",
        }[self]

    @property
    def description(self) -> str:
        return {
            HabitTrackingType.REPETITIONS: "Complete a certain number of times",
            HabitTrackingType.DURATION: "Track time spent on habit",
            HabitTrackingType.QUANTITY: "Track specific amount or quantity",
        }[self]

    @property
    def unit(self) -> str:
        """Label for the logged amount; quantity habits may set their own."""
        return {
            HabitTrackingType.REPETITIONS: "times",
            HabitTrackingType.DURATION: "minutes",
            HabitTrackingType.QUANTITY: "items",
        }[self]


class QuantityUnit(str, enum.Enum):
    """Common units offered for quantity tracking."""

    PAGES = "pages"
    MINUTES = "minutes"
    HOURS = "hours"
    GLASSES = "glasses"
    STEPS = "steps"
    WORDS = "words"
    ITEMS = "items"
    CUSTOM = "custom"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


class HabitIntensity(int, enum.Enum):
    """Perceived effort of a habit, used to weight analytics."""

    LIGHT = 1
    MODERATE = 2
    HIGH = 3
    EXTREME = 4

    @property
    def title(self) -> str:
        return self.name.capitalize()

    @property
    def multiplier(self) -> float:
        return _INTENSITY_MULTIPLIERS[self]

    @classmethod
    def from_level(cls, level: int) -> "HabitIntensity":
        """Map a stored level to an intensity, clamping out-of-range values."""
        return cls(min(max(int(level), cls.LIGHT.value), cls.EXTREME.value))


_INTENSITY_MULTIPLIERS = {
    HabitIntensity.LIGHT: 1.0,
    HabitIntensity.MODERATE: 1.5,
    HabitIntensity.HIGH: 2.0,
    HabitIntensity.EXTREME: 3.0,
}


class HabitSortOption(str, enum.Enum):
    """Sort orders offered for the habit list.

    Values are persisted in the preference store, so they must stay stable.
    """

    ASCENDING = "ascending"
    DESCENDING = "descending"
    CUSTOM = "custom"
    STREAK = "streak"
    COMPLETION = "completion"
    RECENT_COMPLETION = "recentCompletion"

    @property
    def title(self) -> str:
        return _SORT_TITLES[self]

    @classmethod
    def default(cls) -> "HabitSortOption":
        return cls.CUSTOM

    @classmethod
    def parse(cls, raw: object) -> "HabitSortOption":
        """Parse a stored value, falling back to the default when unknown."""
        try:
            return cls(raw)
        except ValueError:
            return cls.default()


_SORT_TITLES = {
    HabitSortOption.ASCENDING: "Ascending (A-Z)",
    HabitSortOption.DESCENDING: "Descending (Z-A)",
    HabitSortOption.CUSTOM: "Custom Order",
    HabitSortOption.STREAK: "Highest Streak",
    HabitSortOption.COMPLETION: "Incomplete First",
    HabitSortOption.RECENT_COMPLETION: "Recent Activity",
}
