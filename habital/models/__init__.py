from .base import Base, TimestampMixin
from .completion import Completion
from .enums import HabitIntensity, HabitSortOption, HabitTrackingType, QuantityUnit
from .habit import Habit, Notification
from .habit_list import HabitCategory, HabitList
from .preference import Preference
from .repeat_pattern import DailyGoal, MonthlyGoal, RepeatPattern, WeeklyGoal

__all__ = [
    "Base",
    "TimestampMixin",
    "Habit",
    "Notification",
    "RepeatPattern",
    "DailyGoal",
    "WeeklyGoal",
    "MonthlyGoal",
    "Completion",
    "HabitList",
    "HabitCategory",
    "Preference",
    "HabitTrackingType",
    "HabitIntensity",
    "HabitSortOption",
    "QuantityUnit",
]
