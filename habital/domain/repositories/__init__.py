from .grouping_repository import (
    CategoryRepository,
    HabitListRepository,
    PreferenceRepository,
)
from .habit_repository import HabitRepository

__all__ = [
    "HabitRepository",
    "HabitListRepository",
    "CategoryRepository",
    "PreferenceRepository",
]
