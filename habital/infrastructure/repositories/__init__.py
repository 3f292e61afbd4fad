from .sqlalchemy_grouping_repository import (
    SqlAlchemyCategoryRepository,
    SqlAlchemyHabitListRepository,
    SqlAlchemyPreferenceRepository,
)
from .sqlalchemy_habit_repository import SqlAlchemyHabitRepository

__all__ = [
    "SqlAlchemyHabitRepository",
    "SqlAlchemyHabitListRepository",
    "SqlAlchemyCategoryRepository",
    "SqlAlchemyPreferenceRepository",
]
