"""
Tests for the SQLAlchemy repository implementations.

Each repository is checked against its protocol and exercised against an
in-memory SQLite store.
"""

from datetime import date

import pytest
from sqlalchemy.exc import IntegrityError

from habital.domain.repositories import (
    CategoryRepository,
    HabitListRepository,
    HabitRepository,
    PreferenceRepository,
)
from habital.infrastructure.repositories import (
    SqlAlchemyCategoryRepository,
    SqlAlchemyHabitListRepository,
    SqlAlchemyHabitRepository,
    SqlAlchemyPreferenceRepository,
)
from habital.models.completion import Completion
from habital.models.habit import Habit
from habital.models.habit_list import HabitList
from habital.services import pattern_builder

START = date(2024, 1, 1)


def new_habit(name, order=0, list_order=0, archived=False, habit_list=None):
    habit = Habit(
        name=name,
        start_date=START,
        order=order,
        list_order=list_order,
        is_archived=archived,
        habit_list=habit_list,
    )
    habit.repeat_patterns.append(pattern_builder.every_day(START))
    return habit


class TestProtocols:
    def test_implementations_satisfy_protocols(self, database):
        with database.session_scope() as session:
            assert isinstance(SqlAlchemyHabitRepository(session), HabitRepository)
            assert isinstance(SqlAlchemyHabitListRepository(session), HabitListRepository)
            assert isinstance(SqlAlchemyCategoryRepository(session), CategoryRepository)
            assert isinstance(SqlAlchemyPreferenceRepository(session), PreferenceRepository)


class TestHabitRepository:
    def test_add_assigns_id_and_loads_schedule(self, database):
        with database.session_scope() as session:
            habit = SqlAlchemyHabitRepository(session).add(new_habit("Read"))
        assert habit.id is not None
        with database.session_scope() as session:
            stored = SqlAlchemyHabitRepository(session).get_by_id(habit.id)
        assert stored.repeat_patterns[0].daily_goal.every_day is True

    def test_missing(self, database):
        with database.session_scope() as session:
            assert SqlAlchemyHabitRepository(session).get_by_id(1) is None

    def test_ordering_and_filters(self, database):
        with database.session_scope() as session:
            repo = SqlAlchemyHabitRepository(session)
            work = HabitList(name="Work", order=0)
            repo.add(new_habit("B", order=0, list_order=1, habit_list=work))
            repo.add(new_habit("A", order=1, list_order=0, habit_list=work))
            repo.add(new_habit("Old", order=2, archived=True))

        with database.session_scope() as session:
            repo = SqlAlchemyHabitRepository(session)
            assert [h.name for h in repo.list_habits()] == ["B", "A"]
            assert [h.name for h in repo.list_habits(list_id=work.id)] == ["A", "B"]
            assert [h.name for h in repo.list_habits(archived_only=True)] == ["Old"]
            assert len(repo.list_habits(include_archived=True)) == 3
            assert repo.count_archived() == 1

    def test_delete_cascades(self, database):
        with database.session_scope() as session:
            habit = SqlAlchemyHabitRepository(session).add(new_habit("Read"))
            habit.completions.append(Completion(day=START, day_key="2024-01-01", completed=True))
        with database.session_scope() as session:
            repo = SqlAlchemyHabitRepository(session)
            repo.delete(repo.get_by_id(habit.id))
        with database.session_scope() as session:
            assert session.query(Completion).count() == 0

    def test_one_completion_per_day(self, database):
        with database.session_scope() as session:
            habit = SqlAlchemyHabitRepository(session).add(new_habit("Read"))
        with pytest.raises(IntegrityError):
            with database.session_factory() as session:
                for _ in range(2):
                    session.add(Completion(habit_id=habit.id, day=START, day_key="2024-01-01"))
                session.flush()


class TestHabitListRepository:
    def test_all_in_display_order(self, database):
        with database.session_scope() as session:
            repo = SqlAlchemyHabitListRepository(session)
            repo.add(HabitList(name="Second", order=1))
            repo.add(HabitList(name="First", order=0))
        with database.session_scope() as session:
            assert [g.name for g in SqlAlchemyHabitListRepository(session).all()] == [
                "First",
                "Second",
            ]

    def test_delete_detaches_habits(self, database):
        with database.session_scope() as session:
            home = HabitList(name="Home", order=0)
            habit = SqlAlchemyHabitRepository(session).add(
                new_habit("Dishes", list_order=3, habit_list=home)
            )
        with database.session_scope() as session:
            repo = SqlAlchemyHabitListRepository(session)
            repo.delete(repo.get_by_id(home.id))
        with database.session_scope() as session:
            stored = SqlAlchemyHabitRepository(session).get_by_id(habit.id)
            assert stored.habit_list_id is None
            assert stored.list_order == 0


class TestPreferenceRepository:
    def test_insert_and_update(self, database):
        with database.session_scope() as session:
            repo = SqlAlchemyPreferenceRepository(session)
            assert repo.get_value("habitSortOption") is None
            repo.set_value("habitSortOption", "streak")
        with database.session_scope() as session:
            repo = SqlAlchemyPreferenceRepository(session)
            repo.set_value("habitSortOption", "custom")
        with database.session_scope() as session:
            assert SqlAlchemyPreferenceRepository(session).get_value("habitSortOption") == "custom"
