import logging
import os
from datetime import date
from typing import Dict, Optional

import pytest

# Set test environment variables
os.environ["HABITAL_ENVIRONMENT"] = "test"
os.environ["HABITAL_LOG_LEVEL"] = "WARNING"
os.environ["HABITAL_LOG_TO_FILE"] = "false"
os.environ["HABITAL_DATABASE_URL"] = "sqlite://"


@pytest.fixture(autouse=True)
def _strip_file_handlers():
    """Remove file handlers from root logger so tests never write to logs/app.log."""
    root = logging.getLogger()
    saved = [h for h in root.handlers if isinstance(h, logging.FileHandler)]
    for h in saved:
        root.removeHandler(h)
    yield
    # Restore any that were removed (and strip any new ones tests may have added)
    for h in list(root.handlers):
        if isinstance(h, logging.FileHandler):
            root.removeHandler(h)
    for h in saved:
        root.addHandler(h)


@pytest.fixture
def database():
    """Fresh in-memory SQLite store with all tables."""
    from habital.core.database import Database

    db = Database("sqlite://")
    db.create_all()
    yield db
    db.dispose()


@pytest.fixture
def bus():
    from habital.domain.events import EventBus

    return EventBus()


@pytest.fixture
def recorded_events(bus):
    """Every event published on ``bus``, in order."""
    from habital.domain import events as ev

    seen = []
    for event_type in (
        ev.HabitCreated,
        ev.HabitUpdated,
        ev.HabitDeleted,
        ev.HabitsReordered,
        ev.HabitToggled,
        ev.HabitCompleted,
        ev.HabitIntervalCompleted,
        ev.TabBarListSelectionChanged,
        ev.ForceCalendarUpdate,
    ):
        bus.subscribe(event_type, seen.append)
    return seen


@pytest.fixture
def container(database):
    """Wired services over the in-memory store."""
    from habital.core.config import Settings
    from habital.core.container import build_container

    return build_container(Settings(database_url="sqlite://"), database=database)


@pytest.fixture
def make_schedule():
    """Build an ORM-free schedule snapshot from pattern versions."""
    from habital.domain.schedule import DayRecord, HabitSchedule, PatternTimeline

    def _make(
        start: date,
        *versions,
        done=(),
        skipped=(),
        records: Optional[Dict[date, DayRecord]] = None,
        bad: bool = False,
        archived: bool = False,
    ) -> HabitSchedule:
        rows = dict(records or {})
        for day in done:
            rows[day] = DayRecord(completed=True, repetitions=1)
        for day in skipped:
            rows[day] = DayRecord(skipped=True)
        return HabitSchedule(
            start_date=start,
            timeline=PatternTimeline(versions),
            records=rows,
            is_bad_habit=bad,
            is_archived=archived,
            habit_id=1,
            name="Test habit",
        )

    return _make
