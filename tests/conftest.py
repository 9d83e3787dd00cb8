"""Shared test fixtures and configuration.

Sets up environment variables before any life_calendar import, and provides
common fixtures: a pinned clock, calendar states and stores.
"""

import os

# Patch env vars BEFORE any life_calendar imports
os.environ.setdefault("STORAGE_BACKEND", "memory")
os.environ.setdefault("DATABASE_PATH", ":memory:")
os.environ.setdefault("STORAGE_KEY", "life-calendar-storage")
os.environ.setdefault("DEFAULT_LIFE_EXPECTANCY", "80")

from datetime import date

import pytest

BIRTH = date(2000, 1, 1)
TODAY = date(2026, 10, 18)


@pytest.fixture
def clock():
    """A clock pinned to TODAY."""
    from life_calendar.adapters.clock import FixedClock
    return FixedClock(TODAY)


@pytest.fixture
def state(clock):
    """An uninitialized calendar."""
    from life_calendar.core.calendar_state import LifeCalendarState
    return LifeCalendarState(clock=clock)


@pytest.fixture
def born_state(state):
    """A calendar born on 2000-01-01 with the default 80 years."""
    state.set_birth_date(BIRTH)
    return state


@pytest.fixture
def memory_store():
    from life_calendar.adapters.memory_store import InMemoryKeyValueStore
    return InMemoryKeyValueStore()


@pytest.fixture
def tmp_db_path(tmp_path):
    """Return a temporary SQLite DB path."""
    return str(tmp_path / "test_life_calendar.db")


@pytest.fixture
def sqlite_store(tmp_db_path):
    """Return a SQLiteKeyValueStore backed by a temp file."""
    from life_calendar.adapters.sqlite_store import SQLiteKeyValueStore
    return SQLiteKeyValueStore(db_path=tmp_db_path)
