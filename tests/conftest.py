"""
Pytest configuration and shared fixtures.
"""

from datetime import date
from unittest.mock import MagicMock

import pytest

from shared_calendar.cache import LiveCache
from shared_calendar.config import Settings
from shared_calendar.selection import SelectionMachine
from shared_calendar.store import MemoryStore

# Wednesday of ISO week 10, 2024
LOAD_DAY = date(2024, 3, 6)
WEEK = "2024-03-04"
NEXT_WEEK = "2024-03-11"


@pytest.fixture
def settings():
    return Settings(backend="memory", _env_file=None)


@pytest.fixture
def store():
    """In-memory store wrapped so calls can be asserted on."""
    return MagicMock(wraps=MemoryStore())


@pytest.fixture
def cache(store, settings):
    live = LiveCache(store, settings, load_week=LOAD_DAY).mount()
    yield live
    live.unmount()


@pytest.fixture
def machine(store, cache):
    return SelectionMachine(store, cache)


@pytest.fixture
def add_reservation(store, settings):
    """Append a reservation document straight to the store."""

    def _add(day="Wed", start=4, end=6, user="Ana", description="Gym", week_start=WEEK, **extra):
        record = {
            "day": day,
            "start": start,
            "end": end,
            "user": user,
            "description": description,
            **extra,
        }
        if week_start is not None:
            record["weekStart"] = week_start
        return store.append(settings.reservations_collection, record)

    return _add
