"""Pytest configuration to ensure local testing defaults."""

from __future__ import annotations

import os
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

# During pytest runs the durable medium is a throwaway sqlite file.
default_sqlite_url = f"sqlite:///{(BACKEND_DIR / 'tests' / 'test_storage.db').resolve().as_posix()}"
os.environ.setdefault("DATABASE_URL", default_sqlite_url)
os.environ.setdefault("TIMEZONE", "UTC")

from salesdesk.collection_service import build_collections  # noqa: E402
from salesdesk.record_store import RecordStore  # noqa: E402
from salesdesk.storage import MemoryKeyValueStorage  # noqa: E402

NOW = datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc)


class SteppingClock:
    """Returns ``start`` and moves forward by ``step`` on every call."""

    def __init__(self, start: datetime = NOW, step: timedelta = timedelta(seconds=1)):
        self.current = start
        self.step = step

    def __call__(self) -> datetime:
        value = self.current
        self.current = self.current + self.step
        return value


@pytest.fixture
def memory_storage():
    return MemoryKeyValueStorage()


@pytest.fixture
def store(memory_storage):
    return RecordStore(memory_storage)


@pytest.fixture
def clock():
    return SteppingClock()


@pytest.fixture
def collections(store, clock):
    return build_collections(store, clock)
