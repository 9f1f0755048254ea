"""
Pytest configuration and shared fixtures.
"""

import pytest
from datetime import datetime, timezone
from pathlib import Path

from jobtracker.logger import StructuredLogger, reset_logger
from jobtracker.memory import MemoryStore
from jobtracker.store import Store


FIXED_NOW = datetime(2024, 3, 1, 9, 30, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def fresh_logger():
    """Each test starts without a global logger."""
    reset_logger()
    yield
    reset_logger()


@pytest.fixture
def quiet_logger() -> StructuredLogger:
    """Logger with no console or file output."""
    return StructuredLogger(name="test", level="DEBUG", enable_console=False)


@pytest.fixture
def fixed_clock():
    """Clock that always returns FIXED_NOW."""
    return lambda: FIXED_NOW


@pytest.fixture
def db_path(tmp_path) -> Path:
    """Path for a temporary database file."""
    return tmp_path / "test.db"


@pytest.fixture
def store(db_path, quiet_logger, fixed_clock):
    """Durable store on a temporary SQLite file."""
    s = Store.open(db_path, clock=fixed_clock, logger=quiet_logger)
    yield s
    s.close()


@pytest.fixture
def memory_store(fixed_clock) -> MemoryStore:
    """In-memory store."""
    return MemoryStore(clock=fixed_clock)


@pytest.fixture(params=["sqlite", "memory"])
def any_store(request, tmp_path, quiet_logger, fixed_clock):
    """Each store implementation in turn, for contract tests."""
    if request.param == "sqlite":
        s = Store.open(tmp_path / "contract.db", clock=fixed_clock, logger=quiet_logger)
    else:
        s = MemoryStore(clock=fixed_clock)
    yield s
    s.close()
