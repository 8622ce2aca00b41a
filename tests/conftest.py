"""
Test configuration - ensures repo root is in sys.path + determinism guards.

This allows tests to import from top-level packages (focusflow, api, cli).
Enforces determinism by blocking access to the live DB and pinning the
default timezone.
"""

import sqlite3
import sys
from pathlib import Path

import pytest

# Add repo root to sys.path so tests can import focusflow.*, api.*, cli.*
REPO_ROOT = Path(__file__).parent.parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from focusflow import config  # noqa: E402
from focusflow.clock import FixedClock  # noqa: E402
from focusflow.store import BlockStore  # noqa: E402
from focusflow.time_truth import BlockManager  # noqa: E402
from tests.fixtures import NOW  # noqa: E402

# =============================================================================
# DETERMINISM GUARD: Block live database access
# =============================================================================

_FORBIDDEN_DB_PATTERNS = [
    str(Path.home() / ".focusflow" / "data" / "focusflow.db"),
    ".focusflow/data/focusflow.db",
]

_original_sqlite_connect = sqlite3.connect


def _guarded_sqlite_connect(database, *args, **kwargs):
    """Intercept sqlite3.connect to block live DB access."""
    db_str = str(database)
    for pattern in _FORBIDDEN_DB_PATTERNS:
        if pattern in db_str:
            raise RuntimeError(
                f"DETERMINISM VIOLATION: Test attempted to access live DB at {database}.\n"
                "Tests must use the store fixture (tmp_path database)."
            )
    return _original_sqlite_connect(database, *args, **kwargs)


@pytest.fixture(autouse=True)
def guard_live_db_access(monkeypatch):
    """Automatically guard all tests against live DB access."""
    monkeypatch.setattr(sqlite3, "connect", _guarded_sqlite_connect)


@pytest.fixture(autouse=True)
def pin_timezone(monkeypatch):
    """Naive datetimes and Quick-Add "today" resolve in UTC during tests."""
    monkeypatch.setattr(config, "DEFAULT_TIMEZONE", "UTC")


# =============================================================================
# CORE FIXTURES
# =============================================================================

@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "focusflow_test.db"


@pytest.fixture
def store(db_path):
    s = BlockStore(db_path, pool_size=4, max_wait=2.0)
    yield s
    s.close()


@pytest.fixture
def clock():
    return FixedClock(NOW)


@pytest.fixture
def manager(store, clock):
    return BlockManager(store, clock=clock)
