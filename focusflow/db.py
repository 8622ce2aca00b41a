"""
Centralized Database Access for FocusFlow.

Single source of truth for:
- DB path resolution
- Connection factory
- Schema convergence (delegated to schema_engine)

ALL code must use this module for DB access. No direct sqlite3.connect() elsewhere.
"""

import logging
import sqlite3
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path

from focusflow import config, paths, schema, schema_engine

logger = logging.getLogger(__name__)


# ============================================================
# DB PATH RESOLUTION
# ============================================================


def get_db_path() -> Path:
    """
    Get the canonical DB path. ALL code must use this.

    Resolution order:
    1. FOCUSFLOW_DB env var (explicit override)
    2. ~/.focusflow/data/focusflow.db (default via paths.db_path())
    """
    return paths.db_path()


# ============================================================
# CONNECTION FACTORY
# ============================================================


def connect(db_path: str | Path | None = None) -> sqlite3.Connection:
    """
    Open a connection configured the way the store expects.

    Connections run in autocommit mode (isolation_level=None); callers open
    explicit transactions with BEGIN. check_same_thread is off because pooled
    connections move between worker threads, one holder at a time.
    """
    db_path = Path(db_path) if db_path else get_db_path()
    if str(db_path) != ":memory:":
        db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(str(db_path), isolation_level=None, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys=ON")
    conn.execute(f"PRAGMA busy_timeout={int(config.BUSY_TIMEOUT_MS)}")
    return conn


@contextmanager
def get_connection(db_path: str | Path | None = None) -> Generator[sqlite3.Connection, None, None]:
    """
    Get a short-lived connection with proper setup.

    Usage:
        with get_connection() as conn:
            conn.execute(...)
    """
    conn = connect(db_path)
    try:
        yield conn
    finally:
        conn.close()


# ============================================================
# SCHEMA
# ============================================================


def get_schema_version(conn: sqlite3.Connection) -> int:
    """Get current schema version from PRAGMA user_version."""
    return conn.execute("PRAGMA user_version").fetchone()[0]


def run_migrations(conn: sqlite3.Connection) -> dict:
    """
    Converge the database schema to match focusflow.schema declarations.

    Returns a results dict for logging.
    """
    previous_version = get_schema_version(conn)
    results = schema_engine.converge(conn)
    results["previous_version"] = previous_version

    if results["tables_created"]:
        logger.info("Tables created: %s", results["tables_created"])
    if results["columns_added"]:
        logger.info("Columns added: %s", results["columns_added"])
    if results["indexes_created"]:
        logger.info("Indexes created: %d", len(results["indexes_created"]))
    if results["errors"]:
        logger.warning("Convergence errors: %s", results["errors"])
    return results


def ensure_schema(db_path: str | Path | None = None) -> dict:
    """Converge the schema of *db_path*. Safe to call multiple times."""
    db_path = Path(db_path) if db_path else get_db_path()
    logger.info("Resolved DB path: %s (target SCHEMA_VERSION %s)", db_path, schema.SCHEMA_VERSION)

    with get_connection(db_path) as conn:
        if get_schema_version(conn) >= schema.SCHEMA_VERSION:
            logger.debug("Schema already converged, skipping")
            return {"status": "skipped", "version": schema.SCHEMA_VERSION}
        return run_migrations(conn)


def get_db_info(db_path: str | Path | None = None) -> dict:
    """DB info for the health endpoint."""
    db_path = Path(db_path) if db_path else get_db_path()
    info = {
        "resolved_db_path": str(db_path),
        "exists": db_path.exists(),
        "sqlite_version": sqlite3.sqlite_version,
        "user_version": None,
        "target_schema_version": schema.SCHEMA_VERSION,
    }
    if info["exists"]:
        with get_connection(db_path) as conn:
            info["user_version"] = get_schema_version(conn)
    return info
