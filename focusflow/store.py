"""
Block Store - durable, owner-scoped storage of time blocks.

SQLite for persistence, a bounded connection pool for reuse. Every
operation runs on a connection checked out for exactly that logical
operation and released afterwards, success or not.

The store performs no authorization: every query is keyed by the owner id
the caller hands in. Ownership rules live in the BlockManager.
"""

import logging
import sqlite3
import uuid
from collections.abc import Generator
from contextlib import ExitStack, contextmanager
from datetime import datetime
from pathlib import Path

from focusflow import config, safe_sql
from focusflow import db as db_module
from focusflow.clock import to_db
from focusflow.db_opt import ConnectionPool, PoolExhausted
from focusflow.errors import StoreFailure
from focusflow.models import BlockStats, TimeBlock

logger = logging.getLogger(__name__)

TABLE = "time_blocks"

# Columns the update operation may touch. id, owner_id, created_at never change.
MUTABLE_COLUMNS = frozenset({"title", "description", "start_time", "end_time", "updated_at"})

_OVERLAP_WHERE = """owner_id = ?
    AND (
        (start_time <= ? AND end_time > ?) OR
        (start_time < ? AND end_time >= ?) OR
        (start_time >= ? AND end_time <= ?)
    )"""

_AGGREGATE_SQL = """
    SELECT
        COUNT(*) AS total_blocks,
        SUM((julianday(end_time) - julianday(start_time)) * 24.0) AS total_hours,
        AVG((julianday(end_time) - julianday(start_time)) * 24.0) AS avg_duration
    FROM time_blocks
    WHERE owner_id = ?
"""


def new_block_id() -> str:
    return f"block_{uuid.uuid4().hex[:12]}"


@contextmanager
def _failure(operation: str, block_id: str | None = None) -> Generator[None, None, None]:
    """Wrap sqlite errors into StoreFailure with operation context."""
    try:
        yield
    except sqlite3.Error as e:
        logger.error("store %s failed (block=%s): %s", operation, block_id, e)
        raise StoreFailure(operation, block_id, str(e)) from e


def _db_value(value):
    return to_db(value) if isinstance(value, datetime) else value


class StoreSession:
    """
    Store operations bound to one pooled connection.

    Obtained from BlockStore.session() (each statement autocommits) or
    BlockStore.transaction() (all statements commit or roll back together).
    """

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def _rows(self, sql: str, params: list) -> list[TimeBlock]:
        return [TimeBlock.from_row(dict(row)) for row in self.conn.execute(sql, params)]

    # ==================== Writes ====================

    def insert(self, block: TimeBlock) -> str:
        """Persist *block* under a fresh id. block.id is ignored. Returns the id."""
        block_id = new_block_id()
        row = {
            "id": block_id,
            "owner_id": block.owner_id,
            "title": block.title,
            "description": block.description,
            "start_time": to_db(block.start_time),
            "end_time": to_db(block.end_time),
            "created_at": to_db(block.created_at),
            "updated_at": to_db(block.updated_at or block.created_at),
        }
        with _failure("insert", block_id):
            self.conn.execute(
                safe_sql.insert_or_ignore("owners", ["id", "created_at"]),
                [block.owner_id, row["created_at"]],
            )
            self.conn.execute(safe_sql.insert(TABLE, list(row)), list(row.values()))
        return block_id

    def update(self, block_id: str, fields: dict) -> int:
        """Update mutable columns of one block. Returns rows affected."""
        if not fields:
            return 0
        unknown = set(fields) - MUTABLE_COLUMNS
        if unknown:
            raise ValueError(f"Immutable or unknown columns: {sorted(unknown)}")

        values = [_db_value(v) for v in fields.values()]
        values.append(block_id)
        with _failure("update", block_id):
            cursor = self.conn.execute(safe_sql.update(TABLE, list(fields)), values)
            return cursor.rowcount

    def delete(self, block_id: str) -> int:
        """Delete one block. Returns rows affected."""
        with _failure("delete", block_id):
            return self.conn.execute(safe_sql.delete(TABLE), [block_id]).rowcount

    def delete_owner(self, owner_id: str) -> int:
        """Remove an owner; its blocks go with it (ON DELETE CASCADE)."""
        with _failure("delete_owner"):
            return self.conn.execute(safe_sql.delete("owners"), [owner_id]).rowcount

    # ==================== Reads ====================

    def get_by_id(self, block_id: str) -> TimeBlock | None:
        with _failure("get_by_id", block_id):
            row = self.conn.execute(safe_sql.select(TABLE, where="id = ?"), [block_id]).fetchone()
        return TimeBlock.from_row(dict(row)) if row else None

    def list_by_owner(self, owner_id: str) -> list[TimeBlock]:
        """All blocks of an owner, most recent start first."""
        sql = safe_sql.select(TABLE, where="owner_id = ?", order_by="start_time DESC, id")
        with _failure("list_by_owner"):
            return self._rows(sql, [owner_id])

    def list_by_owner_range(
        self, owner_id: str, range_start: datetime, range_end: datetime
    ) -> list[TimeBlock]:
        """Blocks fully contained in [range_start, range_end], earliest first."""
        sql = safe_sql.select(
            TABLE,
            where="owner_id = ? AND start_time >= ? AND end_time <= ?",
            order_by="start_time ASC, id",
        )
        with _failure("list_by_owner_range"):
            return self._rows(sql, [owner_id, to_db(range_start), to_db(range_end)])

    def list_overlapping(
        self,
        owner_id: str,
        start: datetime,
        end: datetime,
        exclude_id: str | None = None,
    ) -> list[TimeBlock]:
        """Blocks of an owner whose interval intersects [start, end)."""
        s, e = to_db(start), to_db(end)
        where = _OVERLAP_WHERE
        params = [owner_id, s, s, e, e, s, e]
        if exclude_id:
            where += " AND id != ?"
            params.append(exclude_id)

        sql = safe_sql.select(TABLE, where=where, order_by="start_time ASC, id")
        with _failure("list_overlapping", exclude_id):
            return self._rows(sql, params)

    def aggregate(self, owner_id: str) -> BlockStats:
        """Count, total and average duration in hours, in one query."""
        with _failure("aggregate"):
            row = self.conn.execute(_AGGREGATE_SQL, [owner_id]).fetchone()

        count = row["total_blocks"] or 0
        if count == 0:
            return BlockStats(count=0, total_hours=0.0, average_hours=None)
        return BlockStats(
            count=count,
            total_hours=float(row["total_hours"]),
            average_hours=float(row["avg_duration"]),
        )


class BlockStore:
    """
    Pooled sqlite store for time blocks.

    Read and write helpers on this class each run in their own session.
    Use transaction() when several statements must act as one unit.
    """

    def __init__(
        self,
        db_path: str | Path | None = None,
        pool_size: int | None = None,
        max_wait: float | None = None,
        converge_schema: bool = True,
    ):
        self.db_path = Path(db_path) if db_path else db_module.get_db_path()
        logger.info("BlockStore initializing with DB: %s", self.db_path)

        if converge_schema:
            with _failure("ensure_schema"):
                db_module.ensure_schema(self.db_path)

        self._pool = ConnectionPool(
            lambda: db_module.connect(self.db_path),
            max_size=pool_size or config.POOL_SIZE,
            max_wait=max_wait if max_wait is not None else config.POOL_TIMEOUT,
        )

    @contextmanager
    def _checkout(self) -> Generator[sqlite3.Connection, None, None]:
        with ExitStack() as stack:
            try:
                conn = stack.enter_context(self._pool.connection())
            except PoolExhausted as e:
                raise StoreFailure("checkout", detail=str(e)) from e
            except sqlite3.Error as e:
                raise StoreFailure("connect", detail=str(e)) from e
            yield conn

    @contextmanager
    def session(self) -> Generator[StoreSession, None, None]:
        """One pooled connection, statements autocommit."""
        with self._checkout() as conn:
            yield StoreSession(conn)

    @contextmanager
    def transaction(self) -> Generator[StoreSession, None, None]:
        """
        One pooled connection inside BEGIN IMMEDIATE.

        The write lock is taken up front, so a read-check-write sequence
        cannot interleave with another writer. Any exception rolls back.
        """
        with self._checkout() as conn:
            with _failure("begin"):
                conn.execute("BEGIN IMMEDIATE")
            try:
                yield StoreSession(conn)
            except BaseException:
                if conn.in_transaction:
                    with _failure("rollback"):
                        conn.execute("ROLLBACK")
                raise
            with _failure("commit"):
                conn.execute("COMMIT")

    # ==================== Single-operation helpers ====================

    def insert(self, block: TimeBlock) -> str:
        with self.transaction() as s:
            return s.insert(block)

    def get_by_id(self, block_id: str) -> TimeBlock | None:
        with self.session() as s:
            return s.get_by_id(block_id)

    def list_by_owner(self, owner_id: str) -> list[TimeBlock]:
        with self.session() as s:
            return s.list_by_owner(owner_id)

    def list_by_owner_range(
        self, owner_id: str, range_start: datetime, range_end: datetime
    ) -> list[TimeBlock]:
        with self.session() as s:
            return s.list_by_owner_range(owner_id, range_start, range_end)

    def list_overlapping(
        self,
        owner_id: str,
        start: datetime,
        end: datetime,
        exclude_id: str | None = None,
    ) -> list[TimeBlock]:
        with self.session() as s:
            return s.list_overlapping(owner_id, start, end, exclude_id)

    def update(self, block_id: str, fields: dict) -> int:
        with self.transaction() as s:
            return s.update(block_id, fields)

    def delete(self, block_id: str) -> int:
        with self.transaction() as s:
            return s.delete(block_id)

    def delete_owner(self, owner_id: str) -> int:
        with self.transaction() as s:
            return s.delete_owner(owner_id)

    def aggregate(self, owner_id: str) -> BlockStats:
        with self.session() as s:
            return s.aggregate(owner_id)

    # ==================== Lifecycle ====================

    def pool_stats(self) -> dict:
        return self._pool.pool_stats().to_dict()

    def close(self) -> None:
        self._pool.close_all()


_store: BlockStore | None = None


def get_store(db_path: str | Path | None = None) -> BlockStore:
    """
    Process-wide store, created on first use.

    A later call naming a different database still gets the existing
    store; the mismatch is logged. Call reset_store() first to switch.
    """
    global _store  # noqa: PLW0603
    if _store is None:
        _store = BlockStore(db_path)
    elif db_path is not None and Path(db_path) != _store.db_path:
        logger.warning(
            "get_store(%s) ignored: process store already open on %s", db_path, _store.db_path
        )
    return _store


def reset_store() -> None:
    """Close and forget the process-wide store."""
    global _store  # noqa: PLW0603
    if _store is not None:
        _store.close()
        _store = None
