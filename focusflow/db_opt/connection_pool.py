"""
Connection Pooling for the SQLite store.

Features:
- Configurable pool size
- Connection health checks on checkout and release
- Pool statistics tracking
- Thread-safe operations with a Condition
- Scoped checkout via the connection() context manager

Classes:
- PoolStats: Statistics for pool health
- ConnectionPool: Thread-safe connection pool manager
"""

import logging
import sqlite3
import threading
import time
from collections.abc import Callable, Generator
from contextlib import contextmanager
from dataclasses import dataclass

logger = logging.getLogger(__name__)


class PoolExhausted(RuntimeError):
    """No connection became available within the wait limit."""

    pass


@dataclass
class PoolStats:
    """Statistics for connection pool health."""

    active_connections: int
    idle_connections: int
    total_connections: int
    max_pool_size: int
    wait_time_ms: float = 0.0
    checkout_count: int = 0
    release_count: int = 0

    def to_dict(self) -> dict:
        """Convert stats to dictionary."""
        return {
            "active_connections": self.active_connections,
            "idle_connections": self.idle_connections,
            "total_connections": self.total_connections,
            "max_pool_size": self.max_pool_size,
            "wait_time_ms": round(self.wait_time_ms, 2),
            "checkout_count": self.checkout_count,
            "release_count": self.release_count,
        }


class ConnectionPool:
    """
    Thread-safe connection pool manager.

    Hands out at most max_size connections at a time. Idle connections are
    reused; broken ones are discarded and replaced from the factory.
    """

    def __init__(
        self,
        connection_factory: Callable[[], sqlite3.Connection],
        max_size: int = 5,
        max_wait: float = 30.0,
    ):
        """
        Initialize connection pool.

        Args:
            connection_factory: Callable that returns a configured sqlite3.Connection
            max_size: Maximum number of connections handed out at once
            max_wait: Seconds to wait for a free connection
        """
        if max_size < 1:
            raise ValueError(f"max_size must be >= 1, got {max_size}")

        self.connection_factory = connection_factory
        self.max_size = max_size
        self.max_wait = max_wait

        self._cond = threading.Condition()
        self._idle: list[sqlite3.Connection] = []
        self._active: set[sqlite3.Connection] = set()
        self._closed = False

        self.checkout_count = 0
        self.release_count = 0
        self.total_wait_time_ms = 0.0

    def get_connection(self) -> sqlite3.Connection:
        """
        Get a connection from the pool.

        Returns an idle connection if available, creates a new one if under
        max_size, or waits for one to be released.

        Raises:
            PoolExhausted: If no connection frees up within max_wait
        """
        start_time = time.monotonic()

        with self._cond:
            if self._closed:
                raise RuntimeError("Connection pool is closed")

            while not self._idle and len(self._active) >= self.max_size:
                remaining = self.max_wait - (time.monotonic() - start_time)
                if remaining <= 0:
                    logger.error(
                        "ConnectionPool.get_connection: exceeded max wait time (%ss)",
                        self.max_wait,
                    )
                    raise PoolExhausted(f"Could not obtain connection within {self.max_wait}s")
                self._cond.wait(remaining)

            conn = None
            while self._idle and conn is None:
                candidate = self._idle.pop()
                if self._is_healthy(candidate):
                    conn = candidate
                else:
                    logger.warning("ConnectionPool: unhealthy connection discarded")
                    self._close_connection(candidate)
            if conn is None:
                conn = self.connection_factory()

            self._active.add(conn)
            self.checkout_count += 1
            self.total_wait_time_ms += (time.monotonic() - start_time) * 1000

            logger.debug(
                "ConnectionPool: checked out connection (active=%d, idle=%d)",
                len(self._active),
                len(self._idle),
            )
            return conn

    def release_connection(self, conn: sqlite3.Connection) -> None:
        """
        Return a connection to the pool.

        A connection still inside a transaction is rolled back first so the
        next holder starts clean.
        """
        with self._cond:
            if conn not in self._active:
                logger.error("ConnectionPool.release_connection: connection not in active set")
                raise RuntimeError("Connection not in active pool")

            self._active.remove(conn)

            if conn.in_transaction:
                try:
                    conn.rollback()
                except sqlite3.Error as e:
                    logger.warning("ConnectionPool: rollback on release failed: %s", e)

            if not self._closed and self._is_healthy(conn):
                self._idle.append(conn)
            else:
                self._close_connection(conn)

            self.release_count += 1
            self._cond.notify()

            logger.debug(
                "ConnectionPool: released connection (active=%d, idle=%d)",
                len(self._active),
                len(self._idle),
            )

    @contextmanager
    def connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Scoped checkout: the connection is always released."""
        conn = self.get_connection()
        try:
            yield conn
        finally:
            self.release_connection(conn)

    def pool_stats(self) -> PoolStats:
        """Get current pool statistics."""
        with self._cond:
            avg_wait = (
                self.total_wait_time_ms / self.checkout_count if self.checkout_count > 0 else 0.0
            )
            return PoolStats(
                active_connections=len(self._active),
                idle_connections=len(self._idle),
                total_connections=len(self._active) + len(self._idle),
                max_pool_size=self.max_size,
                wait_time_ms=avg_wait,
                checkout_count=self.checkout_count,
                release_count=self.release_count,
            )

    def close_all(self) -> None:
        """Close idle connections now; active ones are closed on release."""
        with self._cond:
            self._closed = True
            for conn in self._idle:
                self._close_connection(conn)
            self._idle.clear()
            self._cond.notify_all()
            logger.debug("ConnectionPool: pool closed")

    def _is_healthy(self, conn: sqlite3.Connection) -> bool:
        try:
            conn.execute("SELECT 1")
            return True
        except sqlite3.Error as e:
            logger.warning("ConnectionPool: health check failed: %s", e)
            return False

    def _close_connection(self, conn: sqlite3.Connection) -> None:
        try:
            conn.close()
        except sqlite3.Error as e:
            logger.error("ConnectionPool: error closing connection: %s", e)
