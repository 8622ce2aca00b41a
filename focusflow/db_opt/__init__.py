"""Database connection pooling."""

from .connection_pool import ConnectionPool, PoolExhausted, PoolStats

__all__ = ["ConnectionPool", "PoolExhausted", "PoolStats"]
