"""
Clock and instant helpers.

Every instant the core handles is timezone-aware. Naive values coming from
callers are read in the configured default zone, then normalised to UTC.
Stored text is fixed-width so that string order equals time order.
"""

from datetime import UTC, datetime, tzinfo
from typing import Protocol
from zoneinfo import ZoneInfo

from focusflow import config

DB_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    """Wall clock, always UTC-aware."""

    def now(self) -> datetime:
        return datetime.now(UTC)


class FixedClock:
    """Clock pinned to one instant. Used by tests and replay tools."""

    def __init__(self, at: datetime):
        self._at = ensure_aware(at)

    def now(self) -> datetime:
        return self._at

    def set(self, at: datetime) -> None:
        self._at = ensure_aware(at)


def default_zone() -> tzinfo:
    return ZoneInfo(config.DEFAULT_TIMEZONE)


def ensure_aware(value: datetime, tz: tzinfo | None = None) -> datetime:
    """Attach the default zone to naive datetimes, leave aware ones alone."""
    if value.tzinfo is None or value.tzinfo.utcoffset(value) is None:
        return value.replace(tzinfo=tz or default_zone())
    return value


def to_utc(value: datetime) -> datetime:
    return ensure_aware(value).astimezone(UTC)


def to_db(value: datetime) -> str:
    """Serialise an instant for storage and SQL comparison."""
    return to_utc(value).strftime(DB_FORMAT)


def from_db(value: str) -> datetime:
    return datetime.strptime(value, DB_FORMAT).replace(tzinfo=UTC)
