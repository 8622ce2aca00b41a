"""
Pinned instants and block factories for deterministic tests.

All tests run on 2026-03-10 at 14:00 UTC unless they move the clock.
"""

from datetime import UTC, datetime

NOW = datetime(2026, 3, 10, 14, 0, tzinfo=UTC)

OWNER_A = "owner-a"
OWNER_B = "owner-b"


def at(hour: int, minute: int = 0, day: int = 10) -> datetime:
    """Instant on March <day> 2026, UTC."""
    return datetime(2026, 3, day, hour, minute, tzinfo=UTC)


def make_block(manager, owner_id=OWNER_A, start_hour=10, end_hour=11, title="Focus", **kwargs):
    """Create a block through the manager; hours are on the pinned day."""
    return manager.create(
        owner_id,
        title,
        kwargs.get("description"),
        kwargs.get("start") or at(start_hour),
        kwargs.get("end") or at(end_hour),
    )
