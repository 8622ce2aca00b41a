"""
Overlap Checker - decides whether time blocks intersect.

Overlap rule (existing block E, candidate [start, end)):
  (a) E starts at or before start and ends strictly after start, or
  (b) E starts strictly before end and ends at or after end, or
  (c) E lies fully inside [start, end].

Touching intervals ([10:00, 11:00) and [11:00, 12:00)) do not overlap.
Overlap is advisory: nothing here rejects a write.
"""

import logging
from dataclasses import dataclass
from datetime import datetime

from focusflow.clock import to_utc
from focusflow.errors import InvalidInterval
from focusflow.models import TimeBlock

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Conflict:
    block_a_id: str
    block_b_id: str
    overlap_start: datetime
    overlap_end: datetime


def intervals_overlap(
    existing_start: datetime,
    existing_end: datetime,
    start: datetime,
    end: datetime,
) -> bool:
    """Pure form of the overlap rule; mirrors the store's SQL predicate."""
    return (
        (existing_start <= start and existing_end > start)
        or (existing_start < end and existing_end >= end)
        or (existing_start >= start and existing_end <= end)
    )


class OverlapChecker:
    def __init__(self, store):
        self.store = store

    def overlaps(
        self,
        owner_id: str,
        start: datetime,
        end: datetime,
        exclude_id: str | None = None,
    ) -> list[TimeBlock]:
        """
        Every block of *owner_id* intersecting [start, end).

        Args:
            exclude_id: Block to leave out, e.g. the block being edited.

        Raises:
            InvalidInterval: If end <= start.
        """
        start, end = to_utc(start), to_utc(end)
        if end <= start:
            raise InvalidInterval(start, end)
        return self.store.list_overlapping(owner_id, start, end, exclude_id)

    def fits(
        self,
        owner_id: str,
        start: datetime,
        end: datetime,
        exclude_id: str | None = None,
    ) -> bool:
        """True when [start, end) collides with none of the owner's blocks."""
        return not self.overlaps(owner_id, start, end, exclude_id)

    def conflicts(self, owner_id: str) -> list[Conflict]:
        """
        Detect every overlapping pair among an owner's blocks.

        Sweep over blocks sorted by start; only blocks still open at the
        current start can collide with it.
        """
        blocks = sorted(self.store.list_by_owner(owner_id), key=lambda b: (b.start_time, b.id))
        found = []
        open_blocks: list[TimeBlock] = []

        for block in blocks:
            open_blocks = [b for b in open_blocks if b.end_time > block.start_time]
            for other in open_blocks:
                found.append(
                    Conflict(
                        block_a_id=other.id,
                        block_b_id=block.id,
                        overlap_start=block.start_time,
                        overlap_end=min(other.end_time, block.end_time),
                    )
                )
            open_blocks.append(block)

        if found:
            logger.debug("owner %s has %d overlapping pairs", owner_id, len(found))
        return found
