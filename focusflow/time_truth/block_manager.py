"""
Block Manager - Core time block operations for Time Truth.

Manages the creation, update, deletion and lookup of time blocks.
Enforces invariants:
- start < end for every persisted block
- Titles are non-empty and bounded; descriptions are bounded
- A block is only mutated by its owner, and the ownership check comes
  before any validation error is revealed
- Validation failures never reach the store
"""

import io
import logging
from datetime import datetime
from pathlib import Path
from typing import TextIO

from focusflow import config
from focusflow.clock import Clock, SystemClock, to_utc
from focusflow.errors import Forbidden, InvalidDescription, InvalidInterval, InvalidTitle, NotFound
from focusflow.models import BlockStats, TimeBlock
from focusflow.store import BlockStore, get_store

from .aggregator import Aggregator
from .export import write_csv
from .overlap import Conflict, OverlapChecker

logger = logging.getLogger(__name__)


class BlockManager:
    """
    Manages time blocks for any number of owners.

    Responsibilities:
    - Validate and persist new blocks
    - Apply owner-checked updates and deletes atomically
    - Answer owner-scoped list, range, overlap and statistics queries
    """

    def __init__(self, store=None, clock: Clock | None = None):
        if isinstance(store, str | Path):
            # Handle case where store is actually a db_path
            store = BlockStore(store)
        self.store = store or get_store()
        self.clock = clock or SystemClock()
        self.overlap = OverlapChecker(self.store)
        self.aggregator = Aggregator(self.store)

    # ==================== Validation ====================

    @staticmethod
    def _validate(
        title: str,
        description: str | None,
        start: datetime,
        end: datetime,
    ) -> tuple[str, str | None, datetime, datetime]:
        """Check fields, return them normalised (UTC instants, '' -> None)."""
        start, end = to_utc(start), to_utc(end)
        if end <= start:
            raise InvalidInterval(start, end)

        if not title or not title.strip():
            raise InvalidTitle("Title is required")
        if len(title) > config.TITLE_MAX_LENGTH:
            raise InvalidTitle(f"Title exceeds {config.TITLE_MAX_LENGTH} characters")

        description = description or None
        if description is not None and len(description) > config.DESCRIPTION_MAX_LENGTH:
            raise InvalidDescription(
                f"Description exceeds {config.DESCRIPTION_MAX_LENGTH} characters"
            )

        return title, description, start, end

    @staticmethod
    def _check_owner(
        block: TimeBlock | None, block_id: str, owner_id: str, operation: str
    ) -> TimeBlock:
        if block is None:
            logger.info("%s: block %s not found", operation, block_id)
            raise NotFound(block_id)
        if block.owner_id != owner_id:
            logger.warning(
                "%s: owner %s denied on block %s (owned by %s)",
                operation,
                owner_id,
                block_id,
                block.owner_id,
            )
            raise Forbidden(block_id, owner_id)
        return block

    # ==================== Mutations ====================

    def create(
        self,
        owner_id: str,
        title: str,
        description: str | None,
        start: datetime,
        end: datetime,
    ) -> TimeBlock:
        """
        Create a new time block.

        Raises:
            InvalidInterval: end <= start
            InvalidTitle / InvalidDescription: field bounds violated
            StoreFailure: persistence failed

        Returns:
            The stored block, including generated id and timestamps.
        """
        title, description, start, end = self._validate(title, description, start, end)
        now = self.clock.now()
        draft = TimeBlock(
            id="",
            owner_id=owner_id,
            title=title,
            description=description,
            start_time=start,
            end_time=end,
            created_at=now,
            updated_at=now,
        )

        with self.store.transaction() as tx:
            block_id = tx.insert(draft)
            block = tx.get_by_id(block_id)

        logger.info("Created block %s for owner %s (%s - %s)", block_id, owner_id, start, end)
        return block

    def update(
        self,
        block_id: str,
        owner_id: str,
        title: str,
        description: str | None,
        start: datetime,
        end: datetime,
    ) -> TimeBlock:
        """
        Replace title, description and interval of an owned block.

        Lookup, ownership check, validation and write share one store
        transaction, so a concurrent delete yields NotFound rather than a
        write to a vanished row.

        Raises:
            NotFound, Forbidden, InvalidInterval, InvalidTitle,
            InvalidDescription, StoreFailure
        """
        with self.store.transaction() as tx:
            self._check_owner(tx.get_by_id(block_id), block_id, owner_id, "update")
            title, description, start, end = self._validate(title, description, start, end)

            rows = tx.update(
                block_id,
                {
                    "title": title,
                    "description": description,
                    "start_time": start,
                    "end_time": end,
                    "updated_at": self.clock.now(),
                },
            )
            if rows == 0:
                raise NotFound(block_id)
            block = tx.get_by_id(block_id)

        logger.info("Updated block %s for owner %s", block_id, owner_id)
        return block

    def delete(self, block_id: str, owner_id: str) -> None:
        """
        Delete an owned block. Not idempotent.

        Raises:
            NotFound, Forbidden, StoreFailure
        """
        with self.store.transaction() as tx:
            self._check_owner(tx.get_by_id(block_id), block_id, owner_id, "delete")
            if tx.delete(block_id) == 0:
                raise NotFound(block_id)

        logger.info("Deleted block %s for owner %s", block_id, owner_id)

    # ==================== Queries ====================

    def find_by_id(self, block_id: str) -> TimeBlock | None:
        """Lookup without ownership filtering."""
        return self.store.get_by_id(block_id)

    def get_for_owner(self, block_id: str, owner_id: str) -> TimeBlock:
        """Lookup with the ownership rule applied."""
        return self._check_owner(self.store.get_by_id(block_id), block_id, owner_id, "read")

    def find_by_owner(self, owner_id: str) -> list[TimeBlock]:
        """All blocks of an owner, most recent start first."""
        return self.store.list_by_owner(owner_id)

    def find_by_owner_and_range(
        self, owner_id: str, range_start: datetime, range_end: datetime
    ) -> list[TimeBlock]:
        """
        Blocks lying entirely inside [range_start, range_end], earliest first.

        This is containment, not intersection: a block crossing either
        boundary is left out. Use find_overlapping for intersection.
        """
        return self.store.list_by_owner_range(owner_id, to_utc(range_start), to_utc(range_end))

    def find_overlapping(
        self,
        owner_id: str,
        start: datetime,
        end: datetime,
        exclude_id: str | None = None,
    ) -> list[TimeBlock]:
        return self.overlap.overlaps(owner_id, start, end, exclude_id)

    def get_conflicts(self, owner_id: str) -> list[Conflict]:
        return self.overlap.conflicts(owner_id)

    def stats(self, owner_id: str) -> BlockStats:
        return self.aggregator.stats(owner_id)

    def export_csv(self, owner_id: str, out: TextIO | None = None) -> str | int:
        """
        Write the owner's blocks as CSV.

        Returns the CSV text when *out* is None, else the row count.
        """
        blocks = self.find_by_owner(owner_id)
        if out is not None:
            return write_csv(blocks, out)
        buf = io.StringIO()
        write_csv(blocks, buf)
        return buf.getvalue()
