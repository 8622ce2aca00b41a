"""
Aggregator - count and duration statistics over time blocks.
"""

from focusflow.models import BlockStats, TimeBlock


class Aggregator:
    def __init__(self, store):
        self.store = store

    def stats(self, owner_id: str) -> BlockStats:
        """
        Statistics over all blocks of *owner_id*.

        The store computes them in a single aggregate query; no rows are
        loaded. With no blocks, average_hours is None.
        """
        return self.store.aggregate(owner_id)


def summarize(blocks: list[TimeBlock]) -> BlockStats:
    """Same statistics over blocks already in memory (e.g. a range result)."""
    if not blocks:
        return BlockStats(count=0, total_hours=0.0, average_hours=None)
    total = sum(b.duration_hours for b in blocks)
    return BlockStats(count=len(blocks), total_hours=total, average_hours=total / len(blocks))
