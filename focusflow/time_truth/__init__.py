"""
Time Truth Module

The time-block consistency and query engine.

Objects:
- TimeBlock (owned, titled interval)
- BlockStats (count / total / average hours)
- Conflict (overlapping pair)

Invariants:
- start < end for every persisted block
- Every query and mutation is scoped by owner id
- Ownership is checked before any mutation
- Overlap is reported, not enforced
"""

from .aggregator import Aggregator, summarize
from .block_manager import BlockManager
from .export import export_filename, write_csv
from .overlap import Conflict, OverlapChecker, intervals_overlap
from .quick_add import QuickAdd, parse_clock_time, resolve_quick_add

__all__ = [
    "Aggregator",
    "BlockManager",
    "Conflict",
    "OverlapChecker",
    "QuickAdd",
    "export_filename",
    "intervals_overlap",
    "parse_clock_time",
    "resolve_quick_add",
    "summarize",
    "write_csv",
]
