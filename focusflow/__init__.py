# FocusFlow - Time block core
"""
Exports for the API server, the CLI and other consumers.
"""

from .clock import Clock, FixedClock, SystemClock
from .errors import (
    Forbidden,
    InvalidClockTime,
    InvalidDescription,
    InvalidInterval,
    InvalidTitle,
    NotFound,
    StoreFailure,
    TimeBlockError,
    ValidationError,
)
from .models import BlockStats, TimeBlock
from .store import BlockStore, get_store

__version__ = "1.0.0"

__all__ = [
    "BlockStats",
    "BlockStore",
    "Clock",
    "FixedClock",
    "Forbidden",
    "InvalidClockTime",
    "InvalidDescription",
    "InvalidInterval",
    "InvalidTitle",
    "NotFound",
    "StoreFailure",
    "SystemClock",
    "TimeBlock",
    "TimeBlockError",
    "ValidationError",
    "get_store",
]
