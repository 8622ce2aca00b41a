"""
Error kinds raised by the time block core.

Every failure the core can report is a TimeBlockError subclass, so callers
can map them to transport responses with a single except clause.
"""


class TimeBlockError(Exception):
    """Base class for all time block failures."""

    pass


class ValidationError(TimeBlockError):
    """Request rejected before any store mutation was attempted."""

    pass


class InvalidInterval(ValidationError):
    """End is not strictly after start."""

    def __init__(self, start, end):
        self.start = start
        self.end = end
        super().__init__(f"End time must be after start time (start={start}, end={end})")


class InvalidTitle(ValidationError):
    """Title is empty or longer than the allowed bound."""

    pass


class InvalidDescription(ValidationError):
    """Description is longer than the allowed bound."""

    pass


class InvalidClockTime(ValidationError):
    """Quick-Add time is not a valid HH:MM wall-clock time."""

    pass


class NotFound(TimeBlockError):
    """No time block exists with the given id."""

    def __init__(self, block_id: str):
        self.block_id = block_id
        super().__init__(f"Time block not found: {block_id}")


class Forbidden(TimeBlockError):
    """The time block exists but belongs to another owner."""

    def __init__(self, block_id: str, owner_id: str):
        self.block_id = block_id
        self.owner_id = owner_id
        super().__init__(f"Time block {block_id} is not owned by {owner_id}")


class StoreFailure(TimeBlockError):
    """
    Persistence I/O failed.

    The underlying sqlite error is attached as __cause__.
    """

    def __init__(self, operation: str, block_id: str | None = None, detail: str = ""):
        self.operation = operation
        self.block_id = block_id
        msg = f"Store operation '{operation}' failed"
        if block_id:
            msg += f" for {block_id}"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)
