"""
Shared Pydantic request/response models for the time block API.

These models give FastAPI the type information it needs to generate
accurate OpenAPI schemas. Field bounds are deliberately not declared here:
the core validates titles, descriptions and intervals and reports its own
error kinds.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from focusflow.models import BlockStats, TimeBlock

# ==== Requests ====


class TimeBlockIn(BaseModel):
    """Body for create and update."""

    title: str = Field(description="Block title, 1-200 characters")
    description: str | None = Field(default=None, description="Optional, up to 1000 characters")
    start_time: datetime = Field(description="Start instant (ISO-8601)")
    end_time: datetime = Field(description="End instant (ISO-8601), after start_time")


class QuickTaskIn(BaseModel):
    """Body for quick-task: a title and a bare HH:MM time."""

    taskName: str = Field(description="Task name")
    taskTime: str = Field(description="Wall-clock time HH:MM")


# ==== Time Block ====


class TimeBlockOut(BaseModel):
    """A stored time block."""

    id: str
    owner_id: str
    title: str
    description: str | None = None
    start_time: datetime
    end_time: datetime
    created_at: datetime | None = None
    updated_at: datetime | None = None
    duration_hours: float

    @classmethod
    def from_block(cls, block: TimeBlock) -> "TimeBlockOut":
        return cls(
            id=block.id,
            owner_id=block.owner_id,
            title=block.title,
            description=block.description,
            start_time=block.start_time,
            end_time=block.end_time,
            created_at=block.created_at,
            updated_at=block.updated_at,
            duration_hours=block.duration_hours,
        )


# ==== List Envelope ====
# Shape: {items, total}


class ListResponse(BaseModel):
    """Standard list endpoint response."""

    items: list[TimeBlockOut] = Field(default_factory=list, description="Result items")
    total: int = Field(description="Total count")

    @classmethod
    def from_blocks(cls, blocks: list[TimeBlock]) -> "ListResponse":
        return cls(items=[TimeBlockOut.from_block(b) for b in blocks], total=len(blocks))


# ==== Mutation Result ====
# Used by POST/DELETE endpoints that return {success: bool, ...}.


class MutationResponse(BaseModel):
    """Standard mutation result."""

    success: bool = Field(description="Whether the operation succeeded")
    message: str | None = None
    timeBlock: TimeBlockOut | None = None

    model_config = {"extra": "allow"}


# ==== Statistics ====


class StatsResponse(BaseModel):
    count: int = Field(description="Number of blocks")
    total_hours: float = Field(description="Sum of durations in hours")
    average_hours: float | None = Field(default=None, description="None when count is 0")

    @classmethod
    def from_stats(cls, stats: BlockStats) -> "StatsResponse":
        return cls(**stats.to_dict())


# ==== Health Check ====


class HealthResponse(BaseModel):
    """Health check result."""

    status: str = Field(description="healthy or error")
    schema_version: int | None = Field(default=None, description="PRAGMA user_version")
    timestamp: str = Field(description="ISO timestamp")
    pool: dict[str, Any] = Field(default_factory=dict)
