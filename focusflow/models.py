"""
Time block records as the core hands them to callers.
"""

from dataclasses import asdict, dataclass
from datetime import datetime

from focusflow.clock import from_db


@dataclass(frozen=True)
class TimeBlock:
    id: str
    owner_id: str
    title: str
    start_time: datetime
    end_time: datetime
    description: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def duration_hours(self) -> float:
        """Block duration in (fractional) hours."""
        return (self.end_time - self.start_time).total_seconds() / 3600

    def to_dict(self) -> dict:
        data = asdict(self)
        for key in ("start_time", "end_time", "created_at", "updated_at"):
            if data[key] is not None:
                data[key] = data[key].isoformat()
        data["duration_hours"] = self.duration_hours
        return data

    @classmethod
    def from_row(cls, row: dict) -> "TimeBlock":
        """Convert database row to TimeBlock object."""
        return cls(
            id=row["id"],
            owner_id=row["owner_id"],
            title=row["title"],
            description=row.get("description"),
            start_time=from_db(row["start_time"]),
            end_time=from_db(row["end_time"]),
            created_at=from_db(row["created_at"]) if row.get("created_at") else None,
            updated_at=from_db(row["updated_at"]) if row.get("updated_at") else None,
        )


@dataclass(frozen=True)
class BlockStats:
    count: int
    total_hours: float
    average_hours: float | None

    def to_dict(self) -> dict:
        return {
            "count": self.count,
            "total_hours": self.total_hours,
            "average_hours": self.average_hours,
        }
