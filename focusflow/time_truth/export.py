"""
CSV export of time blocks.
"""

import csv
from datetime import date, tzinfo
from typing import TextIO

from focusflow.clock import default_zone
from focusflow.models import TimeBlock

CSV_HEADERS = ["Title", "Description", "Start Time", "End Time", "Duration (hours)"]


def export_filename(day: date) -> str:
    return f"focusflow-timeblocks-{day.isoformat()}.csv"


def write_csv(blocks: list[TimeBlock], out: TextIO, tz: tzinfo | None = None) -> int:
    """
    Write *blocks* as CSV rows to *out*, times rendered in *tz*.

    Returns the number of data rows written.
    """
    tz = tz or default_zone()
    writer = csv.writer(out, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for block in blocks:
        writer.writerow(
            [
                block.title,
                block.description or "",
                block.start_time.astimezone(tz).isoformat(timespec="minutes"),
                block.end_time.astimezone(tz).isoformat(timespec="minutes"),
                f"{block.duration_hours:.2f}",
            ]
        )
    return len(blocks)
