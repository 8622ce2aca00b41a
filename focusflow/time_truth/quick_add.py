"""
Quick-Add - turn a bare clock time into a concrete upcoming block.

The requested time is placed on today's date in the configured zone. If
that instant has already passed, it moves to the same time tomorrow. One
shift always suffices: "now" falls on today's date, so any time on
tomorrow's date is later than now.

Quick-Add blocks last exactly QUICK_ADD_DURATION and carry no description.
"""

import logging
import re
from datetime import datetime, time, timedelta, tzinfo

from focusflow import config
from focusflow.clock import default_zone, ensure_aware, to_utc
from focusflow.errors import InvalidClockTime
from focusflow.models import TimeBlock

logger = logging.getLogger(__name__)

_CLOCK_RE = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*$")


def parse_clock_time(text: str) -> time:
    """Parse "HH:MM" (24h) into a time."""
    match = _CLOCK_RE.match(text or "")
    if not match:
        raise InvalidClockTime(f"Expected HH:MM, got {text!r}")
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        raise InvalidClockTime(f"Clock time out of range: {text!r}")
    return time(hour, minute)


def resolve_quick_add(
    clock_time: time,
    now: datetime,
    tz: tzinfo | None = None,
) -> tuple[datetime, datetime]:
    """
    Resolve *clock_time* to the (start, end) of the next block at that time.

    Returns aware datetimes in *tz* (default: configured zone).
    """
    tz = tz or default_zone()
    local_now = ensure_aware(now).astimezone(tz)
    wall = time(clock_time.hour, clock_time.minute)

    start = datetime.combine(local_now.date(), wall, tzinfo=tz)
    if to_utc(start) < to_utc(local_now):
        start = datetime.combine(local_now.date() + timedelta(days=1), wall, tzinfo=tz)

    end = (to_utc(start) + config.QUICK_ADD_DURATION).astimezone(tz)
    return start, end


class QuickAdd:
    def __init__(self, manager, tz: tzinfo | None = None):
        self.manager = manager
        self.tz = tz

    def add(self, owner_id: str, title: str, clock_time: time | str) -> TimeBlock:
        """Create a block at the next occurrence of *clock_time*."""
        if isinstance(clock_time, str):
            clock_time = parse_clock_time(clock_time)

        start, end = resolve_quick_add(clock_time, self.manager.clock.now(), self.tz)
        logger.debug("quick-add %s resolved to %s - %s", clock_time, start, end)
        return self.manager.create(owner_id, title, None, start, end)
