"""Pure calendar primitives - no I/O dependencies."""

import re
from datetime import date, datetime, time, timedelta

from .models import Session

_CLOCK_PATTERN = re.compile(r"^([01][0-9]|2[0-3]):[0-5][0-9]$")

DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]


def is_valid_clock(value: str) -> bool:
    """Check a wall-clock string is zero-padded 24h "HH:mm"."""
    return isinstance(value, str) and bool(_CLOCK_PATTERN.match(value))


def parse_clock(value: str) -> time:
    """Parse "HH:mm" into a time. Raises ValueError on malformed input."""
    if not is_valid_clock(value):
        raise ValueError(f"Time must be in HH:mm format: {value!r}")
    hour, minute = value.split(":")
    return time(int(hour), int(minute))


def clock_string(dt: datetime) -> str:
    """Wall-clock "HH:mm" for a datetime, in the datetime's own timezone."""
    return dt.strftime("%H:%M")


def day_of_week(d: date | datetime) -> int:
    """Weekday with Sunday=0 .. Saturday=6."""
    return d.isoweekday() % 7


def whole_hours(delta: timedelta) -> int:
    """Length of a timedelta in whole hours, truncated toward zero (90 min -> 1, -90 min -> -1)."""
    return int(delta.total_seconds() / 3600)


def intervals_overlap(
    a_start: datetime,
    a_end: datetime,
    b_start: datetime,
    b_end: datetime,
) -> bool:
    """Half-open overlap test. Touching endpoints do not overlap."""
    return a_start < b_end and b_start < a_end


def find_overlapping(
    start: datetime,
    end: datetime,
    sessions: list[Session],
    exclude_id: str | None = None,
) -> list[Session]:
    """
    Sessions whose interval overlaps [start, end).

    Pure function - no I/O.
    """
    return [
        s
        for s in sessions
        if s.id != exclude_id and intervals_overlap(start, end, s.start_time, s.end_time)
    ]


def is_during_hours(
    dt: datetime,
    start_hour: int,
    end_hour: int,
) -> bool:
    """Check if a datetime is during specified hours."""
    return start_hour <= dt.hour < end_hour
