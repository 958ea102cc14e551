"""Time-of-day arithmetic for ``HH:MM`` activity intervals.

Every duration in DayTally goes through :func:`calculate_duration`, which
treats an end time earlier than the start time as running past midnight.
"""

import math
import re

MINUTES_PER_DAY = 24 * 60
TIMELINE_SLOT_MINUTES = 15

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})$")

# Pattern for parsing duration strings like "2h 15m", "2h", "15m", "0m"
_DURATION_RE = re.compile(r"^\s*(?:(\d+)h)?\s*(?:(\d+)m)?\s*$")


def time_to_minutes(value: str) -> int:
    """Convert an ``HH:MM`` string to minutes since midnight.

    Raises ValueError if *value* is not a valid 24-hour time.
    """
    match = _TIME_RE.match(value) if isinstance(value, str) else None
    if not match:
        raise ValueError(f"Invalid time format: {value!r}")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise ValueError(f"Time out of range: {value!r}")
    return hours * 60 + minutes


def minutes_to_time(minutes: int) -> str:
    """Convert minutes since midnight (0-1439) to a zero-padded ``HH:MM``."""
    if not 0 <= minutes < MINUTES_PER_DAY:
        raise ValueError(f"Minutes out of range: {minutes!r}")
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def calculate_duration(start_time: str, end_time: str) -> int:
    """Return the length of an interval in minutes.

    When *end_time* is earlier than *start_time* the interval spans
    midnight, e.g. 23:45 -> 00:15 is 30 minutes.
    """
    start = time_to_minutes(start_time)
    end = time_to_minutes(end_time)
    if end < start:
        return (MINUTES_PER_DAY - start) + end
    return end - start


def format_duration(minutes: int) -> str:
    """Format minutes as '1h 30m', '2h' or '45m'."""
    hours, mins = divmod(minutes, 60)
    if hours == 0:
        return f"{mins}m"
    if mins == 0:
        return f"{hours}h"
    return f"{hours}h {mins}m"


def parse_duration(text: str) -> int:
    """Parse 'Xh Ym', 'Xh', or 'Ym' back to minutes.

    Raises ValueError if the text doesn't match the expected format.
    """
    match = _DURATION_RE.match(text)
    if not match or (match.group(1) is None and match.group(2) is None):
        raise ValueError(f"Invalid duration format: {text!r}")

    hours = int(match.group(1)) if match.group(1) else 0
    mins = int(match.group(2)) if match.group(2) else 0
    return hours * 60 + mins


def snap_to_interval(minutes: float, interval: int = TIMELINE_SLOT_MINUTES) -> int:
    """Round *minutes* to the nearest multiple of *interval* (halves round up)."""
    return int(math.floor(minutes / interval + 0.5)) * interval


# ---------------------------------------------------------------------------
# 24-hour timeline helpers
# ---------------------------------------------------------------------------

def hour_labels() -> list[str]:
    """Return the 24 hour labels of the day timeline, '00:00' to '23:00'."""
    return [f"{hour:02d}:00" for hour in range(24)]


def time_to_grid_row(value: str) -> int:
    """1-based row of *value* on the 96-row (15 minute) timeline grid."""
    return time_to_minutes(value) // TIMELINE_SLOT_MINUTES + 1


def duration_to_grid_span(start_time: str, end_time: str) -> int:
    """Number of timeline rows an interval covers."""
    return math.ceil(calculate_duration(start_time, end_time) / TIMELINE_SLOT_MINUTES)


def quick_add_end_time(start_time: str, length: int = 60) -> str:
    """End time for a quick-added activity.

    Capped at 23:59 so a quick-add never wraps into the next day.
    """
    end = time_to_minutes(start_time) + length
    if end >= MINUTES_PER_DAY:
        return "23:59"
    return minutes_to_time(end)


def resize_end_time(
    start_time: str, pointer_minutes: float, interval: int = TIMELINE_SLOT_MINUTES
) -> str:
    """End time after dragging an activity's bottom edge to *pointer_minutes*.

    The result is snapped to *interval*, at least one slot after the start,
    and at most midnight, which is rendered as '00:00'.
    """
    start = time_to_minutes(start_time)
    snapped = snap_to_interval(pointer_minutes, interval)
    final = max(start + interval, min(snapped, MINUTES_PER_DAY))
    return minutes_to_time(final % MINUTES_PER_DAY)
