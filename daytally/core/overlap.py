"""Overlap detection for possibly midnight-spanning activity intervals.

Intervals are compared without splitting wrapped ones into two pieces.
The four cases below keep the historical boundary behaviour: touching
endpoints are *not* an overlap when neither interval wraps, but *are* an
overlap when exactly one of them does.
"""

import logging
from typing import Iterable, Optional

from daytally.core.models import Activity
from daytally.core.timeutil import time_to_minutes

logger = logging.getLogger(__name__)


def intervals_overlap(
    start1: int, end1: int, start2: int, end2: int
) -> bool:
    """Compare two intervals given in minutes since midnight.

    The first interval is the candidate, the second the existing one.
    """
    wraps1 = end1 < start1
    wraps2 = end2 < start2

    if not wraps1 and not wraps2:
        return start1 < end2 and end1 > start2

    # Candidate covers [start1, 1440) and [0, end1)
    if wraps1 and not wraps2:
        return start2 >= start1 or end2 <= end1

    # Existing covers [start2, 1440) and [0, end2)
    if wraps2 and not wraps1:
        return start1 >= start2 or end1 <= end2

    # Both run through midnight
    return True


def find_overlaps(
    start_time: str,
    end_time: str,
    existing: Iterable[Activity],
    exclude_id: Optional[str] = None,
) -> list[Activity]:
    """Return every activity in *existing* that the candidate interval hits.

    The activity whose id equals *exclude_id* is skipped so that an edit
    does not collide with its own previous interval.
    """
    start = time_to_minutes(start_time)
    end = time_to_minutes(end_time)

    hits = []
    for act in existing:
        if exclude_id is not None and act.id == exclude_id:
            continue
        if intervals_overlap(
            start, end,
            time_to_minutes(act.start_time), time_to_minutes(act.end_time),
        ):
            hits.append(act)

    if hits:
        logger.debug(
            "%s-%s overlaps %d activities: %s",
            start_time, end_time, len(hits), [a.id for a in hits],
        )
    return hits


def has_overlap(
    start_time: str,
    end_time: str,
    existing: Iterable[Activity],
    exclude_id: Optional[str] = None,
) -> bool:
    """Return True if the candidate interval overlaps any existing activity."""
    return bool(find_overlaps(start_time, end_time, existing, exclude_id))
