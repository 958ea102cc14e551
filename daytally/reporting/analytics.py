"""Aggregation of activities and day ratings for the analytics views.

Activities and ratings come in keyed by ISO date string.  Range filters
compare those strings directly, which is valid because ISO dates are
fixed width.
"""

import logging
import math
from collections import defaultdict
from datetime import date, timedelta
from typing import Iterable, Mapping, Optional, Sequence, Union

from daytally.core.models import (
    Activity,
    AnalyticsOverview,
    Category,
    CategorySlice,
    CategoryTotals,
    DailyRating,
    DateRangePreset,
    DaySummary,
    Rating,
    RatingCounts,
    UNKNOWN_CATEGORY_COLOR,
    UNKNOWN_CATEGORY_NAME,
)
from daytally.core.timeutil import time_to_minutes

logger = logging.getLogger(__name__)

DateLike = Union[date, str]

PRESET_DAYS = (7, 30, 90)


def iso_date(value: DateLike) -> str:
    """Accept a date or an ISO string and return the ISO string."""
    return value.isoformat() if isinstance(value, date) else value


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


# ---------------------------------------------------------------------------
# Grouping
# ---------------------------------------------------------------------------

def group_by_date(activities: Iterable[Activity]) -> dict[str, list[Activity]]:
    """Bucket activities by their start date, keeping input order."""
    grouped: dict[str, list[Activity]] = defaultdict(list)
    for act in activities:
        grouped[act.date].append(act)
    return dict(grouped)


def ratings_by_date(ratings: Iterable[DailyRating]) -> dict[str, Rating]:
    """Map ISO date -> rating.  A later entry for the same date wins."""
    return {r.date: r.rating for r in ratings}


# ---------------------------------------------------------------------------
# Range aggregates
# ---------------------------------------------------------------------------

def category_totals(
    activities_by_date: Mapping[str, Sequence[Activity]],
    start_date: DateLike,
    end_date: DateLike,
) -> CategoryTotals:
    """Total minutes per category id for dates in [start_date, end_date].

    Categories without activity in the range are absent, not zero.
    """
    start, end = iso_date(start_date), iso_date(end_date)
    totals: CategoryTotals = {}
    for date_str, day_activities in activities_by_date.items():
        if not start <= date_str <= end:
            continue
        for act in day_activities:
            totals[act.category_id] = totals.get(act.category_id, 0) + act.duration
    return totals


def rating_counts(
    ratings: Mapping[str, Union[Rating, str]],
    start_date: DateLike,
    end_date: DateLike,
) -> RatingCounts:
    """Count great / ok / tough days in [start_date, end_date].

    Values that are not one of the three ratings are skipped.
    """
    start, end = iso_date(start_date), iso_date(end_date)
    counts = {r.value: 0 for r in Rating}
    for date_str, rating in ratings.items():
        if not start <= date_str <= end:
            continue
        key = rating.value if isinstance(rating, Rating) else rating
        if key in counts:
            counts[key] += 1
        else:
            logger.debug("Ignoring unknown rating %r on %s", rating, date_str)
    return RatingCounts(**counts)


def average_minutes_per_day(
    activities_by_date: Mapping[str, Sequence[Activity]],
    start_date: DateLike,
    end_date: DateLike,
) -> int:
    """Average logged minutes over the days in range that have activity.

    Days without any activity do not count towards the divisor.  Returns 0
    when no day in the range has activity.
    """
    start, end = iso_date(start_date), iso_date(end_date)
    total = 0
    active_days = 0
    for date_str, day_activities in activities_by_date.items():
        if start <= date_str <= end and day_activities:
            active_days += 1
            total += sum(act.duration for act in day_activities)
    if active_days == 0:
        return 0
    return round_half_up(total / active_days)


def date_range_presets(today: date) -> list[DateRangePreset]:
    """Last 7, 30 and 90 days, each including *today*."""
    return [
        DateRangePreset(
            label=f"Last {days} days",
            start_date=today - timedelta(days=days - 1),
            end_date=today,
        )
        for days in PRESET_DAYS
    ]


def top_category(totals: CategoryTotals) -> Optional[tuple[str, int]]:
    """The (category_id, minutes) pair with the most time.

    Ties go to the category that appears first in *totals*.
    """
    ranked = sorted(totals.items(), key=lambda item: item[1], reverse=True)
    return ranked[0] if ranked else None


# ---------------------------------------------------------------------------
# Category lookups
# ---------------------------------------------------------------------------

def find_category(
    categories: Iterable[Category], category_id: str
) -> Optional[Category]:
    for cat in categories:
        if cat.id == category_id:
            return cat
    return None


def category_name(categories: Iterable[Category], category_id: str) -> str:
    cat = find_category(categories, category_id)
    return cat.name if cat else UNKNOWN_CATEGORY_NAME


def category_breakdown(
    totals: CategoryTotals, categories: Sequence[Category]
) -> list[CategorySlice]:
    """Pie-chart slices for *totals*, largest first, zero slices dropped."""
    grand_total = sum(m for m in totals.values() if m > 0)
    slices = []
    for cat_id, minutes in totals.items():
        if minutes <= 0:
            continue
        cat = find_category(categories, cat_id)
        slices.append(
            CategorySlice(
                category_id=cat_id,
                name=cat.name if cat else UNKNOWN_CATEGORY_NAME,
                color=cat.color if cat else UNKNOWN_CATEGORY_COLOR,
                minutes=minutes,
                percent=minutes * 100.0 / grand_total,
            )
        )
    slices.sort(key=lambda s: s.minutes, reverse=True)
    return slices


# ---------------------------------------------------------------------------
# View models
# ---------------------------------------------------------------------------

def analytics_overview(
    activities: Iterable[Activity],
    ratings: Iterable[DailyRating],
    categories: Sequence[Category],
    start_date: date,
    end_date: date,
) -> AnalyticsOverview:
    """Build the overview tab's numbers and charts for a date range."""
    by_date = group_by_date(activities)
    totals = category_totals(by_date, start_date, end_date)
    top = top_category(totals)

    return AnalyticsOverview(
        start_date=start_date,
        end_date=end_date,
        category_totals=totals,
        total_minutes=sum(totals.values()),
        avg_minutes_per_day=average_minutes_per_day(by_date, start_date, end_date),
        rating_counts=rating_counts(ratings_by_date(ratings), start_date, end_date),
        top_category_name=category_name(categories, top[0]) if top else "None",
        breakdown=category_breakdown(totals, categories),
    )


def day_summary(
    day: date, activities: Iterable[Activity], rating: Optional[Rating] = None
) -> DaySummary:
    """Activities of *day* ordered by start time, with the day's total."""
    iso = day.isoformat()
    day_activities = sorted(
        (a for a in activities if a.date == iso),
        key=lambda a: time_to_minutes(a.start_time),
    )
    return DaySummary(
        date=day,
        activities=day_activities,
        rating=rating,
        total_minutes=sum(a.duration for a in day_activities),
    )
