"""Week-over-week trends for the last four Sunday-to-Saturday weeks."""

import logging
from datetime import date, timedelta
from typing import Iterable, Mapping, Sequence

from daytally.core.calendar_grid import end_of_week, start_of_week
from daytally.core.models import (
    Activity,
    Category,
    ChartRow,
    WeekBucket,
    WeeklySummary,
)
from daytally.reporting.analytics import (
    DateLike,
    category_name,
    category_totals,
    group_by_date,
    iso_date,
    round_half_up,
    top_category,
)

logger = logging.getLogger(__name__)

WEEK_LABELS = ("This Week", "Last Week", "2 Weeks Ago", "3 Weeks Ago")


def last_four_weeks(today: date) -> list[WeekBucket]:
    """Return the current week and the three before it, newest first."""
    weeks = []
    for week_number, label in enumerate(WEEK_LABELS):
        anchor = today - timedelta(days=7 * week_number)
        weeks.append(
            WeekBucket(
                label=label,
                start_date=start_of_week(anchor),
                end_date=end_of_week(anchor),
                week_number=week_number,
            )
        )
    return weeks


def weeks_range(weeks: Sequence[WeekBucket]) -> tuple[date, date]:
    """First and last day covered by *weeks*, for fetching them in one query."""
    return (
        min(w.start_date for w in weeks),
        max(w.end_date for w in weeks),
    )


def group_by_week(
    activities: Iterable[Activity], weeks: Sequence[WeekBucket]
) -> dict[str, WeekBucket]:
    """Fill each week bucket with the category totals of its activities.

    The result is keyed by week label, in the order of *weeks*.
    """
    by_date = group_by_date(activities)
    weekly: dict[str, WeekBucket] = {}
    for week in weeks:
        totals = category_totals(by_date, week.start_date, week.end_date)
        weekly[week.label] = WeekBucket(
            label=week.label,
            start_date=week.start_date,
            end_date=week.end_date,
            week_number=week.week_number,
            category_totals=totals,
        )
    return weekly


def chart_matrix(
    weekly_data: Mapping[str, WeekBucket], categories: Sequence[Category]
) -> list[ChartRow]:
    """Rows for a stacked bar chart, oldest week first.

    Every row has a column for each category id seen in any week, with 0
    where that week had no time in the category.  Ids are ordered by first
    appearance, scanning from the oldest week.
    """
    buckets = sorted(weekly_data.values(), key=lambda w: w.week_number, reverse=True)

    column_ids: list[str] = []
    for bucket in buckets:
        for cat_id in bucket.category_totals:
            if cat_id not in column_ids:
                column_ids.append(cat_id)

    unknown = [
        cat_id for cat_id in column_ids
        if not any(c.id == cat_id for c in categories)
    ]
    if unknown:
        logger.debug("Chart columns without a category: %s", unknown)

    return [
        ChartRow(
            week=bucket.label,
            week_number=bucket.week_number,
            values={
                cat_id: bucket.category_totals.get(cat_id, 0)
                for cat_id in column_ids
            },
        )
        for bucket in buckets
    ]


def weekly_summary(
    activities_by_date: Mapping[str, Sequence[Activity]],
    start_date: DateLike,
    end_date: DateLike,
    categories: Sequence[Category],
) -> WeeklySummary:
    """Headline numbers for one week.

    The per-day average always divides by 7, unlike
    :func:`daytally.reporting.analytics.average_minutes_per_day` which only
    counts days with activity.
    """
    totals = category_totals(activities_by_date, start_date, end_date)
    total_minutes = sum(totals.values())
    top = top_category(totals)

    start, end = iso_date(start_date), iso_date(end_date)
    days_with_activities = sum(
        1 for date_str, acts in activities_by_date.items()
        if start <= date_str <= end and acts
    )

    return WeeklySummary(
        total_minutes=total_minutes,
        avg_minutes_per_day=round_half_up(total_minutes / 7),
        top_category=category_name(categories, top[0]) if top else "None",
        days_with_activities=days_with_activities,
    )
