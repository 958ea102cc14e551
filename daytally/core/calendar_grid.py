"""Month-view calendar grid.

The grid always has 6 rows of 7 days starting on Sunday, padded with days
from the neighbouring months.
"""

import calendar
from datetime import date, timedelta
from typing import Optional

from daytally.core.models import CalendarDay

GRID_DAYS = 42

# The grid and month navigation reach one month past either end.
MIN_YEAR = 2
MAX_YEAR = 9998

_WEEKDAY_NAMES = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")


def start_of_week(day: date) -> date:
    """Return the Sunday on or before *day*."""
    # date.weekday(): Monday == 0 ... Sunday == 6
    return day - timedelta(days=(day.weekday() + 1) % 7)


def end_of_week(day: date) -> date:
    """Return the Saturday on or after *day*."""
    return start_of_week(day) + timedelta(days=6)


def month_start(year: int, month: int) -> date:
    """First day of *month*, for years the grid can be built around."""
    if not MIN_YEAR <= year <= MAX_YEAR:
        raise ValueError(f"year must be between {MIN_YEAR} and {MAX_YEAR}, got {year}")
    return date(year, month, 1)


def month_grid(any_day: date, today: Optional[date] = None) -> list[CalendarDay]:
    """Build the 42-day grid for the month containing *any_day*.

    Starts on the Sunday on/before the 1st.  Months that fit in five (or
    four) rows are padded with the following month's days.
    """
    if today is None:
        today = date.today()

    first = any_day.replace(day=1)
    grid_start = start_of_week(first)

    days = []
    for offset in range(GRID_DAYS):
        d = grid_start + timedelta(days=offset)
        days.append(
            CalendarDay(
                date=d,
                in_month=(d.year, d.month) == (first.year, first.month),
                is_today=d == today,
            )
        )
    return days


def grid_range(any_day: date) -> tuple[str, str]:
    """ISO first and last dates of the grid, for fetching it in one query."""
    first = start_of_week(any_day.replace(day=1))
    last = first + timedelta(days=GRID_DAYS - 1)
    return first.isoformat(), last.isoformat()


def _shift_month(day: date, months: int) -> date:
    index = day.year * 12 + (day.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def previous_month(day: date) -> date:
    """Same day one month earlier, clamped to the month's length."""
    return _shift_month(day, -1)


def next_month(day: date) -> date:
    """Same day one month later, clamped to the month's length."""
    return _shift_month(day, 1)


def weekday_names() -> list[str]:
    return list(_WEEKDAY_NAMES)


def month_title(day: date) -> str:
    """Heading for the month view, e.g. 'October 2026'."""
    return day.strftime("%B %Y")
