"""Core data models for DayTally.

Defines all dataclasses and enums used across the application:
- Records: Activity, Category, Rating, DailyRating
- Calendar: CalendarDay
- Analytics: RatingCounts, DateRangePreset, CategorySlice, AnalyticsOverview
- Trends: WeekBucket, ChartRow, WeeklySummary
- Day view: DaySummary
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional

from daytally.core.timeutil import calculate_duration, time_to_minutes

# category id -> total minutes
CategoryTotals = dict[str, int]

UNKNOWN_CATEGORY_NAME = "Unknown"
UNKNOWN_CATEGORY_COLOR = "#6b7280"


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Activity:
    """A logged time interval.

    ``date`` is always the day the activity starts on.  When ``end_time`` is
    numerically earlier than ``start_time`` the activity runs past midnight
    into the following day.
    """
    id: str
    date: str          # ISO YYYY-MM-DD
    start_time: str    # HH:MM
    end_time: str      # HH:MM
    category_id: str
    title: str = ""
    description: str = ""

    @property
    def duration(self) -> int:
        """Length in minutes, wrapping past midnight when needed."""
        return calculate_duration(self.start_time, self.end_time)

    @property
    def spans_midnight(self) -> bool:
        return time_to_minutes(self.end_time) < time_to_minutes(self.start_time)


@dataclass(frozen=True)
class Category:
    """A user-defined label with a display color."""
    id: str
    name: str
    color: str  # hex RGB, e.g. "#3b82f6"
    is_default: bool = False


class Rating(Enum):
    """Qualitative rating of a calendar day."""
    GREAT = "great"
    OK = "ok"
    TOUGH = "tough"

    @property
    def label(self) -> str:
        return _RATING_LABELS[self]

    @property
    def color(self) -> str:
        return _RATING_COLORS[self]


_RATING_LABELS = {
    Rating.GREAT: "Great",
    Rating.OK: "OK",
    Rating.TOUGH: "Tough",
}

_RATING_COLORS = {
    Rating.GREAT: "#10b981",
    Rating.OK: "#f59e0b",
    Rating.TOUGH: "#ef4444",
}


@dataclass(frozen=True)
class DailyRating:
    """The single rating stored for a date."""
    date: str  # ISO YYYY-MM-DD
    rating: Rating


# ---------------------------------------------------------------------------
# Calendar
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CalendarDay:
    """One cell of the 6x7 month grid."""
    date: date
    in_month: bool
    is_today: bool


# ---------------------------------------------------------------------------
# Analytics
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RatingCounts:
    """Number of days rated great / ok / tough within a range."""
    great: int = 0
    ok: int = 0
    tough: int = 0

    @property
    def total(self) -> int:
        return self.great + self.ok + self.tough

    def as_dict(self) -> dict[str, int]:
        return {"great": self.great, "ok": self.ok, "tough": self.tough}


@dataclass(frozen=True)
class DateRangePreset:
    """A named, inclusive date range anchored on today."""
    label: str
    start_date: date
    end_date: date


@dataclass(frozen=True)
class CategorySlice:
    """One slice of the category breakdown chart."""
    category_id: str
    name: str
    color: str
    minutes: int
    percent: float  # 0-100


@dataclass(frozen=True)
class AnalyticsOverview:
    """Everything the analytics overview tab displays for a date range."""
    start_date: date
    end_date: date
    category_totals: CategoryTotals = field(default_factory=dict)
    total_minutes: int = 0
    avg_minutes_per_day: int = 0
    rating_counts: RatingCounts = field(default_factory=RatingCounts)
    top_category_name: str = "None"
    breakdown: list[CategorySlice] = field(default_factory=list)  # sorted by minutes descending


# ---------------------------------------------------------------------------
# Weekly trends
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class WeekBucket:
    """A Sunday-to-Saturday window and the minutes logged in it."""
    label: str
    start_date: date
    end_date: date
    week_number: int  # 0 = current week
    category_totals: CategoryTotals = field(default_factory=dict)


@dataclass(frozen=True)
class ChartRow:
    """One bar of the weekly trends chart: minutes per category id."""
    week: str
    week_number: int
    values: dict[str, int] = field(default_factory=dict)

    def as_dict(self) -> dict:
        row: dict = {"week": self.week, "weekNumber": self.week_number}
        row.update(self.values)
        return row


@dataclass(frozen=True)
class WeeklySummary:
    """Headline numbers for a single selected week."""
    total_minutes: int
    avg_minutes_per_day: int  # always total / 7
    top_category: str
    days_with_activities: int


# ---------------------------------------------------------------------------
# Day view
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DaySummary:
    """Activities and rating for one calendar day."""
    date: date
    activities: list[Activity] = field(default_factory=list)  # sorted by start time
    rating: Optional[Rating] = None
    total_minutes: int = 0
