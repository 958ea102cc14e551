"""Unit tests for the range aggregation functions."""

from datetime import date

import pytest

from daytally.core.models import (
    Activity,
    Category,
    DailyRating,
    Rating,
    RatingCounts,
    UNKNOWN_CATEGORY_COLOR,
)
from daytally.reporting.analytics import (
    analytics_overview,
    average_minutes_per_day,
    category_breakdown,
    category_name,
    category_totals,
    date_range_presets,
    day_summary,
    group_by_date,
    rating_counts,
    ratings_by_date,
    round_half_up,
    top_category,
)

CATEGORIES = [
    Category(id="work", name="Work", color="#3b82f6", is_default=True),
    Category(id="exercise", name="Exercise", color="#10b981", is_default=True),
]

_counter = 0


def _activity(day: str, start: str, end: str, category_id: str = "work", **overrides) -> Activity:
    global _counter
    _counter += 1
    defaults = dict(
        id=f"act-{_counter}",
        date=day,
        start_time=start,
        end_time=end,
        category_id=category_id,
        title="",
    )
    defaults.update(overrides)
    return Activity(**defaults)


def _week_of_activities() -> list[Activity]:
    return [
        _activity("2026-10-12", "09:00", "11:00", "work"),
        _activity("2026-10-12", "18:00", "18:30", "exercise"),
        _activity("2026-10-14", "23:30", "00:30", "work"),
        _activity("2026-10-20", "09:00", "10:00", "work"),  # outside the week
    ]


# ------------------------------------------------------------------
# Grouping helpers
# ------------------------------------------------------------------

class TestGrouping:
    def test_group_by_date_keeps_order(self):
        acts = _week_of_activities()
        grouped = group_by_date(acts)
        assert list(grouped) == ["2026-10-12", "2026-10-14", "2026-10-20"]
        assert grouped["2026-10-12"] == acts[:2]

    def test_group_by_date_empty(self):
        assert group_by_date([]) == {}

    def test_ratings_by_date(self):
        ratings = [
            DailyRating(date="2026-10-12", rating=Rating.GREAT),
            DailyRating(date="2026-10-13", rating=Rating.TOUGH),
        ]
        assert ratings_by_date(ratings) == {
            "2026-10-12": Rating.GREAT,
            "2026-10-13": Rating.TOUGH,
        }

    def test_round_half_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(3.5) == 4
        assert round_half_up(2.49) == 2


# ------------------------------------------------------------------
# category_totals
# ------------------------------------------------------------------

class TestCategoryTotals:
    def test_totals_within_range(self):
        by_date = group_by_date(_week_of_activities())
        totals = category_totals(by_date, date(2026, 10, 12), date(2026, 10, 18))
        assert totals == {"work": 180, "exercise": 30}

    def test_range_bounds_are_inclusive(self):
        by_date = group_by_date(_week_of_activities())
        totals = category_totals(by_date, "2026-10-14", "2026-10-20")
        assert totals == {"work": 120}

    def test_no_matching_activities_is_empty(self):
        by_date = group_by_date(_week_of_activities())
        assert category_totals(by_date, "2026-01-01", "2026-01-31") == {}

    def test_sum_equals_total_logged(self):
        acts = _week_of_activities()
        by_date = group_by_date(acts)
        totals = category_totals(by_date, "2026-10-01", "2026-10-31")
        assert sum(totals.values()) == sum(a.duration for a in acts)

    def test_midnight_activity_counts_on_start_date(self):
        by_date = group_by_date([_activity("2026-10-14", "23:30", "00:30")])
        assert category_totals(by_date, "2026-10-15", "2026-10-15") == {}
        assert category_totals(by_date, "2026-10-14", "2026-10-14") == {"work": 60}

    def test_idempotent(self):
        by_date = group_by_date(_week_of_activities())
        first = category_totals(by_date, "2026-10-12", "2026-10-18")
        second = category_totals(by_date, "2026-10-12", "2026-10-18")
        assert first == second


# ------------------------------------------------------------------
# rating_counts
# ------------------------------------------------------------------

class TestRatingCounts:
    def test_counts_in_range(self):
        ratings = {
            "2026-10-12": Rating.GREAT,
            "2026-10-13": Rating.GREAT,
            "2026-10-14": Rating.OK,
            "2026-10-15": Rating.TOUGH,
            "2026-10-30": Rating.TOUGH,
        }
        counts = rating_counts(ratings, "2026-10-12", "2026-10-18")
        assert counts == RatingCounts(great=2, ok=1, tough=1)
        assert counts.total == 4

    def test_accepts_raw_strings(self):
        ratings = {"2026-10-12": "great", "2026-10-13": "ok"}
        assert rating_counts(ratings, "2026-10-01", "2026-10-31") == RatingCounts(great=1, ok=1)

    def test_unknown_values_ignored(self):
        ratings = {"2026-10-12": "meh", "2026-10-13": "tough"}
        counts = rating_counts(ratings, "2026-10-01", "2026-10-31")
        assert counts == RatingCounts(tough=1)
        assert counts.as_dict() == {"great": 0, "ok": 0, "tough": 1}

    def test_empty(self):
        assert rating_counts({}, "2026-10-01", "2026-10-31").total == 0


# ------------------------------------------------------------------
# average_minutes_per_day
# ------------------------------------------------------------------

class TestAverageMinutesPerDay:
    def test_divides_by_active_days_only(self):
        by_date = group_by_date([
            _activity("2026-10-12", "09:00", "10:00"),
            _activity("2026-10-15", "09:00", "11:00"),
        ])
        # 180 minutes on 2 days of a 7-day range
        assert average_minutes_per_day(by_date, "2026-10-12", "2026-10-18") == 90

    def test_no_activity_returns_zero(self):
        assert average_minutes_per_day({}, "2026-10-12", "2026-10-18") == 0

    def test_empty_day_lists_not_counted(self):
        by_date = {"2026-10-12": [_activity("2026-10-12", "09:00", "10:00")], "2026-10-13": []}
        assert average_minutes_per_day(by_date, "2026-10-12", "2026-10-18") == 60

    def test_rounds_half_up(self):
        by_date = group_by_date([
            _activity("2026-10-12", "09:00", "10:00"),
            _activity("2026-10-13", "09:00", "10:01"),
        ])
        # 121 / 2 = 60.5
        assert average_minutes_per_day(by_date, "2026-10-12", "2026-10-18") == 61


# ------------------------------------------------------------------
# Presets and top category
# ------------------------------------------------------------------

class TestDateRangePresets:
    def test_three_presets_ending_today(self):
        presets = date_range_presets(date(2026, 10, 19))
        assert [p.label for p in presets] == ["Last 7 days", "Last 30 days", "Last 90 days"]
        assert all(p.end_date == date(2026, 10, 19) for p in presets)

    def test_start_dates_include_today(self):
        presets = date_range_presets(date(2026, 10, 19))
        assert presets[0].start_date == date(2026, 10, 13)
        assert presets[1].start_date == date(2026, 9, 20)
        assert presets[2].start_date == date(2026, 7, 22)


class TestTopCategory:
    def test_picks_largest(self):
        assert top_category({"work": 60, "exercise": 120}) == ("exercise", 120)

    def test_tie_goes_to_first_seen(self):
        assert top_category({"work": 60, "exercise": 60}) == ("work", 60)

    def test_empty(self):
        assert top_category({}) is None


# ------------------------------------------------------------------
# Category lookups and breakdown
# ------------------------------------------------------------------

class TestCategoryBreakdown:
    def test_unknown_category_name(self):
        assert category_name(CATEGORIES, "work") == "Work"
        assert category_name(CATEGORIES, "deleted") == "Unknown"

    def test_sorted_by_minutes_with_percentages(self):
        slices = category_breakdown({"exercise": 30, "work": 90}, CATEGORIES)
        assert [s.category_id for s in slices] == ["work", "exercise"]
        assert slices[0].percent == pytest.approx(75.0)
        assert slices[1].percent == pytest.approx(25.0)
        assert slices[0].color == "#3b82f6"

    def test_orphaned_category_slice(self):
        slices = category_breakdown({"work": 90, "gone": 10}, CATEGORIES)
        orphan = slices[1]
        assert orphan.name == "Unknown"
        assert orphan.color == UNKNOWN_CATEGORY_COLOR

    def test_zero_slices_dropped(self):
        slices = category_breakdown({"work": 90, "exercise": 0}, CATEGORIES)
        assert [s.category_id for s in slices] == ["work"]

    def test_empty(self):
        assert category_breakdown({}, CATEGORIES) == []


# ------------------------------------------------------------------
# analytics_overview
# ------------------------------------------------------------------

class TestAnalyticsOverview:
    def test_overview_numbers(self):
        ratings = [
            DailyRating(date="2026-10-12", rating=Rating.GREAT),
            DailyRating(date="2026-10-14", rating=Rating.TOUGH),
        ]
        overview = analytics_overview(
            _week_of_activities(), ratings, CATEGORIES,
            date(2026, 10, 12), date(2026, 10, 18),
        )
        assert overview.category_totals == {"work": 180, "exercise": 30}
        assert overview.total_minutes == 210
        assert overview.avg_minutes_per_day == 105
        assert overview.rating_counts == RatingCounts(great=1, tough=1)
        assert overview.top_category_name == "Work"
        assert [s.name for s in overview.breakdown] == ["Work", "Exercise"]

    def test_empty_range(self):
        overview = analytics_overview(
            [], [], CATEGORIES, date(2026, 10, 12), date(2026, 10, 18)
        )
        assert overview.total_minutes == 0
        assert overview.avg_minutes_per_day == 0
        assert overview.top_category_name == "None"
        assert overview.breakdown == []

    def test_top_category_deleted(self):
        overview = analytics_overview(
            [_activity("2026-10-12", "09:00", "10:00", "gone")], [], CATEGORIES,
            date(2026, 10, 12), date(2026, 10, 18),
        )
        assert overview.top_category_name == "Unknown"

    def test_idempotent(self):
        acts = _week_of_activities()
        args = (acts, [], CATEGORIES, date(2026, 10, 12), date(2026, 10, 18))
        assert analytics_overview(*args) == analytics_overview(*args)


# ------------------------------------------------------------------
# day_summary
# ------------------------------------------------------------------

class TestDaySummary:
    def test_sorted_by_start_and_filtered(self):
        acts = [
            _activity("2026-10-19", "14:00", "15:00", id="afternoon"),
            _activity("2026-10-19", "08:00", "09:30", id="morning"),
            _activity("2026-10-18", "10:00", "11:00", id="yesterday"),
        ]
        summary = day_summary(date(2026, 10, 19), acts, Rating.OK)
        assert [a.id for a in summary.activities] == ["morning", "afternoon"]
        assert summary.total_minutes == 150
        assert summary.rating is Rating.OK

    def test_empty_day(self):
        summary = day_summary(date(2026, 10, 19), [])
        assert summary.activities == []
        assert summary.total_minutes == 0
        assert summary.rating is None
