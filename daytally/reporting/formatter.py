"""Text formatter for DayTally views.

Renders the day view, month calendar, analytics overview and weekly
trends as aligned plain-text reports.
"""

from typing import Sequence

from daytally.core.calendar_grid import month_title, weekday_names
from daytally.core.models import (
    AnalyticsOverview,
    CalendarDay,
    Category,
    CategorySlice,
    ChartRow,
    DaySummary,
    WeeklySummary,
)
from daytally.core.timeutil import format_duration
from daytally.reporting.analytics import category_name

_RULE = "─"


class TextFormatter:
    """Formats DayTally view models as human-readable plain text."""

    @staticmethod
    def _format_breakdown_table(slices: list[CategorySlice], total_minutes: int) -> str:
        """Render a category table with aligned columns.

        Returns lines like:
          Category   Time    Share
          ─────────────────────────
          Work       6h 30m    65%
          Exercise   3h 30m    35%
          ─────────────────────────
          Total      10h      100%
        """
        if not slices:
            return "  No activities logged in this period.\n"

        cat_width = max(len(s.name) for s in slices)
        cat_width = max(cat_width, len("Category"), len("Total"))

        dur_strs = [format_duration(s.minutes) for s in slices]
        total_dur_str = format_duration(total_minutes)
        dur_width = max(len(s) for s in dur_strs + [total_dur_str])
        dur_width = max(dur_width, len("Time"))

        pct_strs = [f"{s.percent:.0f}%" for s in slices]
        pct_width = max(max(len(s) for s in pct_strs), len("Share"), len("100%"))

        header = (
            f"  {'Category':<{cat_width}}  "
            f"{'Time':>{dur_width}}  "
            f"{'Share':>{pct_width}}"
        )
        separator = "  " + _RULE * (len(header) - 2)

        lines = [header, separator]
        for s, dur_str, pct_str in zip(slices, dur_strs, pct_strs):
            lines.append(
                f"  {s.name:<{cat_width}}  "
                f"{dur_str:>{dur_width}}  "
                f"{pct_str:>{pct_width}}"
            )
        lines.append(separator)
        lines.append(
            f"  {'Total':<{cat_width}}  "
            f"{total_dur_str:>{dur_width}}  "
            f"{'100%':>{pct_width}}"
        )
        return "\n".join(lines) + "\n"

    @staticmethod
    def format_day(summary: DaySummary, categories: Sequence[Category]) -> str:
        """Render one day's timeline as plain text."""
        lines = [f"{summary.date.strftime('%A, %B %d, %Y')}"]
        rating = summary.rating.label if summary.rating else "Not rated"
        lines.append(f"Rating: {rating}")
        lines.append(f"Total logged: {format_duration(summary.total_minutes)}")
        lines.append("")

        if not summary.activities:
            lines.append("  No activities logged.")
        for act in summary.activities:
            name = category_name(categories, act.category_id)
            title = act.title or name
            marker = " (+1 day)" if act.spans_midnight else ""
            lines.append(
                f"  {act.start_time}-{act.end_time}{marker}  "
                f"{title} [{name}]  {format_duration(act.duration)}"
            )
        return "\n".join(lines) + "\n"

    @staticmethod
    def format_month(grid: list[CalendarDay], minutes_by_date: dict[str, int]) -> str:
        """Render the 6x7 month grid with minutes logged per day.

        Days outside the month are shown in parentheses, today with '*'.
        """
        in_month = next(d for d in grid if d.in_month)

        texts = []
        for day in grid:
            label = f"{day.date.day}"
            if not day.in_month:
                label = f"({label})"
            if day.is_today:
                label += "*"
            minutes = minutes_by_date.get(day.date.isoformat(), 0)
            texts.append(f"{label} {format_duration(minutes)}" if minutes else label)
        width = max(9, max(len(t) for t in texts))

        lines = [month_title(in_month.date), ""]
        lines.append(" ".join(f"{name:>{width}}" for name in weekday_names()))
        for week_start in range(0, len(texts), 7):
            lines.append(" ".join(f"{t:>{width}}" for t in texts[week_start:week_start + 7]))
        return "\n".join(lines) + "\n"

    @staticmethod
    def format_overview(overview: AnalyticsOverview, label: str = "") -> str:
        """Render the analytics overview for a date range."""
        start_str = overview.start_date.strftime("%b %d, %Y")
        end_str = overview.end_date.strftime("%b %d, %Y")
        heading = f"Analytics: {label} ({start_str} - {end_str})" if label else (
            f"Analytics: {start_str} - {end_str}"
        )
        counts = overview.rating_counts
        parts = [
            heading + "\n",
            "\n",
            f"  Total Time Logged: {format_duration(overview.total_minutes)}\n",
            f"  Avg. Per Day:      {format_duration(overview.avg_minutes_per_day)}\n",
            f"  Days Rated:        {counts.total}\n",
            f"  Top Category:      {overview.top_category_name}\n",
            "\nTime by Category:\n",
            TextFormatter._format_breakdown_table(overview.breakdown, overview.total_minutes),
            "\nDay Quality:\n",
        ]
        if counts.total == 0:
            parts.append("  No day ratings in this period.\n")
        else:
            for name, value in (("Great", counts.great), ("OK", counts.ok), ("Tough", counts.tough)):
                if value:
                    parts.append(f"  {name:<6} {value:>3}  {value * 100 / counts.total:.0f}%\n")
        return "".join(parts)

    @staticmethod
    def format_trends(
        rows: list[ChartRow],
        categories: Sequence[Category],
        selected: str = "",
        summary: WeeklySummary | None = None,
    ) -> str:
        """Render the last four weeks, oldest first, one line per week."""
        parts = ["Weekly Trends\n", "\n"]
        if not any(v > 0 for row in rows for v in row.values.values()):
            parts.append("  No activities logged in the last 4 weeks.\n")
        else:
            width = max(len(row.week) for row in rows)
            for row in rows:
                total = sum(row.values.values())
                cells = ", ".join(
                    f"{category_name(categories, cid)} {format_duration(m)}"
                    for cid, m in row.values.items() if m > 0
                )
                parts.append(
                    f"  {row.week:<{width}}  {format_duration(total):>8}  {cells}\n"
                )

        if summary is not None:
            parts.append(f"\n{selected or 'Selected week'}:\n")
            parts.append(f"  Total Time:   {format_duration(summary.total_minutes)}\n")
            parts.append(f"  Avg. Per Day: {format_duration(summary.avg_minutes_per_day)}\n")
            parts.append(f"  Days Logged:  {summary.days_with_activities}\n")
            parts.append(f"  Top Category: {summary.top_category}\n")
        return "".join(parts)
