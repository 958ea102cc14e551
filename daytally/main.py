"""DayTally application entry point.

Usage:
    python -m daytally.main                     # today's day view
    python -m daytally.main --day 2026-10-19    # a specific day
    python -m daytally.main --month 2026-10     # month calendar
    python -m daytally.main --analytics 30      # last 30 days overview
    python -m daytally.main --weekly            # last four weeks
    python -m daytally.main --export report.docx
    python -m daytally.main --serve             # JSON API for the UI
"""

import argparse
import logging
import os
from datetime import date

from daytally.core.calendar_grid import grid_range, month_grid, month_start
from daytally.core.config import get_default_config_path, load_config
from daytally.persistence.store import ActivityStore
from daytally.reporting.analytics import (
    PRESET_DAYS,
    analytics_overview,
    date_range_presets,
    day_summary,
    group_by_date,
)
from daytally.reporting.formatter import TextFormatter
from daytally.reporting.trends import (
    chart_matrix,
    group_by_week,
    last_four_weeks,
    weekly_summary,
    weeks_range,
)

logger = logging.getLogger(__name__)


def _month_arg(value: str) -> date:
    if value == "today":
        return date.today().replace(day=1)
    try:
        year, month = value.split("-")
        return month_start(int(year), int(month))
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM, got {value!r}")


def _date_arg(value: str) -> date:
    if value == "today":
        return date.today()
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got {value!r}")


def build_parser() -> argparse.ArgumentParser:
    """Build and return the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="daytally",
        description="DayTally: personal time tracking and day ratings",
    )
    parser.add_argument("--config", help="Path to config.json")
    group = parser.add_mutually_exclusive_group()
    group.add_argument(
        "--day",
        nargs="?",
        const="today",
        type=_date_arg,
        metavar="DATE",
        help="Print the day view (default: today) and exit",
    )
    group.add_argument(
        "--month",
        nargs="?",
        const="today",
        type=_month_arg,
        metavar="YYYY-MM",
        help="Print the month calendar YYYY-MM (default: this month) and exit",
    )
    group.add_argument(
        "--analytics",
        type=int,
        choices=PRESET_DAYS,
        help="Print the analytics overview for the last N days and exit",
    )
    group.add_argument(
        "--weekly",
        action="store_true",
        help="Print the last four weeks' trends and exit",
    )
    group.add_argument(
        "--export",
        metavar="PATH",
        help="Write a .docx analytics report (last 30 days) to PATH",
    )
    group.add_argument(
        "--serve",
        action="store_true",
        help="Serve the JSON API for the presentation layer",
    )
    return parser


def _open_store(config: dict) -> ActivityStore:
    db_path = os.path.expanduser(config.get("database_path", "~/.daytally/daytally.db"))
    if db_path != ":memory:":
        os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
    logger.debug("Using database %s", db_path)
    store = ActivityStore(db_path)
    store.init_db()
    store.seed_default_categories(config.get("default_categories", []))
    return store


def _print_day(store: ActivityStore, day: date) -> None:
    rating = store.get_rating(day)
    summary = day_summary(
        day, store.get_activities_by_date(day), rating.rating if rating else None
    )
    print(TextFormatter.format_day(summary, store.get_categories()))


def _print_month(store: ActivityStore, ref: date, today: date) -> None:
    start, end = grid_range(ref)
    by_date = group_by_date(store.get_activities(start, end))
    minutes = {d: sum(a.duration for a in acts) for d, acts in by_date.items()}
    print(TextFormatter.format_month(month_grid(ref, today=today), minutes))


def _print_analytics(store: ActivityStore, days: int, today: date) -> None:
    preset = date_range_presets(today)[PRESET_DAYS.index(days)]
    overview = analytics_overview(
        store.get_activities(preset.start_date, preset.end_date),
        store.get_ratings(preset.start_date, preset.end_date),
        store.get_categories(),
        preset.start_date,
        preset.end_date,
    )
    print(TextFormatter.format_overview(overview, preset.label))


def _weekly_data(store: ActivityStore, today: date):
    weeks = last_four_weeks(today)
    start, end = weeks_range(weeks)
    activities = store.get_activities(start, end)
    categories = store.get_categories()
    weekly = group_by_week(activities, weeks)
    current = weeks[0]
    summary = weekly_summary(
        group_by_date(activities), current.start_date, current.end_date, categories
    )
    return chart_matrix(weekly, categories), categories, summary


def _print_weekly(store: ActivityStore, today: date) -> None:
    rows, categories, summary = _weekly_data(store, today)
    print(TextFormatter.format_trends(rows, categories, "This Week", summary))


def _export_report(store: ActivityStore, config: dict, path: str, today: date) -> None:
    from daytally.reporting.exporter import ReportExporter

    preset = date_range_presets(today)[1]
    categories = store.get_categories()
    overview = analytics_overview(
        store.get_activities(preset.start_date, preset.end_date),
        store.get_ratings(preset.start_date, preset.end_date),
        categories,
        preset.start_date,
        preset.end_date,
    )
    rows, _, summary = _weekly_data(store, today)
    user_name = config.get("report", {}).get("user_name", "")
    out = ReportExporter().export_analytics(
        overview, rows, categories, user_name, os.path.expanduser(path), summary
    )
    print(f"Report written to {out}")


def main(args: list[str] | None = None) -> None:
    """Entry point for DayTally.

    When *args* is ``None`` the arguments are read from ``sys.argv``.
    """
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    parser = build_parser()
    parsed = parser.parse_args(args)

    config_path = parsed.config or get_default_config_path()
    config = load_config(str(config_path))
    today = date.today()

    store = _open_store(config)
    try:
        if parsed.serve:
            from daytally.ui.web import run_dashboard

            run_dashboard(store, config, config.get("dashboard_port", 5555))
        elif parsed.export:
            _export_report(store, config, parsed.export, today)
        elif parsed.weekly:
            _print_weekly(store, today)
        elif parsed.analytics:
            _print_analytics(store, parsed.analytics, today)
        elif parsed.month is not None:
            _print_month(store, parsed.month, today)
        else:
            _print_day(store, parsed.day or today)
    finally:
        store.close()


if __name__ == "__main__":
    main()
