"""JSON API for the DayTally presentation layer.

A lightweight Flask app exposing:
- Day view (timeline, rating, quick-add, resize)
- Month calendar grid
- Analytics overview and weekly trends
- Category and settings management
"""

import logging
from datetime import date
from typing import Any, Callable, Optional

from flask import Flask, jsonify, request

from daytally.core.calendar_grid import (
    grid_range,
    month_grid,
    month_start,
    month_title,
    next_month,
    previous_month,
    weekday_names,
)
from daytally.core.models import Activity, Category
from daytally.core.timeutil import (
    duration_to_grid_span,
    format_duration,
    quick_add_end_time,
    resize_end_time,
    time_to_grid_row,
)
from daytally.persistence.store import (
    ActivityStore,
    NotFoundError,
    OverlapError,
    normalize_date,
)
from daytally.reporting.analytics import (
    PRESET_DAYS,
    analytics_overview,
    category_name,
    date_range_presets,
    day_summary,
    find_category,
    group_by_date,
    ratings_by_date,
)
from daytally.reporting.trends import (
    chart_matrix,
    group_by_week,
    last_four_weeks,
    weekly_summary,
    weeks_range,
)

logger = logging.getLogger(__name__)


def _activity_json(act: Activity, categories: list[Category]) -> dict[str, Any]:
    cat = find_category(categories, act.category_id)
    return {
        "id": act.id,
        "date": act.date,
        "startTime": act.start_time,
        "endTime": act.end_time,
        "categoryId": act.category_id,
        "categoryName": category_name(categories, act.category_id),
        "color": cat.color if cat else None,
        "title": act.title,
        "description": act.description,
        "duration": act.duration,
        "durationStr": format_duration(act.duration),
        "spansMidnight": act.spans_midnight,
        "gridRow": time_to_grid_row(act.start_time),
        "gridSpan": duration_to_grid_span(act.start_time, act.end_time),
    }


def _category_json(cat: Category) -> dict[str, Any]:
    return {"id": cat.id, "name": cat.name, "color": cat.color, "isDefault": cat.is_default}


def create_flask_app(
    store: ActivityStore,
    config: Optional[dict] = None,
    clock: Callable[[], date] = date.today,
) -> Flask:
    config = config or {}
    app = Flask(__name__)

    # ------------------------------------------------------------------
    # Errors
    # ------------------------------------------------------------------

    @app.errorhandler(OverlapError)
    def handle_overlap(exc: OverlapError):
        return jsonify({
            "error": str(exc),
            "conflicts": [a.id for a in exc.conflicts],
        }), 409

    @app.errorhandler(ValueError)
    def handle_invalid(exc: ValueError):
        return jsonify({"error": str(exc)}), 400

    @app.errorhandler(NotFoundError)
    def handle_not_found(exc: NotFoundError):
        return jsonify({"error": str(exc.args[0]) if exc.args else "not found"}), 404

    def _json_body() -> dict:
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValueError("JSON object body required")
        return data

    # ------------------------------------------------------------------
    # Day view
    # ------------------------------------------------------------------

    @app.route("/api/day/<date_str>")
    def api_day(date_str):
        day = date.fromisoformat(normalize_date(date_str))
        categories = store.get_categories()
        rating = store.get_rating(day)
        summary = day_summary(
            day, store.get_activities_by_date(day), rating.rating if rating else None
        )
        return jsonify({
            "date": day.isoformat(),
            "rating": summary.rating.value if summary.rating else None,
            "totalMinutes": summary.total_minutes,
            "totalStr": format_duration(summary.total_minutes),
            "activities": [_activity_json(a, categories) for a in summary.activities],
        })

    @app.route("/api/activities", methods=["POST"])
    def api_add_activity():
        data = _json_body()
        start = data.get("startTime") or data.get("start_time")
        if not data.get("endTime") and not data.get("end_time") and start:
            data["endTime"] = quick_add_end_time(
                start, config.get("quick_add_minutes", 60)
            )
        title = data.get("title")
        if title is not None and not isinstance(title, str):
            raise ValueError(f"title must be a string, got {title!r}")
        if not (title or "").strip():
            category_id = data.get("categoryId") or data.get("category_id")
            cat = store.get_category(category_id) if isinstance(category_id, str) else None
            data["title"] = cat.name if cat else "Activity"
        activity = store.add_activity(data)
        return jsonify(_activity_json(activity, store.get_categories())), 201

    @app.route("/api/activities/<activity_id>", methods=["PATCH"])
    def api_update_activity(activity_id):
        activity = store.update_activity(activity_id, _json_body())
        return jsonify(_activity_json(activity, store.get_categories()))

    @app.route("/api/activities/<activity_id>/resize", methods=["POST"])
    def api_resize_activity(activity_id):
        current = store.get_activity(activity_id)
        if current is None:
            raise NotFoundError(f"No activity with id {activity_id!r}")
        pointer = _json_body().get("pointerMinutes")
        if not isinstance(pointer, (int, float)):
            raise ValueError("pointerMinutes must be a number")
        end_time = resize_end_time(
            current.start_time, pointer, config.get("snap_interval_minutes", 15)
        )
        activity = store.update_activity(activity_id, {"end_time": end_time})
        return jsonify(_activity_json(activity, store.get_categories()))

    @app.route("/api/activities/<activity_id>", methods=["DELETE"])
    def api_delete_activity(activity_id):
        store.delete_activity(activity_id)
        return jsonify({"ok": True})

    @app.route("/api/ratings/<date_str>", methods=["PUT"])
    def api_set_rating(date_str):
        record = store.set_rating(date_str, _json_body().get("rating"))
        return jsonify({"date": record.date, "rating": record.rating.value})

    @app.route("/api/ratings/<date_str>", methods=["DELETE"])
    def api_delete_rating(date_str):
        store.delete_rating(date_str)
        return jsonify({"ok": True})

    # ------------------------------------------------------------------
    # Month calendar
    # ------------------------------------------------------------------

    @app.route("/api/month")
    def api_month():
        today = clock()
        year = int(request.args.get("year", today.year))
        month = int(request.args.get("month", today.month))
        ref = month_start(year, month)

        start, end = grid_range(ref)
        by_date = group_by_date(store.get_activities(start, end))
        ratings = ratings_by_date(store.get_ratings(start, end))
        categories = store.get_categories()

        days = []
        for cell in month_grid(ref, today=today):
            iso = cell.date.isoformat()
            acts = by_date.get(iso, [])
            colors = []
            for act in acts:
                cat = find_category(categories, act.category_id)
                if cat and cat.color not in colors:
                    colors.append(cat.color)
            rating = ratings.get(iso)
            days.append({
                "date": iso,
                "day": cell.date.day,
                "inMonth": cell.in_month,
                "isToday": cell.is_today,
                "minutes": sum(a.duration for a in acts),
                "activityCount": len(acts),
                "rating": rating.value if rating else None,
                "ratingColor": rating.color if rating else None,
                "colors": colors[:3],
            })

        prev_ref, next_ref = previous_month(ref), next_month(ref)
        return jsonify({
            "title": month_title(ref),
            "year": year,
            "month": month,
            "weekdays": weekday_names(),
            "days": days,
            "previous": {"year": prev_ref.year, "month": prev_ref.month},
            "next": {"year": next_ref.year, "month": next_ref.month},
        })

    # ------------------------------------------------------------------
    # Analytics
    # ------------------------------------------------------------------

    @app.route("/api/analytics")
    def api_analytics():
        today = clock()
        presets = date_range_presets(today)
        if request.args.get("start") and request.args.get("end"):
            start = date.fromisoformat(request.args["start"])
            end = date.fromisoformat(request.args["end"])
            label = ""
        else:
            days = int(request.args.get("preset", PRESET_DAYS[0]))
            if days not in PRESET_DAYS:
                raise ValueError(f"preset must be one of {PRESET_DAYS}")
            preset = presets[PRESET_DAYS.index(days)]
            start, end, label = preset.start_date, preset.end_date, preset.label

        overview = analytics_overview(
            store.get_activities(start, end),
            store.get_ratings(start, end),
            store.get_categories(),
            start,
            end,
        )
        return jsonify({
            "label": label,
            "startDate": start.isoformat(),
            "endDate": end.isoformat(),
            "presets": [
                {"label": p.label, "startDate": p.start_date.isoformat(),
                 "endDate": p.end_date.isoformat()}
                for p in presets
            ],
            "totalMinutes": overview.total_minutes,
            "totalStr": format_duration(overview.total_minutes),
            "avgMinutesPerDay": overview.avg_minutes_per_day,
            "avgStr": format_duration(overview.avg_minutes_per_day),
            "daysRated": overview.rating_counts.total,
            "ratingCounts": overview.rating_counts.as_dict(),
            "topCategory": overview.top_category_name,
            "categoryTotals": overview.category_totals,
            "breakdown": [
                {"categoryId": s.category_id, "name": s.name, "color": s.color,
                 "minutes": s.minutes, "percent": round(s.percent, 1)}
                for s in overview.breakdown
            ],
        })

    @app.route("/api/trends")
    def api_trends():
        weeks = last_four_weeks(clock())
        start, end = weeks_range(weeks)
        activities = store.get_activities(start, end)
        categories = store.get_categories()

        weekly = group_by_week(activities, weeks)
        selected = request.args.get("week", weeks[0].label)
        if selected not in weekly:
            raise ValueError(f"Unknown week {selected!r}")
        bucket = weekly[selected]
        summary = weekly_summary(
            group_by_date(activities), bucket.start_date, bucket.end_date, categories
        )
        return jsonify({
            "weeks": [
                {"label": w.label, "startDate": w.start_date.isoformat(),
                 "endDate": w.end_date.isoformat(), "weekNumber": w.week_number}
                for w in weeks
            ],
            "chart": [row.as_dict() for row in chart_matrix(weekly, categories)],
            "selectedWeek": selected,
            "summary": {
                "totalMinutes": summary.total_minutes,
                "avgMinutesPerDay": summary.avg_minutes_per_day,
                "topCategory": summary.top_category,
                "daysWithActivities": summary.days_with_activities,
            },
        })

    # ------------------------------------------------------------------
    # Categories and settings
    # ------------------------------------------------------------------

    @app.route("/api/categories")
    def api_categories():
        return jsonify([_category_json(c) for c in store.get_categories()])

    @app.route("/api/categories", methods=["POST"])
    def api_add_category():
        data = _json_body()
        cat = store.add_category(
            data.get("name", ""), data.get("color", ""), bool(data.get("isDefault", False))
        )
        return jsonify(_category_json(cat)), 201

    @app.route("/api/categories/<category_id>", methods=["PATCH"])
    def api_update_category(category_id):
        return jsonify(_category_json(store.update_category(category_id, _json_body())))

    @app.route("/api/categories/<category_id>", methods=["DELETE"])
    def api_delete_category(category_id):
        store.delete_category(category_id)
        return jsonify({"ok": True})

    @app.route("/api/settings")
    def api_get_settings():
        return jsonify(store.get_settings(today=clock()))

    @app.route("/api/settings", methods=["POST"])
    def api_update_settings():
        return jsonify(store.update_settings(_json_body(), today=clock()))

    return app


def run_dashboard(store: ActivityStore, config: dict, port: int = 5555) -> None:
    """Serve the API on localhost until interrupted."""
    flask_app = create_flask_app(store, config)
    logger.info("Dashboard API starting at http://127.0.0.1:%d", port)
    flask_app.run(host="127.0.0.1", port=port, debug=False, use_reloader=False)
