"""SQLite-backed persistence for activities, categories, day ratings and settings.

This module is the boundary where outside data enters DayTally.  Rows and
request payloads are turned into canonical records by the ``normalize_*``
functions, which validate times, dates and rating values once so that the
aggregation code can trust every record it receives.
"""

import logging
import re
import sqlite3
import uuid
from dataclasses import replace
from datetime import date, datetime
from typing import Any, Iterable, Mapping, Optional

from daytally.core.models import Activity, Category, DailyRating, Rating
from daytally.core.overlap import find_overlaps
from daytally.core.timeutil import minutes_to_time, time_to_minutes

logger = logging.getLogger(__name__)

_ACTIVITY_FIELDS = ("date", "start_time", "end_time", "category_id", "title", "description")
_CATEGORY_FIELDS = ("name", "color", "is_default")

_HEX_COLOR_RE = re.compile(r"^#(?:[0-9a-fA-F]{3}){1,2}$")


class OverlapError(ValueError):
    """Raised when an activity would overlap another one on the same day."""

    def __init__(self, start_time: str, end_time: str, conflicts: list[Activity]) -> None:
        self.conflicts = conflicts
        titles = ", ".join(
            f"{a.title or 'untitled'} ({a.start_time}-{a.end_time})" for a in conflicts
        )
        super().__init__(f"{start_time}-{end_time} overlaps {titles}")


class NotFoundError(LookupError):
    """Raised when an id or date has no stored record."""


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------

def _pick(raw: Mapping[str, Any], snake: str, camel: str, default: Any = None) -> Any:
    if snake in raw:
        return raw[snake]
    return raw.get(camel, default)


def _text(raw: Mapping[str, Any], key: str) -> str:
    value = raw.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"{key} must be a string, got {value!r}")
    return value


def normalize_time(value: Any) -> str:
    """Validate an ``HH:MM`` value and return it zero-padded."""
    return minutes_to_time(time_to_minutes(value))


def normalize_date(value: Any) -> str:
    """Validate a date (or ISO string) and return its ISO form."""
    if isinstance(value, date):
        return value.isoformat()
    if not isinstance(value, str):
        raise ValueError(f"Invalid date: {value!r}")
    return date.fromisoformat(value).isoformat()


def normalize_activity(raw: Mapping[str, Any]) -> Activity:
    """Build an Activity from a row or payload in snake_case or camelCase.

    Raises ValueError on a missing category, malformed date/time or
    non-string text fields.
    """
    category_id = _pick(raw, "category_id", "categoryId")
    if not category_id:
        raise ValueError("category_id is required")
    if not isinstance(category_id, str):
        raise ValueError(f"category_id must be a string, got {category_id!r}")
    return Activity(
        id=str(raw.get("id") or ""),
        date=normalize_date(raw.get("date")),
        start_time=normalize_time(_pick(raw, "start_time", "startTime")),
        end_time=normalize_time(_pick(raw, "end_time", "endTime")),
        category_id=category_id,
        title=_text(raw, "title"),
        description=_text(raw, "description"),
    )


def normalize_category(raw: Mapping[str, Any]) -> Category:
    """Raises ValueError on an empty name or a color that is not ``#rgb``/``#rrggbb``."""
    name = _text(raw, "name").strip()
    if not name:
        raise ValueError("Category name must not be empty")
    color = _text(raw, "color")
    if not _HEX_COLOR_RE.match(color):
        raise ValueError(f"Invalid color: {color!r}")
    return Category(
        id=str(raw.get("id") or ""),
        name=name,
        color=color,
        is_default=bool(_pick(raw, "is_default", "isDefault", False)),
    )


def normalize_rating(raw: Mapping[str, Any]) -> DailyRating:
    """Raises ValueError when the rating is not great / ok / tough."""
    return DailyRating(
        date=normalize_date(raw.get("date")),
        rating=Rating(raw.get("rating")),
    )


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------

class ActivityStore:
    """Read/write interface to the local SQLite database.

    Dates are stored as ISO ``YYYY-MM-DD`` text and times as ``HH:MM`` text,
    so range queries can compare strings.  Every row read back goes through
    the normalization functions above.
    """

    def __init__(self, db_path: str) -> None:
        self.db_path = db_path
        self._conn: Optional[sqlite3.Connection] = None

    # ------------------------------------------------------------------
    # Connection helpers
    # ------------------------------------------------------------------

    def _get_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
        return self._conn

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    # ------------------------------------------------------------------
    # Schema initialisation
    # ------------------------------------------------------------------

    def init_db(self) -> None:
        """Create tables and indexes if they don't already exist."""
        conn = self._get_conn()
        conn.executescript(
            """\
            CREATE TABLE IF NOT EXISTS activities (
                id TEXT PRIMARY KEY,
                date TEXT NOT NULL,
                start_time TEXT NOT NULL,
                end_time TEXT NOT NULL,
                category_id TEXT NOT NULL,
                title TEXT NOT NULL DEFAULT '',
                description TEXT NOT NULL DEFAULT '',
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS categories (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                color TEXT NOT NULL,
                is_default INTEGER NOT NULL DEFAULT 0,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS daily_ratings (
                date TEXT PRIMARY KEY,
                rating TEXT NOT NULL,
                updated_at TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS settings (
                id INTEGER PRIMARY KEY CHECK (id = 1),
                theme TEXT NOT NULL DEFAULT 'light',
                last_viewed_date TEXT,
                updated_at TEXT NOT NULL
            );

            CREATE INDEX IF NOT EXISTS idx_activity_date
                ON activities(date, start_time);
            """
        )
        conn.commit()

    @staticmethod
    def _now() -> str:
        return datetime.now().isoformat()

    # ------------------------------------------------------------------
    # Activity operations
    # ------------------------------------------------------------------

    def _check_overlap(self, activity: Activity, exclude_id: Optional[str]) -> None:
        conflicts = find_overlaps(
            activity.start_time,
            activity.end_time,
            self.get_activities_by_date(activity.date),
            exclude_id=exclude_id,
        )
        if conflicts:
            logger.warning(
                "Rejected %s %s-%s: overlaps %d activities",
                activity.date, activity.start_time, activity.end_time, len(conflicts),
            )
            raise OverlapError(activity.start_time, activity.end_time, conflicts)

    def add_activity(self, data: Mapping[str, Any]) -> Activity:
        """Validate and insert an activity.  Returns the stored record.

        Raises ValueError on malformed data and OverlapError when the
        interval collides with another activity on the same date.
        """
        activity = replace(normalize_activity(data), id=uuid.uuid4().hex)
        self._check_overlap(activity, exclude_id=None)

        now = self._now()
        conn = self._get_conn()
        conn.execute(
            """\
            INSERT INTO activities
                (id, date, start_time, end_time, category_id, title,
                 description, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                activity.id,
                activity.date,
                activity.start_time,
                activity.end_time,
                activity.category_id,
                activity.title,
                activity.description,
                now,
                now,
            ),
        )
        conn.commit()
        logger.debug("Added activity %s on %s", activity.id, activity.date)
        return activity

    def update_activity(self, activity_id: str, changes: Mapping[str, Any]) -> Activity:
        """Apply *changes* to an activity and return the updated record.

        The activity's own previous interval is ignored by the overlap check.
        """
        current = self.get_activity(activity_id)
        if current is None:
            raise NotFoundError(f"No activity with id {activity_id!r}")

        merged = {f: getattr(current, f) for f in _ACTIVITY_FIELDS}
        for f in _ACTIVITY_FIELDS:
            camel = _camel(f)
            if f in changes:
                merged[f] = changes[f]
            elif camel in changes:
                merged[f] = changes[camel]
        merged["id"] = activity_id
        updated = normalize_activity(merged)
        self._check_overlap(updated, exclude_id=activity_id)

        conn = self._get_conn()
        conn.execute(
            """\
            UPDATE activities
            SET date = ?, start_time = ?, end_time = ?, category_id = ?,
                title = ?, description = ?, updated_at = ?
            WHERE id = ?
            """,
            (
                updated.date,
                updated.start_time,
                updated.end_time,
                updated.category_id,
                updated.title,
                updated.description,
                self._now(),
                activity_id,
            ),
        )
        conn.commit()
        return updated

    def delete_activity(self, activity_id: str) -> None:
        conn = self._get_conn()
        cursor = conn.execute("DELETE FROM activities WHERE id = ?", (activity_id,))
        conn.commit()
        if cursor.rowcount == 0:
            raise NotFoundError(f"No activity with id {activity_id!r}")

    def get_activity(self, activity_id: str) -> Optional[Activity]:
        """Return a single activity by id, or ``None``."""
        row = self._get_conn().execute(
            "SELECT * FROM activities WHERE id = ?", (activity_id,)
        ).fetchone()
        return normalize_activity(dict(row)) if row else None

    def get_activities_by_date(self, day: date | str) -> list[Activity]:
        """Activities starting on *day*, ordered by start time."""
        rows = self._get_conn().execute(
            "SELECT * FROM activities WHERE date = ? ORDER BY start_time",
            (normalize_date(day),),
        ).fetchall()
        return [normalize_activity(dict(r)) for r in rows]

    def get_activities(self, start: date | str, end: date | str) -> list[Activity]:
        """Activities whose date falls in [start, end], by date then start time."""
        rows = self._get_conn().execute(
            """\
            SELECT * FROM activities
            WHERE date >= ? AND date <= ?
            ORDER BY date, start_time
            """,
            (normalize_date(start), normalize_date(end)),
        ).fetchall()
        return [normalize_activity(dict(r)) for r in rows]

    def get_all_activities(self) -> list[Activity]:
        """Every activity, newest date first."""
        rows = self._get_conn().execute(
            "SELECT * FROM activities ORDER BY date DESC, start_time"
        ).fetchall()
        return [normalize_activity(dict(r)) for r in rows]

    # ------------------------------------------------------------------
    # Category operations
    # ------------------------------------------------------------------

    def add_category(self, name: str, color: str, is_default: bool = False) -> Category:
        category = replace(
            normalize_category({"name": name, "color": color, "is_default": is_default}),
            id=uuid.uuid4().hex,
        )
        now = self._now()
        conn = self._get_conn()
        conn.execute(
            """\
            INSERT INTO categories (id, name, color, is_default, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (category.id, category.name, category.color, int(category.is_default), now, now),
        )
        conn.commit()
        return category

    def update_category(self, category_id: str, changes: Mapping[str, Any]) -> Category:
        current = self.get_category(category_id)
        if current is None:
            raise NotFoundError(f"No category with id {category_id!r}")

        merged: dict[str, Any] = {"id": category_id}
        for f in _CATEGORY_FIELDS:
            merged[f] = changes.get(f, changes.get(_camel(f), getattr(current, f)))
        updated = normalize_category(merged)

        conn = self._get_conn()
        conn.execute(
            "UPDATE categories SET name = ?, color = ?, is_default = ?, updated_at = ? WHERE id = ?",
            (updated.name, updated.color, int(updated.is_default), self._now(), category_id),
        )
        conn.commit()
        return updated

    def delete_category(self, category_id: str) -> None:
        """Remove a category.  Its activities are kept and show as 'Unknown'."""
        conn = self._get_conn()
        cursor = conn.execute("DELETE FROM categories WHERE id = ?", (category_id,))
        conn.commit()
        if cursor.rowcount == 0:
            raise NotFoundError(f"No category with id {category_id!r}")

    def get_category(self, category_id: str) -> Optional[Category]:
        row = self._get_conn().execute(
            "SELECT * FROM categories WHERE id = ?", (category_id,)
        ).fetchone()
        return normalize_category(dict(row)) if row else None

    def get_categories(self) -> list[Category]:
        """All categories in creation order."""
        rows = self._get_conn().execute(
            "SELECT * FROM categories ORDER BY created_at, rowid"
        ).fetchall()
        return [normalize_category(dict(r)) for r in rows]

    def seed_default_categories(self, defaults: Iterable[Mapping[str, Any]]) -> list[Category]:
        """Insert *defaults* when no category exists yet.  Returns what was added."""
        if self.get_categories():
            return []
        added = [
            self.add_category(d["name"], d["color"], is_default=True)
            for d in defaults
        ]
        logger.info("Seeded %d default categories", len(added))
        return added

    # ------------------------------------------------------------------
    # Daily rating operations
    # ------------------------------------------------------------------

    def set_rating(self, day: date | str, rating: Rating | str) -> DailyRating:
        """Insert or overwrite the rating for *day*."""
        value = rating.value if isinstance(rating, Rating) else rating
        record = normalize_rating({"date": day, "rating": value})
        conn = self._get_conn()
        conn.execute(
            "INSERT OR REPLACE INTO daily_ratings (date, rating, updated_at) VALUES (?, ?, ?)",
            (record.date, record.rating.value, self._now()),
        )
        conn.commit()
        return record

    def delete_rating(self, day: date | str) -> None:
        conn = self._get_conn()
        conn.execute("DELETE FROM daily_ratings WHERE date = ?", (normalize_date(day),))
        conn.commit()

    def get_rating(self, day: date | str) -> Optional[DailyRating]:
        row = self._get_conn().execute(
            "SELECT * FROM daily_ratings WHERE date = ?", (normalize_date(day),)
        ).fetchone()
        return normalize_rating(dict(row)) if row else None

    def get_ratings(self, start: date | str, end: date | str) -> list[DailyRating]:
        rows = self._get_conn().execute(
            "SELECT * FROM daily_ratings WHERE date >= ? AND date <= ? ORDER BY date",
            (normalize_date(start), normalize_date(end)),
        ).fetchall()
        return [normalize_rating(dict(r)) for r in rows]

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def get_settings(self, today: Optional[date] = None) -> dict[str, Any]:
        """Return the user settings, or defaults when none are stored."""
        row = self._get_conn().execute("SELECT * FROM settings WHERE id = 1").fetchone()
        if row is None:
            return {
                "theme": "light",
                "last_viewed_date": (today or date.today()).isoformat(),
            }
        return {"theme": row["theme"], "last_viewed_date": row["last_viewed_date"]}

    def update_settings(
        self, changes: Mapping[str, Any], today: Optional[date] = None
    ) -> dict[str, Any]:
        """Merge *changes* into the stored settings.

        *today* seeds ``last_viewed_date`` when nothing is stored yet.
        """
        settings = self.get_settings(today=today)
        if "theme" in changes:
            if changes["theme"] not in ("light", "dark"):
                raise ValueError(f"Invalid theme: {changes['theme']!r}")
            settings["theme"] = changes["theme"]
        last_viewed = _pick(changes, "last_viewed_date", "lastViewedDate")
        if last_viewed is not None:
            settings["last_viewed_date"] = normalize_date(last_viewed)

        conn = self._get_conn()
        conn.execute(
            """\
            INSERT OR REPLACE INTO settings (id, theme, last_viewed_date, updated_at)
            VALUES (1, ?, ?, ?)
            """,
            (settings["theme"], settings["last_viewed_date"], self._now()),
        )
        conn.commit()
        return settings


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)
