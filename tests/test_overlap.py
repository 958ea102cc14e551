"""Unit tests for midnight-aware overlap detection."""

from daytally.core.models import Activity
from daytally.core.overlap import find_overlaps, has_overlap, intervals_overlap
from daytally.core.timeutil import time_to_minutes


def _activity(start: str, end: str, id: str = "a1", **overrides) -> Activity:
    defaults = dict(
        id=id,
        date="2026-10-19",
        start_time=start,
        end_time=end,
        category_id="work",
        title="Focus block",
    )
    defaults.update(overrides)
    return Activity(**defaults)


def _overlap(s1: str, e1: str, s2: str, e2: str) -> bool:
    return intervals_overlap(
        time_to_minutes(s1), time_to_minutes(e1),
        time_to_minutes(s2), time_to_minutes(e2),
    )


# ------------------------------------------------------------------
# Neither interval wraps
# ------------------------------------------------------------------

class TestSameDayIntervals:
    def test_touching_boundary_is_not_overlap(self):
        assert _overlap("09:00", "10:00", "10:00", "11:00") is False
        assert _overlap("10:00", "11:00", "09:00", "10:00") is False

    def test_partial_overlap(self):
        assert _overlap("09:00", "10:30", "10:00", "11:00") is True

    def test_containment(self):
        assert _overlap("09:00", "12:00", "10:00", "11:00") is True
        assert _overlap("10:00", "11:00", "09:00", "12:00") is True

    def test_disjoint(self):
        assert _overlap("08:00", "09:00", "13:00", "14:00") is False


# ------------------------------------------------------------------
# One or both intervals wrap past midnight
# ------------------------------------------------------------------

class TestWrappingIntervals:
    def test_candidate_wraps_existing_late_evening(self):
        assert _overlap("23:00", "01:00", "23:15", "23:45") is True

    def test_candidate_wraps_existing_early_morning(self):
        assert _overlap("23:00", "01:00", "00:15", "00:45") is True

    def test_candidate_wraps_existing_ends_on_candidate_end(self):
        assert _overlap("23:00", "01:00", "00:15", "01:00") is True

    def test_candidate_wraps_existing_midday(self):
        assert _overlap("23:00", "01:00", "12:00", "13:00") is False

    def test_candidate_wraps_existing_straddles_candidate_end(self):
        # Only the existing start/end against the candidate's segments is
        # checked, so an existing interval straddling the candidate's end
        # is not reported.
        assert _overlap("23:00", "01:00", "00:30", "02:00") is False

    def test_existing_wraps_candidate_late_evening(self):
        assert _overlap("23:30", "23:45", "23:00", "01:00") is True

    def test_existing_wraps_candidate_starts_on_existing_start(self):
        assert _overlap("23:00", "23:30", "23:00", "01:00") is True

    def test_existing_wraps_candidate_midday(self):
        assert _overlap("12:00", "13:00", "22:00", "02:00") is False

    def test_both_wrap_always_overlap(self):
        assert _overlap("23:00", "00:30", "23:50", "00:10") is True
        assert _overlap("22:00", "00:15", "23:59", "00:00") is True


# ------------------------------------------------------------------
# find_overlaps / has_overlap
# ------------------------------------------------------------------

class TestFindOverlaps:
    def test_empty_existing(self):
        assert find_overlaps("09:00", "10:00", []) == []
        assert has_overlap("09:00", "10:00", []) is False

    def test_returns_all_conflicts(self):
        existing = [
            _activity("08:00", "09:30", id="early"),
            _activity("09:45", "10:15", id="mid"),
            _activity("12:00", "13:00", id="lunch"),
        ]
        hits = find_overlaps("09:00", "10:00", existing)
        assert [a.id for a in hits] == ["early", "mid"]

    def test_exclude_id_skips_own_interval(self):
        existing = [_activity("09:00", "10:00", id="self")]
        assert has_overlap("09:00", "10:30", existing) is True
        assert has_overlap("09:00", "10:30", existing, exclude_id="self") is False

    def test_exclude_id_keeps_other_conflicts(self):
        existing = [
            _activity("09:00", "10:00", id="self"),
            _activity("10:15", "11:00", id="other"),
        ]
        hits = find_overlaps("09:00", "10:30", existing, exclude_id="self")
        assert [a.id for a in hits] == ["other"]

    def test_wrapping_candidate_against_day(self):
        existing = [
            _activity("07:00", "08:00", id="morning"),
            _activity("23:30", "23:45", id="late"),
        ]
        assert [a.id for a in find_overlaps("23:00", "01:00", existing)] == ["late"]
