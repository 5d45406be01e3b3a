"""충돌 분석기 테스트 — 중복/겹침/인접 분류와 심각도.

Conflict analyzer tests. Ranges are half-open, so back-to-back shifts
never overlap.
"""

from datetime import date, time

from app.services.conflict_analyzer import (
    ShiftSlot,
    analyze_conflicts,
    gap_minutes,
    overlap_minutes,
    overlap_severity,
    ranges_overlap,
)

DAY = date(2024, 6, 12)


def slot(slot_id: str, start: time, end: time) -> ShiftSlot:
    return ShiftSlot(slot_id, DAY, start, end)


class TestRangeMath:

    def test_touching_ranges_do_not_overlap(self):
        assert not ranges_overlap(time(9), time(13), time(13), time(17))
        assert overlap_minutes(time(9), time(13), time(13), time(17)) == 0

    def test_overlap_minutes(self):
        assert overlap_minutes(time(9), time(13), time(12), time(17)) == 60
        assert overlap_minutes(time(9), time(17), time(10), time(11)) == 60

    def test_gap_minutes_either_direction(self):
        assert gap_minutes(time(9), time(12), time(12, 20), time(15)) == 20
        assert gap_minutes(time(12, 20), time(15), time(9), time(12)) == 20

    def test_severity_thresholds(self):
        assert overlap_severity(240) == "high"
        assert overlap_severity(239) == "medium"
        assert overlap_severity(60) == "medium"
        assert overlap_severity(59) == "low"


class TestAnalyzeConflicts:

    def test_no_existing_shifts(self):
        analysis = analyze_conflicts(time(9), time(17), [])
        assert not analysis.has_conflicts
        assert analysis.conflict_type is None
        assert analysis.conflicting_shifts == []

    def test_back_to_back_is_not_a_conflict(self):
        """09-13 이후 13-17 — 겹침 아님, 간격 0분 인접으로만 보고."""
        analysis = analyze_conflicts(time(13), time(17), [slot("a", time(9), time(13))])
        assert not analysis.has_conflicts
        assert analysis.conflict_type == "adjacent"
        assert analysis.severity == "low"
        assert analysis.conflicting_shifts[0].gap_minutes == 0

    def test_distant_shift_is_ignored(self):
        analysis = analyze_conflicts(time(14), time(18), [slot("a", time(8), time(12))])
        assert not analysis.has_conflicts
        assert analysis.conflict_type is None

    def test_gap_of_thirty_minutes_is_not_adjacent(self):
        analysis = analyze_conflicts(time(12, 30), time(16), [slot("a", time(8), time(12))])
        assert analysis.conflict_type is None

    def test_duplicate(self):
        analysis = analyze_conflicts(time(9), time(17), [slot("a", time(9), time(17))])
        assert analysis.has_conflicts
        assert analysis.conflict_type == "duplicate"
        assert analysis.severity == "high"
        assert analysis.conflicting_shifts[0].shift_id == "a"
        assert analysis.conflicting_shifts[0].overlap_minutes == 480

    def test_high_overlap(self):
        analysis = analyze_conflicts(time(9), time(17), [slot("a", time(10), time(16))])
        assert analysis.conflict_type == "overlap"
        assert analysis.severity == "high"
        assert analysis.conflicting_shifts[0].overlap_minutes == 360

    def test_medium_overlap(self):
        analysis = analyze_conflicts(time(9), time(13), [slot("a", time(12), time(17))])
        assert analysis.conflict_type == "overlap"
        assert analysis.severity == "medium"

    def test_low_overlap(self):
        analysis = analyze_conflicts(time(9), time(13), [slot("a", time(12, 30), time(17))])
        assert analysis.has_conflicts
        assert analysis.severity == "low"
        assert analysis.conflicting_shifts[0].overlap_minutes == 30

    def test_duplicate_outranks_overlap(self):
        existing = [slot("over", time(8), time(10)), slot("dup", time(9), time(17))]
        analysis = analyze_conflicts(time(9), time(17), existing)
        assert analysis.conflict_type == "duplicate"
        assert {c.shift_id for c in analysis.conflicting_shifts} == {"over", "dup"}

    def test_suggestions_are_unique(self):
        existing = [slot("a", time(8), time(10)), slot("b", time(15), time(18))]
        analysis = analyze_conflicts(time(9), time(16), existing)
        assert analysis.suggestions
        assert len(analysis.suggestions) == len(set(analysis.suggestions))

    def test_conflict_carries_shift_date(self):
        analysis = analyze_conflicts(time(9), time(17), [slot("a", time(9), time(17))])
        assert analysis.conflicting_shifts[0].shift_date == DAY
