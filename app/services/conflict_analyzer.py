"""근무 충돌 분석기 — 순수 함수, DB 접근 없음.

Shift conflict analyzer. Given a candidate time range and the employee's
other shifts on the same date, classifies the relationship as duplicate,
overlap or adjacent and attaches a severity and resolution hints.

Ranges are half-open ``[start, end)``: 09:00-13:00 and 13:00-17:00 touch
but do not overlap.
"""

from datetime import date, time
from typing import Iterable, NamedTuple, Protocol

from app.schemas.shift import ConflictAnalysis, ConflictingShift
from app.utils.time_utils import format_time, to_minutes

# 겹침 심각도 기준(분) — Overlap severity thresholds in minutes
HIGH_OVERLAP_MINUTES: int = 240
MEDIUM_OVERLAP_MINUTES: int = 60

# 인접 근무 판정 — Gaps shorter than this are reported as adjacent
ADJACENT_FLAG_MINUTES: int = 30

_SUGGESTIONS: dict[tuple[str, str], list[str]] = {
    ("duplicate", "high"): [
        "Change the start or end time of the new shift",
        "Remove the existing duplicate shift",
    ],
    ("overlap", "high"): [
        "Most of the shift overlaps an existing one; pick a different time range",
        "Assign the shift to another employee",
        "Remove or shorten the existing shift",
    ],
    ("overlap", "medium"): [
        "Shift the start or end time to remove the overlap",
        "Assign the shift to another employee",
    ],
    ("overlap", "low"): [
        "Adjust the start or end time by a few minutes to remove the overlap",
    ],
    ("adjacent", "low"): [
        "Shifts are back to back; review break time between them",
    ],
}

_SEVERITY_RANK: dict[str, int] = {"low": 1, "medium": 2, "high": 3}
_TYPE_RANK: dict[str, int] = {"adjacent": 1, "overlap": 2, "duplicate": 3}


class TimeRange(Protocol):
    id: object
    start_time: time
    end_time: time


class ShiftSlot(NamedTuple):
    """저장 전 후보 근무 — 일괄 작업 중 ORM Shift 와 함께 비교 대상으로 사용.

    A not-yet-persisted shift; duck-types with ``Shift`` for analysis.
    """

    id: object
    shift_date: date
    start_time: time
    end_time: time


def ranges_overlap(start_a: time, end_a: time, start_b: time, end_b: time) -> bool:
    """반개구간 겹침 여부 — ``s1 < e2 and s2 < e1``."""
    return to_minutes(start_a) < to_minutes(end_b) and to_minutes(start_b) < to_minutes(end_a)


def overlap_minutes(start_a: time, end_a: time, start_b: time, end_b: time) -> int:
    """겹치는 분 수 (겹치지 않으면 0)."""
    lo = max(to_minutes(start_a), to_minutes(start_b))
    hi = min(to_minutes(end_a), to_minutes(end_b))
    return max(0, hi - lo)


def gap_minutes(start_a: time, end_a: time, start_b: time, end_b: time) -> int:
    """두 구간 사이 간격(분) — 양방향 간격의 최솟값."""
    return min(
        abs(to_minutes(start_a) - to_minutes(end_b)),
        abs(to_minutes(start_b) - to_minutes(end_a)),
    )


def overlap_severity(minutes: int) -> str:
    if minutes >= HIGH_OVERLAP_MINUTES:
        return "high"
    if minutes >= MEDIUM_OVERLAP_MINUTES:
        return "medium"
    return "low"


def analyze_conflicts(start: time, end: time, existing: Iterable[TimeRange]) -> ConflictAnalysis:
    """후보 근무와 기존 근무 간 충돌을 분석합니다.

    Analyze a candidate range against the employee's same-day shifts.

    Each existing shift is classified in priority order: duplicate (identical
    range), overlap (intersecting range) or adjacent (gap under 30 minutes).
    The result reports the highest-ranked type and severity found; only
    duplicates and overlaps set ``has_conflicts``.

    Args:
        start: 후보 시작 시각 (Candidate start)
        end: 후보 종료 시각 (Candidate end)
        existing: 같은 직원, 같은 날짜의 다른 근무 (Same employee, same date)

    Returns:
        ConflictAnalysis: 분석 결과 (Classification, related shifts, hints)
    """
    related: list[ConflictingShift] = []
    found: list[tuple[str, str]] = []

    for shift in existing:
        shift_date = getattr(shift, "shift_date", None)
        if shift.start_time == start and shift.end_time == end:
            kind, severity = "duplicate", "high"
            entry = ConflictingShift(
                shift_id=str(shift.id),
                shift_date=shift_date,
                start_time=format_time(shift.start_time),
                end_time=format_time(shift.end_time),
                conflict_type=kind,
                overlap_minutes=overlap_minutes(start, end, shift.start_time, shift.end_time),
            )
        elif ranges_overlap(start, end, shift.start_time, shift.end_time):
            minutes = overlap_minutes(start, end, shift.start_time, shift.end_time)
            kind, severity = "overlap", overlap_severity(minutes)
            entry = ConflictingShift(
                shift_id=str(shift.id),
                shift_date=shift_date,
                start_time=format_time(shift.start_time),
                end_time=format_time(shift.end_time),
                conflict_type=kind,
                overlap_minutes=minutes,
            )
        else:
            gap = gap_minutes(start, end, shift.start_time, shift.end_time)
            if gap >= ADJACENT_FLAG_MINUTES:
                continue
            kind, severity = "adjacent", "low"
            entry = ConflictingShift(
                shift_id=str(shift.id),
                shift_date=shift_date,
                start_time=format_time(shift.start_time),
                end_time=format_time(shift.end_time),
                conflict_type=kind,
                gap_minutes=gap,
            )
        related.append(entry)
        found.append((kind, severity))

    if not related:
        return ConflictAnalysis()

    top_type, top_severity = max(found, key=lambda item: (_TYPE_RANK[item[0]], _SEVERITY_RANK[item[1]]))

    # 제안 문구 중복 제거, 순서 유지 — De-duplicate hints, first occurrence wins
    suggestions: list[str] = []
    for item in sorted(set(found), key=lambda i: (-_TYPE_RANK[i[0]], -_SEVERITY_RANK[i[1]])):
        for hint in _SUGGESTIONS[item]:
            if hint not in suggestions:
                suggestions.append(hint)

    return ConflictAnalysis(
        has_conflicts=top_type in ("duplicate", "overlap"),
        conflict_type=top_type,
        severity=top_severity,
        conflicting_shifts=related,
        suggestions=suggestions,
    )
