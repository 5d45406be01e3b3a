"""근무 관련 Pydantic 요청/응답 스키마 정의.

Shift-related Pydantic request/response schemas: single shift CRUD,
conflict analysis and rule validation results, bulk creation,
duplication, and pattern suggestions.

Times are "HH:mm" strings at the boundary; the service layer parses them so
malformed input surfaces as INVALID_TIME_FORMAT rather than a generic
validation error.
"""

from datetime import date, datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

ConflictResolution = Literal["fail", "skip", "overwrite"]
ConflictType = Literal["duplicate", "overlap", "adjacent"]
Severity = Literal["low", "medium", "high"]
ShiftStatus = Literal["pending", "confirmed", "cancelled"]


# === 단건 근무 (Single shift) ===

class ShiftCreate(BaseModel):
    """근무 생성 요청 스키마.

    Attributes:
        employee_id: 대상 직원 UUID (Employee to schedule)
        shift_date: 근무 날짜 (Calendar date)
        start_time: 시작 시각 "HH:mm" UTC (Start time)
        end_time: 종료 시각 "HH:mm" UTC (End time, strictly after start)
        note: 메모 (Optional note)
        status: 초기 상태 (Initial status, default pending)
    """

    employee_id: UUID
    shift_date: date
    start_time: str  # "HH:mm"
    end_time: str  # "HH:mm"
    note: str | None = Field(default=None, max_length=1000)
    status: Literal["pending", "confirmed"] = "pending"


class ShiftUpdate(BaseModel):
    """근무 수정 요청 스키마 (부분 업데이트).

    Partial update; when any of employee/date/times change the full
    conflict and rule checks run again, excluding the shift itself.
    """

    employee_id: UUID | None = None
    shift_date: date | None = None
    start_time: str | None = None
    end_time: str | None = None
    note: str | None = Field(default=None, max_length=1000)
    status: ShiftStatus | None = None


class ShiftResponse(BaseModel):
    id: str
    company_id: str
    employee_id: str
    employee_name: str | None = None
    shift_date: date
    start_time: str
    end_time: str
    duration_hours: float
    note: str | None
    status: str
    created_by: str | None
    confirmed_by: str | None
    confirmed_at: datetime | None
    created_at: datetime
    updated_at: datetime


# === 충돌 분석 / 규칙 검증 (Conflict analysis / rule validation) ===

class ConflictingShift(BaseModel):
    """충돌 대상 근무 — 기존 근무와의 관계 주석 포함."""

    shift_id: str
    shift_date: date | None = None
    start_time: str
    end_time: str
    conflict_type: ConflictType
    overlap_minutes: int = 0
    gap_minutes: int | None = None


class ConflictAnalysis(BaseModel):
    """충돌 분석 결과.

    Attributes:
        has_conflicts: 중복 또는 겹침 존재 여부 (True only for duplicate/overlap)
        conflict_type: 가장 우선순위 높은 유형 (Highest-priority type found, or None)
        severity: 심각도 (Severity of that type)
        conflicting_shifts: 관련 근무 목록 (Annotated related shifts)
        suggestions: 해결 제안, 중복 제거됨 (De-duplicated resolution hints)
    """

    has_conflicts: bool = False
    conflict_type: ConflictType | None = None
    severity: Severity | None = None
    conflicting_shifts: list[ConflictingShift] = []
    suggestions: list[str] = []


class RuleViolation(BaseModel):
    rule: str
    severity: Literal["error", "warning"]
    message: str


class ShiftValidationResult(BaseModel):
    """회사 규칙 검증 결과 — error만 작업을 막고 warning은 참고용.

    Only error-severity violations make ``is_valid`` false.
    """

    is_valid: bool
    violations: list[RuleViolation] = []
    daily_hours: float | None = None
    weekly_hours: float | None = None

    @property
    def errors(self) -> list[RuleViolation]:
        return [v for v in self.violations if v.severity == "error"]

    @property
    def warnings(self) -> list[RuleViolation]:
        return [v for v in self.violations if v.severity == "warning"]


class ShiftWriteResult(BaseModel):
    """근무 생성/수정 결과 — 저장된 근무와 비차단 경고."""

    shift: ShiftResponse
    warnings: list[RuleViolation] = []


class ConflictCheckItem(BaseModel):
    employee_id: UUID
    shift_date: date
    start_time: str
    end_time: str
    exclude_shift_id: UUID | None = None  # 수정 시 자기 자신 제외 (Self-exclusion when editing)


class ConflictCheckRequest(BaseModel):
    shifts: list[ConflictCheckItem] = Field(..., min_length=1, max_length=100)


class ConflictCheckResult(BaseModel):
    index: int
    employee_id: str
    shift_date: date
    start_time: str
    end_time: str
    conflict: ConflictAnalysis
    validation: ShiftValidationResult


class ConflictCheckResponse(BaseModel):
    has_conflicts: bool
    has_blocking_violations: bool
    results: list[ConflictCheckResult]


# === 일괄 생성 / 복제 (Bulk creation / duplication) ===

class BulkShiftCreate(BaseModel):
    """근무 일괄 생성 요청 — 직원 × 날짜 조합마다 같은 시간대로 생성.

    Exactly one of (start_time and end_time) or template_id must be given.
    """

    employee_ids: list[UUID] = Field(..., min_length=1)
    dates: list[date] = Field(..., min_length=1)
    start_time: str | None = None
    end_time: str | None = None
    template_id: UUID | None = None
    note: str | None = Field(default=None, max_length=1000)
    status: Literal["pending", "confirmed"] = "pending"
    conflict_resolution: ConflictResolution = "fail"
    preview_only: bool = False

    @model_validator(mode="after")
    def _check_time_source(self) -> "BulkShiftCreate":
        has_times = self.start_time is not None or self.end_time is not None
        if self.template_id is not None and has_times:
            raise ValueError("Provide either template_id or start_time/end_time, not both")
        if self.template_id is None and (self.start_time is None or self.end_time is None):
            raise ValueError("start_time and end_time are required when template_id is not given")
        return self


class ShiftDuplicateRequest(BaseModel):
    """근무 복제 요청.

    Each axis takes exactly one source: the employee axis uses
    target_employee_ids or preserve_employee, the date axis uses target_dates
    or preserve_date. At least one target list is required.
    """

    source_shift_ids: list[UUID] = Field(..., min_length=1)
    target_dates: list[date] | None = None
    target_employee_ids: list[UUID] | None = None
    preserve_employee: bool = False
    preserve_date: bool = False
    conflict_resolution: ConflictResolution = "fail"

    @model_validator(mode="after")
    def _check_axes(self) -> "ShiftDuplicateRequest":
        if not self.target_dates and not self.target_employee_ids:
            raise ValueError("At least one of target_dates or target_employee_ids is required")
        if bool(self.target_dates) == self.preserve_date:
            raise ValueError("Provide exactly one of target_dates or preserve_date=true")
        if bool(self.target_employee_ids) == self.preserve_employee:
            raise ValueError("Provide exactly one of target_employee_ids or preserve_employee=true")
        return self


class PlannedShift(BaseModel):
    """계획된 후보 근무 (미리보기/결과 보고용)."""

    employee_id: str
    shift_date: date
    start_time: str
    end_time: str
    source_shift_id: str | None = None


class SkippedShift(PlannedShift):
    reason: Literal["CONFLICT_DETECTED", "BUSINESS_RULE_VIOLATION"]
    conflict: ConflictAnalysis | None = None
    violations: list[RuleViolation] = []


class PreviewEntry(PlannedShift):
    has_conflicts: bool
    conflict: ConflictAnalysis
    validation: ShiftValidationResult


class BulkOperationResult(BaseModel):
    """일괄 생성/복제 결과.

    Attributes:
        created: 생성된 근무 (Persisted shifts; empty in preview mode)
        skipped: 건너뛴 후보와 사유 (Skipped candidates with reasons)
        overwritten_shift_ids: 덮어쓰기로 삭제된 기존 근무 (Soft-deleted by overwrite)
        preview: 미리보기 항목 (Per-candidate analysis in preview mode)
    """

    preview_only: bool = False
    total_candidates: int
    created_count: int = 0
    skipped_count: int = 0
    created: list[ShiftResponse] = []
    skipped: list[SkippedShift] = []
    overwritten_shift_ids: list[str] = []
    preview: list[PreviewEntry] = []


# === 패턴 / 추천 (Patterns / suggestions) ===

class ShiftPatternResponse(BaseModel):
    id: str
    employee_id: str
    start_time: str
    end_time: str
    frequency_count: int
    last_used: datetime


class ShiftSuggestion(BaseModel):
    """근무 시간 추천 — 출처와 신뢰도 포함."""

    start_time: str
    end_time: str
    duration_hours: float
    source: Literal["pattern", "recent", "template"]
    confidence: int
    label: str | None = None  # 템플릿 이름 등 (Template name for template suggestions)
    frequency_count: int | None = None


class PatternCleanupRequest(BaseModel):
    max_frequency: int = Field(default=1, ge=1, le=1000)
    older_than_days: int = Field(default=90, ge=1, le=3650)


class PatternCleanupResponse(BaseModel):
    deleted_count: int
