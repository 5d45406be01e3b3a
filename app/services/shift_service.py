"""근무 서비스 — 근무 생성/수정/삭제/확정 및 충돌 사전 검증.

Shift Service — single-shift lifecycle. Every write runs the same
pipeline: HH:mm parsing → overnight rejection → employee tenancy check →
conflict analysis (duplicate/overlap) → company business rules → insert,
pattern update and audit row, all inside the request's transaction.
"""

import logging
from datetime import date, time
from typing import Any, Iterable, Sequence
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.employee import Employee
from app.models.shift import SHIFT_STATUS_CANCELLED, SHIFT_STATUS_CONFIRMED, Shift
from app.repositories.audit_repository import audit_repository
from app.repositories.employee_repository import employee_repository
from app.repositories.shift_repository import shift_repository
from app.schemas.common import PaginatedData
from app.schemas.shift import (
    ConflictAnalysis,
    ConflictCheckRequest,
    ConflictCheckResponse,
    ConflictCheckResult,
    ShiftCreate,
    ShiftResponse,
    ShiftUpdate,
    ShiftValidationResult,
    ShiftWriteResult,
)
from app.services.business_rules import business_rule_service
from app.services.conflict_analyzer import ShiftSlot, analyze_conflicts
from app.services.ownership import get_owned_or_raise
from app.services.pattern_service import pattern_service
from app.utils.exceptions import (
    BadRequestError,
    BusinessRuleViolationError,
    OvernightNotAllowedError,
    ShiftDuplicateError,
    ShiftOverlapError,
    TransactionFailedError,
)
from app.utils.time_utils import duration_hours, format_time, is_overnight, parse_time, utc_now

logger = logging.getLogger(__name__)


async def flush_shift_writes(db: AsyncSession) -> None:
    """근무 쓰기 flush — 저장소 오류를 도메인 오류로 변환.

    Flush pending shift writes. A uniqueness violation (an exact duplicate
    that slipped past the pre-check under concurrent writers) becomes
    ShiftDuplicateError; any other storage failure becomes
    TransactionFailedError. get_db rolls the transaction back.

    Raises:
        ShiftDuplicateError: 유효 근무 유일성 위반 (Live-slot uniqueness violation)
        TransactionFailedError: 기타 저장소 오류 (Any other storage error)
    """
    try:
        await db.flush()
    except IntegrityError as exc:
        logger.warning("Shift uniqueness violation at flush: %s", exc.orig)
        raise ShiftDuplicateError({"detected_by": "storage_constraint"}) from exc
    except SQLAlchemyError as exc:
        logger.exception("Shift write failed")
        raise TransactionFailedError() from exc


def shift_snapshot(shift: Shift) -> dict[str, Any]:
    """감사 로그용 근무 값 — JSON-safe values for audit rows."""
    return {
        "employee_id": str(shift.employee_id),
        "shift_date": shift.shift_date.isoformat(),
        "start_time": format_time(shift.start_time),
        "end_time": format_time(shift.end_time),
        "status": shift.status,
        "note": shift.note,
    }


def ensure_status_transition(shift: Shift, new_status: str) -> None:
    if new_status == SHIFT_STATUS_CONFIRMED and shift.status == SHIFT_STATUS_CANCELLED:
        raise BadRequestError("Cancelled shifts cannot be confirmed")


def apply_status(shift: Shift, new_status: str, user_id: UUID) -> None:
    """상태 전이 — 확정자/확정 시각은 확정 상태에서만 유지.

    Raises:
        BadRequestError: 취소된 근무 확정 (Cancelled shifts cannot be confirmed)
    """
    ensure_status_transition(shift, new_status)
    shift.status = new_status
    if new_status == SHIFT_STATUS_CONFIRMED:
        shift.confirmed_by = user_id
        shift.confirmed_at = utc_now()
    else:
        shift.confirmed_by = None
        shift.confirmed_at = None


def parse_shift_range(start_value: str, end_value: str) -> tuple[time, time]:
    """HH:mm 구간 파싱 + 자정 넘김 거부.

    Raises:
        InvalidTimeFormatError: 형식 오류 (Malformed time)
        OvernightNotAllowedError: 종료가 시작보다 늦지 않음 (End not after start)
    """
    start = parse_time(start_value, "start_time")
    end = parse_time(end_value, "end_time")
    if is_overnight(start, end):
        raise OvernightNotAllowedError(start_value, end_value)
    return start, end


class ShiftService:

    def to_response(self, shift: Shift, employee_name: str | None = None) -> ShiftResponse:
        return ShiftResponse(
            id=str(shift.id),
            company_id=str(shift.company_id),
            employee_id=str(shift.employee_id),
            employee_name=employee_name,
            shift_date=shift.shift_date,
            start_time=format_time(shift.start_time),
            end_time=format_time(shift.end_time),
            duration_hours=duration_hours(shift.start_time, shift.end_time),
            note=shift.note,
            status=shift.status,
            created_by=str(shift.created_by) if shift.created_by else None,
            confirmed_by=str(shift.confirmed_by) if shift.confirmed_by else None,
            confirmed_at=shift.confirmed_at,
            created_at=shift.created_at,
            updated_at=shift.updated_at,
        )

    async def to_responses(self, db: AsyncSession, shifts: Sequence[Shift]) -> list[ShiftResponse]:
        """근무 목록 응답 — 직원 이름은 한 번의 조회로 채움."""
        employees = await employee_repository.get_many(db, list({s.employee_id for s in shifts}))
        names = {e.id: e.full_name for e in employees}
        return [self.to_response(s, names.get(s.employee_id)) for s in shifts]

    async def get_active_employee(self, db: AsyncSession, company_id: UUID, employee_id: UUID) -> Employee:
        """근무 배정 가능한 직원 — 소유 회사 검증, 비활성 직원 거부."""
        employee = await get_owned_or_raise(employee_repository, db, employee_id, company_id, "employee")
        if not employee.is_active:
            raise BadRequestError("Cannot schedule shifts for an inactive employee")
        return employee

    async def assess_candidate(
        self,
        db: AsyncSession,
        company_id: UUID,
        employee_id: UUID,
        shift_date: date,
        start: time,
        end: time,
        exclude_ids: Iterable[UUID] = (),
        extra_shifts: Sequence[ShiftSlot] = (),
    ) -> tuple[ConflictAnalysis, ShiftValidationResult]:
        """후보 근무의 충돌 분석과 규칙 검증 (쓰기 없음).

        Run the conflict analyzer on the employee's same-day shifts and the
        business rules on the surrounding window, without raising.
        """
        excluded = list(exclude_ids)
        same_day = await shift_repository.get_for_employee_between(
            db, employee_id, shift_date, shift_date, exclude_ids=excluded
        )
        same_day_extra = [s for s in extra_shifts if s.shift_date == shift_date]
        analysis = analyze_conflicts(start, end, [*same_day, *same_day_extra])
        validation = await business_rule_service.validate(
            db, company_id, employee_id, shift_date, start, end,
            exclude_shift_ids=excluded, extra_shifts=extra_shifts,
        )
        return analysis, validation

    async def _check_candidate(
        self,
        db: AsyncSession,
        company_id: UUID,
        employee_id: UUID,
        shift_date: date,
        start: time,
        end: time,
        exclude_ids: Iterable[UUID] = (),
    ) -> ShiftValidationResult:
        analysis, validation = await self.assess_candidate(
            db, company_id, employee_id, shift_date, start, end, exclude_ids
        )
        if analysis.conflict_type == "duplicate":
            raise ShiftDuplicateError({"conflict": analysis.model_dump(mode="json")})
        if analysis.has_conflicts:
            raise ShiftOverlapError(analysis.model_dump(mode="json"))
        if not validation.is_valid:
            raise BusinessRuleViolationError([v.model_dump() for v in validation.violations])
        return validation

    async def create_shift(
        self,
        db: AsyncSession,
        company_id: UUID,
        user_id: UUID,
        data: ShiftCreate,
    ) -> ShiftWriteResult:
        """근무를 생성합니다.

        Create a shift after the full validation pipeline, then record the
        employee's time pattern and an audit row.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            company_id: 요청자 회사 UUID (Caller's company)
            user_id: 요청자 UUID (Acting user)
            data: 근무 생성 데이터 (Shift creation data)

        Returns:
            ShiftWriteResult: 생성된 근무와 경고 (Created shift plus rule warnings)

        Raises:
            InvalidTimeFormatError: 시간 형식 오류 (Malformed HH:mm)
            OvernightNotAllowedError: 자정 넘김 근무 (End not after start)
            UnauthorizedCompanyAccessError: 다른 회사 직원 (Foreign employee)
            ShiftDuplicateError: 동일 근무 존재 (Exact duplicate)
            ShiftOverlapError: 기존 근무와 겹침 (Overlaps a stored shift)
            BusinessRuleViolationError: 회사 규칙 위반 (Error-severity rule violation)
        """
        start, end = parse_shift_range(data.start_time, data.end_time)
        employee = await self.get_active_employee(db, company_id, data.employee_id)
        validation = await self._check_candidate(db, company_id, employee.id, data.shift_date, start, end)

        shift = Shift(
            company_id=company_id,
            employee_id=employee.id,
            shift_date=data.shift_date,
            start_time=start,
            end_time=end,
            note=data.note,
            status=data.status,
            created_by=user_id,
        )
        if data.status == SHIFT_STATUS_CONFIRMED:
            shift.confirmed_by = user_id
            shift.confirmed_at = utc_now()
        db.add(shift)
        await flush_shift_writes(db)
        await db.refresh(shift)

        await pattern_service.update_employee_pattern(db, employee.id, start, end)
        await audit_repository.record(
            db, company_id, user_id, "CREATE", "shift", shift.id, new_values=shift_snapshot(shift)
        )
        logger.info(
            "Shift %s created for employee %s on %s %s-%s",
            shift.id, employee.id, data.shift_date, data.start_time, data.end_time,
        )
        return ShiftWriteResult(shift=self.to_response(shift, employee.full_name), warnings=validation.warnings)

    async def update_shift(
        self,
        db: AsyncSession,
        company_id: UUID,
        user_id: UUID,
        shift_id: UUID,
        data: ShiftUpdate,
    ) -> ShiftWriteResult:
        """근무를 수정합니다 (부분 업데이트).

        Partial update. When employee, date or times change the candidate is
        re-validated with the shift itself excluded.
        """
        shift = await get_owned_or_raise(shift_repository, db, shift_id, company_id, "shift")
        old_values = shift_snapshot(shift)
        update_data = data.model_dump(exclude_unset=True)
        new_status = update_data.get("status")
        if new_status is not None:
            ensure_status_transition(shift, new_status)

        employee_id = update_data.get("employee_id") or shift.employee_id
        shift_date = update_data.get("shift_date") or shift.shift_date
        start_value = update_data.get("start_time") or format_time(shift.start_time)
        end_value = update_data.get("end_time") or format_time(shift.end_time)

        warnings = []
        slot_changed = (
            employee_id != shift.employee_id
            or shift_date != shift.shift_date
            or "start_time" in update_data
            or "end_time" in update_data
        )
        employee_name: str | None = None
        if slot_changed:
            start, end = parse_shift_range(start_value, end_value)
            employee = await self.get_active_employee(db, company_id, employee_id)
            employee_name = employee.full_name
            validation = await self._check_candidate(
                db, company_id, employee.id, shift_date, start, end, exclude_ids=[shift.id]
            )
            warnings = validation.warnings
            shift.employee_id = employee.id
            shift.shift_date = shift_date
            shift.start_time = start
            shift.end_time = end

        if "note" in update_data:
            shift.note = update_data["note"]
        if new_status is not None and new_status != shift.status:
            apply_status(shift, new_status, user_id)

        await flush_shift_writes(db)
        await db.refresh(shift)
        await audit_repository.record(
            db, company_id, user_id, "UPDATE", "shift", shift.id,
            old_values=old_values, new_values=shift_snapshot(shift),
        )
        if employee_name is None:
            return ShiftWriteResult(shift=(await self.to_responses(db, [shift]))[0], warnings=warnings)
        return ShiftWriteResult(shift=self.to_response(shift, employee_name), warnings=warnings)

    async def delete_shift(self, db: AsyncSession, company_id: UUID, user_id: UUID, shift_id: UUID) -> None:
        """근무 소프트 삭제 — 물리 삭제 없음 (Soft delete only)."""
        shift = await get_owned_or_raise(shift_repository, db, shift_id, company_id, "shift")
        await shift_repository.soft_delete(db, shift)
        await audit_repository.record(
            db, company_id, user_id, "DELETE", "shift", shift.id, old_values=shift_snapshot(shift)
        )

    async def confirm_shift(
        self, db: AsyncSession, company_id: UUID, user_id: UUID, shift_id: UUID
    ) -> ShiftResponse:
        """근무 확정 — 상태, 확정자, 확정 시각 기록.

        Raises:
            BadRequestError: 취소된 근무 (Cancelled shifts cannot be confirmed)
        """
        shift = await get_owned_or_raise(shift_repository, db, shift_id, company_id, "shift")
        old_status = shift.status
        apply_status(shift, SHIFT_STATUS_CONFIRMED, user_id)
        await flush_shift_writes(db)
        await db.refresh(shift)
        await audit_repository.record(
            db, company_id, user_id, "CONFIRM", "shift", shift.id,
            old_values={"status": old_status}, new_values={"status": SHIFT_STATUS_CONFIRMED},
        )
        return (await self.to_responses(db, [shift]))[0]

    async def get_shift(self, db: AsyncSession, company_id: UUID, shift_id: UUID) -> ShiftResponse:
        shift = await get_owned_or_raise(shift_repository, db, shift_id, company_id, "shift")
        return (await self.to_responses(db, [shift]))[0]

    async def list_shifts(
        self,
        db: AsyncSession,
        company_id: UUID,
        employee_id: UUID | None = None,
        shift_date: date | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
        status: str | None = None,
        page: int = 1,
        per_page: int = 20,
    ) -> PaginatedData[ShiftResponse]:
        """회사 근무 목록 — 직원/날짜/기간/상태 필터, 페이지네이션.

        A foreign employee filter is rejected rather than returning an
        empty page.
        """
        if employee_id is not None:
            await get_owned_or_raise(employee_repository, db, employee_id, company_id, "employee")
        shifts, total = await shift_repository.get_by_filters(
            db, company_id,
            employee_id=employee_id,
            shift_date=shift_date,
            date_from=date_from,
            date_to=date_to,
            status=status,
            page=page,
            per_page=per_page,
        )
        return PaginatedData[ShiftResponse](
            items=await self.to_responses(db, shifts),
            total=total,
            page=page,
            per_page=per_page,
        )

    async def validate_conflicts(
        self,
        db: AsyncSession,
        company_id: UUID,
        data: ConflictCheckRequest,
    ) -> ConflictCheckResponse:
        """후보 근무 목록의 충돌/규칙 사전 검증 (저장하지 않음).

        Dry run for a list of candidates. Each candidate is checked against
        stored shifts and against earlier candidates of the same employee in
        the request. Overnight candidates are reported as rule errors instead
        of raising.
        """
        planned: dict[UUID, list[ShiftSlot]] = {}
        results: list[ConflictCheckResult] = []

        for index, item in enumerate(data.shifts):
            start = parse_time(item.start_time, "start_time")
            end = parse_time(item.end_time, "end_time")
            await get_owned_or_raise(employee_repository, db, item.employee_id, company_id, "employee")
            exclude = [item.exclude_shift_id] if item.exclude_shift_id else []

            earlier = planned.setdefault(item.employee_id, [])
            analysis, validation = await self.assess_candidate(
                db, company_id, item.employee_id, item.shift_date, start, end,
                exclude_ids=exclude, extra_shifts=earlier,
            )
            if not is_overnight(start, end):
                earlier.append(ShiftSlot(f"candidate-{index}", item.shift_date, start, end))

            results.append(ConflictCheckResult(
                index=index,
                employee_id=str(item.employee_id),
                shift_date=item.shift_date,
                start_time=item.start_time,
                end_time=item.end_time,
                conflict=analysis,
                validation=validation,
            ))

        return ConflictCheckResponse(
            has_conflicts=any(r.conflict.has_conflicts for r in results),
            has_blocking_violations=any(not r.validation.is_valid for r in results),
            results=results,
        )


shift_service: ShiftService = ShiftService()
