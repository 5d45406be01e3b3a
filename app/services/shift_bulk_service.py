"""근무 일괄 생성/복제 서비스 — 후보 확장, 충돌 처리 전략, 단일 트랜잭션.

Shift Bulk Service — expands bulk-create (employees × dates) and
duplicate (source shifts × target employees × target dates) requests into
candidate shifts, plans them without writing, then applies the request's
conflict resolution strategy:

    fail      → any conflict or rule error aborts everything (409 aggregate)
    skip      → conflicting candidates are reported and left out
    overwrite → stored conflicting shifts are soft-deleted, then replaced

Planning loads each employee's shifts once for the whole date window and
checks every candidate against stored shifts plus the candidates accepted
before it, so two candidates in the same request cannot collide either.
"""

import logging
from datetime import date, time
from itertools import product
from typing import NamedTuple, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings as app_settings
from app.models.employee import Employee
from app.models.shift import SHIFT_STATUS_CONFIRMED, SHIFT_STATUS_PENDING, Shift
from app.repositories.audit_repository import audit_repository
from app.repositories.employee_repository import employee_repository
from app.repositories.shift_repository import shift_repository
from app.repositories.shift_template_repository import shift_template_repository
from app.schemas.shift import (
    BulkOperationResult,
    BulkShiftCreate,
    ConflictResolution,
    PreviewEntry,
    ShiftDuplicateRequest,
    SkippedShift,
)
from app.services.business_rules import evaluate_business_rules, rule_window
from app.services.company_settings_service import company_settings_service
from app.services.conflict_analyzer import ShiftSlot, analyze_conflicts
from app.services.ownership import ensure_all_owned
from app.services.pattern_service import pattern_service
from app.services.shift_service import flush_shift_writes, parse_shift_range, shift_service
from app.services.shift_template_service import shift_template_service
from app.utils.exceptions import (
    BadRequestError,
    BulkCreationConflictsDetectedError,
    DuplicationConflictsDetectedError,
)
from app.utils.time_utils import format_time, utc_now

logger = logging.getLogger(__name__)

_BLOCKING_TYPES: tuple[str, ...] = ("duplicate", "overlap")


class PlanCandidate(NamedTuple):
    employee_id: UUID
    shift_date: date
    start_time: time
    end_time: time
    note: str | None = None
    source_shift_id: UUID | None = None


class BulkPlan(NamedTuple):
    accepted: list[PlanCandidate]
    skipped: list[SkippedShift]
    preview: list[PreviewEntry]
    to_overwrite: list[Shift]


def _planned_fields(candidate: PlanCandidate) -> dict:
    return {
        "employee_id": str(candidate.employee_id),
        "shift_date": candidate.shift_date,
        "start_time": format_time(candidate.start_time),
        "end_time": format_time(candidate.end_time),
        "source_shift_id": str(candidate.source_shift_id) if candidate.source_shift_id else None,
    }


def _unique(values: Sequence) -> list:
    # 순서 유지 중복 제거 — Order-preserving de-duplication
    return list(dict.fromkeys(values))


class ShiftBulkService:

    async def _load_employees(
        self, db: AsyncSession, company_id: UUID, employee_ids: Sequence[UUID]
    ) -> dict[UUID, Employee]:
        employees = await employee_repository.get_many(db, employee_ids)
        by_id = ensure_all_owned(employees, employee_ids, company_id, "employee")
        inactive = [str(e.id) for e in employees if not e.is_active]
        if inactive:
            raise BadRequestError(
                "Cannot schedule shifts for inactive employees", {"employee_ids": inactive}
            )
        return by_id

    async def _plan(
        self,
        db: AsyncSession,
        company_id: UUID,
        candidates: Sequence[PlanCandidate],
        resolution: ConflictResolution,
    ) -> BulkPlan:
        """후보 근무 계획 — 쓰기 없이 충돌/규칙을 판정.

        Decide the fate of every candidate without writing anything.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            company_id: 요청자 회사 UUID (Caller's company)
            candidates: 확장된 후보 목록 (Expanded candidates, in request order)
            resolution: 충돌 처리 전략 (Conflict resolution strategy)

        Returns:
            BulkPlan: 승인 후보, 건너뛴 후보, 미리보기 항목, 덮어쓸 기존 근무
                      (Accepted, skipped, per-candidate preview, shifts to overwrite)
        """
        company_settings = await company_settings_service.get_settings(db, company_id)

        stored: dict[UUID, list[Shift]] = {}
        for employee_id in _unique([c.employee_id for c in candidates]):
            date_from, date_to = rule_window(c.shift_date for c in candidates if c.employee_id == employee_id)
            stored[employee_id] = await shift_repository.get_for_employee_between(
                db, employee_id, date_from, date_to
            )

        planned: dict[UUID, list[ShiftSlot]] = {employee_id: [] for employee_id in stored}
        overwritten: dict[UUID, Shift] = {}
        accepted: list[PlanCandidate] = []
        skipped: list[SkippedShift] = []
        preview: list[PreviewEntry] = []

        for index, candidate in enumerate(candidates):
            employee_stored = [s for s in stored[candidate.employee_id] if s.id not in overwritten]
            employee_planned = planned[candidate.employee_id]
            same_day = [
                s for s in (*employee_stored, *employee_planned) if s.shift_date == candidate.shift_date
            ]
            analysis = analyze_conflicts(candidate.start_time, candidate.end_time, same_day)
            validation = evaluate_business_rules(
                company_settings, candidate.shift_date, candidate.start_time, candidate.end_time,
                [*employee_stored, *employee_planned],
            )
            preview.append(PreviewEntry(
                **_planned_fields(candidate),
                has_conflicts=analysis.has_conflicts,
                conflict=analysis,
                validation=validation,
            ))

            if analysis.has_conflicts:
                blocking_ids = {
                    c.shift_id for c in analysis.conflicting_shifts if c.conflict_type in _BLOCKING_TYPES
                }
                stored_hits = [s for s in employee_stored if str(s.id) in blocking_ids]
                batch_hit = len(stored_hits) < len(blocking_ids)
                if resolution != "overwrite" or batch_hit:
                    skipped.append(SkippedShift(
                        **_planned_fields(candidate), reason="CONFLICT_DETECTED", conflict=analysis,
                    ))
                    continue
                # 덮어쓰기 — 기존 충돌 근무 제외 후 규칙 재평가 (Re-check rules without the replaced shifts)
                hit_ids = {s.id for s in stored_hits}
                remaining = [s for s in employee_stored if s.id not in hit_ids]
                validation = evaluate_business_rules(
                    company_settings, candidate.shift_date, candidate.start_time, candidate.end_time,
                    [*remaining, *employee_planned],
                )
                if validation.is_valid:
                    for shift in stored_hits:
                        overwritten[shift.id] = shift

            if not validation.is_valid:
                skipped.append(SkippedShift(
                    **_planned_fields(candidate),
                    reason="BUSINESS_RULE_VIOLATION",
                    violations=validation.violations,
                ))
                continue

            accepted.append(candidate)
            employee_planned.append(ShiftSlot(
                f"planned-{index}", candidate.shift_date, candidate.start_time, candidate.end_time
            ))

        return BulkPlan(accepted, skipped, preview, list(overwritten.values()))

    async def _execute(
        self,
        db: AsyncSession,
        company_id: UUID,
        user_id: UUID,
        plan: BulkPlan,
        status: str,
    ) -> tuple[list[Shift], list[str]]:
        overwritten_ids: list[str] = []
        for shift in plan.to_overwrite:
            await shift_repository.soft_delete(db, shift)
            overwritten_ids.append(str(shift.id))

        created: list[Shift] = []
        for candidate in plan.accepted:
            shift = Shift(
                company_id=company_id,
                employee_id=candidate.employee_id,
                shift_date=candidate.shift_date,
                start_time=candidate.start_time,
                end_time=candidate.end_time,
                note=candidate.note,
                status=status,
                created_by=user_id,
            )
            if status == SHIFT_STATUS_CONFIRMED:
                shift.confirmed_by = user_id
                shift.confirmed_at = utc_now()
            db.add(shift)
            created.append(shift)
        await flush_shift_writes(db)

        for shift in created:
            await pattern_service.update_employee_pattern(db, shift.employee_id, shift.start_time, shift.end_time)
        return created, overwritten_ids

    def _build_result(
        self,
        plan: BulkPlan,
        total: int,
        employees: dict[UUID, Employee],
        created: Sequence[Shift] = (),
        overwritten_ids: Sequence[str] = (),
        preview_only: bool = False,
    ) -> BulkOperationResult:
        names = {employee_id: e.full_name for employee_id, e in employees.items()}
        return BulkOperationResult(
            preview_only=preview_only,
            total_candidates=total,
            created_count=len(created),
            skipped_count=len(plan.skipped),
            created=[
                shift_service.to_response(s, names.get(s.employee_id)) for s in created
            ],
            skipped=plan.skipped,
            overwritten_shift_ids=list(overwritten_ids),
            preview=plan.preview if preview_only else [],
        )

    async def bulk_create(
        self,
        db: AsyncSession,
        company_id: UUID,
        user_id: UUID,
        data: BulkShiftCreate,
    ) -> BulkOperationResult:
        """근무 일괄 생성 — 직원 × 날짜 조합마다 같은 시간대 근무.

        Create one shift per (employee, date) pair with a fixed time range
        taken from the request or from a template.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            company_id: 요청자 회사 UUID (Caller's company)
            user_id: 요청자 UUID (Acting user)
            data: 일괄 생성 요청 (Bulk creation request)

        Returns:
            BulkOperationResult: 생성/건너뜀/덮어쓰기 결과 또는 미리보기
                                 (Created, skipped, overwritten, or preview)

        Raises:
            BulkCreationConflictsDetectedError: fail 전략에서 충돌 존재 (Any conflict under ``fail``)
            BadRequestError: 후보 수 초과 또는 비활성 직원 (Too many candidates, inactive employee)
        """
        template = None
        if data.template_id is not None:
            template = await shift_template_service.get_template(db, company_id, data.template_id)
            start, end = template.start_time, template.end_time
        else:
            start, end = parse_shift_range(data.start_time, data.end_time)

        employee_ids = _unique(data.employee_ids)
        dates = _unique(data.dates)
        total = len(employee_ids) * len(dates)
        if total > app_settings.BULK_MAX_CANDIDATES:
            raise BadRequestError(
                f"Too many shifts in one request ({total}); the limit is {app_settings.BULK_MAX_CANDIDATES}"
            )
        employees = await self._load_employees(db, company_id, employee_ids)

        candidates = [
            PlanCandidate(employee_id, shift_date, start, end, data.note)
            for employee_id, shift_date in product(employee_ids, dates)
        ]
        plan = await self._plan(db, company_id, candidates, data.conflict_resolution)

        if data.preview_only:
            return self._build_result(plan, total, employees, preview_only=True)
        if data.conflict_resolution == "fail" and plan.skipped:
            raise BulkCreationConflictsDetectedError([s.model_dump(mode="json") for s in plan.skipped])

        created, overwritten_ids = await self._execute(db, company_id, user_id, plan, data.status)
        if template is not None:
            await shift_template_repository.increment_usage(db, template)
        await audit_repository.record(
            db, company_id, user_id, "BULK_CREATE", "shift",
            new_values={
                "start_time": format_time(start),
                "end_time": format_time(end),
                "template_id": str(template.id) if template else None,
                "conflict_resolution": data.conflict_resolution,
                "created_ids": [str(s.id) for s in created],
                "skipped_count": len(plan.skipped),
                "overwritten_ids": overwritten_ids,
            },
        )
        logger.info(
            "Bulk create for company %s: %d candidate(s), %d created, %d skipped, %d overwritten",
            company_id, total, len(created), len(plan.skipped), len(overwritten_ids),
        )
        return self._build_result(plan, total, employees, created, overwritten_ids)

    async def duplicate_shifts(
        self,
        db: AsyncSession,
        company_id: UUID,
        user_id: UUID,
        data: ShiftDuplicateRequest,
    ) -> BulkOperationResult:
        """근무 복제 — 원본 근무를 대상 직원/날짜로 복사.

        Copy each source shift's time range to every (employee, date) pair
        built from the target lists, using the source's own employee or date
        on a preserved axis. Pairs equal to the source itself are skipped.

        Raises:
            DuplicationConflictsDetectedError: fail 전략에서 충돌 존재 (Any conflict under ``fail``)
            UnauthorizedCompanyAccessError: 다른 회사 근무/직원 (Foreign shift or employee)
            NotFoundError: 없거나 삭제된 근무/직원 (Missing or soft-deleted shift or employee)
            BadRequestError: 비활성 직원 (Inactive employee, including a preserved source employee)
        """
        source_ids = _unique(data.source_shift_ids)
        sources = await shift_repository.get_many(db, source_ids)
        by_id = ensure_all_owned(sources, source_ids, company_id, "shift")

        target_employee_ids = _unique(data.target_employee_ids or [])
        # 직원 유지 시 원본 직원이 곧 대상 — Preserved source employees are scheduled too
        scheduled_ids = target_employee_ids or _unique([s.employee_id for s in sources])
        employees = await self._load_employees(db, company_id, scheduled_ids)

        candidates: list[PlanCandidate] = []
        for source_id in source_ids:
            source = by_id[source_id]
            target_employees = target_employee_ids or [source.employee_id]
            target_dates = _unique(data.target_dates or [source.shift_date])
            for employee_id, shift_date in product(target_employees, target_dates):
                if employee_id == source.employee_id and shift_date == source.shift_date:
                    continue
                candidates.append(PlanCandidate(
                    employee_id, shift_date, source.start_time, source.end_time, source.note, source.id
                ))

        if len(candidates) > app_settings.BULK_MAX_CANDIDATES:
            raise BadRequestError(
                f"Too many shifts in one request ({len(candidates)}); "
                f"the limit is {app_settings.BULK_MAX_CANDIDATES}"
            )

        plan = await self._plan(db, company_id, candidates, data.conflict_resolution)
        if data.conflict_resolution == "fail" and plan.skipped:
            raise DuplicationConflictsDetectedError([s.model_dump(mode="json") for s in plan.skipped])

        created, overwritten_ids = await self._execute(
            db, company_id, user_id, plan, SHIFT_STATUS_PENDING
        )
        await audit_repository.record(
            db, company_id, user_id, "DUPLICATE", "shift",
            new_values={
                "source_shift_ids": [str(i) for i in source_ids],
                "conflict_resolution": data.conflict_resolution,
                "created_ids": [str(s.id) for s in created],
                "skipped_count": len(plan.skipped),
                "overwritten_ids": overwritten_ids,
            },
        )
        logger.info(
            "Duplicated %d source shift(s) for company %s: %d created, %d skipped, %d overwritten",
            len(source_ids), company_id, len(created), len(plan.skipped), len(overwritten_ids),
        )
        return self._build_result(plan, len(candidates), employees, created, overwritten_ids)


shift_bulk_service: ShiftBulkService = ShiftBulkService()
