"""관리자 근무 라우터 — 근무 CRUD, 확정, 일괄 생성/복제, 충돌 검증, 패턴/추천.

Admin Shift Router — Shift CRUD, confirmation, bulk creation, duplication,
conflict pre-validation, patterns and suggestions. Admin level required.
"""

from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_admin
from app.config import settings
from app.database import get_db
from app.models.user import User
from app.schemas.common import PaginatedData, SuccessResponse, ok
from app.schemas.shift import (
    BulkOperationResult,
    BulkShiftCreate,
    ConflictCheckRequest,
    ConflictCheckResponse,
    PatternCleanupRequest,
    PatternCleanupResponse,
    ShiftCreate,
    ShiftDuplicateRequest,
    ShiftPatternResponse,
    ShiftResponse,
    ShiftStatus,
    ShiftSuggestion,
    ShiftUpdate,
    ShiftWriteResult,
)
from app.services.pattern_service import pattern_service
from app.services.shift_bulk_service import shift_bulk_service
from app.services.shift_service import shift_service

router: APIRouter = APIRouter()


@router.get("", response_model=SuccessResponse[PaginatedData[ShiftResponse]])
async def list_shifts(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
    employee_id: Annotated[UUID | None, Query()] = None,
    shift_date: Annotated[date | None, Query()] = None,
    date_from: Annotated[date | None, Query()] = None,
    date_to: Annotated[date | None, Query()] = None,
    status: Annotated[ShiftStatus | None, Query()] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=settings.SHIFT_LIST_MAX_PER_PAGE)] = 20,
) -> dict:
    """근무 목록 — 직원, 날짜, 기간(date_from~date_to), 상태 필터."""
    return ok(await shift_service.list_shifts(
        db, current_user.company_id,
        employee_id=employee_id,
        shift_date=shift_date,
        date_from=date_from,
        date_to=date_to,
        status=status,
        page=page,
        per_page=per_page,
    ))


@router.post("", response_model=SuccessResponse[ShiftWriteResult], status_code=201)
async def create_shift(
    data: ShiftCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> dict:
    """근무 생성 — 충돌/규칙 검증 후 저장, 경고는 응답에 포함."""
    result = await shift_service.create_shift(db, current_user.company_id, current_user.id, data)
    await db.commit()
    return ok(result)


@router.post("/validate-conflicts", response_model=SuccessResponse[ConflictCheckResponse])
async def validate_conflicts(
    data: ConflictCheckRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> dict:
    """충돌 사전 검증 — 저장 없이 후보 근무 분석."""
    result = await shift_service.validate_conflicts(db, current_user.company_id, data)
    # 설정 기본값이 새로 생성될 수 있음 — Lazily created settings row must persist
    await db.commit()
    return ok(result)


@router.post("/bulk-create", response_model=SuccessResponse[BulkOperationResult])
async def bulk_create_shifts(
    data: BulkShiftCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> dict:
    """근무 일괄 생성 — 직원 × 날짜, preview_only면 저장하지 않음."""
    result = await shift_bulk_service.bulk_create(db, current_user.company_id, current_user.id, data)
    await db.commit()
    return ok(result)


@router.post("/duplicate", response_model=SuccessResponse[BulkOperationResult])
async def duplicate_shifts(
    data: ShiftDuplicateRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> dict:
    """근무 복제 — 대상 직원/날짜로 원본 근무 시간 복사."""
    result = await shift_bulk_service.duplicate_shifts(db, current_user.company_id, current_user.id, data)
    await db.commit()
    return ok(result)


@router.get("/suggestions", response_model=SuccessResponse[list[ShiftSuggestion]])
async def get_suggestions(
    employee_id: Annotated[UUID, Query()],
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
    limit: Annotated[int, Query(ge=1, le=20)] = 5,
) -> dict:
    """근무 시간 추천 — 패턴, 최근 근무, 인기 템플릿 혼합."""
    return ok(await pattern_service.get_suggestions(db, current_user.company_id, employee_id, limit))


@router.get("/patterns/{employee_id}", response_model=SuccessResponse[list[ShiftPatternResponse]])
async def get_employee_patterns(
    employee_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
    limit: Annotated[int, Query(ge=1, le=50)] = 10,
) -> dict:
    return ok(await pattern_service.get_employee_patterns(db, current_user.company_id, employee_id, limit))


@router.post("/patterns/cleanup", response_model=SuccessResponse[PatternCleanupResponse])
async def cleanup_patterns(
    data: PatternCleanupRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> dict:
    """저빈도 오래된 패턴 정리 — 수동 유지보수."""
    deleted = await pattern_service.cleanup_old_patterns(
        db, current_user.company_id, data.max_frequency, data.older_than_days
    )
    await db.commit()
    return ok(PatternCleanupResponse(deleted_count=deleted))


@router.get("/{shift_id}", response_model=SuccessResponse[ShiftResponse])
async def get_shift(
    shift_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> dict:
    return ok(await shift_service.get_shift(db, current_user.company_id, shift_id))


@router.put("/{shift_id}", response_model=SuccessResponse[ShiftWriteResult])
async def update_shift(
    shift_id: UUID,
    data: ShiftUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> dict:
    result = await shift_service.update_shift(db, current_user.company_id, current_user.id, shift_id, data)
    await db.commit()
    return ok(result)


@router.delete("/{shift_id}", status_code=204)
async def delete_shift(
    shift_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> None:
    await shift_service.delete_shift(db, current_user.company_id, current_user.id, shift_id)
    await db.commit()


@router.post("/{shift_id}/confirm", response_model=SuccessResponse[ShiftResponse])
async def confirm_shift(
    shift_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> dict:
    result = await shift_service.confirm_shift(db, current_user.company_id, current_user.id, shift_id)
    await db.commit()
    return ok(result)
