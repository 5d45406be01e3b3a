"""관리자 감사 로그 라우터 — 변경 이력 조회 (읽기 전용).

Admin Audit Log Router — Read-only access to the company's audit trail.
Admin level required.
"""

from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_admin
from app.database import get_db
from app.models.user import User
from app.schemas.audit import AuditLogResponse, AuditStatisticsResponse, EntityHistoryResponse
from app.schemas.common import PaginatedData, SuccessResponse, ok
from app.services.audit_service import audit_service

router: APIRouter = APIRouter()


@router.get("", response_model=SuccessResponse[PaginatedData[AuditLogResponse]])
async def list_audit_logs(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
    user_id: Annotated[UUID | None, Query()] = None,
    action: Annotated[str | None, Query(max_length=50)] = None,
    entity_type: Annotated[str | None, Query(max_length=50)] = None,
    entity_id: Annotated[UUID | None, Query()] = None,
    start_date: Annotated[date | None, Query()] = None,
    end_date: Annotated[date | None, Query()] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=100)] = 50,
) -> dict:
    """감사 로그 목록 — 작업자, 작업, 대상, 기간(start_date~end_date) 필터."""
    return ok(await audit_service.list_logs(
        db, current_user.company_id,
        user_id=user_id,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        start_date=start_date,
        end_date=end_date,
        page=page,
        per_page=per_page,
    ))


@router.get("/recent", response_model=SuccessResponse[list[AuditLogResponse]])
async def get_recent_audit_logs(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
    limit: Annotated[int, Query(ge=1, le=50)] = 10,
) -> dict:
    return ok(await audit_service.get_recent(db, current_user.company_id, limit))


@router.get("/statistics", response_model=SuccessResponse[AuditStatisticsResponse])
async def get_audit_statistics(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
    start_date: Annotated[date | None, Query()] = None,
    end_date: Annotated[date | None, Query()] = None,
) -> dict:
    """작업 종류별 건수."""
    return ok(await audit_service.get_statistics(db, current_user.company_id, start_date, end_date))


@router.get("/entity/{entity_type}/{entity_id}", response_model=SuccessResponse[EntityHistoryResponse])
async def get_entity_history(
    entity_type: Annotated[str, Path(max_length=50)],
    entity_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> dict:
    return ok(await audit_service.get_entity_history(db, current_user.company_id, entity_type, entity_id))
