"""관리자 근무 템플릿 라우터 — Shift Template CRUD, 사용 통계.

Admin Shift Template Router — CRUD, usage statistics and manual usage bump.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_admin
from app.database import get_db
from app.models.user import User
from app.schemas.common import SuccessResponse, ok
from app.schemas.shift_template import (
    ShiftTemplateCreate,
    ShiftTemplateResponse,
    ShiftTemplateUpdate,
    ShiftTemplateUsageStatistics,
)
from app.services.shift_template_service import shift_template_service

router: APIRouter = APIRouter()


@router.get("", response_model=SuccessResponse[list[ShiftTemplateResponse]])
async def list_shift_templates(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> dict:
    return ok(await shift_template_service.list_templates(db, current_user.company_id))


@router.post("", response_model=SuccessResponse[ShiftTemplateResponse], status_code=201)
async def create_shift_template(
    data: ShiftTemplateCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> dict:
    result = await shift_template_service.create_template(db, current_user.company_id, current_user.id, data)
    await db.commit()
    return ok(result)


@router.get("/statistics", response_model=SuccessResponse[ShiftTemplateUsageStatistics])
async def get_template_statistics(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> dict:
    """템플릿 사용 통계 — 개수, 합계, 평균, 상위 5개."""
    return ok(await shift_template_service.get_usage_statistics(db, current_user.company_id))


@router.get("/{template_id}", response_model=SuccessResponse[ShiftTemplateResponse])
async def get_shift_template(
    template_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> dict:
    return ok(await shift_template_service.get_detail(db, current_user.company_id, template_id))


@router.put("/{template_id}", response_model=SuccessResponse[ShiftTemplateResponse])
async def update_shift_template(
    template_id: UUID,
    data: ShiftTemplateUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> dict:
    result = await shift_template_service.update_template(
        db, current_user.company_id, current_user.id, template_id, data
    )
    await db.commit()
    return ok(result)


@router.delete("/{template_id}", status_code=204)
async def delete_shift_template(
    template_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> None:
    await shift_template_service.delete_template(db, current_user.company_id, current_user.id, template_id)
    await db.commit()


@router.post("/{template_id}/increment-usage", response_model=SuccessResponse[ShiftTemplateResponse])
async def increment_template_usage(
    template_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> dict:
    result = await shift_template_service.increment_usage(db, current_user.company_id, template_id)
    await db.commit()
    return ok(result)
