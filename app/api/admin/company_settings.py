"""관리자 회사 설정 라우터 — 근무 규칙 한도 조회/수정.

Admin Company Settings Router. Any authenticated member may read the
settings; only admins may change them.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, require_admin
from app.database import get_db
from app.models.user import User
from app.schemas.common import SuccessResponse, ok
from app.schemas.company_settings import CompanySettingsResponse, CompanySettingsUpdate
from app.services.company_settings_service import company_settings_service

router: APIRouter = APIRouter()


@router.get("", response_model=SuccessResponse[CompanySettingsResponse])
async def get_company_settings(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    """회사 설정 조회 — 없으면 기본값으로 생성."""
    result = await company_settings_service.get_settings(db, current_user.company_id)
    await db.commit()
    return ok(result)


@router.patch("", response_model=SuccessResponse[CompanySettingsResponse])
async def update_company_settings(
    data: CompanySettingsUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> dict:
    """회사 설정 부분 수정 — 전달된 필드만 반영, 캐시 무효화."""
    result = await company_settings_service.update_settings(db, current_user.company_id, current_user.id, data)
    await db.commit()
    return ok(result)


@router.get("/defaults", response_model=SuccessResponse[dict])
async def get_default_settings(
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    return ok(company_settings_service.get_defaults())
