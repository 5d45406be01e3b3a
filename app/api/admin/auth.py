"""관리자 인증 라우터 — 로그인, 토큰 갱신, 로그아웃, 내 정보.

Admin Auth Router — Login, token refresh, logout and profile endpoints.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user
from app.database import get_db
from app.models.user import User
from app.schemas.auth import LoginRequest, RefreshRequest, TokenResponse, UserMeResponse
from app.schemas.common import SuccessResponse, ok
from app.services.auth_service import auth_service

router: APIRouter = APIRouter()


@router.post("/login", response_model=SuccessResponse[TokenResponse])
async def login(
    data: LoginRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """로그인 — 회사 코드(선택) + 아이디 + 비밀번호.

    Login endpoint. company_code scopes the username lookup to one company.
    """
    result: TokenResponse = await auth_service.login(db, data)
    await db.commit()
    return ok(result)


@router.post("/refresh", response_model=SuccessResponse[TokenResponse])
async def refresh_token(
    data: RefreshRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """토큰 갱신 — 사용한 리프레시 토큰은 폐기되고 새 토큰 쌍 발급."""
    result: TokenResponse = await auth_service.refresh_tokens(db, data)
    await db.commit()
    return ok(result)


@router.post("/logout", status_code=204)
async def logout(
    data: RefreshRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> None:
    """로그아웃 — 리프레시 토큰 폐기."""
    await auth_service.logout(db, data.refresh_token)
    await db.commit()


@router.get("/me", response_model=SuccessResponse[UserMeResponse])
async def get_me(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    """현재 사용자 정보 — 회사, 역할 레벨, 연결된 직원 ID."""
    return ok(await auth_service.get_me(db, current_user))
