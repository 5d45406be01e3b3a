"""FastAPI 의존성 주입 모듈 — 인증 및 권한 검사.

FastAPI dependency injection module — Authentication and authorization.
Provides reusable dependencies for extracting the current user from JWT
and enforcing role-level access control on API endpoints.

Authentication Flow:
    1. 클라이언트가 Authorization: Bearer <token> 헤더를 전송
       (Client sends Authorization: Bearer <token> header)
    2. decode_token()이 JWT를 검증하고 페이로드를 반환
       (decode_token verifies JWT and returns payload)
    3. 페이로드의 "sub" 필드로 DB에서 사용자를 조회
       (User is fetched from DB using payload "sub" field)
    4. 사용자 활성 상태를 확인 (User active status is verified)

Authorization Flow (require_level):
    역할 레벨이 max_level 이하인지 확인, 아니면 403
    (Role level must be <= max_level, otherwise 403)
"""

from typing import Annotated, Awaitable, Callable
from uuid import UUID

import jwt
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.user import LEVEL_ADMIN, LEVEL_EMPLOYEE, LEVEL_OWNER, User
from app.repositories.auth_repository import auth_repository
from app.utils.exceptions import ForbiddenError, UnauthorizedError
from app.utils.jwt import decode_token

# HTTP Bearer 토큰 추출기 — 누락 시 직접 401 처리 (Missing header handled as 401 below)
security: HTTPBearer = HTTPBearer(auto_error=False)


async def get_current_user(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """JWT 토큰에서 현재 인증된 사용자를 추출합니다.

    Decode JWT from the Authorization header and return the authenticated user
    with its role loaded. The caller's tenant, id and role level are put on
    ``request.state`` for the request logging middleware.

    Raises:
        UnauthorizedError: 토큰 누락/무효/만료, 사용자 없음 또는 비활성
                           (Missing, invalid or expired token; unknown or inactive user)
    """
    if credentials is None:
        raise UnauthorizedError("Authentication required")
    try:
        payload: dict = decode_token(credentials.credentials)
    except jwt.InvalidTokenError:
        raise UnauthorizedError("Invalid or expired token")

    # 토큰 타입 검증 — Reject refresh tokens used as access tokens
    if payload.get("type") != "access":
        raise UnauthorizedError("Invalid token type")
    try:
        user_id = UUID(payload["sub"])
    except (KeyError, ValueError, TypeError):
        raise UnauthorizedError("Invalid token")

    user: User | None = await auth_repository.get_user_with_role(db, user_id)
    if user is None or not user.is_active:
        raise UnauthorizedError("User not found or inactive")

    request.state.company_id = str(user.company_id)
    request.state.user_id = str(user.id)
    request.state.role_level = user.role.level if user.role else None
    return user


def require_level(max_level: int) -> Callable[..., Awaitable[User]]:
    """역할 레벨 기반 권한 검사 의존성 팩토리.

    Dependency factory enforcing a maximum role level.
    Lower level = higher authority.

    Level hierarchy:
        1 = owner (최고 권한, highest authority)
        2 = admin
        3 = employee (최저 권한, lowest authority)

    Args:
        max_level: 허용되는 최대 역할 레벨 (Maximum allowed role level, inclusive)
    """
    async def _check(
        current_user: Annotated[User, Depends(get_current_user)],
    ) -> User:
        role = current_user.role
        if role is None or role.level > max_level:
            raise ForbiddenError("Insufficient permissions")
        return current_user
    return _check


# 편의 의존성 — Pre-configured level dependencies
require_owner = require_level(LEVEL_OWNER)        # Owner만 허용 (Owner only)
require_admin = require_level(LEVEL_ADMIN)        # Owner + Admin 허용 (Level <= 2)
require_member = require_level(LEVEL_EMPLOYEE)    # 모든 역할 (Any authenticated role)
