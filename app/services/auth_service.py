"""인증 서비스 — 로그인, 토큰 갱신, 로그아웃, 내 정보 조회.

Auth Service — Business logic for login, token refresh rotation, logout
and current-user lookup. Supplies the (user, company, employee, role)
context every shift operation runs under.
"""

import logging
from datetime import datetime, timedelta, timezone
from uuid import UUID

import jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.config import settings
from app.models.user import Role, User
from app.repositories.auth_repository import auth_repository
from app.repositories.company_repository import company_repository
from app.repositories.employee_repository import employee_repository
from app.schemas.auth import LoginRequest, RefreshRequest, TokenResponse, UserMeResponse
from app.utils.exceptions import NotFoundError, UnauthorizedError
from app.utils.jwt import create_access_token, create_refresh_token, decode_token
from app.utils.password import verify_password

logger = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    # SQLite는 tz 정보 없이 반환 — SQLite hands back naive datetimes
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


class AuthService:
    """인증 관련 비즈니스 로직을 처리하는 서비스.

    Service handling authentication business logic.
    Manages login, refresh-token rotation, and logout.
    """

    async def resolve_company_code(
        self,
        db: AsyncSession,
        company_code: str | None,
    ) -> UUID | None:
        """회사 코드를 회사 UUID로 변환합니다.

        Resolve a company code to a company UUID.

        Raises:
            NotFoundError: 유효하지 않은 회사 코드일 때 (Invalid company code)
        """
        if company_code is None:
            return None
        company = await company_repository.get_active_by_code(db, company_code)
        if company is None:
            raise NotFoundError("Invalid company code")
        return company.id

    def _build_jwt_payload(self, user: User, role: Role) -> dict[str, str | int]:
        return {
            "sub": str(user.id),
            "company": str(user.company_id),
            "role": role.name,
            "level": role.level,
        }

    async def _generate_tokens(
        self,
        db: AsyncSession,
        user: User,
        role: Role,
    ) -> TokenResponse:
        """액세스 토큰과 리프레시 토큰을 생성합니다.

        Generate an access/refresh token pair and persist the refresh token.
        Earlier refresh tokens of the user are revoked.
        """
        payload: dict[str, str | int] = self._build_jwt_payload(user, role)
        access_token: str = create_access_token(payload)
        refresh_token: str = create_refresh_token(payload)

        # 기존 리프레시 토큰 정리 — Clean up old refresh tokens to prevent accumulation
        await auth_repository.delete_user_refresh_tokens(db, user.id)

        expires_at: datetime = datetime.now(timezone.utc) + timedelta(
            days=settings.JWT_REFRESH_TOKEN_EXPIRE_DAYS
        )
        await auth_repository.create_refresh_token(
            db, user_id=user.id, token=refresh_token, expires_at=expires_at
        )

        return TokenResponse(access_token=access_token, refresh_token=refresh_token)

    async def login(self, db: AsyncSession, data: LoginRequest) -> TokenResponse:
        """로그인을 처리합니다.

        Process login for any role. Without a company code the username
        must be unique across companies.

        Raises:
            NotFoundError: 회사 코드가 유효하지 않을 때 (Invalid company code)
            UnauthorizedError: 잘못된 인증 정보 또는 비활성 계정 (Invalid credentials or inactive)
        """
        company_id = await self.resolve_company_code(db, data.company_code)
        user: User | None = await auth_repository.get_user_by_username(db, data.username, company_id)
        if user is None or not verify_password(data.password, user.password_hash):
            logger.info("Failed login for username %r", data.username)
            raise UnauthorizedError("Invalid username or password")

        if not user.is_active:
            raise UnauthorizedError("Account is deactivated")

        return await self._generate_tokens(db, user, user.role)

    async def refresh_tokens(
        self,
        db: AsyncSession,
        data: RefreshRequest,
    ) -> TokenResponse:
        """리프레시 토큰으로 새 토큰 쌍을 발급합니다 (사용한 토큰은 폐기).

        Rotate: the presented refresh token is revoked and a new pair issued.

        Raises:
            UnauthorizedError: 유효하지 않거나 만료된 리프레시 토큰일 때
                               (Invalid or expired refresh token)
        """
        db_token = await auth_repository.get_refresh_token(db, data.refresh_token)
        if db_token is None:
            raise UnauthorizedError("Invalid refresh token")

        if _as_utc(db_token.expires_at) < datetime.now(timezone.utc):
            await auth_repository.delete_refresh_token(db, data.refresh_token)
            raise UnauthorizedError("Refresh token has expired")

        try:
            payload: dict = decode_token(data.refresh_token)
        except jwt.InvalidTokenError:
            await auth_repository.delete_refresh_token(db, data.refresh_token)
            raise UnauthorizedError("Invalid refresh token")

        user_id: str | None = payload.get("sub")
        if user_id is None or payload.get("type") != "refresh":
            raise UnauthorizedError("Invalid refresh token payload")

        user: User | None = await auth_repository.get_user_with_role(db, UUID(user_id))
        if user is None or not user.is_active:
            raise UnauthorizedError("User not found or inactive")

        await auth_repository.delete_refresh_token(db, data.refresh_token)
        return await self._generate_tokens(db, user, user.role)

    async def logout(self, db: AsyncSession, refresh_token: str) -> None:
        """로그아웃 처리 — 리프레시 토큰을 삭제합니다."""
        await auth_repository.delete_refresh_token(db, refresh_token)

    async def get_me(self, db: AsyncSession, user: User) -> UserMeResponse:
        """현재 로그인한 사용자 정보를 반환합니다.

        Return the authenticated user's context: company, role level and
        linked employee id (if the login belongs to an employee).
        """
        result = await db.execute(
            select(User)
            .options(selectinload(User.role), selectinload(User.company))
            .where(User.id == user.id)
        )
        loaded_user: User | None = result.scalar_one_or_none()
        if loaded_user is None:
            raise NotFoundError("User not found")

        employee = await employee_repository.get_by_user_id(db, loaded_user.id)
        return UserMeResponse(
            id=str(loaded_user.id),
            username=loaded_user.username,
            full_name=loaded_user.full_name,
            email=loaded_user.email,
            role_name=loaded_user.role.name,
            role_level=loaded_user.role.level,
            company_id=str(loaded_user.company_id),
            company_name=loaded_user.company.name,
            company_code=loaded_user.company.code,
            employee_id=str(employee.id) if employee else None,
            is_active=loaded_user.is_active,
        )


# 싱글턴 인스턴스 — Singleton instance
auth_service: AuthService = AuthService()
