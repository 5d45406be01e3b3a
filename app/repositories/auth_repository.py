"""인증 레포지토리 — 리프레시 토큰 CRUD 및 사용자/역할 조회.

Auth Repository — Handles refresh token CRUD, user lookup by username and
role lookup by level.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import Select, delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.token import RefreshToken
from app.models.user import Role, User


class AuthRepository:
    """인증 관련 데이터베이스 쿼리를 담당하는 레포지토리.

    Repository handling authentication-related database queries.
    Manages refresh token lifecycle and user credential lookups.
    """

    async def get_user_by_username(
        self,
        db: AsyncSession,
        username: str,
        company_id: UUID | None = None,
    ) -> User | None:
        """사용자명으로 사용자를 조회합니다.

        Retrieve a user (with role) by username, optionally scoped to a company.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            username: 조회할 사용자명 (Username to look up)
            company_id: 회사 범위 필터, None이면 전체 검색
                        (Company scope filter; None searches all)

        Returns:
            User | None: 조회된 사용자 또는 None (Found user or None)
        """
        query: Select = (
            select(User)
            .options(selectinload(User.role))
            .where(User.username == username)
        )
        if company_id is not None:
            query = query.where(User.company_id == company_id)

        result = await db.execute(query)
        # 회사 코드 없이 같은 아이디가 여러 회사에 있으면 모호 → None
        # Ambiguous across companies without a company code → treat as not found
        users = list(result.scalars().all())
        return users[0] if len(users) == 1 else None

    async def get_user_with_role(self, db: AsyncSession, user_id: UUID) -> User | None:
        result = await db.execute(
            select(User).options(selectinload(User.role)).where(User.id == user_id)
        )
        return result.scalar_one_or_none()

    async def get_role_by_level(self, db: AsyncSession, company_id: UUID, level: int) -> Role | None:
        result = await db.execute(
            select(Role).where(Role.company_id == company_id, Role.level == level)
        )
        return result.scalar_one_or_none()

    async def create_refresh_token(
        self,
        db: AsyncSession,
        user_id: UUID,
        token: str,
        expires_at: datetime,
    ) -> RefreshToken:
        """새 리프레시 토큰 레코드를 생성합니다.

        Create a new refresh token record in the database.
        """
        db_token: RefreshToken = RefreshToken(
            user_id=user_id,
            token=token,
            expires_at=expires_at,
        )
        db.add(db_token)
        await db.flush()
        return db_token

    async def get_refresh_token(self, db: AsyncSession, token: str) -> RefreshToken | None:
        result = await db.execute(select(RefreshToken).where(RefreshToken.token == token))
        return result.scalar_one_or_none()

    async def delete_refresh_token(self, db: AsyncSession, token: str) -> bool:
        """리프레시 토큰을 삭제합니다 — 삭제 여부 반환 (Returns whether a row was removed)."""
        db_token: RefreshToken | None = await self.get_refresh_token(db, token)
        if db_token is None:
            return False

        await db.delete(db_token)
        await db.flush()
        return True

    async def delete_user_refresh_tokens(self, db: AsyncSession, user_id: UUID) -> None:
        """특정 사용자의 모든 리프레시 토큰을 삭제합니다.

        Delete all refresh tokens for a specific user (logout from all devices).
        """
        await db.execute(delete(RefreshToken).where(RefreshToken.user_id == user_id))
        await db.flush()


# 싱글턴 인스턴스 — Singleton instance
auth_repository: AuthRepository = AuthRepository()
