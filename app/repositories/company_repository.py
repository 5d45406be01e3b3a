"""회사 레포지토리 — 회사 및 회사 설정 조회.

Company Repository — Company lookup by code and CompanySettings access.
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.company import Company, CompanySettings
from app.repositories.base import BaseRepository


class CompanyRepository(BaseRepository[Company]):

    def __init__(self) -> None:
        super().__init__(Company)

    async def get_active_by_code(self, db: AsyncSession, code: str) -> Company | None:
        result = await db.execute(
            select(Company).where(Company.code == code.upper(), Company.is_active.is_(True))
        )
        return result.scalar_one_or_none()


class CompanySettingsRepository(BaseRepository[CompanySettings]):

    def __init__(self) -> None:
        super().__init__(CompanySettings)

    async def get_by_company(self, db: AsyncSession, company_id: UUID) -> CompanySettings | None:
        result = await db.execute(
            select(CompanySettings).where(CompanySettings.company_id == company_id)
        )
        return result.scalar_one_or_none()


company_repository: CompanyRepository = CompanyRepository()
company_settings_repository: CompanySettingsRepository = CompanySettingsRepository()
