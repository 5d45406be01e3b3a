"""직원 레포지토리 — Employee 조회 및 필터링.

Employee Repository — Company-scoped employee queries.
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.employee import Employee
from app.repositories.base import BaseRepository


class EmployeeRepository(BaseRepository[Employee]):
    """직원 레포지토리."""

    def __init__(self) -> None:
        super().__init__(Employee)

    async def get_by_filters(
        self,
        db: AsyncSession,
        company_id: UUID,
        is_active: bool | None = None,
        keyword: str | None = None,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[Sequence[Employee], int]:
        """회사 직원 목록 — 활성 여부, 이름 검색 필터.

        List live employees of a company with optional active flag and
        case-insensitive name search.
        """
        query: Select = select(Employee).where(
            Employee.company_id == company_id,
            Employee.deleted_at.is_(None),
        )
        if is_active is not None:
            query = query.where(Employee.is_active == is_active)
        if keyword:
            query = query.where(Employee.full_name.ilike(f"%{keyword}%"))
        query = query.order_by(Employee.full_name)
        return await self.get_paginated(db, query, page, per_page)

    async def get_many(self, db: AsyncSession, employee_ids: Sequence[UUID]) -> list[Employee]:
        """ID 목록으로 조회 (회사 범위 미적용 — 호출자가 소유권 검증)."""
        if not employee_ids:
            return []
        result = await db.execute(
            select(Employee).where(Employee.id.in_(list(employee_ids)), Employee.deleted_at.is_(None))
        )
        return list(result.scalars().all())

    async def get_by_user_id(self, db: AsyncSession, user_id: UUID) -> Employee | None:
        result = await db.execute(
            select(Employee).where(Employee.user_id == user_id, Employee.deleted_at.is_(None))
        )
        return result.scalar_one_or_none()


employee_repository: EmployeeRepository = EmployeeRepository()
