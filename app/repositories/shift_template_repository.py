"""근무 템플릿 레포지토리 — Shift Template 조회.

Shift Template Repository — Queries for the shift_templates table.
"""

from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.shift import ShiftTemplate
from app.repositories.base import BaseRepository


class ShiftTemplateRepository(BaseRepository[ShiftTemplate]):

    def __init__(self) -> None:
        super().__init__(ShiftTemplate)

    async def get_by_company(self, db: AsyncSession, company_id: UUID) -> list[ShiftTemplate]:
        query: Select = (
            select(ShiftTemplate)
            .where(ShiftTemplate.company_id == company_id, ShiftTemplate.deleted_at.is_(None))
            .order_by(ShiftTemplate.name)
        )
        result = await db.execute(query)
        return list(result.scalars().all())

    async def get_by_name(self, db: AsyncSession, company_id: UUID, name: str) -> ShiftTemplate | None:
        """이름으로 조회 — 삭제된 템플릿 포함 (이름은 삭제 후에도 예약됨).

        Includes soft-deleted rows because the company+name constraint does.
        """
        result = await db.execute(
            select(ShiftTemplate).where(ShiftTemplate.company_id == company_id, ShiftTemplate.name == name)
        )
        return result.scalar_one_or_none()

    async def get_most_used(self, db: AsyncSession, company_id: UUID, limit: int) -> list[ShiftTemplate]:
        result = await db.execute(
            select(ShiftTemplate)
            .where(ShiftTemplate.company_id == company_id, ShiftTemplate.deleted_at.is_(None))
            .order_by(ShiftTemplate.usage_count.desc(), ShiftTemplate.name)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def get_usage_totals(self, db: AsyncSession, company_id: UUID) -> tuple[int, int]:
        """(템플릿 수, 사용 횟수 합계) — (template count, summed usage)."""
        result = await db.execute(
            select(func.count(ShiftTemplate.id), func.coalesce(func.sum(ShiftTemplate.usage_count), 0))
            .where(ShiftTemplate.company_id == company_id, ShiftTemplate.deleted_at.is_(None))
        )
        count, total = result.one()
        return int(count or 0), int(total or 0)

    async def increment_usage(self, db: AsyncSession, template: ShiftTemplate, by: int = 1) -> ShiftTemplate:
        # 동시 요청에서도 누락 없도록 SQL 표현식으로 증가 — Increment in SQL so concurrent bumps add up
        template.usage_count = ShiftTemplate.usage_count + by
        await db.flush()
        await db.refresh(template)
        return template


shift_template_repository: ShiftTemplateRepository = ShiftTemplateRepository()
