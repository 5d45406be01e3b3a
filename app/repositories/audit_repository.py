"""감사 로그 레포지토리 — audit_logs 기록 및 조회.

Audit Repository — Appends audit rows inside the caller's transaction and
serves the company-scoped audit queries.
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Sequence
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.audit import AuditLog
from app.models.user import User
from app.repositories.base import BaseRepository


def _day_start(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def _in_period(query: Select, start_date: date | None, end_date: date | None) -> Select:
    # 종료일 포함 — end_date covers the whole day
    if start_date is not None:
        query = query.where(AuditLog.created_at >= _day_start(start_date))
    if end_date is not None:
        query = query.where(AuditLog.created_at < _day_start(end_date + timedelta(days=1)))
    return query


class AuditRepository(BaseRepository[AuditLog]):
    """감사 로그 레포지토리."""

    def __init__(self) -> None:
        super().__init__(AuditLog)

    async def record(
        self,
        db: AsyncSession,
        company_id: UUID,
        user_id: UUID | None,
        action: str,
        entity_type: str,
        entity_id: UUID | None = None,
        old_values: dict[str, Any] | None = None,
        new_values: dict[str, Any] | None = None,
    ) -> AuditLog:
        """감사 로그 1건 추가 — flush만 하고 커밋은 라우터가 담당.

        Add one audit row and flush; the router's commit makes it durable
        together with the change it describes.
        """
        entry = AuditLog(
            company_id=company_id,
            user_id=user_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            old_values=old_values,
            new_values=new_values,
        )
        db.add(entry)
        await db.flush()
        return entry

    async def get_by_filters(
        self,
        db: AsyncSession,
        company_id: UUID,
        user_id: UUID | None = None,
        action: str | None = None,
        entity_type: str | None = None,
        entity_id: UUID | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
        page: int = 1,
        per_page: int = 50,
    ) -> tuple[Sequence[AuditLog], int]:
        """회사 감사 로그 목록 — 최신순, 작업자/작업/대상/기간 필터."""
        query: Select = select(AuditLog).where(AuditLog.company_id == company_id)
        if user_id is not None:
            query = query.where(AuditLog.user_id == user_id)
        if action is not None:
            query = query.where(AuditLog.action == action)
        if entity_type is not None:
            query = query.where(AuditLog.entity_type == entity_type)
        if entity_id is not None:
            query = query.where(AuditLog.entity_id == entity_id)
        query = _in_period(query, start_date, end_date).order_by(AuditLog.created_at.desc())
        return await self.get_paginated(db, query, page, per_page)

    async def get_entity_history(
        self, db: AsyncSession, company_id: UUID, entity_type: str, entity_id: UUID
    ) -> list[AuditLog]:
        result = await db.execute(
            select(AuditLog)
            .where(
                AuditLog.company_id == company_id,
                AuditLog.entity_type == entity_type,
                AuditLog.entity_id == entity_id,
            )
            .order_by(AuditLog.created_at)
        )
        return list(result.scalars().all())

    async def get_recent(self, db: AsyncSession, company_id: UUID, limit: int) -> list[AuditLog]:
        result = await db.execute(
            select(AuditLog)
            .where(AuditLog.company_id == company_id)
            .order_by(AuditLog.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def count_by_action(
        self,
        db: AsyncSession,
        company_id: UUID,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[tuple[str, int]]:
        """작업 종류별 건수 — 많은 순, 같으면 작업 이름순."""
        count = func.count(AuditLog.id).label("count")
        query: Select = select(AuditLog.action, count).where(AuditLog.company_id == company_id)
        query = _in_period(query, start_date, end_date)
        query = query.group_by(AuditLog.action).order_by(count.desc(), AuditLog.action)
        result = await db.execute(query)
        return [(action, total) for action, total in result.all()]

    async def get_user_names(self, db: AsyncSession, user_ids: Sequence[UUID]) -> dict[UUID, str]:
        if not user_ids:
            return {}
        result = await db.execute(select(User.id, User.full_name).where(User.id.in_(list(user_ids))))
        return {user_id: name for user_id, name in result.all()}


audit_repository: AuditRepository = AuditRepository()
