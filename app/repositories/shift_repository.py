"""근무 레포지토리 — 근무 조회 및 필터링.

Shift Repository — Queries over the shifts table. Every read here returns
live rows only (deleted_at IS NULL); soft-deleted shifts never take part in
conflict detection, rule aggregation or suggestions.
"""

from datetime import date, time
from typing import Iterable, Sequence
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.shift import Shift
from app.repositories.base import BaseRepository


class ShiftRepository(BaseRepository[Shift]):
    """근무 레포지토리."""

    def __init__(self) -> None:
        super().__init__(Shift)

    async def get_by_filters(
        self,
        db: AsyncSession,
        company_id: UUID,
        employee_id: UUID | None = None,
        shift_date: date | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
        status: str | None = None,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[Sequence[Shift], int]:
        """필터 조건으로 근무 목록을 페이지네이션 조회합니다.

        List live shifts of a company with optional filters.
        date_from/date_to 범위 필터가 있으면 shift_date보다 우선합니다.
        (Date range filters take precedence over a single shift_date.)

        Returns:
            tuple[Sequence[Shift], int]: (근무 목록, 전체 개수) (Shifts, total count)
        """
        query: Select = select(Shift).where(
            Shift.company_id == company_id,
            Shift.deleted_at.is_(None),
        )

        if employee_id is not None:
            query = query.where(Shift.employee_id == employee_id)
        if date_from is not None or date_to is not None:
            if date_from is not None:
                query = query.where(Shift.shift_date >= date_from)
            if date_to is not None:
                query = query.where(Shift.shift_date <= date_to)
        elif shift_date is not None:
            query = query.where(Shift.shift_date == shift_date)
        if status is not None:
            query = query.where(Shift.status == status)

        query = query.order_by(Shift.shift_date, Shift.start_time, Shift.employee_id)
        return await self.get_paginated(db, query, page, per_page)

    async def get_for_employee_between(
        self,
        db: AsyncSession,
        employee_id: UUID,
        date_from: date,
        date_to: date,
        exclude_ids: Iterable[UUID] = (),
    ) -> list[Shift]:
        """직원의 기간 내 유효 근무를 한 번에 조회합니다.

        Load an employee's live shifts in [date_from, date_to] with a single
        query. Callers slice the result per day; this keeps bulk planning to
        one round-trip per employee.
        """
        query: Select = (
            select(Shift)
            .where(
                Shift.employee_id == employee_id,
                Shift.shift_date >= date_from,
                Shift.shift_date <= date_to,
                Shift.deleted_at.is_(None),
            )
            .order_by(Shift.shift_date, Shift.start_time)
        )
        excluded = list(exclude_ids)
        if excluded:
            query = query.where(Shift.id.not_in(excluded))
        result = await db.execute(query)
        return list(result.scalars().all())

    async def get_many(self, db: AsyncSession, shift_ids: Sequence[UUID]) -> list[Shift]:
        """ID 목록으로 유효 근무를 조회합니다 (회사 범위 미적용 — 호출자가 검증).

        Fetch live shifts by id without company scoping; callers check
        ownership so a foreign id surfaces as a tenancy error, not a 404.
        """
        if not shift_ids:
            return []
        result = await db.execute(
            select(Shift).where(Shift.id.in_(list(shift_ids)), Shift.deleted_at.is_(None))
        )
        return list(result.scalars().all())

    async def get_recent_time_pairs(
        self,
        db: AsyncSession,
        employee_id: UUID,
        limit: int,
    ) -> list[tuple[time, time]]:
        """직원의 최근 근무에서 서로 다른 (시작, 종료) 조합을 최신순으로 반환합니다.

        Distinct (start, end) pairs from the employee's live shifts, most
        recently worked first.
        """
        last_worked = func.max(Shift.shift_date).label("last_worked")
        result = await db.execute(
            select(Shift.start_time, Shift.end_time, last_worked)
            .where(Shift.employee_id == employee_id, Shift.deleted_at.is_(None))
            .group_by(Shift.start_time, Shift.end_time)
            .order_by(last_worked.desc(), Shift.start_time)
            .limit(limit)
        )
        return [(row.start_time, row.end_time) for row in result.all()]


# 싱글턴 인스턴스 — Singleton instance
shift_repository: ShiftRepository = ShiftRepository()
