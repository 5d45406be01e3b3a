"""직원 근무 패턴 레포지토리 — EmployeeShiftPattern 조회/증가/정리.

Employee Shift Pattern Repository — lookup, frequency bump and cleanup
queries for employee_shift_patterns.
"""

from datetime import datetime, time
from uuid import UUID

from sqlalchemy import Select, delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.employee import Employee
from app.models.shift import EmployeeShiftPattern
from app.repositories.base import BaseRepository


class PatternRepository(BaseRepository[EmployeeShiftPattern]):
    """직원 근무 패턴 레포지토리."""

    def __init__(self) -> None:
        super().__init__(EmployeeShiftPattern)

    async def find_pair(
        self, db: AsyncSession, employee_id: UUID, start_time: time, end_time: time
    ) -> EmployeeShiftPattern | None:
        result = await db.execute(
            select(EmployeeShiftPattern).where(
                EmployeeShiftPattern.employee_id == employee_id,
                EmployeeShiftPattern.start_time == start_time,
                EmployeeShiftPattern.end_time == end_time,
            )
        )
        return result.scalar_one_or_none()

    async def get_top_for_employee(
        self, db: AsyncSession, employee_id: UUID, limit: int
    ) -> list[EmployeeShiftPattern]:
        """빈도 내림차순, 최근 사용 내림차순 — Frequency desc, then recency desc."""
        query: Select = (
            select(EmployeeShiftPattern)
            .where(EmployeeShiftPattern.employee_id == employee_id)
            .order_by(
                EmployeeShiftPattern.frequency_count.desc(),
                EmployeeShiftPattern.last_used.desc(),
            )
            .limit(limit)
        )
        result = await db.execute(query)
        return list(result.scalars().all())

    async def delete_stale(
        self,
        db: AsyncSession,
        company_id: UUID,
        max_frequency: int,
        used_before: datetime,
    ) -> int:
        """저빈도 + 오래된 패턴 일괄 삭제, 삭제 건수 반환.

        Delete patterns of the company's employees whose frequency is at most
        ``max_frequency`` and that were last used before ``used_before``.
        """
        company_employees = select(Employee.id).where(Employee.company_id == company_id)
        stmt = (
            delete(EmployeeShiftPattern)
            .where(
                EmployeeShiftPattern.employee_id.in_(company_employees),
                EmployeeShiftPattern.frequency_count <= max_frequency,
                EmployeeShiftPattern.last_used < used_before,
            )
            .execution_options(synchronize_session=False)
        )
        result = await db.execute(stmt)
        await db.flush()
        return result.rowcount or 0


pattern_repository: PatternRepository = PatternRepository()
