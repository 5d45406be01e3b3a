"""감사 로그 조회 서비스 — 회사 범위 목록, 대상 이력, 최근 항목, 통계.

Audit Service — Read side of the audit trail. Every query is scoped to the
caller's company; rows of other companies are never visible.
"""

from datetime import date
from typing import Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.audit import AuditLog
from app.repositories.audit_repository import audit_repository
from app.schemas.audit import (
    AuditActionCount,
    AuditLogResponse,
    AuditStatisticsResponse,
    EntityHistoryResponse,
)
from app.schemas.common import PaginatedData
from app.utils.exceptions import BadRequestError


def _check_period(start_date: date | None, end_date: date | None) -> None:
    if start_date is not None and end_date is not None and start_date > end_date:
        raise BadRequestError("start_date must not be after end_date")


class AuditService:

    async def _to_responses(self, db: AsyncSession, logs: Sequence[AuditLog]) -> list[AuditLogResponse]:
        """작업자 이름은 한 번의 조회로 채움."""
        names = await audit_repository.get_user_names(db, list({log.user_id for log in logs if log.user_id}))
        return [
            AuditLogResponse(
                id=str(log.id),
                user_id=str(log.user_id) if log.user_id else None,
                user_name=names.get(log.user_id),
                action=log.action,
                entity_type=log.entity_type,
                entity_id=str(log.entity_id) if log.entity_id else None,
                old_values=log.old_values,
                new_values=log.new_values,
                created_at=log.created_at,
            )
            for log in logs
        ]

    async def list_logs(
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
    ) -> PaginatedData[AuditLogResponse]:
        """감사 로그 목록을 조회합니다 (최신순).

        List the company's audit rows, newest first.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            company_id: 요청자 회사 UUID (Caller's company)
            user_id: 작업자 필터 (Acting user)
            action: 작업 필터, 예: CREATE, BULK_CREATE (Action)
            entity_type: 대상 종류 필터, 예: shift (Entity type)
            entity_id: 대상 ID 필터 (Entity id)
            start_date: 시작일 포함 (Inclusive first day, UTC)
            end_date: 종료일 포함 (Inclusive last day, UTC)
            page: 페이지 번호 (1-indexed page)
            per_page: 페이지당 항목 수 (Page size)

        Raises:
            BadRequestError: 시작일이 종료일보다 늦음 (start_date after end_date)
        """
        _check_period(start_date, end_date)
        logs, total = await audit_repository.get_by_filters(
            db, company_id,
            user_id=user_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            start_date=start_date,
            end_date=end_date,
            page=page,
            per_page=per_page,
        )
        return PaginatedData[AuditLogResponse](
            items=await self._to_responses(db, logs),
            total=total,
            page=page,
            per_page=per_page,
        )

    async def get_entity_history(
        self, db: AsyncSession, company_id: UUID, entity_type: str, entity_id: UUID
    ) -> EntityHistoryResponse:
        """대상 1건의 변경 이력 — 오래된 순. 이력이 없으면 빈 목록."""
        logs = await audit_repository.get_entity_history(db, company_id, entity_type, entity_id)
        return EntityHistoryResponse(
            entity_type=entity_type,
            entity_id=str(entity_id),
            history=await self._to_responses(db, logs),
            total_changes=len(logs),
        )

    async def get_recent(self, db: AsyncSession, company_id: UUID, limit: int = 10) -> list[AuditLogResponse]:
        return await self._to_responses(db, await audit_repository.get_recent(db, company_id, limit))

    async def get_statistics(
        self,
        db: AsyncSession,
        company_id: UUID,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> AuditStatisticsResponse:
        _check_period(start_date, end_date)
        counts = await audit_repository.count_by_action(db, company_id, start_date, end_date)
        return AuditStatisticsResponse(
            statistics=[AuditActionCount(action=action, count=count) for action, count in counts],
            total_actions=sum(count for _, count in counts),
            start_date=start_date,
            end_date=end_date,
        )


audit_service: AuditService = AuditService()
