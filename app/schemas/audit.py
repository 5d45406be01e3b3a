"""감사 로그 조회 Pydantic 스키마.

Audit log read models: single entries, per-entity history and action
counts. Audit rows are written by the services; these only expose them.
"""

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel


class AuditLogResponse(BaseModel):
    """감사 로그 1건.

    Attributes:
        user_name: 작업자 이름, 삭제된 사용자면 None (Acting user's name)
        old_values: 변경 전 값 (Before snapshot)
        new_values: 변경 후 값 (After snapshot)
    """

    id: str
    user_id: str | None = None
    user_name: str | None = None
    action: str
    entity_type: str
    entity_id: str | None = None
    old_values: dict[str, Any] | None = None
    new_values: dict[str, Any] | None = None
    created_at: datetime


class EntityHistoryResponse(BaseModel):
    """대상 1건의 전체 변경 이력 (오래된 순)."""

    entity_type: str
    entity_id: str
    history: list[AuditLogResponse]
    total_changes: int


class AuditActionCount(BaseModel):
    action: str
    count: int


class AuditStatisticsResponse(BaseModel):
    """작업 종류별 건수 — 기간 필터는 그대로 반환."""

    statistics: list[AuditActionCount]
    total_actions: int
    start_date: date | None = None
    end_date: date | None = None
