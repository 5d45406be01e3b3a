"""감사 로그 SQLAlchemy ORM 모델 정의.

Audit log model. Rows are written in the same transaction as the change
they describe, so a rolled-back request leaves no audit trace.

Tables:
    - audit_logs: 변경 이력 (Who changed what, with before/after snapshots)
"""

import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import JSON, DateTime, ForeignKey, Index, String, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base

# PostgreSQL에서는 JSONB, 그 외에는 일반 JSON (JSONB on PostgreSQL, JSON elsewhere)
JSONType = JSON().with_variant(JSONB(), "postgresql")


class AuditLog(Base):
    """감사 로그 모델.

    Attributes:
        company_id: 회사 FK (Tenant)
        user_id: 작업 사용자 FK (Acting user, nullable for system actions)
        action: 작업 — CREATE/UPDATE/DELETE/CONFIRM/BULK_CREATE/DUPLICATE
        entity_type: 대상 종류 (e.g. "shift", "shift_template")
        entity_id: 대상 ID, 일괄 작업이면 NULL (Target id, NULL for batch actions)
        old_values: 변경 전 값 (Snapshot before)
        new_values: 변경 후 값 (Snapshot after)
    """

    __tablename__ = "audit_logs"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    company_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False)
    user_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    action: Mapped[str] = mapped_column(String(50), nullable=False)
    entity_type: Mapped[str] = mapped_column(String(50), nullable=False)
    entity_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    old_values: Mapped[dict[str, Any] | None] = mapped_column(JSONType, nullable=True)
    new_values: Mapped[dict[str, Any] | None] = mapped_column(JSONType, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        Index("ix_audit_logs_entity", "entity_type", "entity_id"),
        Index("ix_audit_logs_company_created", "company_id", "created_at"),
    )
