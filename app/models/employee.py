"""직원 SQLAlchemy ORM 모델 정의.

Employee model — the person shifts are scheduled for. An employee may or
may not have a login (User); shifts, patterns and suggestions hang off the
employee, not the user.

Tables:
    - employees: 회사 소속 직원 (Employees of a company, soft-deletable)
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


class Employee(Base):
    """직원 모델.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        company_id: 소속 회사 FK (Owning company)
        user_id: 연결된 로그인 계정 FK, 선택 (Linked login, optional)
        full_name: 이름 (Display name)
        position: 직무 (Job title, free text)
        is_active: 활성 상태 (Active flag)
        deleted_at: 소프트 삭제 시각 (Soft-delete marker)
    """

    __tablename__ = "employees"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 소속 회사 FK — 모든 근무 조회의 테넌시 기준 (Tenancy anchor for shift queries)
    company_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False)
    # 로그인 계정 — 계정 삭제 시 연결만 해제 (Unlinked when the user is removed)
    user_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), unique=True, nullable=True)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    position: Mapped[str | None] = mapped_column(String(100), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        Index("ix_employees_company", "company_id"),
    )

    company = relationship("Company", back_populates="employees")
    user = relationship("User", back_populates="employee")
    shifts = relationship("Shift", back_populates="employee")
    patterns = relationship("EmployeeShiftPattern", back_populates="employee", cascade="all, delete-orphan")
