"""근무 관련 SQLAlchemy ORM 모델 정의.

Shift scheduling ORM models: scheduled shifts, reusable shift templates
and per-employee time-pair patterns that drive suggestions.

Tables:
    - shifts: 직원 1명의 하루 근무 구간 (One work interval for one employee on one date)
    - shift_templates: 회사별 재사용 시간 구간 (Named reusable start/end pairs)
    - employee_shift_patterns: 직원별 사용 빈도 (Per-employee usage counts of time pairs)

All times are naive wall-clock UTC ``TIME`` values; dates carry no time part.
"""

import uuid
from datetime import date, datetime, time, timezone

from sqlalchemy import (
    Date, DateTime, ForeignKey, Index, Integer, String, Text, Time, UniqueConstraint, Uuid, text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base

# 근무 상태 — Shift lifecycle statuses
SHIFT_STATUS_PENDING: str = "pending"
SHIFT_STATUS_CONFIRMED: str = "confirmed"
SHIFT_STATUS_CANCELLED: str = "cancelled"
SHIFT_STATUSES: tuple[str, ...] = (SHIFT_STATUS_PENDING, SHIFT_STATUS_CONFIRMED, SHIFT_STATUS_CANCELLED)


class Shift(Base):
    """근무 모델 — 직원 1명, 날짜 1일, 시작~종료 구간.

    Shift model. Never physically removed: delete sets ``deleted_at``.
    Uniqueness of (employee, date, start, end) is enforced only among live
    rows through a partial index, so a soft-deleted shift does not block
    re-creating the same slot.

    Attributes:
        company_id: 소속 회사 FK (Owning company, denormalized for tenancy filters)
        employee_id: 대상 직원 FK (Scheduled employee)
        shift_date: 근무 날짜 (Calendar date)
        start_time: 시작 시각 UTC (Start, HH:mm granularity)
        end_time: 종료 시각 UTC (End, strictly after start)
        note: 메모 (Free-text note)
        status: 상태 — pending/confirmed/cancelled (Lifecycle status)
        created_by: 생성자 FK (Creating user)
        confirmed_by: 확정자 FK (Confirming user)
        confirmed_at: 확정 일시 (Confirmation timestamp)
        deleted_at: 소프트 삭제 시각 (Soft-delete marker)
    """

    __tablename__ = "shifts"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    company_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False)
    employee_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("employees.id", ondelete="CASCADE"), nullable=False)
    shift_date: Mapped[date] = mapped_column(Date, nullable=False)
    start_time: Mapped[time] = mapped_column(Time(), nullable=False)
    end_time: Mapped[time] = mapped_column(Time(), nullable=False)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=SHIFT_STATUS_PENDING)
    created_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    confirmed_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    confirmed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    # 소프트 삭제 — NULL이면 유효한 근무 (NULL means live)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        # 유효 근무 중복 방지 — Exact-duplicate guard among live shifts only
        Index(
            "uq_shifts_employee_slot_live",
            "employee_id", "shift_date", "start_time", "end_time",
            unique=True,
            postgresql_where=text("deleted_at IS NULL"),
            sqlite_where=text("deleted_at IS NULL"),
        ),
        Index("ix_shifts_company_date", "company_id", "shift_date"),
        Index("ix_shifts_employee_date", "employee_id", "shift_date"),
    )

    employee = relationship("Employee", back_populates="shifts")


class ShiftTemplate(Base):
    """근무 템플릿 — 회사별 이름 있는 시작/종료 시간 조합.

    Named reusable (start, end) pair. ``usage_count`` grows each time the
    template seeds a bulk creation. Soft-deleted templates keep their name
    reserved because the unique constraint is not partial.
    """

    __tablename__ = "shift_templates"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    company_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    start_time: Mapped[time] = mapped_column(Time(), nullable=False)
    end_time: Mapped[time] = mapped_column(Time(), nullable=False)
    usage_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint("company_id", "name", name="uq_shift_templates_company_name"),
    )


class EmployeeShiftPattern(Base):
    """직원 근무 패턴 — (시작, 종료) 조합별 사용 빈도와 최근 사용 시각.

    Frequency record of an employee's (start, end) pair. Created on first
    use, incremented on every later shift with the same pair.
    """

    __tablename__ = "employee_shift_patterns"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    employee_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("employees.id", ondelete="CASCADE"), nullable=False)
    start_time: Mapped[time] = mapped_column(Time(), nullable=False)
    end_time: Mapped[time] = mapped_column(Time(), nullable=False)
    frequency_count: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    last_used: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint("employee_id", "start_time", "end_time", name="uq_employee_shift_patterns_pair"),
    )

    employee = relationship("Employee", back_populates="patterns")
