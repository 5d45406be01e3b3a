"""회사(테넌트) 관련 SQLAlchemy ORM 모델 정의.

Company-related SQLAlchemy ORM model definitions.
Includes Company (tenant) and its one-to-one CompanySettings,
which hold the configurable limits enforced by the business-rule validator.

Tables:
    - companies: 최상위 테넌트 (Top-level tenant)
    - company_settings: 회사별 근무 규칙 (Per-company scheduling limits)
"""

import random
import string
import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import String, Boolean, DateTime, ForeignKey, Numeric, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


def generate_company_code() -> str:
    """6자리 랜덤 회사 코드 생성 (대문자 + 숫자).

    Generate a random 6-character company code (uppercase letters + digits).
    """
    chars = string.ascii_uppercase + string.digits
    return "".join(random.choices(chars, k=6))


class Company(Base):
    """회사(테넌트) 모델 — 시스템의 최상위 엔티티.

    Company (tenant) model — Top-level entity in the system.
    Employees, shifts, templates and settings are all scoped under a company.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        name: 회사 이름 (Company name)
        code: 로그인용 회사 코드 (Short company code used at login)
        is_active: 활성 상태 (Active status flag)
        created_at: 생성 일시 UTC (Creation timestamp in UTC)
        updated_at: 수정 일시 UTC (Last update timestamp in UTC)

    Relationships:
        roles: 회사 내 역할 목록 (Roles in this company, cascade delete)
        users: 회사 내 사용자 목록 (Users in this company, cascade delete)
        employees: 직원 목록 (Employees, cascade delete)
        settings: 근무 규칙 설정 (One-to-one scheduling settings)
    """

    __tablename__ = "companies"

    # 회사 고유 식별자 — Company unique identifier (UUID v4, auto-generated)
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 회사 이름 — Company display name (max 255 chars, required)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    # 회사 코드 — Short unique company code for login (6 chars, uppercase + digits)
    code: Mapped[str] = mapped_column(String(6), unique=True, nullable=False, default=generate_company_code)
    # 활성 상태 — Whether the company is active
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    # 생성 일시 — Record creation timestamp (UTC)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    # 수정 일시 — Last modification timestamp (UTC, auto-updated)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    # 관계 — Relationships (cascade: 회사 삭제 시 하위 데이터 일괄 삭제)
    roles = relationship("Role", back_populates="company", cascade="all, delete-orphan")
    users = relationship("User", back_populates="company", cascade="all, delete-orphan")
    employees = relationship("Employee", back_populates="company", cascade="all, delete-orphan")
    settings = relationship("CompanySettings", back_populates="company", uselist=False, cascade="all, delete-orphan")


class CompanySettings(Base):
    """회사 근무 규칙 설정 — 회사당 1건, 최초 조회 시 기본값으로 생성.

    Per-company scheduling limits. Created lazily with defaults on first read
    and patched partially. All times are UTC; ``timezone`` is display-only.

    Attributes:
        company_id: 소속 회사 FK, 고유 (Owning company, unique)
        max_daily_hours: 일일 최대 근무시간 (Daily cap, default 12)
        max_weekly_hours: 주간 최대 근무시간 (Weekly cap, default 40)
        min_break_hours: 근무 간 최소 휴식시간 (Minimum rest between days, default 11)
        allow_overnight_shifts: 야간 근무 허용 플래그 (Stored flag, see DESIGN.md)
        timezone: 표시용 타임존 라벨 (Display-only timezone label)
    """

    __tablename__ = "company_settings"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    company_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("companies.id", ondelete="CASCADE"), unique=True, nullable=False)
    max_daily_hours: Mapped[Decimal] = mapped_column(Numeric(4, 1), nullable=False, default=Decimal("12.0"))
    max_weekly_hours: Mapped[Decimal] = mapped_column(Numeric(5, 1), nullable=False, default=Decimal("40.0"))
    min_break_hours: Mapped[Decimal] = mapped_column(Numeric(4, 1), nullable=False, default=Decimal("11.0"))
    allow_overnight_shifts: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    timezone: Mapped[str] = mapped_column(String(50), nullable=False, default="UTC")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    company = relationship("Company", back_populates="settings")
