"""사용자 및 역할 관련 SQLAlchemy ORM 모델 정의.

User and Role SQLAlchemy ORM model definitions.
Implements role-based access control (RBAC) with hierarchical levels
within each company.

Tables:
    - roles: 회사 내 역할 (Roles within a company, level-based hierarchy)
    - users: 사용자 계정 (User accounts with company/role scoping)
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import String, Boolean, DateTime, Integer, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base

# 역할 레벨 — Role levels (낮을수록 높은 권한, lower is more authority)
LEVEL_OWNER: int = 1
LEVEL_ADMIN: int = 2
LEVEL_EMPLOYEE: int = 3


class Role(Base):
    """역할 모델 — 회사 내 권한 수준을 정의.

    Role model — Defines permission levels within a company.
    Lower level numbers indicate higher authority:
        1 = owner, 2 = admin (scheduling manager), 3 = employee

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        company_id: 소속 회사 FK (Parent company foreign key)
        name: 역할 이름 (Role name, e.g. "owner", "employee")
        level: 권한 레벨 (Permission level, 1=highest)

    Constraints:
        uq_role_company_name: 회사 내 역할 이름 고유 (Unique role name per company)
        uq_role_company_level: 회사 내 역할 레벨 고유 (Unique role level per company)
    """

    __tablename__ = "roles"

    # 역할 고유 식별자 — Role unique identifier (UUID v4, auto-generated)
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 소속 회사 FK — Parent company (CASCADE: 회사 삭제 시 역할도 삭제)
    company_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False)
    # 역할 이름 — Role display name
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    # 권한 레벨 — Permission level (1=owner 최고 권한, 3=employee 최저 권한)
    level: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint("company_id", "name", name="uq_role_company_name"),
        UniqueConstraint("company_id", "level", name="uq_role_company_level"),
    )

    # 관계 — Relationships
    company = relationship("Company", back_populates="roles")
    users = relationship("User", back_populates="role")


class User(Base):
    """사용자 모델 — 로그인 계정 정보.

    User model — Login account information.
    Each user belongs to exactly one company and has one role.
    Username is unique within a company (not globally). A user may be linked
    to an Employee record (see Employee.user_id); admins often are not.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        company_id: 소속 회사 FK (Parent company foreign key)
        role_id: 역할 FK (Assigned role foreign key)
        username: 로그인 아이디 (Login username, unique per company)
        email: 이메일 (Email address, optional)
        full_name: 실명 (Full display name)
        password_hash: bcrypt 해시된 비밀번호 (bcrypt-hashed password)
        is_active: 활성 상태 (Active status)

    Constraints:
        uq_user_company_username: 회사 내 사용자명 고유 (Unique username per company)
    """

    __tablename__ = "users"

    # 사용자 고유 식별자 — User unique identifier (UUID v4, auto-generated)
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 소속 회사 FK — Parent company (CASCADE: 회사 삭제 시 사용자도 삭제)
    company_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False)
    # 역할 FK — Assigned role (역할 삭제 시 제한됨, role deletion is restricted)
    role_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("roles.id"), nullable=False)
    # 로그인 아이디 — Login username (회사 내 고유, unique within company)
    username: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    # 비밀번호 해시 — bcrypt hashed password (평문 저장 금지, never store plaintext)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint("company_id", "username", name="uq_user_company_username"),
    )

    # 관계 — Relationships
    company = relationship("Company", back_populates="users")
    role = relationship("Role", back_populates="users")
    employee = relationship("Employee", back_populates="user", uselist=False)
    refresh_tokens = relationship("RefreshToken", back_populates="user", cascade="all, delete-orphan")
