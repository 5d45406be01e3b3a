"""SQLAlchemy ORM 모델 패키지 — 모든 도메인 모델의 중앙 임포트 지점.

SQLAlchemy ORM models package — Central import point for all domain models.
Importing from this package ensures all models are registered with the
SQLAlchemy metadata, which is required for Alembic migrations and
relationship resolution.

Modules:
    company: 회사, 회사 근무 규칙 설정 (Company, CompanySettings)
    user: 역할 및 사용자 (Role and User)
    token: 리프레시 토큰 (Refresh tokens)
    employee: 직원 (Employee)
    shift: 근무, 근무 템플릿, 직원 근무 패턴 (Shift, ShiftTemplate, EmployeeShiftPattern)
    audit: 감사 로그 (Audit log)
"""

from app.models.company import Company, CompanySettings
from app.models.user import Role, User
from app.models.token import RefreshToken
from app.models.employee import Employee
from app.models.shift import Shift, ShiftTemplate, EmployeeShiftPattern
from app.models.audit import AuditLog

__all__ = [
    "Company", "CompanySettings",
    "Role", "User",
    "RefreshToken",
    "Employee",
    "Shift", "ShiftTemplate", "EmployeeShiftPattern",
    "AuditLog",
]
