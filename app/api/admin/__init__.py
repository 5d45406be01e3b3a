"""관리자 API 라우터 패키지 — 모든 관리자 엔드포인트 통합.

Admin API Router package — Aggregates all admin-facing endpoints
into a single router for inclusion in the FastAPI application.

Included routers:
    - auth: 인증 (Login, refresh, logout, current user)
    - employees: 직원 관리 (Employee management)
    - shifts: 근무 관리, 일괄 생성/복제, 충돌 검증, 패턴/추천
              (Shifts, bulk/duplicate, conflict checks, patterns/suggestions)
    - shift_templates: 근무 템플릿 (Reusable shift time ranges)
    - company_settings: 회사 근무 규칙 설정 (Per-company shift limits)
    - audit_logs: 감사 로그 조회 (Read-only audit trail)
"""

from fastapi import APIRouter

from app.api.admin.audit_logs import router as audit_logs_router
from app.api.admin.auth import router as auth_router
from app.api.admin.company_settings import router as company_settings_router
from app.api.admin.employees import router as employees_router
from app.api.admin.shift_templates import router as shift_templates_router
from app.api.admin.shifts import router as shifts_router

admin_router: APIRouter = APIRouter()

admin_router.include_router(auth_router, prefix="/auth", tags=["Admin Auth"])
admin_router.include_router(employees_router, prefix="/employees", tags=["Employees"])
admin_router.include_router(shifts_router, prefix="/shifts", tags=["Shifts"])
admin_router.include_router(shift_templates_router, prefix="/shift-templates", tags=["Shift Templates"])
admin_router.include_router(company_settings_router, prefix="/company-settings", tags=["Company Settings"])
admin_router.include_router(audit_logs_router, prefix="/audit-logs", tags=["Audit Logs"])
