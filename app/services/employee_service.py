"""직원 서비스 — Employee CRUD 및 선택적 로그인 계정 생성.

Employee Service — Business logic for company employees. Creating an
employee can also create a login on the company's employee-level role.
"""

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.employee import Employee
from app.models.user import LEVEL_EMPLOYEE, User
from app.repositories.audit_repository import audit_repository
from app.repositories.auth_repository import auth_repository
from app.repositories.employee_repository import employee_repository
from app.schemas.common import PaginatedData
from app.schemas.employee import EmployeeCreate, EmployeeResponse, EmployeeUpdate
from app.services.ownership import get_owned_or_raise
from app.utils.exceptions import BadRequestError, DuplicateError
from app.utils.password import MIN_PASSWORD_LENGTH, hash_password, is_acceptable_password


class EmployeeService:

    def _to_response(self, employee: Employee) -> EmployeeResponse:
        return EmployeeResponse(
            id=str(employee.id),
            company_id=str(employee.company_id),
            user_id=str(employee.user_id) if employee.user_id else None,
            full_name=employee.full_name,
            position=employee.position,
            is_active=employee.is_active,
            created_at=employee.created_at,
        )

    async def list_employees(
        self,
        db: AsyncSession,
        company_id: UUID,
        is_active: bool | None = None,
        keyword: str | None = None,
        page: int = 1,
        per_page: int = 20,
    ) -> PaginatedData[EmployeeResponse]:
        employees, total = await employee_repository.get_by_filters(
            db, company_id, is_active=is_active, keyword=keyword, page=page, per_page=per_page
        )
        return PaginatedData[EmployeeResponse](
            items=[self._to_response(e) for e in employees],
            total=total,
            page=page,
            per_page=per_page,
        )

    async def get_employee(self, db: AsyncSession, company_id: UUID, employee_id: UUID) -> EmployeeResponse:
        employee = await get_owned_or_raise(employee_repository, db, employee_id, company_id, "employee")
        return self._to_response(employee)

    async def create_employee(
        self,
        db: AsyncSession,
        company_id: UUID,
        actor_id: UUID,
        data: EmployeeCreate,
    ) -> EmployeeResponse:
        """직원을 생성합니다 (username/password가 있으면 로그인 계정도 생성).

        Create an employee, optionally with a login on the employee role.

        Raises:
            BadRequestError: 비밀번호 정책 위반 또는 직원 역할 미설정
                             (Weak password or missing employee role)
            DuplicateError: 같은 회사에 같은 아이디 존재 (Username taken in the company)
        """
        user_id: UUID | None = None
        if data.username is not None:
            if not is_acceptable_password(data.password):
                raise BadRequestError(
                    f"Password must be at least {MIN_PASSWORD_LENGTH} characters "
                    "and contain a letter and a digit"
                )
            if await auth_repository.get_user_by_username(db, data.username, company_id) is not None:
                raise DuplicateError("Username already exists")
            role = await auth_repository.get_role_by_level(db, company_id, LEVEL_EMPLOYEE)
            if role is None:
                raise BadRequestError("Employee role not configured for this company")

            user = User(
                company_id=company_id,
                role_id=role.id,
                username=data.username,
                email=data.email,
                full_name=data.full_name,
                password_hash=hash_password(data.password),
            )
            db.add(user)
            await db.flush()
            user_id = user.id

        employee = await employee_repository.create(db, {
            "company_id": company_id,
            "user_id": user_id,
            "full_name": data.full_name,
            "position": data.position,
        })
        await audit_repository.record(
            db, company_id, actor_id, "CREATE", "employee", employee.id,
            new_values={"full_name": employee.full_name, "has_login": user_id is not None},
        )
        return self._to_response(employee)

    async def update_employee(
        self,
        db: AsyncSession,
        company_id: UUID,
        actor_id: UUID,
        employee_id: UUID,
        data: EmployeeUpdate,
    ) -> EmployeeResponse:
        employee = await get_owned_or_raise(employee_repository, db, employee_id, company_id, "employee")
        update_data = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None or k == "position"}
        old_values = {k: getattr(employee, k) for k in update_data}
        employee = await employee_repository.update(db, employee, update_data)
        await audit_repository.record(
            db, company_id, actor_id, "UPDATE", "employee", employee.id,
            old_values=old_values, new_values=update_data,
        )
        return self._to_response(employee)

    async def delete_employee(self, db: AsyncSession, company_id: UUID, actor_id: UUID, employee_id: UUID) -> None:
        """직원 소프트 삭제 — 연결된 로그인은 비활성화.

        Soft-delete the employee and deactivate its login. Existing shifts
        stay untouched for history.
        """
        employee = await get_owned_or_raise(employee_repository, db, employee_id, company_id, "employee")
        if employee.user_id is not None:
            user = await auth_repository.get_user_with_role(db, employee.user_id)
            if user is not None:
                user.is_active = False
                await auth_repository.delete_user_refresh_tokens(db, user.id)
        employee.is_active = False
        await employee_repository.soft_delete(db, employee)
        await audit_repository.record(
            db, company_id, actor_id, "DELETE", "employee", employee.id,
            old_values={"full_name": employee.full_name},
        )


employee_service: EmployeeService = EmployeeService()
