"""관리자 직원 라우터 — Employee CRUD 엔드포인트.

Admin Employee Router — Company-scoped employee CRUD.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_admin
from app.database import get_db
from app.models.user import User
from app.schemas.common import PaginatedData, SuccessResponse, ok
from app.schemas.employee import EmployeeCreate, EmployeeResponse, EmployeeUpdate
from app.services.employee_service import employee_service

router: APIRouter = APIRouter()


@router.get("", response_model=SuccessResponse[PaginatedData[EmployeeResponse]])
async def list_employees(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
    is_active: Annotated[bool | None, Query()] = None,
    keyword: Annotated[str | None, Query(max_length=100)] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=100)] = 20,
) -> dict:
    return ok(await employee_service.list_employees(
        db, current_user.company_id, is_active=is_active, keyword=keyword, page=page, per_page=per_page
    ))


@router.post("", response_model=SuccessResponse[EmployeeResponse], status_code=201)
async def create_employee(
    data: EmployeeCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> dict:
    """직원 생성 — username/password 전달 시 로그인 계정도 생성."""
    result = await employee_service.create_employee(db, current_user.company_id, current_user.id, data)
    await db.commit()
    return ok(result)


@router.get("/{employee_id}", response_model=SuccessResponse[EmployeeResponse])
async def get_employee(
    employee_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> dict:
    return ok(await employee_service.get_employee(db, current_user.company_id, employee_id))


@router.patch("/{employee_id}", response_model=SuccessResponse[EmployeeResponse])
async def update_employee(
    employee_id: UUID,
    data: EmployeeUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> dict:
    result = await employee_service.update_employee(
        db, current_user.company_id, current_user.id, employee_id, data
    )
    await db.commit()
    return ok(result)


@router.delete("/{employee_id}", status_code=204)
async def delete_employee(
    employee_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> None:
    await employee_service.delete_employee(db, current_user.company_id, current_user.id, employee_id)
    await db.commit()
