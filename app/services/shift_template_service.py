"""근무 템플릿 서비스 — Shift Template CRUD 및 사용 통계.

Shift Template Service — CRUD, usage counting and statistics for a
company's reusable shift time ranges.
"""

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.shift import ShiftTemplate
from app.repositories.audit_repository import audit_repository
from app.repositories.shift_template_repository import shift_template_repository
from app.schemas.shift_template import (
    ShiftTemplateCreate,
    ShiftTemplateResponse,
    ShiftTemplateUpdate,
    ShiftTemplateUsageStatistics,
)
from app.services.ownership import get_owned_or_raise
from app.utils.exceptions import DuplicateError, OvernightNotAllowedError
from app.utils.time_utils import duration_hours, format_time, is_overnight, parse_time

MOST_USED_LIMIT: int = 5


class ShiftTemplateService:

    def _to_response(self, template: ShiftTemplate) -> ShiftTemplateResponse:
        return ShiftTemplateResponse(
            id=str(template.id),
            company_id=str(template.company_id),
            name=template.name,
            description=template.description,
            start_time=format_time(template.start_time),
            end_time=format_time(template.end_time),
            duration_hours=duration_hours(template.start_time, template.end_time),
            usage_count=template.usage_count,
            created_by=str(template.created_by) if template.created_by else None,
            created_at=template.created_at,
            updated_at=template.updated_at,
        )

    async def _ensure_name_available(
        self, db: AsyncSession, company_id: UUID, name: str, exclude_id: UUID | None = None
    ) -> None:
        existing = await shift_template_repository.get_by_name(db, company_id, name)
        if existing is not None and existing.id != exclude_id:
            raise DuplicateError(
                f"Shift template '{name}' already exists",
                code="DUPLICATE_TEMPLATE_NAME",
            )

    async def get_template(self, db: AsyncSession, company_id: UUID, template_id: UUID) -> ShiftTemplate:
        """소유권 검증 후 템플릿 ORM 객체 반환 — 일괄 생성에서도 사용."""
        return await get_owned_or_raise(shift_template_repository, db, template_id, company_id, "shift template")

    async def get_detail(self, db: AsyncSession, company_id: UUID, template_id: UUID) -> ShiftTemplateResponse:
        return self._to_response(await self.get_template(db, company_id, template_id))

    async def list_templates(self, db: AsyncSession, company_id: UUID) -> list[ShiftTemplateResponse]:
        templates = await shift_template_repository.get_by_company(db, company_id)
        return [self._to_response(t) for t in templates]

    async def create_template(
        self, db: AsyncSession, company_id: UUID, user_id: UUID, data: ShiftTemplateCreate
    ) -> ShiftTemplateResponse:
        """템플릿 생성 — 이름 중복, 자정 넘김 시간 거부.

        Raises:
            InvalidTimeFormatError: 시간 형식 오류 (Malformed HH:mm)
            OvernightNotAllowedError: 종료가 시작보다 늦지 않을 때 (End not after start)
            DuplicateError: 같은 회사에 같은 이름 존재 (DUPLICATE_TEMPLATE_NAME)
        """
        start = parse_time(data.start_time, "start_time")
        end = parse_time(data.end_time, "end_time")
        if is_overnight(start, end):
            raise OvernightNotAllowedError(data.start_time, data.end_time)
        await self._ensure_name_available(db, company_id, data.name)

        template = await shift_template_repository.create(db, {
            "company_id": company_id,
            "name": data.name,
            "description": data.description,
            "start_time": start,
            "end_time": end,
            "usage_count": 0,
            "created_by": user_id,
        })
        await audit_repository.record(
            db, company_id, user_id, "CREATE", "shift_template", template.id,
            new_values={"name": template.name, "start_time": data.start_time, "end_time": data.end_time},
        )
        return self._to_response(template)

    async def update_template(
        self, db: AsyncSession, company_id: UUID, user_id: UUID, template_id: UUID, data: ShiftTemplateUpdate
    ) -> ShiftTemplateResponse:
        template = await self.get_template(db, company_id, template_id)
        update_data = data.model_dump(exclude_unset=True)

        if "start_time" in update_data and update_data["start_time"] is not None:
            update_data["start_time"] = parse_time(update_data["start_time"], "start_time")
        else:
            update_data.pop("start_time", None)
        if "end_time" in update_data and update_data["end_time"] is not None:
            update_data["end_time"] = parse_time(update_data["end_time"], "end_time")
        else:
            update_data.pop("end_time", None)
        if update_data.get("name") is None:
            update_data.pop("name", None)

        start = update_data.get("start_time", template.start_time)
        end = update_data.get("end_time", template.end_time)
        if is_overnight(start, end):
            raise OvernightNotAllowedError(format_time(start), format_time(end))
        if "name" in update_data and update_data["name"] != template.name:
            await self._ensure_name_available(db, company_id, update_data["name"], exclude_id=template.id)

        old_values = {
            "name": template.name,
            "start_time": format_time(template.start_time),
            "end_time": format_time(template.end_time),
        }
        template = await shift_template_repository.update(db, template, update_data)
        await audit_repository.record(
            db, company_id, user_id, "UPDATE", "shift_template", template.id,
            old_values=old_values,
            new_values={
                "name": template.name,
                "start_time": format_time(template.start_time),
                "end_time": format_time(template.end_time),
            },
        )
        return self._to_response(template)

    async def delete_template(self, db: AsyncSession, company_id: UUID, user_id: UUID, template_id: UUID) -> None:
        template = await self.get_template(db, company_id, template_id)
        await shift_template_repository.soft_delete(db, template)
        await audit_repository.record(
            db, company_id, user_id, "DELETE", "shift_template", template.id,
            old_values={"name": template.name},
        )

    async def increment_usage(
        self, db: AsyncSession, company_id: UUID, template_id: UUID, by: int = 1
    ) -> ShiftTemplateResponse:
        template = await self.get_template(db, company_id, template_id)
        template = await shift_template_repository.increment_usage(db, template, by)
        return self._to_response(template)

    async def get_usage_statistics(self, db: AsyncSession, company_id: UUID) -> ShiftTemplateUsageStatistics:
        """템플릿 사용 통계 — 총 개수, 사용 합계, 평균, 상위 5개."""
        count, total = await shift_template_repository.get_usage_totals(db, company_id)
        most_used = await shift_template_repository.get_most_used(db, company_id, MOST_USED_LIMIT)
        return ShiftTemplateUsageStatistics(
            total_templates=count,
            total_usage=total,
            average_usage=round(total / count, 2) if count else 0.0,
            most_used=[self._to_response(t) for t in most_used],
        )


shift_template_service: ShiftTemplateService = ShiftTemplateService()
