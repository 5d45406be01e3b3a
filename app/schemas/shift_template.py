"""근무 템플릿 Pydantic 스키마.

Shift Template request/response schemas.
"""

from datetime import datetime

from pydantic import BaseModel, Field


class ShiftTemplateCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = None
    start_time: str  # "HH:mm"
    end_time: str  # "HH:mm"


class ShiftTemplateUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = None
    start_time: str | None = None
    end_time: str | None = None


class ShiftTemplateResponse(BaseModel):
    id: str
    company_id: str
    name: str
    description: str | None
    start_time: str
    end_time: str
    duration_hours: float
    usage_count: int
    created_by: str | None
    created_at: datetime
    updated_at: datetime


class ShiftTemplateUsageStatistics(BaseModel):
    """템플릿 사용 통계 — 개수, 합계, 평균, 상위 5개."""

    total_templates: int
    total_usage: int
    average_usage: float
    most_used: list[ShiftTemplateResponse]
