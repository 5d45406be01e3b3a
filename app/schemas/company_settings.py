"""회사 근무 규칙 설정 Pydantic 스키마.

Company settings request/response schemas. The response model doubles as
the immutable snapshot kept in the settings cache.
"""

from pydantic import BaseModel, ConfigDict, Field

# 기본값 — Defaults applied when a company has no settings row yet
DEFAULT_MAX_DAILY_HOURS: float = 12.0
DEFAULT_MAX_WEEKLY_HOURS: float = 40.0
DEFAULT_MIN_BREAK_HOURS: float = 11.0
DEFAULT_ALLOW_OVERNIGHT: bool = False
DEFAULT_TIMEZONE: str = "UTC"


class CompanySettingsResponse(BaseModel):
    """회사 설정 스냅샷 (캐시 저장 대상, 변경 불가).

    Frozen snapshot of a company's limits; safe to share across requests.
    """

    model_config = ConfigDict(frozen=True)

    company_id: str
    max_daily_hours: float = DEFAULT_MAX_DAILY_HOURS
    max_weekly_hours: float = DEFAULT_MAX_WEEKLY_HOURS
    min_break_hours: float = DEFAULT_MIN_BREAK_HOURS
    allow_overnight_shifts: bool = DEFAULT_ALLOW_OVERNIGHT
    timezone: str = DEFAULT_TIMEZONE


class CompanySettingsUpdate(BaseModel):
    """회사 설정 부분 수정 — 전달된 필드만 반영 (Partial patch)."""

    max_daily_hours: float | None = Field(default=None, gt=0, le=24)
    max_weekly_hours: float | None = Field(default=None, gt=0, le=168)
    min_break_hours: float | None = Field(default=None, ge=0, le=24)
    allow_overnight_shifts: bool | None = None
    timezone: str | None = Field(default=None, min_length=1, max_length=50)
