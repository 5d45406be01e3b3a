"""회사 설정 서비스 — 근무 규칙 한도 조회/수정 및 캐시.

Company Settings Service — Reads and patches per-company shift limits.
Settings rows are created lazily with defaults on first read. Snapshots are
cached per company for a short TTL and invalidated on every write, once
at flush and again when the writing transaction commits.
"""

import logging
from decimal import Decimal
from uuid import UUID

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from app.config import settings as app_settings
from app.models.company import CompanySettings
from app.repositories.audit_repository import audit_repository
from app.repositories.company_repository import company_settings_repository
from app.schemas.company_settings import (
    DEFAULT_ALLOW_OVERNIGHT,
    DEFAULT_MAX_DAILY_HOURS,
    DEFAULT_MAX_WEEKLY_HOURS,
    DEFAULT_MIN_BREAK_HOURS,
    DEFAULT_TIMEZONE,
    CompanySettingsResponse,
    CompanySettingsUpdate,
)
from app.utils.cache import MemoryCache

logger = logging.getLogger(__name__)

_DECIMAL_FIELDS: tuple[str, ...] = ("max_daily_hours", "max_weekly_hours", "min_break_hours")


def _json_safe(values: dict) -> dict:
    return {k: float(v) if isinstance(v, Decimal) else v for k, v in values.items()}


def _cache_key(company_id: UUID) -> str:
    return f"company_settings:{company_id}"


class CompanySettingsService:
    """회사 설정 서비스.

    Args:
        cache: 설정 스냅샷 캐시 (Snapshot cache; injected so tests can own it)
    """

    def __init__(self, cache: MemoryCache) -> None:
        self.cache: MemoryCache = cache

    def _to_response(self, row: CompanySettings) -> CompanySettingsResponse:
        return CompanySettingsResponse(
            company_id=str(row.company_id),
            max_daily_hours=float(row.max_daily_hours),
            max_weekly_hours=float(row.max_weekly_hours),
            min_break_hours=float(row.min_break_hours),
            allow_overnight_shifts=row.allow_overnight_shifts,
            timezone=row.timezone,
        )

    def get_defaults(self) -> dict:
        """기본 설정값 — Defaults used when a company has no settings yet."""
        return {
            "max_daily_hours": DEFAULT_MAX_DAILY_HOURS,
            "max_weekly_hours": DEFAULT_MAX_WEEKLY_HOURS,
            "min_break_hours": DEFAULT_MIN_BREAK_HOURS,
            "allow_overnight_shifts": DEFAULT_ALLOW_OVERNIGHT,
            "timezone": DEFAULT_TIMEZONE,
        }

    async def _get_or_create_row(self, db: AsyncSession, company_id: UUID) -> CompanySettings:
        row = await company_settings_repository.get_by_company(db, company_id)
        if row is None:
            logger.info("Creating default settings for company %s", company_id)
            defaults = self.get_defaults()
            for field in _DECIMAL_FIELDS:
                defaults[field] = Decimal(str(defaults[field]))
            row = await company_settings_repository.create(db, {"company_id": company_id, **defaults})
        return row

    async def get_settings(self, db: AsyncSession, company_id: UUID) -> CompanySettingsResponse:
        """회사 설정 스냅샷을 반환합니다 (캐시 우선, 없으면 기본값으로 생성).

        Return the company's settings snapshot, served from cache when fresh.
        A missing settings row is created with defaults.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            company_id: 회사 UUID (Company UUID)

        Returns:
            CompanySettingsResponse: 변경 불가 스냅샷 (Frozen snapshot)
        """
        key = _cache_key(company_id)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        snapshot = self._to_response(await self._get_or_create_row(db, company_id))
        self.cache.set(key, snapshot)
        return snapshot

    async def update_settings(
        self,
        db: AsyncSession,
        company_id: UUID,
        user_id: UUID,
        data: CompanySettingsUpdate,
    ) -> CompanySettingsResponse:
        """전달된 필드만 반영하여 설정을 수정하고 캐시를 무효화합니다.

        Apply a partial patch, then drop the cached snapshot so the next
        validation sees the new limits.
        """
        row = await self._get_or_create_row(db, company_id)
        update_data = data.model_dump(exclude_unset=True, exclude_none=True)
        for field in _DECIMAL_FIELDS:
            if field in update_data:
                update_data[field] = Decimal(str(update_data[field]))

        old_values = {field: getattr(row, field) for field in update_data}
        row = await company_settings_repository.update(db, row, update_data)
        self.invalidate(company_id)
        self._invalidate_after_commit(db, company_id)
        await audit_repository.record(
            db, company_id, user_id, "UPDATE", "company_settings", row.id,
            old_values=_json_safe(old_values), new_values=_json_safe(update_data),
        )
        logger.info("Company %s settings updated: %s", company_id, sorted(update_data))
        return self._to_response(row)

    def invalidate(self, company_id: UUID) -> None:
        self.cache.delete(_cache_key(company_id))

    def _invalidate_after_commit(self, db: AsyncSession, company_id: UUID) -> None:
        """커밋 직후 한 번 더 무효화.

        A concurrent request may cache the previously committed row between
        our flush and the router's commit; dropping the key again once the
        commit lands discards that snapshot.
        """
        def _on_commit(_session: Session) -> None:
            self.invalidate(company_id)

        event.listen(db.sync_session, "after_commit", _on_commit, once=True)


company_settings_service: CompanySettingsService = CompanySettingsService(
    MemoryCache(default_ttl=app_settings.COMPANY_SETTINGS_CACHE_TTL_SECONDS)
)
