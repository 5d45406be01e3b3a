"""근무 패턴 서비스 — 직원별 시간 조합 빈도 기록 및 추천.

Pattern Service — tracks how often each employee works a given
(start, end) pair and blends patterns, recent shifts and popular templates
into ranked time suggestions.

Confidence:
    pattern  → min(frequency * 10, 100)
    recent   → 30 (only consulted when fewer than 3 pattern suggestions)
    template → min(usage_count * 5, 80) (only while still short of the limit)
"""

import logging
from datetime import time, timedelta
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.shift import EmployeeShiftPattern
from app.repositories.employee_repository import employee_repository
from app.repositories.pattern_repository import pattern_repository
from app.repositories.shift_repository import shift_repository
from app.repositories.shift_template_repository import shift_template_repository
from app.schemas.shift import ShiftPatternResponse, ShiftSuggestion
from app.services.ownership import get_owned_or_raise
from app.utils.time_utils import duration_hours, format_time, utc_now

logger = logging.getLogger(__name__)

RECENT_CONFIDENCE: int = 30
MIN_PATTERN_SUGGESTIONS: int = 3


class PatternService:

    def _to_response(self, pattern: EmployeeShiftPattern) -> ShiftPatternResponse:
        return ShiftPatternResponse(
            id=str(pattern.id),
            employee_id=str(pattern.employee_id),
            start_time=format_time(pattern.start_time),
            end_time=format_time(pattern.end_time),
            frequency_count=pattern.frequency_count,
            last_used=pattern.last_used,
        )

    async def update_employee_pattern(
        self,
        db: AsyncSession,
        employee_id: UUID,
        start: time,
        end: time,
    ) -> EmployeeShiftPattern:
        """근무 생성 후 패턴 빈도를 증가시키거나 새로 기록합니다.

        Bump the frequency and last-used time of the employee's pair, or
        create it with frequency 1. Runs inside the caller's transaction.
        """
        pattern = await pattern_repository.find_pair(db, employee_id, start, end)
        if pattern is None:
            return await pattern_repository.create(db, {
                "employee_id": employee_id,
                "start_time": start,
                "end_time": end,
                "frequency_count": 1,
                "last_used": utc_now(),
            })
        return await pattern_repository.update(db, pattern, {
            "frequency_count": pattern.frequency_count + 1,
            "last_used": utc_now(),
        })

    async def get_employee_patterns(
        self,
        db: AsyncSession,
        company_id: UUID,
        employee_id: UUID,
        limit: int = 10,
    ) -> list[ShiftPatternResponse]:
        """직원의 자주 쓰는 시간 조합 — 빈도순, 최근 사용순."""
        await get_owned_or_raise(employee_repository, db, employee_id, company_id, "employee")
        patterns = await pattern_repository.get_top_for_employee(db, employee_id, limit)
        return [self._to_response(p) for p in patterns]

    async def get_suggestions(
        self,
        db: AsyncSession,
        company_id: UUID,
        employee_id: UUID,
        limit: int = 5,
    ) -> list[ShiftSuggestion]:
        """직원 근무 시간 추천 목록을 생성합니다.

        Build ranked time suggestions for an employee.

        Sources are consulted in order (patterns, recent shifts, templates),
        de-duplicated by exact time pair, then sorted by confidence and cut
        to ``limit``.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            company_id: 요청자 회사 UUID (Caller's company)
            employee_id: 대상 직원 UUID (Employee to suggest for)
            limit: 최대 추천 개수 (Maximum suggestions)

        Returns:
            list[ShiftSuggestion]: 신뢰도 내림차순 추천 (Suggestions, best first)
        """
        await get_owned_or_raise(employee_repository, db, employee_id, company_id, "employee")

        suggestions: list[ShiftSuggestion] = []
        seen: set[tuple[time, time]] = set()

        def add(start: time, end: time, **fields) -> None:
            if (start, end) in seen:
                return
            seen.add((start, end))
            suggestions.append(ShiftSuggestion(
                start_time=format_time(start),
                end_time=format_time(end),
                duration_hours=duration_hours(start, end),
                **fields,
            ))

        for pattern in await pattern_repository.get_top_for_employee(db, employee_id, limit):
            add(
                pattern.start_time,
                pattern.end_time,
                source="pattern",
                confidence=min(pattern.frequency_count * 10, 100),
                frequency_count=pattern.frequency_count,
            )

        if len(suggestions) < MIN_PATTERN_SUGGESTIONS:
            for start, end in await shift_repository.get_recent_time_pairs(db, employee_id, limit):
                add(start, end, source="recent", confidence=RECENT_CONFIDENCE)

        if len(suggestions) < limit:
            for template in await shift_template_repository.get_most_used(db, company_id, limit):
                add(
                    template.start_time,
                    template.end_time,
                    source="template",
                    confidence=min(template.usage_count * 5, 80),
                    label=template.name,
                )

        suggestions.sort(key=lambda s: s.confidence, reverse=True)
        return suggestions[:limit]

    async def cleanup_old_patterns(
        self,
        db: AsyncSession,
        company_id: UUID,
        max_frequency: int = 1,
        older_than_days: int = 90,
    ) -> int:
        """저빈도 오래된 패턴 정리 (수동 유지보수 작업).

        Delete the company's patterns used at most ``max_frequency`` times
        and not since ``older_than_days`` days ago. Returns the deleted count.
        """
        cutoff = utc_now() - timedelta(days=older_than_days)
        deleted = await pattern_repository.delete_stale(db, company_id, max_frequency, cutoff)
        logger.info(
            "Pattern cleanup for company %s removed %d row(s) (freq <= %d, unused since %s)",
            company_id, deleted, max_frequency, cutoff.date().isoformat(),
        )
        return deleted


pattern_service: PatternService = PatternService()
