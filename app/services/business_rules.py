"""회사 근무 규칙 검증 — 일일/주간 근무시간, 휴식시간, 야간 근무.

Business rule validation for a candidate shift against the company's
configured limits:

- overnight: end not strictly after start → error (always enforced)
- daily: same-day total over max_daily_hours → error; at 83% or more → warning
- break: gap to a shift on the previous or next day under min_break_hours → error
- weekly: Sunday-Saturday total over max_weekly_hours → warning

Only error-severity violations block a write.
"""

from datetime import date, time, timedelta
from typing import Iterable, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.repositories.shift_repository import shift_repository
from app.schemas.company_settings import CompanySettingsResponse
from app.schemas.shift import RuleViolation, ShiftValidationResult
from app.services.company_settings_service import company_settings_service
from app.services.conflict_analyzer import TimeRange
from app.utils.time_utils import (
    break_gap_minutes,
    duration_minutes,
    format_time,
    is_overnight,
    week_bounds,
)

# 일일 한도 경고 비율 — Warn once the day reaches this share of the limit
DAILY_WARNING_RATIO: float = 0.83


def rule_window(dates: Iterable[date]) -> tuple[date, date]:
    """규칙 평가에 필요한 조회 범위 — 첫 주 시작 전날부터 마지막 주 끝 다음날까지.

    Date range covering every shift the rules may look at for the given
    candidate dates: whole weeks plus one day on each side for break checks.
    """
    days = list(dates)
    first_week_start, _ = week_bounds(min(days))
    _, last_week_end = week_bounds(max(days))
    return first_week_start - timedelta(days=1), last_week_end + timedelta(days=1)


def _hours(minutes: int) -> float:
    return round(minutes / 60, 2)


def evaluate_business_rules(
    company_settings: CompanySettingsResponse,
    shift_date: date,
    start: time,
    end: time,
    employee_shifts: Sequence[TimeRange],
) -> ShiftValidationResult:
    """후보 근무에 회사 규칙을 적용합니다 (순수 함수).

    Evaluate the rules for one candidate. ``employee_shifts`` holds the
    employee's other shifts (each with ``shift_date``) and must cover
    ``rule_window([shift_date])``; the candidate itself must not be in it.

    Args:
        company_settings: 회사 설정 스냅샷 (Settings snapshot)
        shift_date: 후보 근무 날짜 (Candidate date)
        start: 후보 시작 시각 (Candidate start)
        end: 후보 종료 시각 (Candidate end)
        employee_shifts: 직원의 다른 근무 목록 (The employee's other shifts)

    Returns:
        ShiftValidationResult: 위반 목록과 일/주 합계 (Violations and totals)
    """
    if is_overnight(start, end):
        violation = RuleViolation(
            rule="overnight_not_allowed",
            severity="error",
            message=(
                f"Shift end {format_time(end)} must be after start {format_time(start)}; "
                "overnight shifts are not allowed"
            ),
        )
        return ShiftValidationResult(is_valid=False, violations=[violation])

    violations: list[RuleViolation] = []
    candidate_minutes = duration_minutes(start, end)

    # 일일 근무시간 — Daily total
    same_day = [s for s in employee_shifts if s.shift_date == shift_date]
    daily_minutes = candidate_minutes + sum(duration_minutes(s.start_time, s.end_time) for s in same_day)
    daily_hours = _hours(daily_minutes)
    max_daily = company_settings.max_daily_hours
    if daily_minutes > max_daily * 60:
        violations.append(RuleViolation(
            rule="max_daily_hours",
            severity="error",
            message=f"Daily hours {daily_hours:g}h exceed the limit of {max_daily:g}h",
        ))
    elif daily_minutes >= max_daily * 60 * DAILY_WARNING_RATIO:
        violations.append(RuleViolation(
            rule="approaching_daily_limit",
            severity="warning",
            message=f"Daily hours {daily_hours:g}h are close to the limit of {max_daily:g}h",
        ))

    # 휴식시간 — Break against previous/next calendar day
    min_break_minutes = company_settings.min_break_hours * 60
    previous_day = shift_date - timedelta(days=1)
    next_day = shift_date + timedelta(days=1)
    for other in employee_shifts:
        if other.shift_date == previous_day:
            gap = break_gap_minutes(other.end_time, start, days_apart=1)
        elif other.shift_date == next_day:
            gap = break_gap_minutes(end, other.start_time, days_apart=1)
        else:
            continue
        if gap < min_break_minutes:
            violations.append(RuleViolation(
                rule="min_break_hours",
                severity="error",
                message=(
                    f"Only {_hours(gap):g}h break against the shift on {other.shift_date.isoformat()} "
                    f"({format_time(other.start_time)}-{format_time(other.end_time)}); "
                    f"minimum is {company_settings.min_break_hours:g}h"
                ),
            ))

    # 주간 근무시간 — Sunday..Saturday total
    week_start, week_end = week_bounds(shift_date)
    weekly_minutes = candidate_minutes + sum(
        duration_minutes(s.start_time, s.end_time)
        for s in employee_shifts
        if week_start <= s.shift_date <= week_end
    )
    weekly_hours = _hours(weekly_minutes)
    max_weekly = company_settings.max_weekly_hours
    if weekly_minutes > max_weekly * 60:
        violations.append(RuleViolation(
            rule="max_weekly_hours",
            severity="warning",
            message=f"Weekly hours {weekly_hours:g}h exceed the limit of {max_weekly:g}h",
        ))

    return ShiftValidationResult(
        is_valid=not any(v.severity == "error" for v in violations),
        violations=violations,
        daily_hours=daily_hours,
        weekly_hours=weekly_hours,
    )


class BusinessRuleService:
    """규칙 검증 서비스 — 설정과 직원 근무를 불러와 evaluate_business_rules 호출."""

    async def validate(
        self,
        db: AsyncSession,
        company_id: UUID,
        employee_id: UUID,
        shift_date: date,
        start: time,
        end: time,
        exclude_shift_ids: Iterable[UUID] = (),
        extra_shifts: Iterable[TimeRange] = (),
    ) -> ShiftValidationResult:
        """후보 근무를 회사 규칙으로 검증합니다.

        Load the company's settings and the employee's shifts around the
        date, then evaluate the rules.

        Args:
            exclude_shift_ids: 제외할 근무 (Shifts to ignore, e.g. the one being edited)
            extra_shifts: 아직 저장되지 않은 근무 (Unsaved shifts to count as well)
        """
        company_settings = await company_settings_service.get_settings(db, company_id)
        date_from, date_to = rule_window([shift_date])
        existing = await shift_repository.get_for_employee_between(
            db, employee_id, date_from, date_to, exclude_ids=exclude_shift_ids
        )
        return evaluate_business_rules(
            company_settings, shift_date, start, end, [*existing, *extra_shifts]
        )


business_rule_service: BusinessRuleService = BusinessRuleService()
