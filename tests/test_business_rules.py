"""회사 근무 규칙 테스트 — 일일/주간 한도, 휴식시간, 야간 근무.

Business rule tests against a settings snapshot; pure, no database.
"""

from datetime import date, time, timedelta

from app.schemas.company_settings import CompanySettingsResponse
from app.services.business_rules import evaluate_business_rules, rule_window
from app.services.conflict_analyzer import ShiftSlot

SETTINGS = CompanySettingsResponse(company_id="c0ffee")
# 2024-06-12 = 수요일, 주 범위 2024-06-09(일) ~ 2024-06-15(토)
WEDNESDAY = date(2024, 6, 12)


def slot(slot_id: str, day: date, start: time, end: time) -> ShiftSlot:
    return ShiftSlot(slot_id, day, start, end)


def rules_of(result) -> list[str]:
    return [v.rule for v in result.violations]


class TestOvernight:

    def test_overnight_is_single_error(self):
        result = evaluate_business_rules(SETTINGS, WEDNESDAY, time(22), time(6), [])
        assert not result.is_valid
        assert rules_of(result) == ["overnight_not_allowed"]
        assert result.errors[0].severity == "error"


class TestDailyHours:

    def test_within_limit(self):
        result = evaluate_business_rules(SETTINGS, WEDNESDAY, time(9), time(17), [])
        assert result.is_valid
        assert result.violations == []
        assert result.daily_hours == 8

    def test_exceeding_daily_limit_blocks(self):
        """기존 4시간 + 신규 9시간 = 13시간 > 12시간."""
        existing = [slot("a", WEDNESDAY, time(6), time(10))]
        result = evaluate_business_rules(SETTINGS, WEDNESDAY, time(11), time(20), existing)
        assert not result.is_valid
        assert "max_daily_hours" in rules_of(result)
        assert result.daily_hours == 13

    def test_approaching_daily_limit_warns(self):
        result = evaluate_business_rules(SETTINGS, WEDNESDAY, time(8), time(18), [])
        assert result.is_valid
        assert rules_of(result) == ["approaching_daily_limit"]
        assert result.warnings[0].severity == "warning"

    def test_exactly_at_limit_is_allowed(self):
        result = evaluate_business_rules(SETTINGS, WEDNESDAY, time(6), time(18), [])
        assert result.is_valid
        assert rules_of(result) == ["approaching_daily_limit"]

    def test_other_days_do_not_count(self):
        existing = [slot("a", WEDNESDAY - timedelta(days=2), time(6), time(18))]
        result = evaluate_business_rules(SETTINGS, WEDNESDAY, time(9), time(17), existing)
        assert result.daily_hours == 8


class TestBreak:

    def test_short_break_after_previous_day(self):
        """전날 22:00 종료 → 06:00 시작 = 8시간 휴식 < 11시간."""
        existing = [slot("prev", WEDNESDAY - timedelta(days=1), time(14), time(22))]
        result = evaluate_business_rules(SETTINGS, WEDNESDAY, time(6), time(10), existing)
        assert not result.is_valid
        assert rules_of(result) == ["min_break_hours"]

    def test_short_break_before_next_day(self):
        existing = [slot("next", WEDNESDAY + timedelta(days=1), time(6), time(10))]
        result = evaluate_business_rules(SETTINGS, WEDNESDAY, time(14), time(23), existing)
        assert not result.is_valid
        assert "min_break_hours" in rules_of(result)

    def test_enough_break(self):
        existing = [slot("prev", WEDNESDAY - timedelta(days=1), time(9), time(17))]
        result = evaluate_business_rules(SETTINGS, WEDNESDAY, time(9), time(17), existing)
        assert result.is_valid

    def test_zero_minimum_break_disables_rule(self):
        relaxed = SETTINGS.model_copy(update={"min_break_hours": 0})
        existing = [slot("prev", WEDNESDAY - timedelta(days=1), time(14), time(23, 59))]
        result = evaluate_business_rules(relaxed, WEDNESDAY, time(0), time(4), existing)
        assert result.is_valid


class TestWeeklyHours:

    def test_weekly_limit_only_warns(self):
        """월~금 8시간씩 40시간 + 토요일 4시간 → 경고만."""
        monday = date(2024, 6, 10)
        existing = [slot(f"d{i}", monday + timedelta(days=i), time(9), time(17)) for i in range(5)]
        saturday = date(2024, 6, 15)
        result = evaluate_business_rules(SETTINGS, saturday, time(9), time(13), existing)
        assert result.is_valid
        assert "max_weekly_hours" in rules_of(result)
        assert result.weekly_hours == 44

    def test_previous_week_not_counted(self):
        """일요일 시작 주 — 직전 토요일 근무는 제외."""
        sunday = date(2024, 6, 9)
        existing = [slot("sat", sunday - timedelta(days=1), time(6), time(8))]
        result = evaluate_business_rules(SETTINGS, sunday, time(9), time(17), existing)
        assert result.weekly_hours == 8


class TestRuleWindow:

    def test_single_date(self):
        assert rule_window([WEDNESDAY]) == (date(2024, 6, 8), date(2024, 6, 16))

    def test_spans_weeks(self):
        assert rule_window([date(2024, 6, 12), date(2024, 6, 20)]) == (date(2024, 6, 8), date(2024, 6, 23))
