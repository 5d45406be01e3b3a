"""근무 시간 유틸리티 테스트 — HH:mm 파싱, 기간, 휴식 간격, 주 범위.

Time utility tests — pure functions, no database.
"""

from datetime import date, time

import pytest

from app.utils.exceptions import InvalidTimeFormatError
from app.utils.time_utils import (
    add_hours_to_time,
    break_gap_minutes,
    duration_hours,
    duration_minutes,
    format_date,
    format_time,
    is_overnight,
    parse_date,
    parse_time,
    validate_date_format,
    validate_time_format,
    week_bounds,
)


class TestTimeFormat:

    @pytest.mark.parametrize("value", ["00:00", "09:00", "13:45", "23:59"])
    def test_valid_times(self, value):
        assert validate_time_format(value)
        assert format_time(parse_time(value)) == value

    @pytest.mark.parametrize(
        "value",
        ["9:00", "24:00", "12:60", "09:00:00", "09:00Z", "09:00+00:00", "09-00", "", "noon"],
    )
    def test_invalid_times(self, value):
        assert not validate_time_format(value)

    def test_parse_time_error_carries_field(self):
        with pytest.raises(InvalidTimeFormatError) as exc_info:
            parse_time("25:00", "start_time")
        err = exc_info.value
        assert err.status_code == 400
        assert err.code == "INVALID_TIME_FORMAT"
        assert err.metadata == {"field": "start_time", "value": "25:00"}

    def test_non_string_rejected(self):
        assert not validate_time_format(900)  # type: ignore[arg-type]
        with pytest.raises(InvalidTimeFormatError):
            parse_time(None)  # type: ignore[arg-type]


class TestDateFormat:

    def test_valid_date(self):
        assert validate_date_format("2024-02-29")
        assert parse_date("2024-02-29") == date(2024, 2, 29)
        assert format_date(date(2024, 6, 9)) == "2024-06-09"

    @pytest.mark.parametrize("value", ["2023-02-29", "2024-13-01", "2024/01/01", "20240101"])
    def test_invalid_dates(self, value):
        assert not validate_date_format(value)
        with pytest.raises(ValueError):
            parse_date(value)


class TestDurations:

    def test_duration(self):
        assert duration_minutes(time(9, 0), time(17, 30)) == 510
        assert duration_hours(time(9, 0), time(17, 30)) == 8.5
        assert duration_hours(time(9, 0), time(9, 20)) == 0.33

    def test_overnight(self):
        assert is_overnight(time(22, 0), time(6, 0))
        assert is_overnight(time(9, 0), time(9, 0))
        assert not is_overnight(time(9, 0), time(9, 1))

    def test_break_gap_across_days(self):
        """18:00 종료 → 다음날 06:00 시작 = 12시간."""
        assert break_gap_minutes(time(18, 0), time(6, 0), days_apart=1) == 720
        assert break_gap_minutes(time(22, 0), time(6, 0), days_apart=1) == 480

    def test_add_hours_wraps_midnight(self):
        assert add_hours_to_time("09:00", 8) == "17:00"
        assert add_hours_to_time("22:30", 2.5) == "01:00"
        assert add_hours_to_time("10:00", 0.25) == "10:15"


class TestWeekBounds:

    def test_sunday_to_saturday(self):
        # 2024-06-12 = 수요일 (Wednesday)
        assert week_bounds(date(2024, 6, 12)) == (date(2024, 6, 9), date(2024, 6, 15))

    def test_sunday_starts_its_own_week(self):
        assert week_bounds(date(2024, 6, 9)) == (date(2024, 6, 9), date(2024, 6, 15))

    def test_saturday_ends_week(self):
        assert week_bounds(date(2024, 6, 15)) == (date(2024, 6, 9), date(2024, 6, 15))
