"""근무 시간 유틸리티 — HH:mm(UTC) 파싱/포맷, 기간 및 휴식 간격 계산.

Shift time utilities — parse/format HH:mm UTC strings, dates, durations
and break gaps. Every function here is pure; the conflict analyzer and
business rules build on top of them.

Time strings cross the API boundary as zero-padded 24-hour "HH:mm" with
no timezone suffix ("09:00", "23:59"). Dates cross as "YYYY-MM-DD".
"""

import re
from datetime import date, datetime, time, timedelta, timezone

from app.utils.exceptions import InvalidTimeFormatError

# 24시간 HH:mm, 0 채움 필수 — Zero-padded 24-hour HH:mm, nothing else
_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")
_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

MINUTES_PER_DAY: int = 24 * 60


def validate_time_format(value: str) -> bool:
    """HH:mm 형식 검증 — 초, 'Z', '+00:00' 등 타임존 표기는 거부.

    Check that a string is a bare 24-hour HH:mm time.
    """
    if not isinstance(value, str):
        return False
    if "Z" in value or "+" in value or "-" in value:
        return False
    return bool(_TIME_RE.match(value))


def parse_time(value: str, field: str = "time") -> time:
    """HH:mm 문자열을 time 객체로 변환합니다.

    Parse an HH:mm string into a naive (UTC) time.

    Args:
        value: "HH:mm" 문자열 (Time string)
        field: 오류 메시지용 필드 이름 (Field name reported on failure)

    Returns:
        time: 파싱된 시각 (Parsed wall-clock time)

    Raises:
        InvalidTimeFormatError: 형식이 맞지 않을 때 (Malformed or tz-suffixed input)
    """
    if not validate_time_format(value):
        raise InvalidTimeFormatError(field, value if isinstance(value, str) else repr(value))
    hours, minutes = value.split(":")
    return time(int(hours), int(minutes))


def format_time(value: time) -> str:
    """time 객체를 HH:mm 문자열로 변환합니다 (parse_time의 역함수)."""
    return f"{value.hour:02d}:{value.minute:02d}"


def validate_date_format(value: str) -> bool:
    """YYYY-MM-DD 형식 및 실제 달력 날짜 여부 검증."""
    if not isinstance(value, str) or not _DATE_RE.match(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def parse_date(value: str, field: str = "date") -> date:
    """YYYY-MM-DD 문자열을 date 객체로 변환합니다.

    Raises:
        ValueError: 형식이 맞지 않을 때 (Malformed date string)
    """
    if not validate_date_format(value):
        raise ValueError(f"Invalid {field} format. Expected YYYY-MM-DD")
    return date.fromisoformat(value)


def format_date(value: date) -> str:
    return value.isoformat()


def to_minutes(value: time) -> int:
    """자정 기준 경과 분 — Minutes since midnight."""
    return value.hour * 60 + value.minute


def is_overnight(start: time, end: time) -> bool:
    """자정 넘김 여부 — True when end is not strictly after start.

    Equal start and end counts as overnight (a zero or 24-hour range).
    """
    return to_minutes(end) <= to_minutes(start)


def duration_minutes(start: time, end: time) -> int:
    """근무 길이(분) — 단순 차이, start < end 가정 (no wraparound)."""
    return to_minutes(end) - to_minutes(start)


def duration_hours(start: time, end: time) -> float:
    """근무 길이(시간) — 분 차이 / 60, 소수 둘째 자리 반올림."""
    return round(duration_minutes(start, end) / 60, 2)


def break_gap_minutes(earlier_end: time, later_start: time, days_apart: int) -> int:
    """서로 다른 날짜 근무 사이의 휴식 간격(분).

    Minutes between the end of a shift and the start of a shift that falls
    ``days_apart`` calendar days later. With ``days_apart=1`` an 18:00 end
    and a 06:00 start yield 720 minutes.
    """
    return days_apart * MINUTES_PER_DAY + to_minutes(later_start) - to_minutes(earlier_end)


def add_hours_to_time(value: str, hours: float) -> str:
    """HH:mm에 시간을 더한 결과 — 자정을 넘으면 순환합니다.

    Add (possibly fractional) hours to an HH:mm string, wrapping at midnight.
    """
    start = parse_time(value)
    total = (to_minutes(start) + round(hours * 60)) % MINUTES_PER_DAY
    return f"{total // 60:02d}:{total % 60:02d}"


def week_bounds(day: date) -> tuple[date, date]:
    """날짜가 속한 주(일요일~토요일) 범위 — Sunday..Saturday week containing day."""
    # weekday(): 월=0 ... 일=6 → 일요일부터의 경과 일수 (days since Sunday)
    week_start = day - timedelta(days=(day.weekday() + 1) % 7)
    return week_start, week_start + timedelta(days=6)


def utc_now() -> datetime:
    """현재 UTC 시각 — Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)
