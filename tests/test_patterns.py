"""근무 패턴/추천 API 테스트 — 빈도 기록, 신뢰도, 중복 제거, 정리 작업."""

from datetime import date, datetime, time, timedelta, timezone

from httpx import AsyncClient
from sqlalchemy import select

from app.models.shift import EmployeeShiftPattern, ShiftTemplate
from tests.conftest import auth_header, create_shift_row, random_uuid

URL = "/api/v1/admin/shifts"


async def post_shift(client, token, employee, day: str, start: str, end: str):
    res = await client.post(URL, json={
        "employee_id": str(employee.id),
        "shift_date": day,
        "start_time": start,
        "end_time": end,
    }, headers=auth_header(token))
    assert res.status_code == 201, res.text
    return res


async def add_template(db, company, name: str, start: time, end: time, usage: int) -> ShiftTemplate:
    template = ShiftTemplate(
        company_id=company.id, name=name, start_time=start, end_time=end, usage_count=usage,
    )
    db.add(template)
    await db.commit()
    return template


async def add_pattern(db, employee, start: time, end: time, frequency: int, days_ago: int) -> EmployeeShiftPattern:
    pattern = EmployeeShiftPattern(
        employee_id=employee.id,
        start_time=start,
        end_time=end,
        frequency_count=frequency,
        last_used=datetime.now(timezone.utc) - timedelta(days=days_ago),
    )
    db.add(pattern)
    await db.commit()
    return pattern


def pairs(suggestions: list[dict]) -> list[tuple[str, str]]:
    return [(s["start_time"], s["end_time"]) for s in suggestions]


class TestSuggestions:
    """근무 시간 추천 테스트."""

    async def test_frequent_pair_ranks_by_frequency(self, client: AsyncClient, admin_token, employee):
        for day in ["2024-06-10", "2024-06-11", "2024-06-12", "2024-06-13", "2024-06-14"]:
            await post_shift(client, admin_token, employee, day, "09:00", "17:00")

        res = await client.get(
            f"{URL}/suggestions", params={"employee_id": str(employee.id)}, headers=auth_header(admin_token)
        )
        assert res.status_code == 200
        suggestions = res.json()["data"]
        # 최근 근무도 같은 조합이므로 하나만 남음 — The recent pair repeats the pattern
        assert len(suggestions) == 1
        assert suggestions[0]["source"] == "pattern"
        assert suggestions[0]["confidence"] == 50
        assert suggestions[0]["frequency_count"] == 5
        assert suggestions[0]["duration_hours"] == 8

    async def test_recent_shifts_fill_in(self, client: AsyncClient, db, admin_token, employee):
        """패턴이 없으면 최근 근무 조합을 신뢰도 30으로 추천."""
        await create_shift_row(db, employee, date(2024, 6, 10), time(8), time(12))
        await create_shift_row(db, employee, date(2024, 6, 11), time(13), time(18))

        res = await client.get(
            f"{URL}/suggestions", params={"employee_id": str(employee.id)}, headers=auth_header(admin_token)
        )
        suggestions = res.json()["data"]
        assert pairs(suggestions) == [("13:00", "18:00"), ("08:00", "12:00")]
        assert {s["source"] for s in suggestions} == {"recent"}
        assert {s["confidence"] for s in suggestions} == {30}

    async def test_templates_fill_remaining_slots(self, client: AsyncClient, db, admin_token, company, employee):
        await add_template(db, company, "Morning", time(7), time(15), usage=20)
        await add_template(db, company, "Evening", time(15), time(23), usage=2)
        await post_shift(client, admin_token, employee, "2024-06-10", "09:00", "17:00")

        res = await client.get(
            f"{URL}/suggestions", params={"employee_id": str(employee.id)}, headers=auth_header(admin_token)
        )
        suggestions = res.json()["data"]
        assert [(s["source"], s["confidence"]) for s in suggestions] == [
            ("template", 80),
            ("pattern", 10),
            ("template", 10),
        ]
        assert suggestions[0]["label"] == "Morning"

    async def test_same_pair_is_suggested_once(self, client: AsyncClient, db, admin_token, company, employee):
        await add_template(db, company, "Standard", time(9), time(17), usage=100)
        await post_shift(client, admin_token, employee, "2024-06-10", "09:00", "17:00")

        res = await client.get(
            f"{URL}/suggestions", params={"employee_id": str(employee.id)}, headers=auth_header(admin_token)
        )
        suggestions = res.json()["data"]
        assert len(suggestions) == 1
        assert suggestions[0]["source"] == "pattern"

    async def test_limit(self, client: AsyncClient, db, admin_token, company, employee):
        for hour, usage in [(6, 1), (7, 4), (8, 8), (10, 12)]:
            await add_template(db, company, f"T{hour}", time(hour), time(hour + 4), usage=usage)

        res = await client.get(
            f"{URL}/suggestions",
            params={"employee_id": str(employee.id), "limit": 2},
            headers=auth_header(admin_token),
        )
        suggestions = res.json()["data"]
        assert [s["label"] for s in suggestions] == ["T10", "T8"]
        assert [s["confidence"] for s in suggestions] == [60, 40]

    async def test_no_history(self, client: AsyncClient, admin_token, employee):
        res = await client.get(
            f"{URL}/suggestions", params={"employee_id": str(employee.id)}, headers=auth_header(admin_token)
        )
        assert res.json()["data"] == []

    async def test_foreign_employee(self, client: AsyncClient, admin_token, other_employee):
        res = await client.get(
            f"{URL}/suggestions", params={"employee_id": str(other_employee.id)}, headers=auth_header(admin_token)
        )
        assert res.status_code == 403
        assert res.json()["error"]["code"] == "UNAUTHORIZED_COMPANY_ACCESS"

    async def test_unknown_employee(self, client: AsyncClient, admin_token):
        res = await client.get(
            f"{URL}/suggestions", params={"employee_id": random_uuid()}, headers=auth_header(admin_token)
        )
        assert res.status_code == 404


class TestPatterns:
    """근무 패턴 조회/정리 테스트."""

    async def test_patterns_sorted_by_frequency(self, client: AsyncClient, admin_token, employee):
        await post_shift(client, admin_token, employee, "2024-06-10", "10:00", "14:00")
        await post_shift(client, admin_token, employee, "2024-06-11", "09:00", "17:00")
        await post_shift(client, admin_token, employee, "2024-06-12", "09:00", "17:00")

        res = await client.get(f"{URL}/patterns/{employee.id}", headers=auth_header(admin_token))
        assert res.status_code == 200
        patterns = res.json()["data"]
        assert [(p["start_time"], p["end_time"], p["frequency_count"]) for p in patterns] == [
            ("09:00", "17:00", 2),
            ("10:00", "14:00", 1),
        ]

    async def test_only_creation_records_patterns(self, client: AsyncClient, admin_token, employee):
        """패턴은 생성 시에만 기록 — 시간 수정은 빈도에 반영하지 않음."""
        res = await post_shift(client, admin_token, employee, "2024-06-10", "09:00", "17:00")
        shift_id = res.json()["data"]["shift"]["id"]
        res = await client.put(f"{URL}/{shift_id}", json={"start_time": "10:00"}, headers=auth_header(admin_token))
        assert res.status_code == 200

        res = await client.get(f"{URL}/patterns/{employee.id}", headers=auth_header(admin_token))
        patterns = res.json()["data"]
        assert [(p["start_time"], p["end_time"], p["frequency_count"]) for p in patterns] == [
            ("09:00", "17:00", 1),
        ]

    async def test_foreign_employee_patterns(self, client: AsyncClient, admin_token, other_employee):
        res = await client.get(f"{URL}/patterns/{other_employee.id}", headers=auth_header(admin_token))
        assert res.status_code == 403

    async def test_cleanup_removes_stale_rare_patterns(
        self, client: AsyncClient, db, admin_token, employee, other_employee
    ):
        stale = await add_pattern(db, employee, time(6), time(10), frequency=1, days_ago=200)
        await add_pattern(db, employee, time(9), time(17), frequency=5, days_ago=200)
        await add_pattern(db, employee, time(12), time(16), frequency=1, days_ago=3)
        await add_pattern(db, other_employee, time(6), time(10), frequency=1, days_ago=200)

        res = await client.post(f"{URL}/patterns/cleanup", json={}, headers=auth_header(admin_token))
        assert res.status_code == 200
        assert res.json()["data"]["deleted_count"] == 1

        remaining = (await db.execute(select(EmployeeShiftPattern.id))).scalars().all()
        assert len(remaining) == 3
        assert stale.id not in remaining

    async def test_cleanup_thresholds(self, client: AsyncClient, db, admin_token, employee):
        await add_pattern(db, employee, time(6), time(10), frequency=3, days_ago=40)
        res = await client.post(
            f"{URL}/patterns/cleanup",
            json={"max_frequency": 3, "older_than_days": 30},
            headers=auth_header(admin_token),
        )
        assert res.json()["data"]["deleted_count"] == 1

    async def test_cleanup_requires_admin(self, client: AsyncClient, staff_token):
        res = await client.post(f"{URL}/patterns/cleanup", json={}, headers=auth_header(staff_token))
        assert res.status_code == 403
