"""근무 API 테스트 — 생성 파이프라인, 충돌/규칙 오류, 수정/삭제/확정, 목록, 사전 검증.

Shift API tests. Covers the single-shift write pipeline (time parsing,
overnight rejection, tenancy, duplicate/overlap detection, business
rules), lifecycle operations, listing and the conflict dry run.
"""

from datetime import date, time

from httpx import AsyncClient
from sqlalchemy import select

from tests.conftest import auth_header, create_shift_row, random_uuid

URL = "/api/v1/admin/shifts"
DAY = "2024-06-12"  # 수요일 (Wednesday)
DAY_DATE = date(2024, 6, 12)


async def post_shift(client: AsyncClient, token: str, employee, start: str, end: str, day: str = DAY, **extra):
    return await client.post(URL, json={
        "employee_id": str(employee.id),
        "shift_date": day,
        "start_time": start,
        "end_time": end,
        **extra,
    }, headers=auth_header(token))


class TestCreateShift:
    """근무 생성 테스트."""

    async def test_create_and_read_back(self, client: AsyncClient, admin_token, admin_user, employee):
        """생성 후 조회 — 날짜와 HH:mm 그대로 왕복."""
        res = await post_shift(client, admin_token, employee, "09:00", "17:00", note="Opening")
        assert res.status_code == 201
        body = res.json()
        assert body["success"] is True
        shift = body["data"]["shift"]
        assert shift["shift_date"] == DAY
        assert shift["start_time"] == "09:00"
        assert shift["end_time"] == "17:00"
        assert shift["duration_hours"] == 8
        assert shift["status"] == "pending"
        assert shift["employee_name"] == "Alice Kim"
        assert shift["created_by"] == str(admin_user.id)
        assert body["data"]["warnings"] == []

        res = await client.get(f"{URL}/{shift['id']}", headers=auth_header(admin_token))
        assert res.status_code == 200
        fetched = res.json()["data"]
        assert (fetched["shift_date"], fetched["start_time"], fetched["end_time"]) == (DAY, "09:00", "17:00")
        assert fetched["note"] == "Opening"

    async def test_create_confirmed_sets_confirmer(self, client: AsyncClient, admin_token, admin_user, employee):
        res = await post_shift(client, admin_token, employee, "09:00", "17:00", status="confirmed")
        assert res.status_code == 201
        shift = res.json()["data"]["shift"]
        assert shift["status"] == "confirmed"
        assert shift["confirmed_by"] == str(admin_user.id)
        assert shift["confirmed_at"] is not None

    async def test_overnight_rejected(self, client: AsyncClient, admin_token, employee):
        res = await post_shift(client, admin_token, employee, "22:00", "06:00")
        assert res.status_code == 400
        error = res.json()["error"]
        assert error["code"] == "OVERNIGHT_NOT_ALLOWED"
        assert error["metadata"] == {"start_time": "22:00", "end_time": "06:00"}

    async def test_equal_start_and_end_rejected(self, client: AsyncClient, admin_token, employee):
        res = await post_shift(client, admin_token, employee, "09:00", "09:00")
        assert res.json()["error"]["code"] == "OVERNIGHT_NOT_ALLOWED"

    async def test_invalid_time_format(self, client: AsyncClient, admin_token, employee):
        res = await post_shift(client, admin_token, employee, "9:00", "17:00")
        assert res.status_code == 400
        error = res.json()["error"]
        assert error["code"] == "INVALID_TIME_FORMAT"
        assert error["metadata"]["field"] == "start_time"

    async def test_timezone_suffix_rejected(self, client: AsyncClient, admin_token, employee):
        res = await post_shift(client, admin_token, employee, "09:00Z", "17:00")
        assert res.json()["error"]["code"] == "INVALID_TIME_FORMAT"

    async def test_back_to_back_shifts_allowed(self, client: AsyncClient, admin_token, employee):
        """09-13 다음 13-17 — 경계 접촉은 겹침이 아님."""
        first = await post_shift(client, admin_token, employee, "09:00", "13:00")
        second = await post_shift(client, admin_token, employee, "13:00", "17:00")
        assert first.status_code == 201
        assert second.status_code == 201

    async def test_exact_duplicate(self, client: AsyncClient, admin_token, employee):
        await post_shift(client, admin_token, employee, "09:00", "17:00")
        res = await post_shift(client, admin_token, employee, "09:00", "17:00")
        assert res.status_code == 409
        error = res.json()["error"]
        assert error["code"] == "SHIFT_DUPLICATE"
        assert error["metadata"]["conflict"]["conflict_type"] == "duplicate"

    async def test_overlap(self, client: AsyncClient, admin_token, employee):
        await post_shift(client, admin_token, employee, "09:00", "13:00")
        res = await post_shift(client, admin_token, employee, "12:00", "16:00")
        assert res.status_code == 409
        error = res.json()["error"]
        assert error["code"] == "SHIFT_OVERLAP"
        conflict = error["metadata"]["conflict"]
        assert conflict["severity"] == "medium"
        assert conflict["conflicting_shifts"][0]["overlap_minutes"] == 60

    async def test_other_employee_same_time_is_fine(self, client: AsyncClient, admin_token, employee, employee_b):
        await post_shift(client, admin_token, employee, "09:00", "17:00")
        res = await post_shift(client, admin_token, employee_b, "09:00", "17:00")
        assert res.status_code == 201

    async def test_daily_limit_violation(self, client: AsyncClient, admin_token, employee):
        """4시간 + 9시간 = 13시간 → 일일 한도 12시간 초과."""
        await post_shift(client, admin_token, employee, "06:00", "10:00")
        res = await post_shift(client, admin_token, employee, "11:00", "20:00")
        assert res.status_code == 400
        error = res.json()["error"]
        assert error["code"] == "BUSINESS_RULE_VIOLATION"
        rules = [v["rule"] for v in error["metadata"]["violations"]]
        assert "max_daily_hours" in rules

    async def test_warning_does_not_block(self, client: AsyncClient, admin_token, employee):
        res = await post_shift(client, admin_token, employee, "08:00", "18:00")
        assert res.status_code == 201
        warnings = res.json()["data"]["warnings"]
        assert [w["rule"] for w in warnings] == ["approaching_daily_limit"]

    async def test_short_break_violation(self, client: AsyncClient, admin_token, employee):
        await post_shift(client, admin_token, employee, "14:00", "22:00", day="2024-06-11")
        res = await post_shift(client, admin_token, employee, "06:00", "10:00")
        assert res.status_code == 400
        rules = [v["rule"] for v in res.json()["error"]["metadata"]["violations"]]
        assert rules == ["min_break_hours"]

    async def test_foreign_employee(self, client: AsyncClient, admin_token, other_employee):
        res = await post_shift(client, admin_token, other_employee, "09:00", "17:00")
        assert res.status_code == 403
        assert res.json()["error"]["code"] == "UNAUTHORIZED_COMPANY_ACCESS"

    async def test_unknown_employee(self, client: AsyncClient, admin_token):
        res = await client.post(URL, json={
            "employee_id": random_uuid(),
            "shift_date": DAY,
            "start_time": "09:00",
            "end_time": "17:00",
        }, headers=auth_header(admin_token))
        assert res.status_code == 404

    async def test_inactive_employee(self, client: AsyncClient, db, admin_token, employee):
        employee.is_active = False
        await db.commit()
        res = await post_shift(client, admin_token, employee, "09:00", "17:00")
        assert res.status_code == 400

    async def test_writes_audit_and_pattern(self, client: AsyncClient, db, admin_token, employee):
        from app.models.audit import AuditLog
        from app.models.shift import EmployeeShiftPattern

        res = await post_shift(client, admin_token, employee, "09:00", "17:00")
        shift_id = res.json()["data"]["shift"]["id"]

        logs = (await db.execute(select(AuditLog).where(AuditLog.entity_type == "shift"))).scalars().all()
        assert [(log.action, str(log.entity_id)) for log in logs] == [("CREATE", shift_id)]
        assert logs[0].new_values["start_time"] == "09:00"

        patterns = (await db.execute(
            select(EmployeeShiftPattern).where(EmployeeShiftPattern.employee_id == employee.id)
        )).scalars().all()
        assert len(patterns) == 1
        assert patterns[0].frequency_count == 1

    async def test_rejected_write_leaves_no_trace(self, client: AsyncClient, db, admin_token, employee):
        from app.models.audit import AuditLog

        await post_shift(client, admin_token, employee, "09:00", "13:00")
        await post_shift(client, admin_token, employee, "12:00", "16:00")

        logs = (await db.execute(select(AuditLog))).scalars().all()
        assert len(logs) == 1


class TestShiftLifecycle:
    """근무 수정/삭제/확정 테스트."""

    async def _create(self, client, token, employee, start="09:00", end="17:00", day=DAY) -> str:
        res = await post_shift(client, token, employee, start, end, day=day)
        assert res.status_code == 201
        return res.json()["data"]["shift"]["id"]

    async def test_update_excludes_itself(self, client: AsyncClient, admin_token, employee):
        """자기 자신과는 충돌하지 않음 — 09-17 → 10-17."""
        shift_id = await self._create(client, admin_token, employee)
        res = await client.put(f"{URL}/{shift_id}", json={"start_time": "10:00"}, headers=auth_header(admin_token))
        assert res.status_code == 200
        shift = res.json()["data"]["shift"]
        assert shift["start_time"] == "10:00"
        assert shift["end_time"] == "17:00"

    async def test_update_into_overlap(self, client: AsyncClient, admin_token, employee):
        await self._create(client, admin_token, employee, "09:00", "12:00")
        shift_id = await self._create(client, admin_token, employee, "13:00", "17:00")
        res = await client.put(f"{URL}/{shift_id}", json={"start_time": "11:00"}, headers=auth_header(admin_token))
        assert res.status_code == 409
        assert res.json()["error"]["code"] == "SHIFT_OVERLAP"

    async def test_update_note_only(self, client: AsyncClient, admin_token, employee):
        shift_id = await self._create(client, admin_token, employee)
        res = await client.put(f"{URL}/{shift_id}", json={"note": "Bring keys"}, headers=auth_header(admin_token))
        assert res.status_code == 200
        data = res.json()["data"]
        assert data["shift"]["note"] == "Bring keys"
        assert data["shift"]["employee_name"] == "Alice Kim"

    async def test_update_to_overnight(self, client: AsyncClient, admin_token, employee):
        shift_id = await self._create(client, admin_token, employee)
        res = await client.put(f"{URL}/{shift_id}", json={"end_time": "08:00"}, headers=auth_header(admin_token))
        assert res.status_code == 400
        assert res.json()["error"]["code"] == "OVERNIGHT_NOT_ALLOWED"

    async def test_delete_then_recreate(self, client: AsyncClient, admin_token, employee):
        """소프트 삭제 후 같은 시간대 재생성 가능."""
        shift_id = await self._create(client, admin_token, employee)
        res = await client.delete(f"{URL}/{shift_id}", headers=auth_header(admin_token))
        assert res.status_code == 204

        res = await client.get(f"{URL}/{shift_id}", headers=auth_header(admin_token))
        assert res.status_code == 404

        res = await post_shift(client, admin_token, employee, "09:00", "17:00")
        assert res.status_code == 201

    async def test_confirm(self, client: AsyncClient, admin_token, admin_user, employee):
        shift_id = await self._create(client, admin_token, employee)
        res = await client.post(f"{URL}/{shift_id}/confirm", headers=auth_header(admin_token))
        assert res.status_code == 200
        data = res.json()["data"]
        assert data["status"] == "confirmed"
        assert data["confirmed_by"] == str(admin_user.id)

    async def test_confirm_cancelled_rejected(self, client: AsyncClient, admin_token, employee):
        shift_id = await self._create(client, admin_token, employee)
        await client.put(f"{URL}/{shift_id}", json={"status": "cancelled"}, headers=auth_header(admin_token))
        res = await client.post(f"{URL}/{shift_id}/confirm", headers=auth_header(admin_token))
        assert res.status_code == 400

    async def test_foreign_shift_access(self, client: AsyncClient, db, admin_token, other_employee):
        foreign = await create_shift_row(db, other_employee, DAY_DATE, time(9), time(17))
        for method, path in [("GET", f"{URL}/{foreign.id}"), ("DELETE", f"{URL}/{foreign.id}")]:
            res = await client.request(method, path, headers=auth_header(admin_token))
            assert res.status_code == 403
            assert res.json()["error"]["code"] == "UNAUTHORIZED_COMPANY_ACCESS"


class TestShiftStatus:
    """상태 전이 테스트 — 수정(PUT)과 확정 엔드포인트가 같은 규칙을 따름."""

    async def _create(self, client, token, employee, **extra) -> str:
        res = await post_shift(client, token, employee, "09:00", "17:00", **extra)
        assert res.status_code == 201
        return res.json()["data"]["shift"]["id"]

    async def test_put_confirmed_sets_confirmer(self, client: AsyncClient, admin_token, admin_user, employee):
        shift_id = await self._create(client, admin_token, employee)
        res = await client.put(f"{URL}/{shift_id}", json={"status": "confirmed"}, headers=auth_header(admin_token))
        assert res.status_code == 200
        shift = res.json()["data"]["shift"]
        assert shift["confirmed_by"] == str(admin_user.id)
        assert shift["confirmed_at"] is not None

    async def test_put_cannot_confirm_cancelled(self, client: AsyncClient, admin_token, employee):
        shift_id = await self._create(client, admin_token, employee)
        await client.put(f"{URL}/{shift_id}", json={"status": "cancelled"}, headers=auth_header(admin_token))

        res = await client.put(f"{URL}/{shift_id}", json={"status": "confirmed"}, headers=auth_header(admin_token))
        assert res.status_code == 400
        assert res.json()["error"]["code"] == "BAD_REQUEST"

        res = await client.get(f"{URL}/{shift_id}", headers=auth_header(admin_token))
        assert res.json()["data"]["status"] == "cancelled"

    async def test_leaving_confirmed_clears_confirmer(self, client: AsyncClient, admin_token, employee):
        shift_id = await self._create(client, admin_token, employee, status="confirmed")
        res = await client.put(f"{URL}/{shift_id}", json={"status": "pending"}, headers=auth_header(admin_token))
        assert res.status_code == 200
        shift = res.json()["data"]["shift"]
        assert shift["status"] == "pending"
        assert shift["confirmed_by"] is None
        assert shift["confirmed_at"] is None

    async def test_cancel_then_confirm_endpoint(self, client: AsyncClient, admin_token, employee):
        shift_id = await self._create(client, admin_token, employee, status="confirmed")
        res = await client.put(f"{URL}/{shift_id}", json={"status": "cancelled"}, headers=auth_header(admin_token))
        assert res.json()["data"]["shift"]["confirmed_by"] is None

        res = await client.post(f"{URL}/{shift_id}/confirm", headers=auth_header(admin_token))
        assert res.status_code == 400


class TestStorageFailures:
    """저장 단계 오류 변환 테스트 — 사전 검증을 통과한 쓰기."""

    async def test_unique_slot_violation_is_duplicate(
        self, client: AsyncClient, db, admin_token, employee, monkeypatch
    ):
        """동시 요청이 사전 검증 후 같은 근무를 먼저 저장한 경우."""
        from app.models.audit import AuditLog
        from app.models.shift import EmployeeShiftPattern, Shift
        from app.services.conflict_analyzer import analyze_conflicts

        await client.patch("/api/v1/admin/company-settings", json={"max_daily_hours": 24},
                           headers=auth_header(admin_token))
        existing = await create_shift_row(db, employee, DAY_DATE, time(9), time(17))
        # 사전 검증이 기존 근무를 보지 못한 상황 — The pre-check misses the stored row
        monkeypatch.setattr(
            "app.services.shift_service.analyze_conflicts",
            lambda start, end, existing_shifts: analyze_conflicts(start, end, []),
        )

        res = await post_shift(client, admin_token, employee, "09:00", "17:00")
        assert res.status_code == 409
        error = res.json()["error"]
        assert error["code"] == "SHIFT_DUPLICATE"
        assert error["metadata"] == {"detected_by": "storage_constraint"}

        shifts = (await db.execute(select(Shift))).scalars().all()
        assert [s.id for s in shifts] == [existing.id]
        logs = (await db.execute(select(AuditLog).where(AuditLog.entity_type == "shift"))).scalars().all()
        assert logs == []
        assert (await db.execute(select(EmployeeShiftPattern))).scalars().all() == []

    async def test_storage_error_is_transaction_failed(
        self, client: AsyncClient, db, admin_token, employee, monkeypatch
    ):
        from sqlalchemy.exc import OperationalError
        from sqlalchemy.ext.asyncio import AsyncSession

        from app.models.shift import Shift

        # 설정 행을 미리 생성 — Settings row exists before flush breaks
        await client.get("/api/v1/admin/company-settings", headers=auth_header(admin_token))

        async def broken_flush(self, objects=None):
            raise OperationalError("INSERT INTO shifts", {}, Exception("disk I/O error"))

        monkeypatch.setattr(AsyncSession, "flush", broken_flush)

        res = await post_shift(client, admin_token, employee, "09:00", "17:00")
        assert res.status_code == 500
        error = res.json()["error"]
        assert error["code"] == "TRANSACTION_FAILED"
        assert "disk" not in error["message"]

        monkeypatch.undo()
        assert (await db.execute(select(Shift))).scalars().all() == []


class TestListShifts:
    """근무 목록 테스트."""

    async def test_filters_and_pagination(self, client: AsyncClient, admin_token, employee, employee_b):
        await post_shift(client, admin_token, employee, "09:00", "13:00", day="2024-06-10")
        await post_shift(client, admin_token, employee, "09:00", "13:00", day="2024-06-11")
        await post_shift(client, admin_token, employee_b, "09:00", "13:00", day="2024-06-11")

        res = await client.get(URL, params={"employee_id": str(employee.id)}, headers=auth_header(admin_token))
        page = res.json()["data"]
        assert page["total"] == 2
        assert [s["shift_date"] for s in page["items"]] == ["2024-06-10", "2024-06-11"]

        res = await client.get(URL, params={"shift_date": "2024-06-11"}, headers=auth_header(admin_token))
        assert res.json()["data"]["total"] == 2

        res = await client.get(
            URL, params={"date_from": "2024-06-11", "date_to": "2024-06-30", "per_page": 1},
            headers=auth_header(admin_token),
        )
        page = res.json()["data"]
        assert page["total"] == 2
        assert len(page["items"]) == 1
        assert page["per_page"] == 1

    async def test_list_hides_other_company(self, client: AsyncClient, db, admin_token, employee, other_employee):
        await create_shift_row(db, other_employee, DAY_DATE, time(9), time(17))
        await post_shift(client, admin_token, employee, "09:00", "17:00")
        res = await client.get(URL, headers=auth_header(admin_token))
        assert res.json()["data"]["total"] == 1

    async def test_foreign_employee_filter(self, client: AsyncClient, admin_token, company, other_employee):
        res = await client.get(URL, params={"employee_id": str(other_employee.id)}, headers=auth_header(admin_token))
        assert res.status_code == 403

    async def test_per_page_limit(self, client: AsyncClient, admin_token):
        res = await client.get(URL, params={"per_page": 1000}, headers=auth_header(admin_token))
        assert res.status_code == 400
        assert res.json()["error"]["code"] == "VALIDATION_ERROR"


class TestValidateConflicts:
    """충돌 사전 검증 테스트 — 저장하지 않음."""

    async def test_dry_run(self, client: AsyncClient, db, admin_token, employee):
        from app.models.shift import Shift

        await post_shift(client, admin_token, employee, "09:00", "13:00")
        res = await client.post(f"{URL}/validate-conflicts", json={"shifts": [
            {"employee_id": str(employee.id), "shift_date": DAY, "start_time": "12:00", "end_time": "15:00"},
            {"employee_id": str(employee.id), "shift_date": "2024-06-13", "start_time": "09:00", "end_time": "12:00"},
            {"employee_id": str(employee.id), "shift_date": "2024-06-13", "start_time": "11:00", "end_time": "14:00"},
        ]}, headers=auth_header(admin_token))
        assert res.status_code == 200
        data = res.json()["data"]
        assert data["has_conflicts"] is True
        results = data["results"]
        assert results[0]["conflict"]["conflict_type"] == "overlap"
        assert results[1]["conflict"]["has_conflicts"] is False
        # 같은 요청 안의 앞선 후보와도 비교 — Earlier candidates count too
        assert results[2]["conflict"]["conflict_type"] == "overlap"

        count = len((await db.execute(select(Shift))).scalars().all())
        assert count == 1

    async def test_self_exclusion(self, client: AsyncClient, admin_token, employee):
        created = await post_shift(client, admin_token, employee, "09:00", "17:00")
        shift_id = created.json()["data"]["shift"]["id"]
        res = await client.post(f"{URL}/validate-conflicts", json={"shifts": [{
            "employee_id": str(employee.id), "shift_date": DAY,
            "start_time": "09:00", "end_time": "17:00", "exclude_shift_id": shift_id,
        }]}, headers=auth_header(admin_token))
        assert res.json()["data"]["has_conflicts"] is False

    async def test_overnight_reported_not_raised(self, client: AsyncClient, admin_token, employee):
        res = await client.post(f"{URL}/validate-conflicts", json={"shifts": [{
            "employee_id": str(employee.id), "shift_date": DAY, "start_time": "22:00", "end_time": "02:00",
        }]}, headers=auth_header(admin_token))
        assert res.status_code == 200
        data = res.json()["data"]
        assert data["has_blocking_violations"] is True
        assert data["results"][0]["validation"]["violations"][0]["rule"] == "overnight_not_allowed"
