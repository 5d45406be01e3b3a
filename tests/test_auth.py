"""인증 API 테스트 — 로그인, 토큰 갱신, 로그아웃, /me 엔드포인트.

Auth API tests — Login, token refresh rotation, logout, /me and the
role-level guards every shift endpoint relies on.
"""

from httpx import AsyncClient

from tests.conftest import auth_header, make_token

AUTH = "/api/v1/admin/auth"


class TestLogin:
    """로그인 테스트."""

    async def test_login_success(self, client: AsyncClient, admin_user, company):
        """회사 코드 포함 로그인 성공 — 성공 봉투에 토큰 쌍."""
        res = await client.post(f"{AUTH}/login", json={
            "username": "admin",
            "password": "admin123!",
            "company_code": company.code,
        })
        assert res.status_code == 200
        body = res.json()
        assert body["success"] is True
        assert body["data"]["access_token"]
        assert body["data"]["refresh_token"]
        assert body["data"]["token_type"] == "bearer"

    async def test_login_without_company_code(self, client: AsyncClient, admin_user):
        """회사가 하나뿐이면 회사 코드 없이 로그인."""
        res = await client.post(f"{AUTH}/login", json={"username": "admin", "password": "admin123!"})
        assert res.status_code == 200

    async def test_login_lowercase_company_code(self, client: AsyncClient, admin_user, company):
        res = await client.post(f"{AUTH}/login", json={
            "username": "admin",
            "password": "admin123!",
            "company_code": company.code.lower(),
        })
        assert res.status_code == 200

    async def test_login_wrong_password(self, client: AsyncClient, admin_user):
        res = await client.post(f"{AUTH}/login", json={"username": "admin", "password": "wrong"})
        assert res.status_code == 401
        body = res.json()
        assert body["success"] is False
        assert body["error"]["code"] == "UNAUTHORIZED"

    async def test_login_unknown_user(self, client: AsyncClient, company):
        res = await client.post(f"{AUTH}/login", json={"username": "ghost", "password": "whatever1"})
        assert res.status_code == 401

    async def test_login_invalid_company_code(self, client: AsyncClient, admin_user):
        res = await client.post(f"{AUTH}/login", json={
            "username": "admin",
            "password": "admin123!",
            "company_code": "ZZZZZZ",
        })
        assert res.status_code == 404
        assert res.json()["error"]["code"] == "RESOURCE_NOT_FOUND"

    async def test_login_inactive_user(self, client: AsyncClient, db, admin_user):
        """비활성 계정 로그인 실패."""
        admin_user.is_active = False
        await db.commit()

        res = await client.post(f"{AUTH}/login", json={"username": "admin", "password": "admin123!"})
        assert res.status_code == 401

    async def test_login_missing_fields(self, client: AsyncClient):
        """필수 필드 누락 — 400 VALIDATION_ERROR 봉투."""
        res = await client.post(f"{AUTH}/login", json={"username": "admin"})
        assert res.status_code == 400
        error = res.json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        assert error["metadata"]["errors"]


class TestRefreshAndLogout:
    """토큰 갱신 / 로그아웃 테스트."""

    async def _login(self, client: AsyncClient) -> dict:
        res = await client.post(f"{AUTH}/login", json={"username": "admin", "password": "admin123!"})
        return res.json()["data"]

    async def test_refresh_rotates_token(self, client: AsyncClient, admin_user):
        """갱신 시 새 토큰 발급, 사용한 토큰은 폐기."""
        tokens = await self._login(client)

        res = await client.post(f"{AUTH}/refresh", json={"refresh_token": tokens["refresh_token"]})
        assert res.status_code == 200
        new_tokens = res.json()["data"]
        assert new_tokens["refresh_token"] != tokens["refresh_token"]

        reused = await client.post(f"{AUTH}/refresh", json={"refresh_token": tokens["refresh_token"]})
        assert reused.status_code == 401

    async def test_refresh_invalid_token(self, client: AsyncClient, admin_user):
        res = await client.post(f"{AUTH}/refresh", json={"refresh_token": "not-a-token"})
        assert res.status_code == 401

    async def test_logout_revokes_refresh_token(self, client: AsyncClient, admin_user):
        tokens = await self._login(client)

        res = await client.post(f"{AUTH}/logout", json={"refresh_token": tokens["refresh_token"]})
        assert res.status_code == 204

        res = await client.post(f"{AUTH}/refresh", json={"refresh_token": tokens["refresh_token"]})
        assert res.status_code == 401


class TestMe:
    """현재 사용자 정보 테스트."""

    async def test_me_returns_auth_context(self, client: AsyncClient, admin_token, admin_user, company):
        res = await client.get(f"{AUTH}/me", headers=auth_header(admin_token))
        assert res.status_code == 200
        data = res.json()["data"]
        assert data["username"] == "admin"
        assert data["company_id"] == str(company.id)
        assert data["company_code"] == company.code
        assert data["role_level"] == 2
        assert data["employee_id"] is None

    async def test_me_includes_linked_employee(self, client: AsyncClient, db, staff_user, staff_token, company):
        """직원 로그인이면 연결된 employee_id 포함."""
        from app.models.employee import Employee

        linked = Employee(company_id=company.id, user_id=staff_user.id, full_name="Test Staff")
        db.add(linked)
        await db.commit()

        res = await client.get(f"{AUTH}/me", headers=auth_header(staff_token))
        assert res.status_code == 200
        assert res.json()["data"]["employee_id"] == str(linked.id)

    async def test_me_without_token(self, client: AsyncClient):
        res = await client.get(f"{AUTH}/me")
        assert res.status_code == 401
        assert res.json()["error"]["code"] == "UNAUTHORIZED"

    async def test_me_with_garbage_token(self, client: AsyncClient):
        res = await client.get(f"{AUTH}/me", headers=auth_header("garbage"))
        assert res.status_code == 401


class TestRoleGuards:
    """역할 레벨 권한 검사."""

    async def test_employee_level_cannot_manage_shifts(self, client: AsyncClient, staff_token):
        res = await client.get("/api/v1/admin/shifts", headers=auth_header(staff_token))
        assert res.status_code == 403
        assert res.json()["error"]["code"] == "FORBIDDEN"

    async def test_owner_can_manage_shifts(self, client: AsyncClient, owner_token):
        res = await client.get("/api/v1/admin/shifts", headers=auth_header(owner_token))
        assert res.status_code == 200

    async def test_refresh_token_rejected_as_access_token(self, client: AsyncClient, admin_user):
        from app.utils.jwt import create_refresh_token

        token = create_refresh_token({"sub": str(admin_user.id), "company": str(admin_user.company_id)})
        res = await client.get(f"{AUTH}/me", headers=auth_header(token))
        assert res.status_code == 401

    async def test_token_for_unknown_user(self, client: AsyncClient, admin_user):
        class Ghost:
            id = "00000000-0000-0000-0000-000000000000"
            company_id = admin_user.company_id

        res = await client.get(f"{AUTH}/me", headers=auth_header(make_token(Ghost, "admin", 2)))
        assert res.status_code == 401
