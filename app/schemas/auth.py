"""인증 관련 Pydantic 요청/응답 스키마 정의.

Authentication-related Pydantic request/response schema definitions.
Covers login, token issuance/refresh, and current user info.
"""

from pydantic import BaseModel


class LoginRequest(BaseModel):
    """로그인 요청 스키마.

    Attributes:
        username: 사용자 로그인 아이디 (User login identifier)
        password: 비밀번호 (Plain text password, verified against bcrypt hash)
        company_code: 회사 코드 (Company code; required when the username exists in several companies)
    """

    username: str
    password: str
    company_code: str | None = None


class TokenResponse(BaseModel):
    """JWT 토큰 발급 응답 스키마.

    Attributes:
        access_token: JWT 액세스 토큰 (Short-lived access token)
        refresh_token: JWT 리프레시 토큰 (Long-lived refresh token)
        token_type: 토큰 유형 (Always "bearer")
    """

    access_token: str  # 만료: 30분 기본 (Default TTL: 30min)
    refresh_token: str  # 만료: 7일 기본 (Default TTL: 7 days)
    token_type: str = "bearer"


class RefreshRequest(BaseModel):
    refresh_token: str


class UserMeResponse(BaseModel):
    """현재 사용자 정보 (GET /auth/me) — 인증 컨텍스트 그대로 노출.

    Exposes the auth context the shift engine relies on:
    (user id, company id, employee id, role).
    """

    id: str
    username: str
    full_name: str
    email: str | None
    role_name: str
    role_level: int  # 1=owner, 2=admin, 3=employee
    company_id: str
    company_name: str
    company_code: str
    employee_id: str | None
    is_active: bool
