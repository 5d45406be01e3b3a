"""직원 관련 Pydantic 요청/응답 스키마 정의.

Employee request/response schemas. An employee can optionally be created
together with a login (username + password) on the company's employee role.
"""

from datetime import datetime

from pydantic import BaseModel, Field, model_validator


class EmployeeCreate(BaseModel):
    """직원 생성 요청 스키마.

    Attributes:
        full_name: 이름 (Display name)
        position: 직무 (Job title, optional)
        username: 로그인 아이디, 선택 (Login username, optional)
        password: 로그인 비밀번호 (Required together with username)
        email: 이메일 (Optional, stored on the login)
    """

    full_name: str = Field(..., min_length=1, max_length=255)
    position: str | None = Field(default=None, max_length=100)
    username: str | None = Field(default=None, min_length=3, max_length=100)
    password: str | None = None
    email: str | None = None

    @model_validator(mode="after")
    def _login_pair(self) -> "EmployeeCreate":
        if (self.username is None) != (self.password is None):
            raise ValueError("username and password must be provided together")
        return self


class EmployeeUpdate(BaseModel):
    full_name: str | None = Field(default=None, min_length=1, max_length=255)
    position: str | None = Field(default=None, max_length=100)
    is_active: bool | None = None


class EmployeeResponse(BaseModel):
    id: str
    company_id: str
    user_id: str | None
    full_name: str
    position: str | None
    is_active: bool
    created_at: datetime
