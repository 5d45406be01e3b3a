"""테스트 인프라 — 테스트 DB 엔진, 세션, httpx 클라이언트 픽스처.

Test infrastructure — Test database engine, session, and httpx client fixtures.
TEST_DATABASE_URL selects the database (e.g. a throwaway PostgreSQL
database); it defaults to an in-memory SQLite database shared through a
single connection. The schema is created fresh for every test.

Each API request gets its own session, exactly like app.database.get_db:
routers commit, failures roll back. Fixtures commit their rows so a failed
request never takes the test data with it.
"""

import os
import uuid
from collections.abc import AsyncGenerator
from datetime import date, time

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db
from app.main import app
from app.models import *  # noqa: F401,F403 — register all models with metadata
from app.models.user import LEVEL_ADMIN, LEVEL_EMPLOYEE, LEVEL_OWNER
from app.utils.jwt import create_access_token
from app.utils.password import hash_password

# ---------------------------------------------------------------------------
# 테스트 DB 설정
# ---------------------------------------------------------------------------
TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        # 모든 세션이 같은 인메모리 DB를 보도록 단일 연결 공유
        return {"connect_args": {"check_same_thread": False}, "poolclass": StaticPool}
    return {"pool_pre_ping": True}


# ---------------------------------------------------------------------------
# Function-scoped: 엔진, 세션, 클라이언트
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """테스트용 async 엔진. 매 테스트마다 스키마를 새로 만들고 지웁니다."""
    eng = create_async_engine(TEST_DATABASE_URL, echo=False, **_engine_options(TEST_DATABASE_URL))
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield eng

    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await eng.dispose()


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """회사 설정 캐시는 프로세스 전역 — 테스트 간 공유 방지."""
    from app.services.company_settings_service import company_settings_service

    company_settings_service.cache.clear()
    yield
    company_settings_service.cache.clear()


@pytest_asyncio.fixture
async def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """픽스처 데이터 생성 및 검증 조회용 세션."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """FastAPI 테스트 클라이언트 — 요청마다 테스트 DB 세션을 엽니다."""
    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = _override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# 헬퍼 픽스처: 테스트용 데이터 생성
# ---------------------------------------------------------------------------
async def _create_company(db: AsyncSession, name: str, code: str):
    from app.models.company import Company
    from app.models.user import Role

    company = Company(name=name, code=code)
    db.add(company)
    await db.flush()
    roles = {}
    for role_name, level in [("owner", LEVEL_OWNER), ("admin", LEVEL_ADMIN), ("employee", LEVEL_EMPLOYEE)]:
        role = Role(company_id=company.id, name=role_name, level=level)
        db.add(role)
        roles[role_name] = role
    await db.commit()
    return company, roles


async def _create_user(db: AsyncSession, company, role, username: str, password: str):
    from app.models.user import User

    user = User(
        company_id=company.id,
        role_id=role.id,
        username=username,
        full_name=f"Test {username.capitalize()}",
        password_hash=hash_password(password),
        email=f"{username}@test.com",
    )
    db.add(user)
    await db.commit()
    return user


async def _create_employee(db: AsyncSession, company, full_name: str, **fields):
    from app.models.employee import Employee

    employee = Employee(company_id=company.id, full_name=full_name, **fields)
    db.add(employee)
    await db.commit()
    return employee


@pytest_asyncio.fixture
async def company_roles(db: AsyncSession):
    """테스트 회사와 기본 3개 역할을 생성합니다."""
    return await _create_company(db, "Test Corp", "TEST01")


@pytest.fixture
def company(company_roles):
    return company_roles[0]


@pytest.fixture
def roles(company_roles):
    return company_roles[1]


@pytest_asyncio.fixture
async def admin_user(db: AsyncSession, company, roles):
    """관리자 사용자를 생성합니다."""
    return await _create_user(db, company, roles["admin"], "admin", "admin123!")


@pytest_asyncio.fixture
async def owner_user(db: AsyncSession, company, roles):
    return await _create_user(db, company, roles["owner"], "owner", "owner123!")


@pytest_asyncio.fixture
async def staff_user(db: AsyncSession, company, roles):
    """직원 레벨 로그인을 생성합니다."""
    return await _create_user(db, company, roles["employee"], "staff", "staff123!")


@pytest_asyncio.fixture
async def employee(db: AsyncSession, company):
    return await _create_employee(db, company, "Alice Kim", position="Barista")


@pytest_asyncio.fixture
async def employee_b(db: AsyncSession, company):
    return await _create_employee(db, company, "Brian Lee", position="Cashier")


@pytest_asyncio.fixture
async def employee_c(db: AsyncSession, company):
    return await _create_employee(db, company, "Chloe Park")


@pytest_asyncio.fixture
async def other_company_roles(db: AsyncSession):
    """다른 테넌트 — 교차 회사 접근 테스트용."""
    return await _create_company(db, "Other Corp", "OTHR02")


@pytest.fixture
def other_company(other_company_roles):
    return other_company_roles[0]


@pytest_asyncio.fixture
async def other_admin_user(db: AsyncSession, other_company_roles):
    company, roles = other_company_roles
    return await _create_user(db, company, roles["admin"], "otheradmin", "other123!")


@pytest_asyncio.fixture
async def other_employee(db: AsyncSession, other_company):
    return await _create_employee(db, other_company, "Outsider Choi")


async def create_shift_row(
    db: AsyncSession,
    employee,
    shift_date: date,
    start: time,
    end: time,
    **fields,
):
    """DB에 근무를 직접 생성합니다 (API 검증 우회)."""
    from app.models.shift import Shift

    shift = Shift(
        company_id=employee.company_id,
        employee_id=employee.id,
        shift_date=shift_date,
        start_time=start,
        end_time=end,
        **fields,
    )
    db.add(shift)
    await db.commit()
    return shift


def make_token(user, role_name: str, role_level: int) -> str:
    """테스트용 JWT 액세스 토큰을 생성합니다."""
    return create_access_token({
        "sub": str(user.id),
        "company": str(user.company_id),
        "role": role_name,
        "level": role_level,
    })


@pytest.fixture
def admin_token(admin_user) -> str:
    return make_token(admin_user, "admin", LEVEL_ADMIN)


@pytest.fixture
def owner_token(owner_user) -> str:
    return make_token(owner_user, "owner", LEVEL_OWNER)


@pytest.fixture
def staff_token(staff_user) -> str:
    return make_token(staff_user, "employee", LEVEL_EMPLOYEE)


@pytest.fixture
def other_admin_token(other_admin_user) -> str:
    return make_token(other_admin_user, "admin", LEVEL_ADMIN)


def auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def random_uuid() -> str:
    return str(uuid.uuid4())
