"""초기 데이터 시드 스크립트 — 회사, 역할, 소유자 계정, 기본 근무 규칙 생성.

Seed script — Creates the initial company, roles, owner account and the
company's default scheduling settings.
Run this script once to bootstrap the database with required initial data.

Usage:
    python -m app.seed

Creates:
    - 1개 회사: "Demo Company" (1 company)
    - 3개 역할: owner(1), admin(2), employee(3) (3 roles)
    - 1개 소유자 계정: owner / owner1234 (1 owner user)
    - 회사 근무 규칙 기본값 (Default company settings: 12h/day, 40h/week, 11h break)
"""

import asyncio
import logging
from decimal import Decimal

from sqlalchemy import select

from app.database import async_session, engine, Base
from app.models import Company, CompanySettings, Role, User
from app.models.user import LEVEL_ADMIN, LEVEL_EMPLOYEE, LEVEL_OWNER
from app.schemas.company_settings import (
    DEFAULT_ALLOW_OVERNIGHT,
    DEFAULT_MAX_DAILY_HOURS,
    DEFAULT_MAX_WEEKLY_HOURS,
    DEFAULT_MIN_BREAK_HOURS,
    DEFAULT_TIMEZONE,
)
from app.utils.password import hash_password

logger = logging.getLogger(__name__)


async def seed() -> None:
    """데이터베이스를 초기 데이터로 시드합니다.

    Seed the database with initial data.
    Creates tables if they don't exist, then inserts the initial
    company, role hierarchy, owner user and default settings.

    Idempotent: 이미 시드된 경우 건너뜁니다 (Skips if already seeded).
    """
    # 테이블 생성 — DDL 실행 (Create all tables from ORM metadata)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session() as db:
        # 회사가 하나라도 있으면 건너뜀 (Already seeded when any company exists)
        result = await db.execute(select(Company).limit(1))
        if result.scalar_one_or_none():
            logger.info("Already seeded. Skipping.")
            return

        company: Company = Company(name="Demo Company")
        db.add(company)
        await db.flush()  # flush로 company.id 생성 (Flush to generate company.id)

        # 역할 계층 생성 — Create role hierarchy (level 1=owner ~ 3=employee)
        roles_data: list[tuple[str, int]] = [
            ("owner", LEVEL_OWNER),
            ("admin", LEVEL_ADMIN),
            ("employee", LEVEL_EMPLOYEE),
        ]
        roles: dict[str, Role] = {}
        for name, level in roles_data:
            role: Role = Role(company_id=company.id, name=name, level=level)
            db.add(role)
            await db.flush()
            roles[name] = role

        owner: User = User(
            company_id=company.id,
            role_id=roles["owner"].id,
            username="owner",
            full_name="Company Owner",
            email="owner@example.com",
            password_hash=hash_password("owner1234"),
            is_active=True,
        )
        db.add(owner)

        db.add(CompanySettings(
            company_id=company.id,
            max_daily_hours=Decimal(str(DEFAULT_MAX_DAILY_HOURS)),
            max_weekly_hours=Decimal(str(DEFAULT_MAX_WEEKLY_HOURS)),
            min_break_hours=Decimal(str(DEFAULT_MIN_BREAK_HOURS)),
            allow_overnight_shifts=DEFAULT_ALLOW_OVERNIGHT,
            timezone=DEFAULT_TIMEZONE,
        ))

        await db.commit()
        logger.info("Seeded: company=%s code=%s, owner user=owner/owner1234", company.id, company.code)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    asyncio.run(seed())
