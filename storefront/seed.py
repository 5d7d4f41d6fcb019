"""초기 데이터 시드 스크립트 — 테이블 및 관리자 계정 생성.

Seed script — Creates the tables and the initial admin account.
Run this script once to bootstrap the database.

Usage:
    python -m storefront.seed

Creates:
    - 1개 관리자 계정: admin@admin.local / admin123, 첫 로그인 후 비밀번호 변경 필요
      (1 admin user that must change its password after the first login)
"""

import asyncio

from sqlalchemy.ext.asyncio import AsyncSession

from storefront.database import Base, async_session, engine
from storefront.logging import get_logger
from storefront.models import Role, User
from storefront.repositories.user_repository import user_repository
from storefront.utils.password import hash_password

logger = get_logger(__name__)

ADMIN_EMAIL: str = "admin@admin.local"
ADMIN_PASSWORD: str = "admin123"
ADMIN_NAME: str = "Admin"


async def seed_admin(db: AsyncSession) -> User | None:
    """관리자 계정이 없으면 생성합니다.

    Create the initial admin unless an account with its email already
    exists. Returns the created user, or None when skipped.
    """
    if await user_repository.get_by_email(db, ADMIN_EMAIL) is not None:
        return None

    admin: User = await user_repository.create(
        db,
        {
            "email": ADMIN_EMAIL,
            "name": ADMIN_NAME,
            "password_hash": hash_password(ADMIN_PASSWORD),
            "role": Role.ADMIN.value,
            "password_change_required": True,
        },
    )
    await db.commit()
    return admin


async def seed() -> None:
    """데이터베이스를 초기 데이터로 시드합니다.

    Seed the database with initial data.
    Creates tables if they don't exist, then inserts the admin user.

    Idempotent: 이미 시드된 경우 건너뜁니다 (Skips if already seeded).
    """
    # 테이블 생성 — DDL 실행 (Create all tables from ORM metadata)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session() as db:
        admin: User | None = await seed_admin(db)

    if admin is None:
        logger.info("seed_skipped", reason="admin already exists")
    else:
        logger.info("seed_completed", admin_email=ADMIN_EMAIL, admin_id=str(admin.id))
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(seed())
