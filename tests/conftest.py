"""테스트 인프라 — 임시 SQLite DB, 세션, httpx 클라이언트 픽스처.

Test infrastructure — Temporary database, session, and httpx client fixtures.
Each test gets a fresh SQLite file under ``tmp_path`` (set TEST_DATABASE_URL
to run against PostgreSQL instead). The app gets a new session per request,
like production, so concurrent requests really use separate connections.
"""

import os

# 설정은 임포트 시점에 읽히므로 storefront 임포트 전에 환경 변수를 지정
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./storefront-dev.db")
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["TOKEN_SWEEP_INTERVAL_SECONDS"] = "0"
os.environ["ENVIRONMENT"] = "test"
os.environ["AXIOM_API_TOKEN"] = ""
os.environ["AXIOM_DATASET"] = ""
os.environ["LOG_JSON"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"

from collections.abc import AsyncGenerator  # noqa: E402
from typing import Any  # noqa: E402

import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient, Response  # noqa: E402
from sqlalchemy import event  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from storefront.config import settings  # noqa: E402
from storefront.database import Base, get_db  # noqa: E402
from storefront.main import app  # noqa: E402
from storefront.models import *  # noqa: F401,F403,E402 — register all models with metadata
from storefront.models.user import Role, User  # noqa: E402
from storefront.utils.password import hash_password  # noqa: E402

TEST_DATABASE_URL: str | None = os.environ.get("TEST_DATABASE_URL")

USER_EMAIL = "alice@example.com"
USER_PASSWORD = "alice-password"
ADMIN_EMAIL = "root@example.com"
ADMIN_PASSWORD = "root-password"


def _enable_sqlite_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


# ---------------------------------------------------------------------------
# Function-scoped: 엔진, 세션, 클라이언트
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """테스트용 async 엔진. 매 테스트마다 스키마를 새로 생성합니다."""
    url = TEST_DATABASE_URL or f"sqlite+aiosqlite:///{tmp_path / 'storefront_test.db'}"
    eng = create_async_engine(url, echo=False)
    if eng.dialect.name == "sqlite":
        event.listen(eng.sync_engine, "connect", _enable_sqlite_foreign_keys)

    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield eng

    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await eng.dispose()


@pytest_asyncio.fixture
async def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """테스트 엔진에 묶인 세션 팩토리."""
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncSession, None]:
    """테스트 코드에서 직접 사용하는 DB 세션."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncClient, None]:
    """FastAPI 테스트 클라이언트 — 요청마다 새 DB 세션을 사용합니다."""
    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# 헬퍼 픽스처: 테스트용 데이터 생성
# ---------------------------------------------------------------------------
async def create_user(
    db: AsyncSession,
    email: str,
    password: str,
    *,
    name: str = "Test User",
    role: Role = Role.USER,
    password_change_required: bool = False,
) -> User:
    """사용자를 생성하고 커밋합니다."""
    user = User(
        email=email,
        name=name,
        password_hash=hash_password(password),
        role=role.value,
        password_change_required=password_change_required,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


@pytest_asyncio.fixture
async def user(db: AsyncSession) -> User:
    """일반 사용자를 생성합니다."""
    return await create_user(db, USER_EMAIL, USER_PASSWORD, name="Alice")


@pytest_asyncio.fixture
async def admin(db: AsyncSession) -> User:
    """관리자 사용자를 생성합니다."""
    return await create_user(db, ADMIN_EMAIL, ADMIN_PASSWORD, name="Root", role=Role.ADMIN)


def auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def refresh_cookie_header(token: str) -> dict[str, str]:
    return {"Cookie": f"{settings.REFRESH_COOKIE_NAME}={token}"}


def refresh_cookie_from(res: Response) -> str | None:
    """Set-Cookie 헤더에서 리프레시 토큰 값을 꺼냅니다."""
    for header in res.headers.get_list("set-cookie"):
        name, _, rest = header.partition("=")
        if name.strip() == settings.REFRESH_COOKIE_NAME:
            return rest.split(";", 1)[0].strip('"')
    return None


async def login(client: AsyncClient, email: str, password: str) -> Response:
    """로그인하고 클라이언트 쿠키 저장소를 비웁니다 (쿠키는 테스트가 명시적으로 전달)."""
    res = await client.post("/auth/login", json={"email": email, "password": password})
    client.cookies.clear()
    return res


@pytest_asyncio.fixture
async def user_session(client: AsyncClient, user: User) -> dict[str, str]:
    """일반 사용자로 로그인한 세션 — {"access": ..., "refresh": ...}."""
    res = await login(client, USER_EMAIL, USER_PASSWORD)
    assert res.status_code == 200
    return {"access": res.json()["accessToken"], "refresh": refresh_cookie_from(res)}


@pytest_asyncio.fixture
async def admin_token(client: AsyncClient, admin: User) -> str:
    """관리자 액세스 토큰."""
    res = await login(client, ADMIN_EMAIL, ADMIN_PASSWORD)
    assert res.status_code == 200
    return res.json()["accessToken"]
