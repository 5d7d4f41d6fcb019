"""Axiom 로깅 미들웨어 테스트 — 이벤트 구성, 마스킹, 전송 실패 처리."""

from collections.abc import AsyncGenerator
from typing import Any

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from storefront.database import get_db
from storefront.main import app
from storefront.middleware.axiom_logging import AxiomLoggingMiddleware
from tests.conftest import USER_EMAIL


class _RecordingClient:
    """ingest_events 호출을 기록하는 Axiom 클라이언트 대역."""

    def __init__(self, fail: bool = False) -> None:
        self.events: list[dict[str, Any]] = []
        self.fail = fail

    def ingest_events(self, dataset: str, events: list[dict[str, Any]]) -> None:
        if self.fail:
            raise ConnectionError("axiom unreachable")
        self.events.extend(events)


@pytest_asyncio.fixture
async def recorder() -> _RecordingClient:
    return _RecordingClient()


async def _logged_client(
    session_factory: async_sessionmaker[AsyncSession], axiom: _RecordingClient
) -> AsyncGenerator[AsyncClient, None]:
    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db
    wrapped = AxiomLoggingMiddleware(app, client=axiom)
    async with AsyncClient(transport=ASGITransport(app=wrapped), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


class TestAxiomLogging:
    """Axiom 로깅 미들웨어 테스트."""

    async def test_error_event_masks_credentials(self, session_factory, user, recorder):
        """실패한 로그인 — 비밀번호 마스킹, 상태 코드와 사유 기록."""
        async for ac in _logged_client(session_factory, recorder):
            res = await ac.post("/auth/login", json={"email": USER_EMAIL, "password": "wrong"})
            assert res.status_code == 401
            assert res.json()["detail"] == "Invalid credentials"

        assert len(recorder.events) == 1
        event = recorder.events[0]
        assert event["method"] == "POST"
        assert event["path"] == "/auth/login"
        assert event["status_code"] == 401
        assert event["error"] == "Invalid credentials"
        assert event["request_body"] == {"email": USER_EMAIL, "password": "***"}
        assert event["duration_ms"] >= 0

    async def test_validation_error_detail_serialized(self, session_factory, recorder):
        """422 검증 오류 사유는 문자열로 기록."""
        async for ac in _logged_client(session_factory, recorder):
            res = await ac.post("/auth/register", json={"email": "bad", "name": "X", "password": "pw"})
            assert res.status_code == 422

        assert isinstance(recorder.events[0]["error"], str)
        assert recorder.events[0]["request_body"]["password"] == "***"

    async def test_health_not_logged(self, session_factory, recorder):
        """헬스 체크는 기록하지 않음."""
        async for ac in _logged_client(session_factory, recorder):
            assert (await ac.get("/health")).status_code == 200
        assert recorder.events == []

    async def test_ingest_failure_does_not_break_request(self, session_factory, user):
        """Axiom 전송 실패에도 응답은 정상."""
        failing = _RecordingClient(fail=True)
        async for ac in _logged_client(session_factory, failing):
            res = await ac.post("/auth/login", json={"email": USER_EMAIL, "password": "wrong"})
        assert res.status_code == 401
