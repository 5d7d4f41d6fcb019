"""헬스 체크 엔드포인트 테스트."""

from httpx import AsyncClient


class TestHealth:
    """헬스 체크 테스트."""

    async def test_health(self, client: AsyncClient):
        """인증 없이 상태 확인."""
        res = await client.get("/health")
        assert res.status_code == 200
        data = res.json()
        assert data["status"] == "ok"
        assert "timestamp" in data
