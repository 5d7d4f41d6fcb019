"""폐기된 액세스 토큰 레포지토리.

Blacklist Repository — Revoked access tokens keyed by ``jti``.
"""

from datetime import datetime

from sqlalchemy import Insert, Select, delete, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.database import utcnow
from storefront.models.token import BlacklistedToken


class BlacklistRepository:
    """액세스 토큰 폐기 목록 레포지토리.

    Repository for the access token revocation list.
    """

    async def is_blacklisted(self, db: AsyncSession, jti: str) -> bool:
        """jti가 폐기 목록에 있는지 확인 — Whether a jti has been revoked."""
        query: Select = select(BlacklistedToken.id).where(BlacklistedToken.jti == jti)
        result = await db.execute(query)
        return result.first() is not None

    async def blacklist(
        self,
        db: AsyncSession,
        jti: str,
        expires_at: datetime,
    ) -> None:
        """토큰 jti를 폐기 목록에 추가합니다. 이미 있으면 무시.

        Record a token id as revoked. Idempotent on ``jti``, also when two
        requests revoke the same token at once: the losing insert hits the
        unique constraint and is skipped by ``ON CONFLICT DO NOTHING``.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            jti: 토큰 고유 ID (Token unique identifier)
            expires_at: 토큰의 원래 만료 시각 (The token's own expiry)
        """
        insert_fn = pg_insert if db.get_bind().dialect.name == "postgresql" else sqlite_insert
        stmt: Insert = (
            insert_fn(BlacklistedToken)
            .values(jti=jti, expires_at=expires_at)
            .on_conflict_do_nothing(index_elements=[BlacklistedToken.jti])
        )
        await db.execute(stmt)

    async def sweep_expired(self, db: AsyncSession) -> int:
        """자연 만료된 항목 삭제 — Drop entries whose token has expired anyway."""
        result = await db.execute(
            delete(BlacklistedToken)
            .where(BlacklistedToken.expires_at < utcnow())
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0


# 싱글턴 인스턴스 — Singleton instance
blacklist_repository: BlacklistRepository = BlacklistRepository()
