"""리프레시 토큰 레포지토리 — 저장, 폐기, 만료 정리, 원자적 소비.

Refresh Token Repository — Stores refresh tokens as salted hashes only.
Because the hash is salted, a raw token can never be looked up directly;
matching always scans the owner's records and verifies each hash.
"""

from datetime import datetime, timedelta
from uuid import UUID

from sqlalchemy import Select, delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.config import settings
from storefront.database import utcnow
from storefront.models.token import RefreshToken
from storefront.utils.password import hash_token, verify_token


class RefreshTokenRepository:
    """리프레시 토큰 수명 주기를 관리하는 레포지토리.

    Repository managing the refresh token lifecycle.
    """

    async def save(
        self,
        db: AsyncSession,
        user_id: UUID,
        raw_token: str,
    ) -> RefreshToken:
        """새 리프레시 토큰을 해시하여 저장합니다.

        Drop the user's already-expired records, then hash the raw token and
        insert a record expiring after JWT_REFRESH_TOKEN_EXPIRE_DAYS.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            user_id: 토큰 소유자 사용자 ID (Token owner user UUID)
            raw_token: JWT 리프레시 토큰 원문 (Raw JWT refresh token)

        Returns:
            RefreshToken: 생성된 리프레시 토큰 레코드 (Created refresh token record)
        """
        now: datetime = utcnow()
        await db.execute(
            delete(RefreshToken).where(
                RefreshToken.user_id == user_id,
                RefreshToken.expires_at < now,
            ).execution_options(synchronize_session=False)
        )

        db_token: RefreshToken = RefreshToken(
            user_id=user_id,
            token_hash=hash_token(raw_token),
            expires_at=now + timedelta(days=settings.JWT_REFRESH_TOKEN_EXPIRE_DAYS),
        )
        db.add(db_token)
        await db.flush()
        await db.refresh(db_token)
        return db_token

    async def list_for_user(
        self,
        db: AsyncSession,
        user_id: UUID,
    ) -> list[RefreshToken]:
        """사용자의 모든 리프레시 토큰 레코드 — All records owned by a user."""
        query: Select = (
            select(RefreshToken)
            .where(RefreshToken.user_id == user_id)
            .order_by(RefreshToken.created_at.desc())
        )
        result = await db.execute(query)
        return list(result.scalars().all())

    async def consume(
        self,
        db: AsyncSession,
        record_id: UUID,
    ) -> bool:
        """레코드를 조건부로 삭제하고 이 호출이 삭제했는지 반환합니다.

        Conditionally delete a record by id. Returns True only when this call
        removed the row; a concurrent caller that lost the race gets False.
        """
        result = await db.execute(
            delete(RefreshToken)
            .where(RefreshToken.id == record_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def revoke_one(
        self,
        db: AsyncSession,
        user_id: UUID,
        raw_token: str,
    ) -> bool:
        """원문 토큰과 일치하는 레코드를 삭제합니다 (단일 세션 로그아웃).

        Delete the record(s) matching the raw token. Used on single-session
        logout.

        Returns:
            bool: 삭제된 레코드가 있는지 여부 (Whether any record was removed)
        """
        matched: list[UUID] = [
            record.id
            for record in await self.list_for_user(db, user_id)
            if verify_token(raw_token, record.token_hash)
        ]
        if not matched:
            return False
        await db.execute(
            delete(RefreshToken)
            .where(RefreshToken.id.in_(matched))
            .execution_options(synchronize_session=False)
        )
        return True

    async def revoke_all(
        self,
        db: AsyncSession,
        user_id: UUID,
    ) -> None:
        """특정 사용자의 모든 리프레시 토큰을 삭제합니다.

        Delete all refresh tokens for a specific user (logout from all devices).

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            user_id: 대상 사용자 ID (Target user UUID)
        """
        stmt = (
            delete(RefreshToken)
            .where(RefreshToken.user_id == user_id)
            .execution_options(synchronize_session=False)
        )
        await db.execute(stmt)
        await db.flush()

    async def sweep_expired(self, db: AsyncSession) -> int:
        """만료된 리프레시 토큰을 모두 삭제하고 삭제 수를 반환합니다.

        Delete every expired refresh token and return how many were removed.
        """
        result = await db.execute(
            delete(RefreshToken)
            .where(RefreshToken.expires_at < utcnow())
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0


# 싱글턴 인스턴스 — Singleton instance
refresh_token_repository: RefreshTokenRepository = RefreshTokenRepository()
