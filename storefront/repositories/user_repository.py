"""사용자 레포지토리 — 사용자 조회, 전역 로그아웃 마커, 재설정 토큰.

User Repository — User lookups, the global logout marker, and password
reset token bookkeeping.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import Select, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.database import utcnow
from storefront.models.user import User
from storefront.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """사용자 테이블에 대한 데이터베이스 쿼리를 담당하는 레포지토리.

    Repository handling database queries for the users table.
    """

    def __init__(self) -> None:
        """UserRepository를 초기화합니다.

        Initialize the UserRepository with the User model.
        """
        super().__init__(User)

    async def get_by_email(
        self,
        db: AsyncSession,
        email: str,
    ) -> User | None:
        """이메일로 사용자를 조회합니다.

        Retrieve a user by email.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            email: 조회할 이메일 (Email to look up)

        Returns:
            User | None: 조회된 사용자 또는 None (Found user or None)
        """
        query: Select = select(User).where(User.email == email)
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def list_users(self, db: AsyncSession) -> list[User]:
        """가입 순으로 전체 사용자 목록 — All users, oldest first."""
        return list(await self.get_all(db, order_by=User.created_at))

    async def mark_logout_all(
        self,
        db: AsyncSession,
        user_id: UUID,
    ) -> datetime:
        """전역 로그아웃 마커를 현재 시각으로 갱신합니다.

        Set ``tokens_valid_from`` to now. Every token issued before this
        moment fails validation from now on.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            user_id: 대상 사용자 ID (Target user UUID)

        Returns:
            datetime: 새 마커 값 (The new marker value)
        """
        marker: datetime = utcnow()
        await db.execute(
            update(User)
            .where(User.id == user_id)
            .values(tokens_valid_from=marker)
            .execution_options(synchronize_session="fetch")
        )
        await db.flush()
        return marker

    async def set_reset_token(
        self,
        db: AsyncSession,
        user: User,
        token_digest: str,
        expires_at: datetime,
    ) -> None:
        """재설정 토큰 다이제스트와 만료 시각을 저장합니다.

        Store the pending reset token digest and its expiry on the user row.
        """
        user.reset_token_hash = token_digest
        user.reset_token_expires = expires_at
        await db.flush()

    async def update_password(
        self,
        db: AsyncSession,
        user: User,
        password_hash: str,
        *,
        clear_change_required: bool = False,
    ) -> None:
        """비밀번호 해시를 교체하고 재설정 토큰을 비웁니다.

        Replace the password hash and clear any pending reset token.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            user: 대상 사용자 (Target user)
            password_hash: 새 bcrypt 해시 (New bcrypt hash)
            clear_change_required: 비밀번호 변경 강제 플래그 해제 여부
                                   (Whether to clear the forced-change flag)
        """
        user.password_hash = password_hash
        user.reset_token_hash = None
        user.reset_token_expires = None
        if clear_change_required:
            user.password_change_required = False
        await db.flush()
        await db.refresh(user)


# 싱글턴 인스턴스 — Singleton instance
user_repository: UserRepository = UserRepository()
