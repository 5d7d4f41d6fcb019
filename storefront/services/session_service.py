"""세션 검증 서비스 — 액세스 토큰 검증, 리프레시 토큰 검증, 만료 토큰 정리.

Session Service — Per-request access token validation, refresh token
validation, and the sweep of expired refresh/blacklist rows.

Access Token Validation (매 요청마다 수행, 캐시 없음 / every request, never cached):
    1. 토큰 없음 → 401 "Access token not found"
    2. 서명/만료/유형 오류 → 401 "Invalid or expired token"
    3. jti 폐기됨 → 401 "Token is blacklisted"
    4. 사용자 없음 → 401 "User not found"
    5. iat < tokens_valid_from → 401 "Token has been invalidated by a global logout"
"""

from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

import jwt
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.database import utcnow
from storefront.logging import get_logger
from storefront.models.token import RefreshToken
from storefront.models.user import User
from storefront.repositories.blacklist_repository import blacklist_repository
from storefront.repositories.refresh_token_repository import refresh_token_repository
from storefront.repositories.user_repository import user_repository
from storefront.utils.exceptions import UnauthorizedError
from storefront.utils.jwt import decode_access_token, decode_refresh_token
from storefront.utils.password import verify_token

logger = get_logger(__name__)

REFRESH_REJECTED: str = "Refresh token is invalid, expired, or has been revoked."


@dataclass(frozen=True)
class AuthContext:
    """검증을 통과한 요청의 인증 컨텍스트.

    Authentication context of an accepted request, handed to route handlers
    as a dependency value.

    Attributes:
        user: 인증된 사용자 (Authenticated user)
        claims: 검증된 액세스 토큰 클레임 (Verified access token claims)
        token: 액세스 토큰 원문 (Raw bearer token)
    """

    user: User
    claims: dict[str, Any] = field(repr=False)
    token: str = field(repr=False)


@dataclass(frozen=True)
class RefreshMatch:
    """검증된 리프레시 토큰과 일치한 저장 레코드 — Verified refresh token and its stored record."""

    claims: dict[str, Any]
    record: RefreshToken


def _parse_subject(claims: dict[str, Any]) -> UUID | None:
    try:
        return UUID(str(claims.get("sub")))
    except ValueError:
        return None


class SessionService:
    """토큰 검증 로직을 처리하는 서비스.

    Service validating access and refresh tokens against the live store.
    """

    async def validate_access_token(
        self,
        db: AsyncSession,
        token: str | None,
    ) -> AuthContext:
        """액세스 토큰을 검증하고 인증 컨텍스트를 반환합니다.

        Run validation steps 1-5 on a bearer token.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            token: Authorization 헤더의 토큰, 없으면 None (Bearer token or None)

        Returns:
            AuthContext: 인증 컨텍스트 (Resolved user, claims and token)

        Raises:
            UnauthorizedError: 검증 실패 시 (On any validation failure)
        """
        if not token:
            raise UnauthorizedError("Access token not found")

        try:
            claims: dict[str, Any] = decode_access_token(token)
        except jwt.InvalidTokenError:
            raise UnauthorizedError("Invalid or expired token")

        if await blacklist_repository.is_blacklisted(db, str(claims["jti"])):
            raise UnauthorizedError("Token is blacklisted")

        user_id: UUID | None = _parse_subject(claims)
        user: User | None = (
            await user_repository.get_by_id(db, user_id) if user_id is not None else None
        )
        if user is None:
            raise UnauthorizedError("User not found")

        if float(claims["iat"]) < user.tokens_valid_from.timestamp():
            raise UnauthorizedError("Token has been invalidated by a global logout")

        return AuthContext(user=user, claims=claims, token=token)

    async def validate_refresh_token(
        self,
        db: AsyncSession,
        raw_token: str | None,
    ) -> RefreshMatch:
        """리프레시 토큰 쿠키를 검증합니다.

        Verify the refresh cookie, reject it if it was issued before the
        owner's global logout marker, then scan the owner's stored records
        for the first one whose hash matches and which has not expired.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            raw_token: 리프레시 토큰 쿠키 값 (Refresh cookie value)

        Returns:
            RefreshMatch: 클레임과 일치한 레코드 (Claims and the matched record)

        Raises:
            UnauthorizedError: 검증 실패 시 (On any validation failure)
        """
        if not raw_token:
            raise UnauthorizedError("Refresh token not found")

        try:
            claims: dict[str, Any] = decode_refresh_token(raw_token)
        except jwt.InvalidTokenError:
            raise UnauthorizedError("Invalid or expired token")

        user_id: UUID | None = _parse_subject(claims)
        if user_id is None:
            raise UnauthorizedError(REFRESH_REJECTED)

        # 전역 로그아웃 이전에 발급된 리프레시 토큰도 거부
        user: User | None = await user_repository.get_by_id(db, user_id)
        if user is None or float(claims["iat"]) < user.tokens_valid_from.timestamp():
            raise UnauthorizedError(REFRESH_REJECTED)

        records: list[RefreshToken] = await refresh_token_repository.list_for_user(db, user_id)
        if not records:
            raise UnauthorizedError(REFRESH_REJECTED)

        now = utcnow()
        for record in records:
            if verify_token(raw_token, record.token_hash) and record.expires_at >= now:
                return RefreshMatch(claims=claims, record=record)

        raise UnauthorizedError(REFRESH_REJECTED)

    async def sweep_expired(self, db: AsyncSession) -> tuple[int, int]:
        """만료된 리프레시 토큰과 폐기 목록 항목을 정리합니다.

        Delete expired refresh records and expired blacklist entries. The
        caller owns the transaction.

        Returns:
            tuple[int, int]: (리프레시 삭제 수, 폐기 목록 삭제 수)
                             (Refresh rows removed, blacklist rows removed)
        """
        refresh_removed: int = await refresh_token_repository.sweep_expired(db)
        blacklist_removed: int = await blacklist_repository.sweep_expired(db)
        if refresh_removed or blacklist_removed:
            logger.info(
                "expired_tokens_swept",
                refresh_removed=refresh_removed,
                blacklist_removed=blacklist_removed,
            )
        return refresh_removed, blacklist_removed


# 싱글턴 인스턴스 — Singleton instance
session_service: SessionService = SessionService()
