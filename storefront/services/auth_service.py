"""인증 서비스 — 회원가입, 로그인, 토큰 갱신, 로그아웃, 비밀번호 재설정.

Auth Service — Business logic for registration, login, token rotation,
single-session and global logout, and the password reset flow.

Every login, registration and refresh deletes the user's prior refresh
records before the new one is stored, so a user holds one refresh session
at a time.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import UUID

import jwt
from fastapi import Response
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.config import settings
from storefront.database import utcnow
from storefront.logging import get_logger
from storefront.models.user import Role, User
from storefront.repositories.blacklist_repository import blacklist_repository
from storefront.repositories.refresh_token_repository import refresh_token_repository
from storefront.repositories.user_repository import user_repository
from storefront.schemas.auth import (
    ForgotPasswordRequest,
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
)
from storefront.services.session_service import (
    REFRESH_REJECTED,
    AuthContext,
    RefreshMatch,
    session_service,
)
from storefront.utils.email import send_password_reset_email
from storefront.utils.exceptions import DuplicateError, UnauthorizedError
from storefront.utils.jwt import TokenPair, create_reset_token, decode_reset_token, issue_token_pair
from storefront.utils.password import digest_matches, hash_password, token_sha256, verify_password

logger = get_logger(__name__)

RESET_REJECTED: str = "Invalid or expired reset token"


@dataclass(frozen=True)
class IssuedSession:
    """발급된 세션 — 사용자와 토큰 쌍 (Authenticated user and its fresh token pair)."""

    user: User
    tokens: TokenPair


@dataclass(frozen=True)
class PendingReset:
    """발송 대기 중인 재설정 링크 — Reset token waiting to be mailed."""

    email: str
    token: str = field(repr=False)


class AuthService:
    """인증 관련 비즈니스 로직을 처리하는 서비스.

    Service handling authentication business logic.
    """

    async def _start_session(self, db: AsyncSession, user: User) -> IssuedSession:
        """기존 리프레시 토큰을 모두 폐기하고 새 토큰 쌍을 발급합니다.

        Revoke every prior refresh record, mint a fresh pair and store the
        refresh token's hash.
        """
        await refresh_token_repository.revoke_all(db, user.id)
        tokens: TokenPair = issue_token_pair(str(user.id), user.email, user.role)
        await refresh_token_repository.save(db, user.id, tokens.refresh_token)
        return IssuedSession(user=user, tokens=tokens)

    async def create_user(
        self,
        db: AsyncSession,
        email: str,
        name: str,
        password: str,
        role: Role = Role.USER,
        password_change_required: bool = False,
    ) -> User:
        """새 사용자를 생성합니다. 이메일 중복 시 409.

        Create a user. The unique-email violation is translated into a
        ``DuplicateError`` whether it is caught by the pre-check or by the
        database constraint.

        Raises:
            DuplicateError: 같은 이메일이 이미 존재할 때 (Email already taken)
        """
        if await user_repository.get_by_email(db, email) is not None:
            raise DuplicateError("User with this email already exists.")

        try:
            user: User = await user_repository.create(
                db,
                {
                    "email": email,
                    "name": name,
                    "password_hash": hash_password(password),
                    "role": role.value,
                    "password_change_required": password_change_required,
                },
            )
        except IntegrityError:
            await db.rollback()
            raise DuplicateError("User with this email already exists.")
        return user

    async def register(self, db: AsyncSession, data: RegisterRequest) -> IssuedSession:
        """회원가입 후 바로 세션을 시작합니다.

        Register a ``USER`` account and start its first session.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            data: 회원가입 요청 데이터 (Registration request data)

        Returns:
            IssuedSession: 생성된 사용자와 토큰 쌍 (Created user and token pair)

        Raises:
            DuplicateError: 이메일 중복 (Duplicate email)
        """
        user: User = await self.create_user(db, data.email, data.name, data.password)
        logger.info("user_registered", user_id=str(user.id))
        return await self._start_session(db, user)

    async def login(self, db: AsyncSession, data: LoginRequest) -> IssuedSession:
        """로그인을 처리합니다.

        Process login. Unknown email and wrong password are indistinguishable.

        Raises:
            UnauthorizedError: 잘못된 인증 정보일 때 (Invalid credentials)
        """
        user: User | None = await user_repository.get_by_email(db, data.email)
        if user is None or not verify_password(data.password, user.password_hash):
            raise UnauthorizedError("Invalid credentials")

        return await self._start_session(db, user)

    async def refresh(self, db: AsyncSession, raw_token: str | None) -> IssuedSession:
        """리프레시 토큰으로 새 토큰 쌍을 발급합니다.

        Rotate tokens. The matched refresh record is consumed with a
        conditional delete first; if a concurrent refresh already consumed
        it, this call is rejected and issues nothing.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            raw_token: 리프레시 토큰 쿠키 값 (Refresh cookie value)

        Returns:
            IssuedSession: 사용자와 새 토큰 쌍 (User and the rotated token pair)

        Raises:
            UnauthorizedError: 유효하지 않거나 이미 사용된 리프레시 토큰일 때
                               (Invalid, expired, revoked or already consumed)
        """
        match: RefreshMatch = await session_service.validate_refresh_token(db, raw_token)

        if not await refresh_token_repository.consume(db, match.record.id):
            logger.warning("refresh_token_reuse_rejected", user_id=str(match.record.user_id))
            raise UnauthorizedError(REFRESH_REJECTED)

        user: User | None = await user_repository.get_by_id(db, match.record.user_id)
        if user is None:
            raise UnauthorizedError("User not found")

        return await self._start_session(db, user)

    async def logout(
        self,
        db: AsyncSession,
        ctx: AuthContext,
        raw_refresh_token: str | None,
    ) -> None:
        """현재 세션을 로그아웃합니다.

        Revoke the refresh record matching the cookie (if any) and blacklist
        the presented access token's ``jti`` until its own expiry. Other
        tokens of the same user stay valid.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            ctx: 인증 컨텍스트 (Authentication context of the request)
            raw_refresh_token: 리프레시 토큰 쿠키 값 (Refresh cookie value, optional)
        """
        if raw_refresh_token:
            await refresh_token_repository.revoke_one(db, ctx.user.id, raw_refresh_token)

        claims: dict[str, Any] = ctx.claims
        expires_at: datetime = datetime.fromtimestamp(float(claims["exp"]), tz=timezone.utc)
        await blacklist_repository.blacklist(db, str(claims["jti"]), expires_at)

    async def logout_all(self, db: AsyncSession, user: User) -> None:
        """모든 세션에서 로그아웃 — 전역 로그아웃 마커를 갱신합니다.

        Bump the global logout marker; every token issued before now fails.
        """
        await user_repository.mark_logout_all(db, user.id)
        logger.info("user_logged_out_everywhere", user_id=str(user.id))

    async def forgot_password(
        self, db: AsyncSession, data: ForgotPasswordRequest
    ) -> PendingReset | None:
        """비밀번호 재설정 토큰을 발급하고 다이제스트를 저장합니다.

        Start a password reset. Unknown emails are a silent no-op (None) so
        the response never reveals whether an account exists. The caller
        commits, then hands the result to ``send_reset_link``.
        """
        user: User | None = await user_repository.get_by_email(db, data.email)
        if user is None:
            return None

        token: str = create_reset_token(str(user.id), user.email)
        expires_at: datetime = utcnow() + timedelta(minutes=settings.JWT_RESET_TOKEN_EXPIRE_MINUTES)
        await user_repository.set_reset_token(db, user, token_sha256(token), expires_at)
        return PendingReset(email=user.email, token=token)

    async def send_reset_link(self, pending: PendingReset) -> None:
        """재설정 링크 메일 발송 — 발송 실패는 로그만 남김 (Failures are only logged)."""
        await send_password_reset_email(pending.email, pending.token)

    async def reset_password(self, db: AsyncSession, data: ResetPasswordRequest) -> None:
        """재설정 토큰으로 비밀번호를 변경합니다. 토큰은 한 번만 사용 가능.

        Complete a password reset. The stored digest is cleared on success,
        so the same token is rejected the second time.

        Raises:
            UnauthorizedError: 토큰 검증 실패 (Invalid or expired reset token)
        """
        try:
            claims: dict[str, Any] = decode_reset_token(data.token)
        except jwt.InvalidTokenError:
            raise UnauthorizedError(RESET_REJECTED)

        try:
            user_id: UUID = UUID(str(claims.get("sub")))
        except ValueError:
            raise UnauthorizedError(RESET_REJECTED)

        user: User | None = await user_repository.get_by_id(db, user_id)
        if (
            user is None
            or user.reset_token_expires is None
            or user.reset_token_expires < utcnow()
            or not digest_matches(data.token, user.reset_token_hash)
        ):
            raise UnauthorizedError(RESET_REJECTED)

        await refresh_token_repository.revoke_all(db, user.id)
        await user_repository.update_password(db, user, hash_password(data.new_password))
        logger.info("password_reset_completed", user_id=str(user.id))

    def set_refresh_cookie(self, response: Response, refresh_token: str) -> None:
        """리프레시 토큰 쿠키 설정 — http-only, SameSite=strict, 7일."""
        response.set_cookie(
            key=settings.REFRESH_COOKIE_NAME,
            value=refresh_token,
            max_age=settings.JWT_REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60,
            httponly=True,
            secure=settings.is_production,
            samesite="strict",
        )

    def clear_refresh_cookie(self, response: Response) -> None:
        """리프레시 토큰 쿠키 삭제 — Clear the refresh cookie."""
        response.delete_cookie(
            key=settings.REFRESH_COOKIE_NAME,
            httponly=True,
            secure=settings.is_production,
            samesite="strict",
        )


# 싱글턴 인스턴스 — Singleton instance
auth_service: AuthService = AuthService()
