"""인증 라우터 — 회원가입, 로그인, 토큰 갱신, 로그아웃, 비밀번호 재설정.

Auth Router — Registration, login, token refresh, logout, and password reset
endpoints. The refresh token travels only in the ``refresh_token`` cookie.

Routers:
    public_router: 인증 불필요 (No bearer token required)
    session_router: Bearer 토큰 필요, 비밀번호 변경 게이트 적용
                    (Bearer token required, password-change gate applied)
"""

from typing import Annotated

from fastapi import APIRouter, Cookie, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.deps import password_change_gate, require_session, sweep_expired_sessions
from storefront.config import settings
from storefront.database import get_db
from storefront.schemas.auth import (
    AuthResponse,
    ForgotPasswordRequest,
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
)
from storefront.schemas.common import MessageResponse
from storefront.schemas.user import UserResponse
from storefront.services.auth_service import IssuedSession, PendingReset, auth_service
from storefront.services.session_service import AuthContext

public_router: APIRouter = APIRouter()
session_router: APIRouter = APIRouter(dependencies=[Depends(password_change_gate)])

RefreshCookie = Annotated[str | None, Cookie(alias=settings.REFRESH_COOKIE_NAME)]


def _auth_response(response: Response, issued: IssuedSession) -> AuthResponse:
    auth_service.set_refresh_cookie(response, issued.tokens.refresh_token)
    return AuthResponse(
        access_token=issued.tokens.access_token,
        user=UserResponse.model_validate(issued.user),
    )


@public_router.post(
    "/register",
    name="register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(sweep_expired_sessions)],
)
async def register(
    data: RegisterRequest,
    response: Response,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AuthResponse:
    """회원가입 — USER 계정 생성 후 세션 시작.

    Register a new user and start its session. Sets the refresh cookie.
    """
    issued: IssuedSession = await auth_service.register(db, data)
    await db.commit()
    return _auth_response(response, issued)


@public_router.post(
    "/login",
    name="login",
    response_model=AuthResponse,
    dependencies=[Depends(sweep_expired_sessions)],
)
async def login(
    data: LoginRequest,
    response: Response,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AuthResponse:
    """로그인 — 이메일/비밀번호 확인 후 토큰 발급.

    Login endpoint. Sets the refresh cookie.
    """
    issued: IssuedSession = await auth_service.login(db, data)
    await db.commit()
    return _auth_response(response, issued)


@public_router.post(
    "/refresh",
    name="refresh",
    response_model=AuthResponse,
    dependencies=[Depends(sweep_expired_sessions)],
)
async def refresh(
    response: Response,
    db: Annotated[AsyncSession, Depends(get_db)],
    refresh_token: RefreshCookie = None,
) -> AuthResponse:
    """토큰 갱신 — 리프레시 쿠키로 새 토큰 쌍 발급.

    Refresh endpoint. Rotates both tokens; the old refresh cookie stops
    working.
    """
    issued: IssuedSession = await auth_service.refresh(db, refresh_token)
    await db.commit()
    return _auth_response(response, issued)


@public_router.post("/forgot-password", name="forgot_password", response_model=MessageResponse)
async def forgot_password(
    data: ForgotPasswordRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> MessageResponse:
    """비밀번호 재설정 메일 요청 — 계정 존재 여부와 무관하게 항상 200.

    Start a password reset. Always 200 so the response reveals nothing about
    which emails are registered.
    """
    pending: PendingReset | None = await auth_service.forgot_password(db, data)
    # 링크 발송 전에 다이제스트 커밋
    await db.commit()
    if pending is not None:
        await auth_service.send_reset_link(pending)
    return MessageResponse(
        message="If a user with that email exists, a password reset link will be sent."
    )


@public_router.post(
    "/reset-password",
    name="reset_password",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def reset_password(
    data: ResetPasswordRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> None:
    """비밀번호 재설정 — 유효한 재설정 토큰으로 새 비밀번호 설정.

    Reset the password with a valid reset token. Every refresh session of the
    user is revoked.
    """
    await auth_service.reset_password(db, data)
    await db.commit()


@session_router.post("/logout", name="logout", response_model=MessageResponse)
async def logout(
    response: Response,
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[AuthContext, Depends(require_session(allow_password_change=True))],
    refresh_token: RefreshCookie = None,
) -> MessageResponse:
    """로그아웃 — 현재 리프레시 토큰 폐기 및 액세스 토큰 블랙리스트 등록.

    Logout from the current session. Revokes the refresh record, blacklists
    the access token and clears the refresh cookie.
    """
    await auth_service.logout(db, ctx, refresh_token)
    await db.commit()
    auth_service.clear_refresh_cookie(response)
    return MessageResponse(message="Logged out successfully")


@session_router.delete("/logout/all", name="logout_all", response_model=MessageResponse)
async def logout_all(
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[AuthContext, Depends(require_session())],
) -> MessageResponse:
    """모든 세션 로그아웃 — 이전에 발급된 모든 토큰 무효화.

    Logout from every session. All tokens issued before this call are rejected.
    """
    await auth_service.logout_all(db, ctx.user)
    await db.commit()
    return MessageResponse(message="Logged out from all sessions successfully")
