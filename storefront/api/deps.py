"""FastAPI 의존성 주입 모듈 — 인증, 권한 검사, 만료 토큰 정리.

FastAPI dependency injection module — Authentication and authorization.
Provides reusable dependencies that resolve the authenticated session and
enforce the password-change requirement and role-based access control.

Authentication Flow (authenticate):
    1. HTTPBearer가 Authorization: Bearer <token> 헤더에서 토큰을 추출
       (HTTPBearer extracts the token; missing or malformed → 401)
    2. session_service가 서명, 폐기 목록, 사용자, 전역 로그아웃 마커를 검증
       (session_service verifies signature, blacklist, user and global logout marker)
    3. 검증된 AuthContext를 핸들러에 명시적으로 전달
       (The resolved AuthContext is handed to the handler explicitly)

Password Change Flow:
    - require_session(allow_password_change=...) — 라우트 정의에 선언된 허용 여부
      (Per-route declaration on the route definition)
    - password_change_gate — 라우터 단위 의존성, capabilities 테이블 조회
      (Router-level dependency consulting the capability table)
"""

from typing import Annotated, Awaitable, Callable

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.capabilities import capabilities_for
from storefront.database import get_db
from storefront.logging import get_logger
from storefront.models.user import Role
from storefront.services.session_service import AuthContext, session_service
from storefront.utils.exceptions import ForbiddenError

logger = get_logger(__name__)

PASSWORD_CHANGE_REQUIRED: str = "Password change required. Please update your password."

# HTTP Bearer 토큰 추출기 — 헤더가 없어도 예외를 던지지 않고 None 반환
# (Returns None instead of raising when the header is missing, so the
# session service reports "Access token not found" with 401)
bearer_scheme: HTTPBearer = HTTPBearer(auto_error=False)


async def authenticate(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AuthContext:
    """Bearer 토큰을 검증하고 인증 컨텍스트를 반환합니다.

    Validate the bearer token (steps 1-5) and return the authentication
    context. Re-evaluated on every request.

    Raises:
        UnauthorizedError: 토큰 누락, 무효, 폐기, 사용자 없음, 전역 로그아웃
                           (Missing, invalid, blacklisted, unknown user, globally invalidated)
    """
    token: str | None = credentials.credentials if credentials is not None else None
    return await session_service.validate_access_token(db, token)


def require_session(
    allow_password_change: bool = False,
) -> Callable[..., Awaitable[AuthContext]]:
    """인증 세션 의존성 팩토리.

    Dependency factory adding step 6 on top of ``authenticate``: a user with
    a pending password change is rejected unless the route declares
    ``allow_password_change=True``.

    Args:
        allow_password_change: 비밀번호 변경 대기 중 허용 여부
                               (Allow while a password change is pending)

    Returns:
        FastAPI 의존성 함수 — AuthContext 반환 또는 403 발생
        (FastAPI dependency returning AuthContext or raising 403)
    """
    async def _check(
        ctx: Annotated[AuthContext, Depends(authenticate)],
    ) -> AuthContext:
        if ctx.user.password_change_required and not allow_password_change:
            raise ForbiddenError(PASSWORD_CHANGE_REQUIRED)
        return ctx
    return _check


async def password_change_gate(
    request: Request,
    ctx: Annotated[AuthContext, Depends(authenticate)],
) -> None:
    """라우터 단위 비밀번호 변경 게이트.

    Router-level gate. Looks the matched route up in the capability table and
    rejects users with a pending password change on routes not listed as
    exempt.

    Raises:
        ForbiddenError: 비밀번호 변경 필요 (Password change required)
    """
    route = request.scope.get("route")
    route_name: str | None = getattr(route, "name", None)
    if ctx.user.password_change_required and not capabilities_for(route_name).allow_password_change:
        raise ForbiddenError(PASSWORD_CHANGE_REQUIRED)


def require_role(*roles: Role) -> Callable[..., Awaitable[AuthContext]]:
    """역할 기반 권한 검사 의존성 팩토리.

    Dependency factory enforcing that the authenticated user holds one of
    the given roles.

    Args:
        roles: 허용되는 역할 (Allowed roles)

    Returns:
        FastAPI 의존성 함수 — AuthContext 반환 또는 403 발생
        (FastAPI dependency returning AuthContext or raising 403)
    """
    allowed: set[str] = {role.value for role in roles}

    async def _check(
        ctx: Annotated[AuthContext, Depends(require_session())],
    ) -> AuthContext:
        if ctx.user.role not in allowed:
            raise ForbiddenError("Insufficient permissions")
        return ctx
    return _check


# 편의 의존성 — Pre-configured dependencies
CurrentSession = Annotated[AuthContext, Depends(require_session())]
require_admin = require_role(Role.ADMIN)


async def sweep_expired_sessions(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> None:
    """로그인/회원가입/갱신 전에 만료 토큰을 정리합니다. 실패해도 요청은 계속.

    Sweep expired refresh records and blacklist entries before login,
    registration and refresh. Failures are logged and never block the request.
    """
    try:
        await session_service.sweep_expired(db)
        await db.commit()
    except Exception:
        logger.exception("token_cleanup_failed")
        await db.rollback()
