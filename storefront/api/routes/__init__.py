"""API 라우터 패키지 — 모든 엔드포인트 통합.

API Router package — Aggregates every endpoint into a single router for
inclusion in the FastAPI application.

Included routers:
    - auth: 인증 (Registration, login, refresh, logout, password reset)
    - users: 사용자 (My profile, password change, admin user management)
"""

from fastapi import APIRouter

from storefront.api.routes.auth import public_router as auth_public_router
from storefront.api.routes.auth import session_router as auth_session_router
from storefront.api.routes.users import router as users_router

api_router: APIRouter = APIRouter()

# ---------------------------------------------------------------------------
# 인증 라우터 등록 — /auth 하위 (공개 + 세션 필요)
# ---------------------------------------------------------------------------
api_router.include_router(auth_public_router, prefix="/auth", tags=["Auth"])
api_router.include_router(auth_session_router, prefix="/auth", tags=["Auth"])

# ---------------------------------------------------------------------------
# 사용자 라우터 등록 — /users 하위
# ---------------------------------------------------------------------------
api_router.include_router(users_router, prefix="/users", tags=["Users"])
