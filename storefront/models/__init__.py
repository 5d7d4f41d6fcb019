"""SQLAlchemy ORM 모델 패키지 — 모든 도메인 모델의 중앙 임포트 지점.

SQLAlchemy ORM models package — Central import point for all domain models.
Importing from this package ensures all models are registered with the
SQLAlchemy metadata, which is required for schema creation and
relationship resolution.

Modules:
    user: 사용자 및 역할 (User and Role)
    token: 리프레시 토큰, 폐기된 액세스 토큰 (Refresh tokens, blacklisted access tokens)
"""

from storefront.models.user import Role, User
from storefront.models.token import BlacklistedToken, RefreshToken

__all__ = [
    "Role", "User",
    "RefreshToken", "BlacklistedToken",
]
