"""토큰 모델 — 리프레시 토큰 해시 및 폐기된 액세스 토큰.

Token models — Refresh token hashes and revoked access token identifiers.
Refresh tokens are stored only as salted bcrypt hashes; blacklisted access
tokens are stored by their ``jti`` together with their natural expiry.
"""

import uuid
from datetime import datetime

from sqlalchemy import ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from storefront.database import Base, UTCDateTime, utcnow


class RefreshToken(Base):
    """리프레시 토큰 테이블.

    Refresh token table for managing long-lived authentication sessions.
    A user may hold several records at once (one per device).

    Attributes:
        id: 고유 식별자 (Primary key UUID)
        user_id: 소유 사용자 ID (Owner user UUID)
        token_hash: 토큰 bcrypt 해시 (Salted hash of the raw refresh token)
        expires_at: 만료 일시 (Expiration timestamp)
        created_at: 생성 일시 (Creation timestamp)
    """

    __tablename__ = "refresh_tokens"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    token_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)

    # Relationships
    user = relationship("User", back_populates="refresh_tokens")


class BlacklistedToken(Base):
    """폐기된 액세스 토큰 테이블.

    Revoked access tokens, keyed by ``jti``. Rows are useless once
    ``expires_at`` has passed because signature verification already
    rejects the token, so they are swept on that column.

    Attributes:
        id: 고유 식별자 (Primary key UUID)
        jti: 토큰 고유 ID (Token unique identifier)
        expires_at: 토큰 원래 만료 일시 (Original token expiry)
        created_at: 폐기 일시 (Revocation timestamp)
    """

    __tablename__ = "blacklisted_tokens"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )
    jti: Mapped[str] = mapped_column(String(64), unique=True, nullable=False, index=True)
    expires_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)
