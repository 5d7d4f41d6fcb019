"""사용자 SQLAlchemy ORM 모델 정의.

User SQLAlchemy ORM model definition.
Holds credentials, role, the forced-password-change flag, the global logout
marker, and the pending password-reset token digest.

Tables:
    - users: 사용자 계정 (User accounts)
"""

import enum
import uuid
from datetime import datetime, timedelta

from sqlalchemy import Boolean, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from storefront.database import Base, UTCDateTime, utcnow


class Role(str, enum.Enum):
    """사용자 역할 — User role."""

    USER = "USER"
    ADMIN = "ADMIN"


def _initial_tokens_valid_from() -> datetime:
    # 생성 직후 발급된 토큰이 마커보다 앞서지 않도록 1초 이전으로 설정
    return utcnow() - timedelta(seconds=1)


class User(Base):
    """사용자 모델 — 시스템 사용자 계정 정보.

    User model — Account information for a shop customer or administrator.
    Email is globally unique.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        email: 로그인 이메일 (Login email, unique)
        name: 표시 이름 (Display name)
        password_hash: bcrypt 해시된 비밀번호 (bcrypt-hashed password)
        role: 역할 (USER | ADMIN)
        password_change_required: 비밀번호 변경 강제 여부 (Forced password change flag)
        tokens_valid_from: 전역 로그아웃 마커 (Global logout marker; tokens issued earlier are rejected)
        reset_token_hash: 재설정 토큰 SHA-256 다이제스트 (Pending reset token digest)
        reset_token_expires: 재설정 토큰 만료 일시 (Pending reset token expiry)
        created_at: 생성 일시 UTC (Creation timestamp)
        updated_at: 수정 일시 UTC (Last update timestamp)

    Relationships:
        refresh_tokens: 리프레시 토큰 목록 (Refresh token records, cascade delete)
    """

    __tablename__ = "users"

    # 사용자 고유 식별자 — User unique identifier (UUID v4, auto-generated)
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 로그인 이메일 — Login email (전역 고유, globally unique)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    # 표시 이름 — Display name
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    # 비밀번호 해시 — bcrypt hashed password (평문 저장 금지, never store plaintext)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    # 역할 — USER 또는 ADMIN
    role: Mapped[str] = mapped_column(String(16), nullable=False, default=Role.USER.value)
    # 비밀번호 변경 강제 — 관리자가 발급한 계정은 첫 로그인 후 변경 필요
    password_change_required: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    # 전역 로그아웃 마커 — 이 시각 이전에 발급된 토큰은 모두 거부
    tokens_valid_from: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, default=_initial_tokens_valid_from
    )
    # 비밀번호 재설정 — 토큰 원문 대신 SHA-256 다이제스트만 저장
    reset_token_hash: Mapped[str | None] = mapped_column(String(64), nullable=True)
    reset_token_expires: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    # 생성 일시 — Record creation timestamp (UTC)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)
    # 수정 일시 — Last modification timestamp (UTC, auto-updated)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, onupdate=utcnow)

    # 관계 — Relationships
    refresh_tokens = relationship("RefreshToken", back_populates="user", cascade="all, delete-orphan")
