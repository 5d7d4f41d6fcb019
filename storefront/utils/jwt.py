"""JWT 토큰 생성 및 검증 유틸리티 모듈.

JWT token creation and verification utility module.
Provides functions for minting access/refresh/reset tokens and decoding them.
Each token kind is signed with its own secret, so a token of one kind can
never verify as another.

JWT Payload Structure:
    액세스/리프레시 토큰은 동일한 기본 페이로드를 사용합니다.
    Access and refresh tokens share the same base payload:
    {
        "sub": "user_uuid",          # 사용자 ID (User identifier)
        "email": "a@example.com",    # 이메일 (User email)
        "role": "USER",              # 역할 (USER | ADMIN)
        "jti": "uuid4",              # 토큰 고유 ID, 폐기 핸들 (Revocation handle)
        "iat": 1234567890.123456,    # 발급 시각, 소수 초 (Issued-at, fractional seconds)
        "exp": 1234567890,           # 만료 시간 UNIX timestamp (Expiration)
        "type": "access"|"refresh"   # 토큰 유형 (Token type discriminator)
    }
    재설정 토큰은 sub, email, jti와 "type": "reset"만 포함합니다.
    Reset tokens carry only sub, email, jti and "type": "reset".
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from storefront.config import settings

ACCESS_TOKEN_TYPE: str = "access"
REFRESH_TOKEN_TYPE: str = "refresh"
RESET_TOKEN_TYPE: str = "reset"

_REQUIRED_CLAIMS: list[str] = ["sub", "jti", "iat", "exp"]


@dataclass(frozen=True)
class TokenPair:
    """액세스/리프레시 토큰 쌍 — Access/refresh token pair."""

    access_token: str
    refresh_token: str


def generate_jti() -> str:
    """새 토큰 고유 ID — Fresh random token identifier."""
    return str(uuid.uuid4())


def _encode(claims: dict[str, Any], secret: str, lifetime: timedelta, token_type: str) -> str:
    now: datetime = datetime.now(timezone.utc)
    payload: dict[str, Any] = {
        **claims,
        "jti": generate_jti(),
        # 소수 초 iat — 같은 초 안의 전역 로그아웃과도 순서가 보장됨
        "iat": now.timestamp(),
        "exp": now + lifetime,
        "type": token_type,
    }
    return jwt.encode(payload, secret, algorithm=settings.JWT_ALGORITHM)


def _decode(token: str, secret: str, token_type: str) -> dict[str, Any]:
    payload: dict[str, Any] = jwt.decode(
        token,
        secret,
        algorithms=[settings.JWT_ALGORITHM],
        options={"require": _REQUIRED_CLAIMS},
    )
    if payload.get("type") != token_type:
        raise jwt.InvalidTokenError("Invalid token type")
    return payload


def create_access_token(user_id: str, email: str, role: str) -> str:
    """JWT 액세스 토큰을 생성합니다.

    Generate a JWT access token signed with the access secret.
    Token expires after JWT_ACCESS_TOKEN_EXPIRE_MINUTES (default: 15 min).

    Args:
        user_id: 사용자 ID (User identifier, becomes ``sub``)
        email: 사용자 이메일 (User email)
        role: 역할 이름 (Role name)

    Returns:
        str: 인코딩된 JWT 문자열 (Encoded JWT token string)
    """
    return _encode(
        {"sub": user_id, "email": email, "role": role},
        settings.JWT_ACCESS_SECRET,
        timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES),
        ACCESS_TOKEN_TYPE,
    )


def create_refresh_token(user_id: str, email: str, role: str) -> str:
    """JWT 리프레시 토큰을 생성합니다.

    Generate a JWT refresh token signed with the refresh secret.
    Token expires after JWT_REFRESH_TOKEN_EXPIRE_DAYS (default: 7 days).
    """
    return _encode(
        {"sub": user_id, "email": email, "role": role},
        settings.JWT_REFRESH_SECRET,
        timedelta(days=settings.JWT_REFRESH_TOKEN_EXPIRE_DAYS),
        REFRESH_TOKEN_TYPE,
    )


def issue_token_pair(user_id: str, email: str, role: str) -> TokenPair:
    """액세스/리프레시 토큰 쌍을 발급합니다. 부수 효과 없음.

    Mint an access and a refresh token for the same identity, each with its
    own ``jti``. Pure generation, nothing is persisted.
    """
    return TokenPair(
        access_token=create_access_token(user_id, email, role),
        refresh_token=create_refresh_token(user_id, email, role),
    )


def create_reset_token(user_id: str, email: str) -> str:
    """비밀번호 재설정 토큰 생성 — 1시간 유효 (Password reset token, 1h by default)."""
    return _encode(
        {"sub": user_id, "email": email},
        settings.JWT_RESET_SECRET,
        timedelta(minutes=settings.JWT_RESET_TOKEN_EXPIRE_MINUTES),
        RESET_TOKEN_TYPE,
    )


def decode_access_token(token: str) -> dict[str, Any]:
    """액세스 토큰을 디코딩하고 검증합니다.

    Decode and verify an access token.

    Raises:
        jwt.ExpiredSignatureError: 토큰 만료 시 (When token has expired)
        jwt.InvalidTokenError: 유효하지 않은 토큰 (When token is invalid or of another type)
    """
    return _decode(token, settings.JWT_ACCESS_SECRET, ACCESS_TOKEN_TYPE)


def decode_refresh_token(token: str) -> dict[str, Any]:
    """리프레시 토큰 디코딩 및 검증 — Decode and verify a refresh token."""
    return _decode(token, settings.JWT_REFRESH_SECRET, REFRESH_TOKEN_TYPE)


def decode_reset_token(token: str) -> dict[str, Any]:
    """재설정 토큰 디코딩 및 검증 — Decode and verify a password reset token."""
    return _decode(token, settings.JWT_RESET_SECRET, RESET_TOKEN_TYPE)
