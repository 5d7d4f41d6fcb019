"""비밀번호 및 토큰 해싱 유틸리티 모듈.

Password and token hashing utility module.
Uses bcrypt directly for secure credential storage.
Passwords and refresh tokens are never stored in plain text — always hashed with bcrypt.

Refresh tokens are JWTs whose first 72 bytes (bcrypt's input limit) are
shared by every token of the same user, so they are reduced to a SHA-256
hex digest before being handed to bcrypt.
"""

import hashlib
import hmac

import bcrypt

from storefront.config import settings


def hash_password(password: str) -> str:
    """평문 비밀번호를 bcrypt 해시로 변환합니다.

    Hash a plain text password using bcrypt.
    The resulting hash includes a random salt, making each hash unique
    even for identical passwords.

    Args:
        password: 평문 비밀번호 (Plain text password to hash)

    Returns:
        str: bcrypt 해시 문자열 (Bcrypt hash string, ~60 chars)
    """
    salt: bytes = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """평문 비밀번호와 bcrypt 해시를 비교 검증합니다.

    Verify a plain text password against a bcrypt hash.
    Uses constant-time comparison to prevent timing attacks.

    Args:
        plain_password: 검증할 평문 비밀번호 (Plain text password to verify)
        hashed_password: 저장된 bcrypt 해시 (Stored bcrypt hash to compare against)

    Returns:
        bool: 일치하면 True, 불일치하면 False (True if password matches hash)
    """
    try:
        return bcrypt.checkpw(
            plain_password.encode("utf-8"), hashed_password.encode("utf-8")
        )
    except ValueError:
        # 72바이트 초과 입력 또는 손상된 해시 — Over-long input or malformed hash
        return False


def token_sha256(token: str) -> str:
    """토큰의 SHA-256 hex 다이제스트 — SHA-256 hex digest of a token."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def hash_token(token: str) -> str:
    """리프레시 토큰을 솔트 해시로 변환합니다.

    Hash a raw refresh token for storage. Salted, so the same token hashes
    differently on every call and lookups must scan and verify.
    """
    salt: bytes = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(token_sha256(token).encode("utf-8"), salt).decode("utf-8")


def verify_token(token: str, token_hash: str) -> bool:
    """원문 토큰과 저장된 해시를 비교합니다 — Check a raw token against a stored hash."""
    return verify_password(token_sha256(token), token_hash)


def digest_matches(token: str, digest: str | None) -> bool:
    """토큰과 저장된 SHA-256 다이제스트를 상수 시간으로 비교합니다.

    Constant-time comparison of a raw token against a stored SHA-256 digest.
    """
    if not digest:
        return False
    return hmac.compare_digest(token_sha256(token), digest)
