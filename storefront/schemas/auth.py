"""인증 관련 Pydantic 요청/응답 스키마 정의.

Authentication-related Pydantic request/response schema definitions.
Covers registration, login, token issuance/refresh, and password reset.
The refresh token itself never appears in a body; it travels only in the
``refresh_token`` http-only cookie.
"""

from pydantic import EmailStr, Field

from storefront.schemas.common import CamelModel
from storefront.schemas.user import UserResponse


class RegisterRequest(CamelModel):
    """회원가입 요청 스키마.

    Self-registration request schema. Creates a ``USER`` account.

    Attributes:
        email: 이메일 (Login email, globally unique)
        name: 표시 이름 (Display name)
        password: 비밀번호 (Plain text, will be bcrypt-hashed on server)
    """

    email: EmailStr  # 로그인 이메일 — 전역 고유 (Login email, unique)
    name: str = Field(min_length=1)  # 표시 이름 (Display name)
    password: str = Field(min_length=1)  # 비밀번호 — 평문, 서버에서 bcrypt 해싱


class LoginRequest(CamelModel):
    """로그인 요청 스키마.

    Login request schema. The email is matched verbatim, so seeded accounts
    on special-use domains can still sign in.
    """

    email: str  # 로그인 이메일 (Login email)
    password: str  # 비밀번호 — 평문, 서버에서 bcrypt 해시와 비교 (Plain text, compared to bcrypt hash)


class AuthResponse(CamelModel):
    """토큰 발급 응답 스키마.

    Token issuance response schema. Returned after register, login and
    refresh; the refresh token is set as a cookie alongside.

    Attributes:
        access_token: JWT 액세스 토큰 (Short-lived access token)
        user: 사용자 정보 (Authenticated user)
    """

    access_token: str  # JWT 액세스 토큰 — 만료: 15분 기본 (Access token, default TTL: 15min)
    user: UserResponse


class ForgotPasswordRequest(CamelModel):
    """비밀번호 재설정 요청 스키마 — Password reset initiation."""

    email: str


class ResetPasswordRequest(CamelModel):
    """비밀번호 재설정 실행 스키마.

    Password reset completion schema.

    Attributes:
        token: 이메일로 받은 재설정 토큰 (Reset token from the email link)
        new_password: 새 비밀번호 (New password)
    """

    token: str = Field(min_length=1)
    new_password: str = Field(min_length=1)
