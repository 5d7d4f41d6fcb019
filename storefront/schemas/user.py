"""사용자 및 프로필 관련 Pydantic 요청/응답 스키마 정의.

User and profile Pydantic request/response schema definitions.
Covers self-service profile management, password change, and the
admin-only user management endpoints.
"""

from datetime import datetime
from uuid import UUID

from pydantic import EmailStr, Field

from storefront.models.user import Role
from storefront.schemas.common import CamelModel


class UserResponse(CamelModel):
    """사용자 응답 스키마 — 비밀번호 해시와 토큰 필드는 제외.

    User response schema. Never exposes the password hash, the reset token
    digest, or the global logout marker.

    Attributes:
        id: 사용자 UUID (User identifier)
        email: 이메일 (Email)
        name: 표시 이름 (Display name)
        role: 역할 (USER | ADMIN)
        password_change_required: 비밀번호 변경 필요 여부 (Forced change pending)
        created_at: 생성 일시 (Creation timestamp)
        updated_at: 수정 일시 (Last update timestamp)
    """

    id: UUID
    email: str
    name: str
    role: Role
    password_change_required: bool
    created_at: datetime
    updated_at: datetime


class UserUpdate(CamelModel):
    """사용자 수정 요청 스키마 (부분 업데이트).

    User update request schema (partial update).
    Only provided fields are updated; omitted fields remain unchanged.
    """

    email: EmailStr | None = None
    name: str | None = Field(default=None, min_length=1)


class AdminUserUpdate(UserUpdate):
    """관리자용 사용자 수정 스키마 — 역할 변경 포함 (Admin update, may change role)."""

    role: Role | None = None


class ChangePasswordRequest(CamelModel):
    """비밀번호 변경 요청 스키마.

    Password change request schema. The new password must be confirmed.

    Attributes:
        current_password: 현재 비밀번호 (Current password)
        new_password: 새 비밀번호, 최소 8자 (New password, at least 8 chars)
        new_password_confirmation: 새 비밀번호 확인 (Confirmation of the new password)
    """

    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=8)
    new_password_confirmation: str = Field(min_length=8)


class CreateAdminRequest(CamelModel):
    """관리자 계정 생성 요청 스키마.

    Admin account provisioning request. The created account must change its
    password on first use.
    """

    email: EmailStr
    name: str = Field(min_length=1)
    password: str = Field(min_length=1)
