"""사용자 라우터 — 내 프로필, 비밀번호 변경, 관리자용 사용자 관리.

Users Router — My profile, password change, and admin-only user management.
All endpoints require a bearer token and pass the password-change gate.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.deps import CurrentSession, password_change_gate, require_admin, require_session
from storefront.database import get_db
from storefront.models.user import User
from storefront.schemas.common import MessageResponse
from storefront.schemas.user import (
    AdminUserUpdate,
    ChangePasswordRequest,
    CreateAdminRequest,
    UserResponse,
    UserUpdate,
)
from storefront.services.session_service import AuthContext
from storefront.services.user_service import user_service

router: APIRouter = APIRouter(dependencies=[Depends(password_change_gate)])

AdminSession = Annotated[AuthContext, Depends(require_admin)]


async def _delete(db: AsyncSession, user_id: UUID) -> MessageResponse:
    await user_service.delete_user(db, user_id)
    await db.commit()
    return MessageResponse(message=f'User with ID "{user_id}" has been successfully removed.')


# ---------------------------------------------------------------------------
# 내 프로필 — My profile
# ---------------------------------------------------------------------------
@router.get("/me", name="get_me", response_model=UserResponse)
async def get_me(ctx: CurrentSession) -> UserResponse:
    """내 프로필 조회 — Get the authenticated user's profile."""
    return UserResponse.model_validate(ctx.user)


@router.patch("/me", name="update_me", response_model=UserResponse)
async def update_me(
    data: UserUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: CurrentSession,
) -> UserResponse:
    """내 프로필 수정 — 이름/이메일 (Update my name and/or email)."""
    user: User = await user_service.update_user(db, ctx.user, data)
    await db.commit()
    return UserResponse.model_validate(user)


@router.delete("/me", name="delete_me", response_model=MessageResponse)
async def delete_me(
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: CurrentSession,
) -> MessageResponse:
    """내 계정 삭제 — Delete my account."""
    return await _delete(db, ctx.user.id)


@router.patch("/me/password", name="change_password", response_model=UserResponse)
async def change_password(
    data: ChangePasswordRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[AuthContext, Depends(require_session(allow_password_change=True))],
) -> UserResponse:
    """비밀번호 변경 — 비밀번호 변경 대기 중에도 허용.

    Change my password. Allowed while a password change is pending, and
    clears that requirement on success.
    """
    user: User = await user_service.change_password(db, ctx.user, data)
    await db.commit()
    return UserResponse.model_validate(user)


# ---------------------------------------------------------------------------
# 관리자 — Admin only
# ---------------------------------------------------------------------------
@router.post(
    "/admin",
    name="create_admin",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_admin(
    data: CreateAdminRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    _: AdminSession,
) -> UserResponse:
    """관리자 계정 생성 — 첫 사용 시 비밀번호 변경 필요.

    Provision an admin account that must change its password on first use.
    """
    user: User = await user_service.create_admin(db, data)
    await db.commit()
    return UserResponse.model_validate(user)


@router.get("", name="list_users", response_model=list[UserResponse])
async def list_users(
    db: Annotated[AsyncSession, Depends(get_db)],
    _: AdminSession,
) -> list[UserResponse]:
    """전체 사용자 목록 — List all users."""
    users: list[User] = await user_service.list_users(db)
    return [UserResponse.model_validate(u) for u in users]


@router.get("/{user_id}", name="get_user", response_model=UserResponse)
async def get_user(
    user_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    _: AdminSession,
) -> UserResponse:
    """사용자 상세 조회 — Get a user by id."""
    user: User = await user_service.get_user(db, user_id)
    return UserResponse.model_validate(user)


@router.patch("/{user_id}", name="update_user", response_model=UserResponse)
async def update_user(
    user_id: UUID,
    data: AdminUserUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    _: AdminSession,
) -> UserResponse:
    """사용자 수정 — 이름, 이메일, 역할 (Update a user's name, email or role)."""
    user: User = await user_service.admin_update_user(db, user_id, data)
    await db.commit()
    return UserResponse.model_validate(user)


@router.delete("/{user_id}", name="delete_user", response_model=MessageResponse)
async def delete_user(
    user_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    _: AdminSession,
) -> MessageResponse:
    """사용자 삭제 — 리프레시 토큰도 함께 삭제 (Delete a user and its refresh records)."""
    return await _delete(db, user_id)
