"""사용자 서비스 — 프로필 관리, 비밀번호 변경, 관리자용 사용자 관리.

User Service — Self-service profile management, password change, and the
admin-only user management operations.
"""

from typing import Any
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.logging import get_logger
from storefront.models.user import Role, User
from storefront.repositories.user_repository import user_repository
from storefront.schemas.user import (
    AdminUserUpdate,
    ChangePasswordRequest,
    CreateAdminRequest,
    UserUpdate,
)
from storefront.services.auth_service import auth_service
from storefront.utils.exceptions import (
    BadRequestError,
    DuplicateError,
    NotFoundError,
    UnauthorizedError,
)
from storefront.utils.password import hash_password, verify_password

logger = get_logger(__name__)


class UserService:
    """사용자 관련 비즈니스 로직을 처리하는 서비스.

    Service handling user business logic.
    """

    async def get_user(self, db: AsyncSession, user_id: UUID) -> User:
        """ID로 사용자를 조회합니다. 없으면 404.

        Raises:
            NotFoundError: 사용자가 없을 때 (User not found)
        """
        user: User | None = await user_repository.get_by_id(db, user_id)
        if user is None:
            raise NotFoundError(f'User with ID "{user_id}" not found')
        return user

    async def list_users(self, db: AsyncSession) -> list[User]:
        """전체 사용자 목록 — All users."""
        return await user_repository.list_users(db)

    async def update_user(
        self,
        db: AsyncSession,
        user: User,
        data: UserUpdate,
    ) -> User:
        """사용자 정보를 부분 업데이트합니다.

        Partially update a user. Changing the email to one that is already
        taken raises 409.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            user: 대상 사용자 (Target user)
            data: 변경할 필드 (Fields to change; omitted fields stay as they are)

        Returns:
            User: 업데이트된 사용자 (Updated user)

        Raises:
            DuplicateError: 이메일 중복 (Email already taken)
        """
        update_data: dict[str, Any] = data.model_dump(exclude_unset=True, exclude_none=True)
        if "role" in update_data:
            update_data["role"] = Role(update_data["role"]).value

        new_email: str | None = update_data.get("email")
        if new_email is not None and new_email != user.email:
            if await user_repository.get_by_email(db, new_email) is not None:
                raise DuplicateError("User with this email already exists.")

        try:
            updated: User | None = await user_repository.update(db, user.id, update_data)
        except IntegrityError:
            await db.rollback()
            raise DuplicateError("User with this email already exists.")
        if updated is None:
            raise NotFoundError(f'User with ID "{user.id}" not found')
        return updated

    async def admin_update_user(
        self,
        db: AsyncSession,
        user_id: UUID,
        data: AdminUserUpdate,
    ) -> User:
        """관리자용 사용자 수정 — Admin update of any user, role included."""
        user: User = await self.get_user(db, user_id)
        return await self.update_user(db, user, data)

    async def delete_user(self, db: AsyncSession, user_id: UUID) -> None:
        """사용자 삭제 — 리프레시 토큰도 함께 삭제 (Delete; refresh records cascade).

        Raises:
            NotFoundError: 사용자가 없을 때 (User not found)
        """
        if not await user_repository.delete(db, user_id):
            raise NotFoundError(f'User with ID "{user_id}" not found')
        logger.info("user_deleted", user_id=str(user_id))

    async def change_password(
        self,
        db: AsyncSession,
        user: User,
        data: ChangePasswordRequest,
    ) -> User:
        """비밀번호를 변경하고 변경 강제 플래그를 해제합니다.

        Change the password of the authenticated user and clear the
        ``password_change_required`` flag.

        Raises:
            BadRequestError: 새 비밀번호 확인 불일치 (Confirmation mismatch)
            UnauthorizedError: 현재 비밀번호 불일치 (Wrong current password)
        """
        if data.new_password != data.new_password_confirmation:
            raise BadRequestError("Passwords do not match.")

        if not verify_password(data.current_password, user.password_hash):
            raise UnauthorizedError("Invalid credentials.")

        await user_repository.update_password(
            db, user, hash_password(data.new_password), clear_change_required=True
        )
        logger.info("password_changed", user_id=str(user.id))
        return user

    async def create_admin(self, db: AsyncSession, data: CreateAdminRequest) -> User:
        """관리자 계정을 생성합니다. 첫 사용 시 비밀번호 변경 필요.

        Provision an ``ADMIN`` account flagged ``password_change_required``.

        Raises:
            DuplicateError: 이메일 중복 (Email already taken)
        """
        user: User = await auth_service.create_user(
            db,
            data.email,
            data.name,
            data.password,
            role=Role.ADMIN,
            password_change_required=True,
        )
        logger.info("admin_created", user_id=str(user.id))
        return user


# 싱글턴 인스턴스 — Singleton instance
user_service: UserService = UserService()
