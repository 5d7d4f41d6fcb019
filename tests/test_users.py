"""사용자 API 테스트 — 내 프로필, 비밀번호 변경, 관리자용 사용자 관리.

Users API tests — Profile management, password change and the
password-change gate, plus admin-only user management.
"""

import uuid

from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.models.token import RefreshToken
from storefront.models.user import Role, User
from tests.conftest import (
    ADMIN_EMAIL,
    USER_EMAIL,
    USER_PASSWORD,
    auth_header,
    create_user,
    login,
)

USERS = "/users"


# ===== My Profile =====

class TestMyProfile:
    """내 프로필 테스트."""

    async def test_get_me(self, client: AsyncClient, user: User, user_session):
        """내 프로필 조회."""
        res = await client.get(f"{USERS}/me", headers=auth_header(user_session["access"]))
        assert res.status_code == 200
        data = res.json()
        assert data["id"] == str(user.id)
        assert data["email"] == USER_EMAIL
        assert data["name"] == "Alice"
        assert "passwordHash" not in data
        assert "tokensValidFrom" not in data

    async def test_get_me_unauthenticated(self, client: AsyncClient):
        """토큰 없이 조회 시 401."""
        res = await client.get(f"{USERS}/me")
        assert res.status_code == 401
        assert res.json()["detail"] == "Access token not found"

    async def test_update_me(self, client: AsyncClient, user_session):
        """이름과 이메일 수정."""
        res = await client.patch(
            f"{USERS}/me",
            json={"name": "Alice Liddell", "email": "liddell@example.com"},
            headers=auth_header(user_session["access"]),
        )
        assert res.status_code == 200
        assert res.json()["name"] == "Alice Liddell"
        assert res.json()["email"] == "liddell@example.com"

        assert (await login(client, "liddell@example.com", USER_PASSWORD)).status_code == 200

    async def test_update_me_partial(self, client: AsyncClient, user_session):
        """생략한 필드는 유지."""
        res = await client.patch(
            f"{USERS}/me",
            json={"name": "Only Name"},
            headers=auth_header(user_session["access"]),
        )
        assert res.status_code == 200
        assert res.json()["email"] == USER_EMAIL

    async def test_update_me_duplicate_email(
        self, client: AsyncClient, db: AsyncSession, user_session
    ):
        """이미 사용 중인 이메일로 변경 시 409."""
        await create_user(db, "taken@example.com", "taken-password")
        res = await client.patch(
            f"{USERS}/me",
            json={"email": "taken@example.com"},
            headers=auth_header(user_session["access"]),
        )
        assert res.status_code == 409

    async def test_update_me_cannot_change_role(self, client: AsyncClient, user_session):
        """일반 사용자는 자기 역할을 바꿀 수 없음 (role 필드 무시)."""
        res = await client.patch(
            f"{USERS}/me",
            json={"role": "ADMIN"},
            headers=auth_header(user_session["access"]),
        )
        assert res.status_code == 200
        assert res.json()["role"] == "USER"

    async def test_delete_me(self, client: AsyncClient, db: AsyncSession, user: User, user_session):
        """내 계정 삭제 — 리프레시 레코드도 삭제, 이후 토큰은 401."""
        res = await client.delete(f"{USERS}/me", headers=auth_header(user_session["access"]))
        assert res.status_code == 200
        assert res.json()["message"] == f'User with ID "{user.id}" has been successfully removed.'

        records = (await db.execute(
            select(RefreshToken).where(RefreshToken.user_id == user.id)
        )).scalars().all()
        assert records == []

        me = await client.get(f"{USERS}/me", headers=auth_header(user_session["access"]))
        assert me.status_code == 401
        assert me.json()["detail"] == "User not found"


# ===== Password Change =====

class TestChangePassword:
    """비밀번호 변경 테스트."""

    async def test_change_password_success(self, client: AsyncClient, user_session):
        """비밀번호 변경 성공 후 새 비밀번호로 로그인."""
        res = await client.patch(
            f"{USERS}/me/password",
            json={
                "currentPassword": USER_PASSWORD,
                "newPassword": "fresh-password",
                "newPasswordConfirmation": "fresh-password",
            },
            headers=auth_header(user_session["access"]),
        )
        assert res.status_code == 200
        assert res.json()["passwordChangeRequired"] is False

        assert (await login(client, USER_EMAIL, USER_PASSWORD)).status_code == 401
        assert (await login(client, USER_EMAIL, "fresh-password")).status_code == 200

    async def test_change_password_mismatch(self, client: AsyncClient, user_session):
        """새 비밀번호 확인 불일치 시 400."""
        res = await client.patch(
            f"{USERS}/me/password",
            json={
                "currentPassword": USER_PASSWORD,
                "newPassword": "fresh-password",
                "newPasswordConfirmation": "other-password",
            },
            headers=auth_header(user_session["access"]),
        )
        assert res.status_code == 400
        assert res.json()["detail"] == "Passwords do not match."

    async def test_change_password_wrong_current(self, client: AsyncClient, user_session):
        """현재 비밀번호 불일치 시 401."""
        res = await client.patch(
            f"{USERS}/me/password",
            json={
                "currentPassword": "not-my-password",
                "newPassword": "fresh-password",
                "newPasswordConfirmation": "fresh-password",
            },
            headers=auth_header(user_session["access"]),
        )
        assert res.status_code == 401

    async def test_change_password_too_short(self, client: AsyncClient, user_session):
        """새 비밀번호 8자 미만 시 422."""
        res = await client.patch(
            f"{USERS}/me/password",
            json={
                "currentPassword": USER_PASSWORD,
                "newPassword": "short",
                "newPasswordConfirmation": "short",
            },
            headers=auth_header(user_session["access"]),
        )
        assert res.status_code == 422


# ===== Password Change Gate =====

class TestPasswordChangeGate:
    """비밀번호 변경 대기 중인 사용자 접근 제한 테스트."""

    async def _flagged_token(self, client: AsyncClient, db: AsyncSession) -> tuple[User, str]:
        flagged: User = await create_user(
            db, "flagged@example.com", "temporary-password",
            name="Flagged", password_change_required=True,
        )
        res = await login(client, "flagged@example.com", "temporary-password")
        assert res.status_code == 200
        return flagged, res.json()["accessToken"]

    async def test_flagged_user_can_login(self, client: AsyncClient, db: AsyncSession):
        """비밀번호 변경 대기 중이어도 로그인은 가능."""
        _, token = await self._flagged_token(client, db)
        assert token

    async def test_flagged_user_blocked_on_profile(self, client: AsyncClient, db: AsyncSession):
        """비밀번호 변경 대기 중에는 프로필 조회 403."""
        _, token = await self._flagged_token(client, db)
        res = await client.get(f"{USERS}/me", headers=auth_header(token))
        assert res.status_code == 403
        assert res.json()["detail"] == "Password change required. Please update your password."

    async def test_flagged_user_blocked_on_logout_all(self, client: AsyncClient, db: AsyncSession):
        """전역 로그아웃은 비밀번호 변경 면제 대상이 아님."""
        _, token = await self._flagged_token(client, db)
        res = await client.delete("/auth/logout/all", headers=auth_header(token))
        assert res.status_code == 403

    async def test_flagged_user_can_logout(self, client: AsyncClient, db: AsyncSession):
        """비밀번호 변경 대기 중에도 로그아웃은 가능."""
        _, token = await self._flagged_token(client, db)
        res = await client.post("/auth/logout", headers=auth_header(token))
        assert res.status_code == 200

    async def test_change_password_clears_flag(self, client: AsyncClient, db: AsyncSession):
        """비밀번호 변경 후 플래그 해제, 같은 토큰으로 접근 가능."""
        flagged, token = await self._flagged_token(client, db)
        res = await client.patch(
            f"{USERS}/me/password",
            json={
                "currentPassword": "temporary-password",
                "newPassword": "permanent-password",
                "newPasswordConfirmation": "permanent-password",
            },
            headers=auth_header(token),
        )
        assert res.status_code == 200
        assert res.json()["passwordChangeRequired"] is False

        await db.refresh(flagged)
        assert flagged.password_change_required is False

        me = await client.get(f"{USERS}/me", headers=auth_header(token))
        assert me.status_code == 200


# ===== Admin User Management =====

class TestAdminUsers:
    """관리자용 사용자 관리 테스트."""

    async def test_list_users_as_admin(self, client: AsyncClient, user: User, admin_token: str):
        """관리자는 전체 사용자 목록 조회 가능."""
        res = await client.get(USERS, headers=auth_header(admin_token))
        assert res.status_code == 200
        emails = {u["email"] for u in res.json()}
        assert emails == {USER_EMAIL, ADMIN_EMAIL}

    async def test_list_users_as_user_forbidden(self, client: AsyncClient, user_session):
        """일반 사용자는 403."""
        res = await client.get(USERS, headers=auth_header(user_session["access"]))
        assert res.status_code == 403
        assert res.json()["detail"] == "Insufficient permissions"

    async def test_get_user(self, client: AsyncClient, user: User, admin_token: str):
        """ID로 사용자 조회."""
        res = await client.get(f"{USERS}/{user.id}", headers=auth_header(admin_token))
        assert res.status_code == 200
        assert res.json()["email"] == USER_EMAIL

    async def test_get_user_not_found(self, client: AsyncClient, admin_token: str):
        """없는 사용자 조회 시 404."""
        missing = uuid.uuid4()
        res = await client.get(f"{USERS}/{missing}", headers=auth_header(admin_token))
        assert res.status_code == 404
        assert res.json()["detail"] == f'User with ID "{missing}" not found'

    async def test_update_user_role(self, client: AsyncClient, user: User, admin_token: str):
        """관리자가 역할 변경."""
        res = await client.patch(
            f"{USERS}/{user.id}",
            json={"role": "ADMIN"},
            headers=auth_header(admin_token),
        )
        assert res.status_code == 200
        assert res.json()["role"] == "ADMIN"

        promoted = (await login(client, USER_EMAIL, USER_PASSWORD)).json()["accessToken"]
        assert (await client.get(USERS, headers=auth_header(promoted))).status_code == 200

    async def test_delete_user(
        self, client: AsyncClient, db: AsyncSession, user: User, user_session, admin_token: str
    ):
        """관리자가 사용자 삭제 — 해당 사용자 토큰은 401."""
        res = await client.delete(f"{USERS}/{user.id}", headers=auth_header(admin_token))
        assert res.status_code == 200

        res = await client.delete(f"{USERS}/{user.id}", headers=auth_header(admin_token))
        assert res.status_code == 404

        me = await client.get(f"{USERS}/me", headers=auth_header(user_session["access"]))
        assert me.status_code == 401

    async def test_create_admin(self, client: AsyncClient, db: AsyncSession, admin_token: str):
        """관리자 계정 생성 — 첫 로그인 후 비밀번호 변경 필요."""
        res = await client.post(
            f"{USERS}/admin",
            json={"email": "ops@example.com", "name": "Ops", "password": "initial-password"},
            headers=auth_header(admin_token),
        )
        assert res.status_code == 201
        data = res.json()
        assert data["role"] == "ADMIN"
        assert data["passwordChangeRequired"] is True

        created = (await db.execute(
            select(User).where(User.email == "ops@example.com")
        )).scalar_one()
        assert created.role == Role.ADMIN.value

        token = (await login(client, "ops@example.com", "initial-password")).json()["accessToken"]
        assert (await client.get(USERS, headers=auth_header(token))).status_code == 403

    async def test_create_admin_duplicate(self, client: AsyncClient, user: User, admin_token: str):
        """이미 존재하는 이메일로 관리자 생성 시 409."""
        res = await client.post(
            f"{USERS}/admin",
            json={"email": USER_EMAIL, "name": "Dup", "password": "initial-password"},
            headers=auth_header(admin_token),
        )
        assert res.status_code == 409

    async def test_create_admin_as_user_forbidden(self, client: AsyncClient, user_session):
        """일반 사용자는 관리자 생성 불가."""
        res = await client.post(
            f"{USERS}/admin",
            json={"email": "sneaky@example.com", "name": "Sneaky", "password": "pw"},
            headers=auth_header(user_session["access"]),
        )
        assert res.status_code == 403
