"""
Tests for authentication and staff account administration.
"""

import pytest
from datetime import timedelta
from httpx import AsyncClient
from fastapi import status

from app.models.user import User, UserRole
from app.repositories.user import UserRepository
from app.services.auth import AuthService
from app.utils.auth import create_access_token, create_refresh_token, verify_token, JWTError
from app.utils.exceptions import InvalidCredentialsError, InactiveUserError, BusinessRuleViolationError
from tests.conftest import UserFactory, DEFAULT_PASSWORD, auth_headers_for, assert_error


class TestTokens:
    """JWT helpers."""

    def test_access_token_claims(self, test_admin: User):
        token = create_access_token(test_admin.id, test_admin.email, test_admin.role)
        payload = verify_token(token)

        assert payload.user_id == str(test_admin.id)
        assert payload.email == test_admin.email
        assert payload.role == "admin"
        assert payload.token_type == "access"

    def test_refresh_token_rejected_as_access(self, test_admin: User):
        token = create_refresh_token(test_admin.id, test_admin.email)
        with pytest.raises(JWTError):
            verify_token(token, "access")

    async def test_expired_token_rejected(self, async_client: AsyncClient, test_admin: User):
        token = create_access_token(
            test_admin.id, test_admin.email, test_admin.role, expires_delta=timedelta(seconds=-1)
        )
        response = await async_client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})

        assert_error(response, status.HTTP_401_UNAUTHORIZED, "Token has expired")


class TestAuthService:
    """Service-level authentication rules."""

    async def test_authenticate_success(self, auth_service: AuthService, test_agent: User):
        user = await auth_service.authenticate_user("agent@test.com", DEFAULT_PASSWORD)
        assert user.id == test_agent.id

    async def test_authenticate_wrong_password(self, auth_service: AuthService, test_agent: User):
        with pytest.raises(InvalidCredentialsError):
            await auth_service.authenticate_user("agent@test.com", "wrong-password")

    async def test_authenticate_inactive(self, auth_service: AuthService, test_inactive_user: User):
        with pytest.raises(InactiveUserError):
            await auth_service.authenticate_user("inactive@test.com", DEFAULT_PASSWORD)

    async def test_cannot_delete_last_admin(self, auth_service: AuthService, test_admin: User):
        with pytest.raises(BusinessRuleViolationError):
            await auth_service.delete_user(test_admin.id, test_admin)


class TestLoginEndpoints:
    """Login, refresh and profile endpoints."""

    async def test_login_success(self, async_client: AsyncClient, test_agent: User):
        response = await async_client.post(
            "/api/auth/login",
            json={"email": "Agent@Test.com", "password": DEFAULT_PASSWORD}
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["token_type"] == "bearer"
        assert data["access_token"] and data["refresh_token"]
        assert data["user"]["email"] == "agent@test.com"
        assert data["user"]["last_login"] is not None
        assert "hashed_password" not in data["user"]

    async def test_login_invalid_credentials(self, async_client: AsyncClient, test_agent: User):
        response = await async_client.post(
            "/api/auth/login",
            json={"email": "agent@test.com", "password": "wrongpassword"}
        )
        assert_error(response, status.HTTP_401_UNAUTHORIZED, "Invalid email or password")

    async def test_login_unknown_email(self, async_client: AsyncClient):
        response = await async_client.post(
            "/api/auth/login",
            json={"email": "nobody@example.com", "password": "password123"}
        )
        assert_error(response, status.HTTP_401_UNAUTHORIZED)

    async def test_login_inactive_user(self, async_client: AsyncClient, test_inactive_user: User):
        response = await async_client.post(
            "/api/auth/login",
            json={"email": "inactive@test.com", "password": DEFAULT_PASSWORD}
        )
        assert_error(response, status.HTTP_401_UNAUTHORIZED, "inactive")

    async def test_login_short_password_is_validation_error(self, async_client: AsyncClient):
        response = await async_client.post(
            "/api/auth/login",
            json={"email": "agent@test.com", "password": "123"}
        )
        error = assert_error(response, status.HTTP_400_BAD_REQUEST)
        assert error["code"] == "VALIDATION_ERROR"
        assert error["details"]

    async def test_refresh_token(self, async_client: AsyncClient, test_agent: User):
        login = await async_client.post(
            "/api/auth/login",
            json={"email": "agent@test.com", "password": DEFAULT_PASSWORD}
        )
        refresh_token = login.json()["refresh_token"]

        response = await async_client.post("/api/auth/refresh", json={"refresh_token": refresh_token})

        assert response.status_code == status.HTTP_200_OK
        new_token = response.json()["access_token"]
        assert verify_token(new_token).user_id == str(test_agent.id)

    async def test_refresh_with_access_token_fails(self, async_client: AsyncClient, agent_headers):
        access_token = agent_headers["Authorization"].split(" ", 1)[1]
        response = await async_client.post("/api/auth/refresh", json={"refresh_token": access_token})
        assert_error(response, status.HTTP_401_UNAUTHORIZED)

    async def test_me(self, async_client: AsyncClient, test_agent: User, agent_headers):
        response = await async_client.get("/api/auth/me", headers=agent_headers)

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["id"] == str(test_agent.id)
        assert response.json()["role"] == "agent"

    async def test_me_without_token(self, async_client: AsyncClient):
        response = await async_client.get("/api/auth/me")
        assert_error(response, status.HTTP_401_UNAUTHORIZED, "Authentication token required")

    async def test_me_with_garbage_token(self, async_client: AsyncClient):
        response = await async_client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-token"})
        assert_error(response, status.HTTP_401_UNAUTHORIZED)

    async def test_token_of_deactivated_user_rejected(
        self,
        async_client: AsyncClient,
        test_inactive_user: User
    ):
        response = await async_client.get("/api/auth/me", headers=auth_headers_for(test_inactive_user))
        assert_error(response, status.HTTP_401_UNAUTHORIZED)

    async def test_change_password(self, async_client: AsyncClient, test_agent: User, agent_headers):
        response = await async_client.put(
            "/api/auth/change-password",
            json={"current_password": DEFAULT_PASSWORD, "new_password": "brandnew123"},
            headers=agent_headers
        )
        assert response.status_code == status.HTTP_200_OK

        login = await async_client.post(
            "/api/auth/login",
            json={"email": "agent@test.com", "password": "brandnew123"}
        )
        assert login.status_code == status.HTTP_200_OK

    async def test_change_password_wrong_current(self, async_client: AsyncClient, agent_headers):
        response = await async_client.put(
            "/api/auth/change-password",
            json={"current_password": "not-my-password", "new_password": "brandnew123"},
            headers=agent_headers
        )
        error = assert_error(response, status.HTTP_400_BAD_REQUEST, "Current password is incorrect")
        assert error["code"] == "INVALID_PASSWORD"

    async def test_logout(self, async_client: AsyncClient, agent_headers):
        response = await async_client.post("/api/auth/logout", headers=agent_headers)
        assert response.status_code == status.HTTP_200_OK


class TestUserAdministration:
    """Admin management of staff accounts."""

    async def test_register_user(self, async_client: AsyncClient, admin_headers):
        response = await async_client.post(
            "/api/auth/register",
            json={"name": "New Agent", "email": "New@Example.com", "password": "secret123", "role": "agent"},
            headers=admin_headers
        )

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["email"] == "new@example.com"
        assert data["role"] == "agent"
        assert data["is_active"] is True

    async def test_register_duplicate_email(self, async_client: AsyncClient, admin_headers, test_agent: User):
        response = await async_client.post(
            "/api/auth/register",
            json={"name": "Copy", "email": "agent@test.com", "password": "secret123"},
            headers=admin_headers
        )
        assert_error(response, status.HTTP_400_BAD_REQUEST, "Email already in use")

    async def test_register_requires_admin(self, async_client: AsyncClient, agent_headers):
        response = await async_client.post(
            "/api/auth/register",
            json={"name": "Sneaky", "email": "sneaky@example.com", "password": "secret123"},
            headers=agent_headers
        )
        assert_error(response, status.HTTP_403_FORBIDDEN)

    async def test_list_users(self, async_client: AsyncClient, admin_headers, test_agent: User):
        response = await async_client.get("/api/auth/users", headers=admin_headers)

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["total"] == 2
        assert {user["email"] for user in data["users"]} == {"admin@test.com", "agent@test.com"}

    async def test_list_users_filtered_by_role(self, async_client: AsyncClient, admin_headers, test_agent: User):
        response = await async_client.get("/api/auth/users", params={"role": "agent"}, headers=admin_headers)

        data = response.json()
        assert data["total"] == 1
        assert data["users"][0]["email"] == "agent@test.com"

    async def test_list_users_forbidden_for_agent(self, async_client: AsyncClient, agent_headers):
        response = await async_client.get("/api/auth/users", headers=agent_headers)
        assert_error(response, status.HTTP_403_FORBIDDEN)

    async def test_get_unknown_user(self, async_client: AsyncClient, admin_headers):
        response = await async_client.get(
            "/api/auth/users/00000000-0000-0000-0000-000000000000",
            headers=admin_headers
        )
        assert_error(response, status.HTTP_404_NOT_FOUND, "User not found")

    async def test_agent_updates_own_profile(self, async_client: AsyncClient, test_agent: User, agent_headers):
        response = await async_client.put(
            f"/api/auth/users/{test_agent.id}",
            json={"name": "Renamed Agent", "phone": "+216 99 999 999"},
            headers=agent_headers
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["name"] == "Renamed Agent"
        assert response.json()["phone"] == "+216 99 999 999"

    async def test_agent_cannot_change_own_role(self, async_client: AsyncClient, test_agent: User, agent_headers):
        response = await async_client.put(
            f"/api/auth/users/{test_agent.id}",
            json={"role": "admin"},
            headers=agent_headers
        )
        assert_error(response, status.HTTP_403_FORBIDDEN)

    async def test_agent_cannot_update_someone_else(
        self,
        async_client: AsyncClient,
        test_admin: User,
        agent_headers
    ):
        response = await async_client.put(
            f"/api/auth/users/{test_admin.id}",
            json={"name": "Hijacked"},
            headers=agent_headers
        )
        assert_error(response, status.HTTP_403_FORBIDDEN)

    async def test_update_with_taken_email(
        self,
        async_client: AsyncClient,
        test_admin: User,
        test_agent: User,
        admin_headers
    ):
        response = await async_client.put(
            f"/api/auth/users/{test_agent.id}",
            json={"email": "admin@test.com"},
            headers=admin_headers
        )
        assert_error(response, status.HTTP_400_BAD_REQUEST, "Email already in use")

    async def test_update_without_fields(self, async_client: AsyncClient, test_agent: User, admin_headers):
        response = await async_client.put(f"/api/auth/users/{test_agent.id}", json={}, headers=admin_headers)
        assert_error(response, status.HTTP_400_BAD_REQUEST, "No valid fields to update")

    async def test_cannot_demote_last_admin(self, async_client: AsyncClient, test_admin: User, admin_headers):
        response = await async_client.put(
            f"/api/auth/users/{test_admin.id}",
            json={"role": "agent"},
            headers=admin_headers
        )
        assert_error(response, status.HTTP_400_BAD_REQUEST, "last active admin")

    async def test_cannot_deactivate_last_active_admin(
        self,
        async_client: AsyncClient,
        test_admin: User,
        admin_headers
    ):
        response = await async_client.put(
            f"/api/auth/users/{test_admin.id}/status",
            json={"is_active": False},
            headers=admin_headers
        )
        assert_error(response, status.HTTP_400_BAD_REQUEST, "Cannot deactivate the last active admin")

    async def test_deactivate_admin_when_another_exists(
        self,
        async_client: AsyncClient,
        user_repository: UserRepository,
        admin_headers
    ):
        other = await UserFactory.create_user(user_repository, email="second@test.com", role=UserRole.ADMIN)

        response = await async_client.put(
            f"/api/auth/users/{other.id}/status",
            json={"is_active": False},
            headers=admin_headers
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["is_active"] is False

    async def test_cannot_delete_last_admin(self, async_client: AsyncClient, test_admin: User, admin_headers):
        response = await async_client.delete(f"/api/auth/users/{test_admin.id}", headers=admin_headers)
        assert_error(response, status.HTTP_400_BAD_REQUEST, "Cannot delete the last admin")

    async def test_delete_user(self, async_client: AsyncClient, test_agent: User, admin_headers):
        response = await async_client.delete(f"/api/auth/users/{test_agent.id}", headers=admin_headers)
        assert response.status_code == status.HTTP_204_NO_CONTENT

        response = await async_client.get(f"/api/auth/users/{test_agent.id}", headers=admin_headers)
        assert response.status_code == status.HTTP_404_NOT_FOUND

    async def test_reset_password(self, async_client: AsyncClient, test_agent: User, admin_headers):
        response = await async_client.post(f"/api/auth/reset-password/{test_agent.id}", headers=admin_headers)

        assert response.status_code == status.HTTP_200_OK
        temp_password = response.json()["temp_password"]
        assert len(temp_password) == 8

        login = await async_client.post(
            "/api/auth/login",
            json={"email": "agent@test.com", "password": temp_password}
        )
        assert login.status_code == status.HTTP_200_OK
