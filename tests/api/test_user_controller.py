"""
API tests for the User controller.

Covers signup and activation, authentication, profile management, password
and email changes and account deletion.
"""

import base64
import uuid
from unittest.mock import patch

import pytest
from fastapi import status
from httpx import AsyncClient
from sqlalchemy import func, select

from app.services.email_service import email_service
from models import File, Post, User
from tests.factories import create_file, create_post, create_user

USERS_URL = "/api/v1.0/users"


async def count_users(session) -> int:
    result = await session.execute(select(func.count()).select_from(User))
    return result.scalar()


class TestSignup:
    @pytest.mark.asyncio
    async def test_signup_creates_inactive_account(self, client: AsyncClient, test_db):
        signup_data = {"account_name": "newcomer", "email": "new@example.com", "password": "Secret123!"}

        response = await client.post(f"{USERS_URL}/", json=signup_data)

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["message"] == "Account created, check your inbox to activate it"
        assert data["data"]["account_name"] == "newcomer"
        assert data["data"]["email"] == "new@example.com"
        assert "password" not in data["data"]

        result = await test_db.execute(select(User).where(User.account_name == "newcomer"))
        user = result.scalar_one()
        assert user.is_inactive is True
        assert user.activation_token
        assert user.password != signup_data["password"]

    @pytest.mark.asyncio
    async def test_mail_failure_stores_nothing(self, client: AsyncClient, test_db):
        signup_data = {"account_name": "unlucky", "email": "unlucky@example.com", "password": "Secret123!"}

        with patch.object(email_service, "send_account_activation", return_value=False):
            response = await client.post(f"{USERS_URL}/", json=signup_data)

        assert response.status_code == status.HTTP_502_BAD_GATEWAY
        assert response.json()["message"] == "Email could not be sent"
        assert await count_users(test_db) == 0

    @pytest.mark.asyncio
    async def test_duplicate_account_name(self, client: AsyncClient, test_user):
        signup_data = {"account_name": "alice", "email": "other@example.com", "password": "Secret123!"}

        response = await client.post(f"{USERS_URL}/", json=signup_data)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["details"] == {"account_name": "Account name is already in use"}

    @pytest.mark.asyncio
    async def test_duplicate_email(self, client: AsyncClient, test_user):
        signup_data = {"account_name": "alice2", "email": "alice@example.com", "password": "Secret123!"}

        response = await client.post(f"{USERS_URL}/", json=signup_data)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["details"] == {"email": "Email is already in use"}

    @pytest.mark.asyncio
    async def test_invalid_payload(self, client: AsyncClient):
        signup_data = {"account_name": "no spaces allowed", "email": "invalid-email", "password": "short"}

        response = await client.post(f"{USERS_URL}/", json=signup_data)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        data = response.json()
        assert data["error_code"] == "VALIDATION_ERROR"
        assert set(data["details"]) == {"account_name", "email", "password"}


class TestActivation:
    @pytest.mark.asyncio
    async def test_activate_account(self, client: AsyncClient, test_db):
        user = await create_user(test_db, is_inactive=True, activation_token="activate-me")

        response = await client.post(f"{USERS_URL}/activate/activate-me")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["message"] == "Account activated"
        result = await test_db.execute(select(User.is_inactive).where(User.id == user.id))
        assert result.scalar_one() is False

    @pytest.mark.asyncio
    async def test_unknown_token(self, client: AsyncClient):
        response = await client.post(f"{USERS_URL}/activate/nope")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["message"] == "Activation token is invalid"


class TestAuthentication:
    @pytest.mark.asyncio
    async def test_login_returns_token(self, client: AsyncClient, test_user, password):
        response = await client.post(
            f"{USERS_URL}/auth", json={"email": "alice@example.com", "password": password}
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["token"]
        assert data["expires_in"] > 0
        assert data["user"]["id"] == str(test_user.id)

        me = await client.get(
            f"{USERS_URL}/{test_user.id}", headers={"Authorization": f"Bearer {data['token']}"}
        )
        assert me.status_code == status.HTTP_200_OK

    @pytest.mark.asyncio
    async def test_wrong_password(self, client: AsyncClient, test_user):
        response = await client.post(
            f"{USERS_URL}/auth", json={"email": "alice@example.com", "password": "wrong-password"}
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["message"] == "Incorrect credentials"

    @pytest.mark.asyncio
    async def test_inactive_account(self, client: AsyncClient, test_db, password):
        await create_user(test_db, email="sleepy@example.com", is_inactive=True)

        response = await client.post(
            f"{USERS_URL}/auth", json={"email": "sleepy@example.com", "password": password}
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["message"] == "Account is not activated"

    @pytest.mark.asyncio
    async def test_banned_account(self, client: AsyncClient, test_db, password):
        await create_user(test_db, email="banned@example.com", has_ban=True)

        response = await client.post(
            f"{USERS_URL}/auth", json={"email": "banned@example.com", "password": password}
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["message"] == "Account is suspended"

    @pytest.mark.asyncio
    async def test_invalid_token_is_rejected(self, client: AsyncClient, test_user):
        response = await client.get(
            f"{USERS_URL}/{test_user.id}", headers={"Authorization": "Bearer not-a-jwt"}
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


class TestUserListing:
    @pytest.mark.asyncio
    async def test_list_excludes_caller_and_inactive_users(
        self, client: AsyncClient, test_db, user_headers, test_user_2, admin_user
    ):
        await create_user(test_db, account_name="ghost", is_inactive=True)

        response = await client.get(f"{USERS_URL}/", headers=user_headers)

        assert response.status_code == status.HTTP_200_OK
        names = [user["account_name"] for user in response.json()["data"]]
        assert names == ["bob", "moderator"]

    @pytest.mark.asyncio
    async def test_search_by_name(self, client: AsyncClient, user_headers, test_user_2):
        response = await client.get(f"{USERS_URL}/name", params={"name": "BO"}, headers=user_headers)

        assert response.status_code == status.HTTP_200_OK
        assert [user["account_name"] for user in response.json()["data"]] == ["bob"]

    @pytest.mark.asyncio
    async def test_search_without_name(self, client: AsyncClient, user_headers):
        response = await client.get(f"{USERS_URL}/name", params={"name": "  "}, headers=user_headers)

        assert response.status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.asyncio
    async def test_get_user_hides_private_fields(self, client: AsyncClient, user_headers, test_user_2):
        response = await client.get(f"{USERS_URL}/{test_user_2.id}", headers=user_headers)

        assert response.status_code == status.HTTP_200_OK
        data = response.json()["data"]
        assert data["account_name"] == "bob"
        assert "email" not in data

    @pytest.mark.asyncio
    async def test_get_unknown_user(self, client: AsyncClient, user_headers):
        response = await client.get(f"{USERS_URL}/{uuid.uuid4()}", headers=user_headers)

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["message"] == "User not found"


class TestProfileUpdate:
    @pytest.mark.asyncio
    async def test_update_profile_with_avatar(
        self, client: AsyncClient, test_user, user_headers, storage, png_bytes
    ):
        payload = {
            "username": "Alice Cooper",
            "city": "Kraków",
            "image": base64.b64encode(png_bytes).decode(),
        }

        response = await client.put(f"{USERS_URL}/{test_user.id}", json=payload, headers=user_headers)

        assert response.status_code == status.HTTP_200_OK
        data = response.json()["data"]
        assert data["username"] == "Alice Cooper"
        assert data["city"] == "Kraków"
        assert data["avatar"].endswith(".png")
        assert storage.avatar_path(data["avatar"]).read_bytes() == png_bytes

    @pytest.mark.asyncio
    async def test_new_avatar_replaces_old_one(
        self, client: AsyncClient, test_user, user_headers, storage, png_bytes, jpeg_bytes
    ):
        url = f"{USERS_URL}/{test_user.id}"
        first = await client.put(
            url, json={"image": base64.b64encode(png_bytes).decode()}, headers=user_headers
        )
        second = await client.put(
            url, json={"image": base64.b64encode(jpeg_bytes).decode()}, headers=user_headers
        )

        old_avatar = first.json()["data"]["avatar"]
        new_avatar = second.json()["data"]["avatar"]
        assert not storage.avatar_path(old_avatar).exists()
        assert storage.avatar_path(new_avatar).exists()

    @pytest.mark.asyncio
    async def test_avatar_must_be_an_image(self, client: AsyncClient, test_user, user_headers, text_bytes):
        response = await client.put(
            f"{USERS_URL}/{test_user.id}",
            json={"image": base64.b64encode(text_bytes).decode()},
            headers=user_headers,
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["details"] == {"image": "Only PNG and JPEG images are supported"}

    @pytest.mark.asyncio
    async def test_cannot_update_other_user(self, client: AsyncClient, test_user_2, user_headers):
        response = await client.put(
            f"{USERS_URL}/{test_user_2.id}", json={"username": "Hacked"}, headers=user_headers
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN


class TestPasswordAndEmail:
    @pytest.mark.asyncio
    async def test_password_reset_flow(self, client: AsyncClient, test_db, test_user):
        response = await client.post(f"{USERS_URL}/password", json={"email": "alice@example.com"})
        assert response.status_code == status.HTTP_200_OK

        result = await test_db.execute(select(User.password_reset_token).where(User.id == test_user.id))
        token = result.scalar_one()
        assert token

        response = await client.put(
            f"{USERS_URL}/password",
            json={"password_reset_token": token, "password": "BrandNew123"},
        )
        assert response.status_code == status.HTTP_200_OK

        login = await client.post(
            f"{USERS_URL}/auth", json={"email": "alice@example.com", "password": "BrandNew123"}
        )
        assert login.status_code == status.HTTP_200_OK

    @pytest.mark.asyncio
    async def test_password_reset_for_unknown_email(self, client: AsyncClient):
        response = await client.post(f"{USERS_URL}/password", json={"email": "nobody@example.com"})

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["message"] == "No account is registered with this email"

    @pytest.mark.asyncio
    async def test_password_reset_with_bad_token(self, client: AsyncClient):
        response = await client.put(
            f"{USERS_URL}/password",
            json={"password_reset_token": "forged", "password": "BrandNew123"},
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    @pytest.mark.asyncio
    async def test_update_password(self, client: AsyncClient, test_user, user_headers, password):
        response = await client.put(
            f"{USERS_URL}/password/{test_user.id}",
            json={"password": password, "new_password": "Changed123!"},
            headers=user_headers,
        )

        assert response.status_code == status.HTTP_200_OK
        login = await client.post(
            f"{USERS_URL}/auth", json={"email": "alice@example.com", "password": "Changed123!"}
        )
        assert login.status_code == status.HTTP_200_OK

    @pytest.mark.asyncio
    async def test_update_password_requires_current_password(
        self, client: AsyncClient, test_user, user_headers
    ):
        response = await client.put(
            f"{USERS_URL}/password/{test_user.id}",
            json={"password": "not-my-password", "new_password": "Changed123!"},
            headers=user_headers,
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    @pytest.mark.asyncio
    async def test_update_email(self, client: AsyncClient, test_user, user_headers, password):
        response = await client.put(
            f"{USERS_URL}/email/{test_user.id}",
            json={"password": password, "new_email": "alice@new.example.com"},
            headers=user_headers,
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["data"]["email"] == "alice@new.example.com"

    @pytest.mark.asyncio
    async def test_update_email_to_taken_address(
        self, client: AsyncClient, test_user, test_user_2, user_headers, password
    ):
        response = await client.put(
            f"{USERS_URL}/email/{test_user.id}",
            json={"password": password, "new_email": "bob@example.com"},
            headers=user_headers,
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["details"] == {"new_email": "Email is already in use"}


class TestDeleteAccount:
    @pytest.mark.asyncio
    async def test_delete_own_account_with_content(
        self, client: AsyncClient, test_db, storage, test_user, user_headers, password, png_bytes
    ):
        post = await create_post(test_db, test_user.id)
        file = await create_file(test_db, storage, png_bytes, post_id=post.id)

        response = await client.request(
            "DELETE", f"{USERS_URL}/{test_user.id}", json={"password": password}, headers=user_headers
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["message"] == "Account deleted"
        assert await count_users(test_db) == 0
        for model in (Post, File):
            result = await test_db.execute(select(func.count()).select_from(model))
            assert result.scalar() == 0
        assert not storage.post_file_path(file.filename).exists()

    @pytest.mark.asyncio
    async def test_wrong_password_keeps_account(
        self, client: AsyncClient, test_db, test_user, user_headers
    ):
        response = await client.request(
            "DELETE", f"{USERS_URL}/{test_user.id}", json={"password": "nope"}, headers=user_headers
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert await count_users(test_db) == 1

    @pytest.mark.asyncio
    async def test_cannot_delete_other_user(
        self, client: AsyncClient, test_user_2, user_headers, password
    ):
        response = await client.request(
            "DELETE", f"{USERS_URL}/{test_user_2.id}", json={"password": password}, headers=user_headers
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
