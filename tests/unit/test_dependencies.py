"""
Unit tests for Dependencies module.

This module contains unit tests for the dependency injection functions used
throughout the application.
"""

import uuid
from unittest.mock import MagicMock, patch

import pytest
from fastapi import status

from app.core.dependencies import (
    auth,
    get_current_admin,
    get_current_user,
    get_pagination,
    get_upload_storage,
    validate_token,
)
from app.core.config import settings
from app.exceptions.base import AppPermissionError, UnauthorizedError


class TestValidateToken:
    """Test cases for validate_token dependency."""

    @pytest.mark.asyncio
    async def test_validate_token_success(self):
        mock_token = MagicMock()
        mock_token.credentials = "valid_jwt_token"
        mock_payload = {"sub": str(uuid.uuid4()), "email": "test@example.com"}

        with patch("app.core.dependencies.auth.verify_token", return_value=mock_payload) as mock_verify:
            result = await validate_token(mock_token)

        assert result == mock_payload
        mock_verify.assert_called_once_with("valid_jwt_token")

    @pytest.mark.asyncio
    async def test_validate_token_none_token(self):
        with pytest.raises(UnauthorizedError) as exc_info:
            await validate_token(None)

        assert exc_info.value.status_code == status.HTTP_401_UNAUTHORIZED

    @pytest.mark.asyncio
    async def test_validate_token_empty_credentials(self):
        mock_token = MagicMock()
        mock_token.credentials = ""

        with pytest.raises(UnauthorizedError):
            await validate_token(mock_token)


class TestGetCurrentUser:
    @pytest.mark.asyncio
    async def test_returns_user_and_tags_request(self, test_db, test_user):
        request = MagicMock()
        token, _ = auth.create_access_token(
            user_id=test_user.id, email=test_user.email, account_name="alice", is_admin=False
        )

        user = await get_current_user(request, auth.verify_token(token), test_db)

        assert user.id == test_user.id
        assert request.state.user_id == test_user.id

    @pytest.mark.asyncio
    async def test_missing_user(self, test_db):
        with pytest.raises(UnauthorizedError):
            await get_current_user(MagicMock(), {"sub": str(uuid.uuid4())}, test_db)

    @pytest.mark.asyncio
    async def test_malformed_subject(self, test_db):
        with pytest.raises(UnauthorizedError):
            await get_current_user(MagicMock(), {"sub": "not-a-uuid"}, test_db)


class TestGetCurrentAdmin:
    @pytest.mark.asyncio
    async def test_admin_passes(self, admin_user):
        assert await get_current_admin(admin_user) is admin_user

    @pytest.mark.asyncio
    async def test_regular_user_is_rejected(self, test_user):
        with pytest.raises(AppPermissionError) as exc_info:
            await get_current_admin(test_user)

        assert exc_info.value.message == "admin_required"


class TestSimpleDependencies:
    def test_upload_storage_uses_settings(self):
        storage = get_upload_storage()

        assert storage.profile_dir == settings.profile_path
        assert storage.post_dir == settings.post_path

    def test_pagination_is_lenient(self):
        params = get_pagination(page="-4", size="1000")

        assert params.page == 0
        assert params.size == 10
