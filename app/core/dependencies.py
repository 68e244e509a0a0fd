# app/core/dependencies.py
import logging
from uuid import UUID

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.security import JWTAuthenticator
from app.database import get_db
from app.domains.file.storage import UploadStorage
from app.exceptions.base import AppPermissionError, UnauthorizedError
from app.shared.pagination import PaginationParams
from models import User

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)
auth = JWTAuthenticator()


async def validate_token(
    token: HTTPAuthorizationCredentials | None = Depends(security),
) -> dict:
    """Validate and decode the bearer token of the request.

    Returns:
        dict: Decoded token payload

    Raises:
        UnauthorizedError: If token is missing, invalid or expired
    """
    if not token or not token.credentials:
        raise UnauthorizedError("authentication_failure")

    return auth.verify_token(token.credentials)


async def get_current_user(
    request: Request,
    payload: dict = Depends(validate_token),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Get current authenticated user from JWT payload.

    Returns:
        User: Current authenticated user

    Raises:
        UnauthorizedError: If the token does not point to an existing user
    """
    try:
        user_id = UUID(payload.get("sub", ""))
    except ValueError as e:
        raise UnauthorizedError("authentication_failure") from e

    user = await db.get(User, user_id)
    if not user:
        logger.warning("Token refers to a missing user %s", user_id)
        raise UnauthorizedError("authentication_failure")

    # Add user info to request state for logging
    request.state.user_id = user.id

    return user


async def get_current_admin(current_user: User = Depends(get_current_user)) -> User:
    """Require the authenticated user to be an administrator."""
    if not current_user.is_admin:
        raise AppPermissionError("admin_required")
    return current_user


def get_upload_storage() -> UploadStorage:
    """Storage of uploaded files rooted at the configured directories."""
    return UploadStorage(settings.profile_path, settings.post_path)


def get_pagination(page: str | None = None, size: str | None = None) -> PaginationParams:
    """Read lenient ``page``/``size`` query parameters."""
    return PaginationParams.from_query(page, size)
