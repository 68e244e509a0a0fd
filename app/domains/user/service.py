# app/domains/user/service.py
import logging
from typing import Any, Dict, Optional
from uuid import UUID

from fastapi.concurrency import run_in_threadpool
from sqlalchemy import and_, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import create_random_token, hash_password, verify_password
from app.domains.file.service import FileService
from app.domains.file.storage import UploadStorage
from app.exceptions.base import (
    AppPermissionError,
    BadGatewayError,
    BadRequestError,
    InternalServerError,
    NotFoundError,
    UnauthorizedError,
)
from app.schemas.user import UserUpdateRequest
from app.services.email_service import email_service
from app.shared.pagination import PaginationParams, paginate
from models import User

logger = logging.getLogger(__name__)


class UserService:
    """Service class for accounts and profiles."""

    def __init__(self, db: AsyncSession, storage: UploadStorage):
        self.db = db
        self.file_service = FileService(db, storage)

    async def create_user(self, account_name: str, email: str, password: str) -> User:
        """
        Register an inactive account and send its activation mail.

        The account is only committed once the mail went out; when sending
        fails nothing is stored and ``mail_failure`` is raised.
        """
        await self._ensure_account_name_free(account_name)
        await self._ensure_email_free(email)

        user = User(
            account_name=account_name,
            email=email,
            password=hash_password(password),
            is_inactive=True,
            activation_token=create_random_token(),
        )

        try:
            self.db.add(user)
            await self.db.flush()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise InternalServerError() from e

        sent = await run_in_threadpool(
            email_service.send_account_activation, email, account_name, user.activation_token
        )
        if not sent:
            await self.db.rollback()
            logger.warning(f"Signup of {account_name} rolled back, activation mail failed")
            raise BadGatewayError("mail_failure")

        await self._commit(user)
        logger.info(f"User {user.id} signed up as {account_name}")
        return user

    async def activate_account(self, token: str) -> User:
        result = await self.db.execute(select(User).where(User.activation_token == token))
        user = result.scalar_one_or_none()
        if not user:
            raise BadRequestError("invalid_activation_token")

        user.activation_token = None
        user.is_inactive = False
        await self._commit(user)
        return user

    async def authenticate(self, email: str, password: str) -> User:
        """Check credentials and account state before a token is issued."""
        result = await self.db.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()

        if not user or not verify_password(password, user.password):
            raise UnauthorizedError("authentication_failure")
        if user.is_inactive:
            raise AppPermissionError("inactive_account")
        if user.has_ban:
            raise AppPermissionError("account_suspended")

        return user

    async def get_user_by_id(self, user_id: UUID) -> Optional[User]:
        """Get a user by ID."""
        return await self.db.get(User, user_id)

    async def get_active_user(self, user_id: UUID) -> User:
        user = await self.get_user_by_id(user_id)
        if not user or user.is_inactive:
            raise NotFoundError("user_not_found")
        return user

    async def get_users(self, exclude_user_id: UUID, pagination: PaginationParams) -> Dict[str, Any]:
        """Active users other than the caller, ordered by account name."""
        query = (
            select(User)
            .where(and_(User.is_inactive.is_(False), User.id != exclude_user_id))
            .order_by(User.account_name)
        )
        return await paginate(self.db, query, pagination)

    async def search_users(self, name: str | None, pagination: PaginationParams) -> Dict[str, Any]:
        if not name or not name.strip():
            raise NotFoundError("user_not_found")

        term = f"%{name.strip()}%"
        query = (
            select(User)
            .where(
                and_(
                    User.is_inactive.is_(False),
                    or_(User.account_name.ilike(term), User.username.ilike(term)),
                )
            )
            .order_by(User.account_name)
        )
        return await paginate(self.db, query, pagination)

    async def update_user(self, user_id: UUID, data: UserUpdateRequest, current_user: User) -> User:
        """Update the profile of the caller.

        Fields sent as ``null`` are cleared, fields left out are kept. A new
        ``image`` replaces the previous avatar.
        """
        if current_user.id != user_id:
            raise AppPermissionError("unauthorized_user_update")

        update_data = data.model_dump(exclude_unset=True)
        avatar = self.file_service.validate_image(update_data.pop("image", None))

        if "username" in update_data and update_data["username"] is None:
            update_data.pop("username")

        for field, value in update_data.items():
            setattr(current_user, field, value)

        if avatar:
            if current_user.avatar:
                await self.file_service.delete_profile_avatar(current_user.avatar)
            current_user.avatar = await self.file_service.save_profile_avatar(avatar)

        await self._commit(current_user)
        return current_user

    async def delete_own_account(self, user_id: UUID, password: str, current_user: User) -> None:
        if current_user.id != user_id:
            raise AppPermissionError("unauthorized_user_delete")
        if not verify_password(password, current_user.password):
            raise UnauthorizedError("authentication_failure")

        await self.delete_user(current_user)

    async def delete_user(self, user: User) -> None:
        """Remove the user with the stored objects of their avatar and posts.

        Posts, comments, likes and file rows go with the cascading foreign keys.
        """
        if user.avatar:
            await self.file_service.delete_profile_avatar(user.avatar)
        await self.file_service.delete_user_files(user.id)

        try:
            await self.db.delete(user)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise InternalServerError() from e

        logger.info(f"User {user.id} deleted")

    async def request_password_reset(self, email: str) -> None:
        result = await self.db.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()
        if not user:
            raise NotFoundError("email_not_inuse")

        user.password_reset_token = create_random_token()
        await self._commit(user)

        sent = await run_in_threadpool(
            email_service.send_password_reset, user.email, user.account_name, user.password_reset_token
        )
        if not sent:
            raise BadGatewayError("mail_failure")

    async def reset_password(self, token: str, new_password: str) -> None:
        """Set a new password from a reset link. The account counts as activated."""
        result = await self.db.execute(select(User).where(User.password_reset_token == token))
        user = result.scalar_one_or_none()
        if not user:
            raise UnauthorizedError("unauthorized_password_reset")

        user.password = hash_password(new_password)
        user.password_reset_token = None
        user.activation_token = None
        user.is_inactive = False
        await self._commit(user)

    async def update_password(
        self, user_id: UUID, password: str, new_password: str, current_user: User
    ) -> None:
        if current_user.id != user_id:
            raise AppPermissionError("unauthorized_user_update")
        if not verify_password(password, current_user.password):
            raise UnauthorizedError("authentication_failure")

        current_user.password = hash_password(new_password)
        await self._commit(current_user)

    async def update_email(self, user_id: UUID, password: str, new_email: str, current_user: User) -> User:
        if current_user.id != user_id:
            raise AppPermissionError("unauthorized_user_update")
        if not verify_password(password, current_user.password):
            raise UnauthorizedError("authentication_failure")

        await self._ensure_email_free(new_email, field="new_email")
        current_user.email = new_email
        await self._commit(current_user)
        return current_user

    async def set_ban(self, user_id: UUID, value: bool) -> User:
        """Ban or unban a user. A ban is announced by mail before it is stored."""
        user = await self.get_user_by_id(user_id)
        if not user:
            raise NotFoundError("user_not_found")

        if value:
            sent = await run_in_threadpool(
                email_service.send_account_suspended, user.email, user.account_name
            )
            if not sent:
                raise BadGatewayError("mail_failure")

        user.has_ban = value
        await self._commit(user)
        logger.info(f"User {user.id} {'banned' if value else 'unbanned'}")
        return user

    async def delete_user_as_admin(self, user_id: UUID, password: str, admin: User) -> None:
        """Delete any account after confirming the admin's password.

        The user is notified first; when the mail cannot be sent nothing is deleted.
        """
        if not verify_password(password, admin.password):
            raise UnauthorizedError("authentication_failure")

        user = await self.get_user_by_id(user_id)
        if not user:
            raise NotFoundError("user_not_found")

        sent = await run_in_threadpool(email_service.send_account_deleted, user.email, user.account_name)
        if not sent:
            raise BadGatewayError("mail_failure")

        await self.delete_user(user)

    # Private helper methods

    async def _ensure_account_name_free(self, account_name: str) -> None:
        result = await self.db.execute(select(User.id).where(User.account_name == account_name))
        if result.scalar_one_or_none() is not None:
            raise BadRequestError(details={"account_name": "account_name_taken"})

    async def _ensure_email_free(self, email: str, field: str = "email") -> None:
        result = await self.db.execute(select(User.id).where(User.email == email))
        if result.scalar_one_or_none() is not None:
            raise BadRequestError(details={field: "email_taken"})

    async def _commit(self, user: User) -> None:
        try:
            await self.db.commit()
            await self.db.refresh(user)
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise InternalServerError() from e
