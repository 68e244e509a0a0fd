"""Comment service layer with business logic."""

import logging
from typing import Any, Dict
from uuid import UUID

from sqlalchemy import asc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from app.core.config import settings
from app.core.i18n import translate
from app.exceptions.base import AppPermissionError, InternalServerError, NotFoundError
from app.shared.pagination import PaginationParams, paginate
from models import Comment, Post, User

logger = logging.getLogger(__name__)


class CommentService:
    """Service class for comment business logic."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def add_comment(self, post_id: UUID, user_id: UUID, content: str) -> Comment:
        await self._get_post_or_404(post_id)

        comment = Comment(post_id=post_id, user_id=user_id, content=content)
        try:
            self.db.add(comment)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise InternalServerError() from e

        return await self._get_comment_with_user(comment.id)

    async def get_comments(self, post_id: UUID, pagination: PaginationParams) -> Dict[str, Any]:
        """Comments of a post, oldest first."""
        await self._get_post_or_404(post_id)

        query = (
            select(Comment)
            .options(selectinload(Comment.user))
            .where(Comment.post_id == post_id)
            .order_by(asc(Comment.created_at), asc(Comment.id))
        )
        return await paginate(self.db, query, pagination)

    async def update_comment(self, comment_id: UUID, content: str, current_user: User) -> Comment:
        """Change the content of a comment. Allowed for its author and admins."""
        comment = await self._get_comment_with_user(comment_id)
        if comment.user_id != current_user.id and not current_user.is_admin:
            raise AppPermissionError("unauthorized_comment_update")

        comment.content = content
        await self._commit()
        return await self._get_comment_with_user(comment_id)

    async def delete_comment(self, comment_id: UUID, current_user: User) -> None:
        comment = await self._get_comment_with_user(comment_id)
        if comment.user_id != current_user.id:
            raise AppPermissionError("unauthorized_comment_delete")

        try:
            await self.db.delete(comment)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise InternalServerError() from e

    async def reset_comment(self, comment_id: UUID) -> Comment:
        """Replace the content of a comment with the moderation notice."""
        comment = await self._get_comment_with_user(comment_id)
        comment.content = translate("comment_moderated", settings.default_language)
        await self._commit()
        logger.info(f"Comment {comment_id} moderated")
        return await self._get_comment_with_user(comment_id)

    # Private helper methods

    async def _get_post_or_404(self, post_id: UUID) -> Post:
        post = await self.db.get(Post, post_id)
        if not post:
            raise NotFoundError("post_not_found")
        return post

    async def _get_comment_with_user(self, comment_id: UUID) -> Comment:
        result = await self.db.execute(
            select(Comment)
            .options(selectinload(Comment.user))
            .where(Comment.id == comment_id)
            .execution_options(populate_existing=True)
        )
        comment = result.scalar_one_or_none()
        if not comment:
            raise NotFoundError("comment_not_found")
        return comment

    async def _commit(self) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise InternalServerError() from e
