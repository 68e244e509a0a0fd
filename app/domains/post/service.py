"""Post service layer with business logic."""

import logging
from datetime import timedelta
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import and_, desc, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from app.domains.file.service import AttachStatus, FileService
from app.domains.file.storage import UploadStorage
from app.exceptions.base import AppPermissionError, InternalServerError, NotFoundError
from app.schemas.file import FileResponse
from app.schemas.post import PostCreate, PostDateFilter, PostResponse
from app.schemas.user import UserBriefResponse
from app.shared.pagination import PaginationParams, paginate
from models import Comment, Post, User
from models.base import utcnow

logger = logging.getLogger(__name__)

FEED_RECENT = timedelta(hours=24)
FEED_WEEK = timedelta(days=7)


class PostService:
    """Service class for post business logic."""

    def __init__(self, db: AsyncSession, storage: UploadStorage):
        self.db = db
        self.file_service = FileService(db, storage)

    async def create_post(self, post_data: PostCreate, user_id: UUID) -> Dict[str, Any]:
        """
        Create a post and attach the uploaded file referenced by ``file``.

        A missing or already attached file does not fail the request; the post
        is then created without a file.
        """
        post = Post(user_id=user_id, content=post_data.content)

        try:
            self.db.add(post)
            await self.db.flush()

            if post_data.file:
                status = await self.file_service.associate_file_to_post(
                    post_data.file, post.id, commit=False
                )
                if status is not AttachStatus.ATTACHED:
                    logger.info(f"Post {post.id} created without file ({status.value})")

            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise InternalServerError() from e

        return await self.get_post(post.id)

    async def get_post(self, post_id: UUID) -> Dict[str, Any]:
        post = await self._get_post_with_relations(post_id)
        if not post:
            raise NotFoundError("post_not_found")
        counts = await self._comment_counts([post.id])
        return self._serialize(post, counts)

    async def get_posts(
        self, date_filter: Optional[PostDateFilter], pagination: PaginationParams
    ) -> Dict[str, Any]:
        """Public posts of an age window, newest first.

        ``today`` covers the last 24 hours, ``week`` the 7 days before that
        and ``older`` everything beyond 7 days.
        """
        now = utcnow()
        day_ago = now - FEED_RECENT
        week_ago = now - FEED_WEEK

        query = self._posts_query().where(Post.is_public.is_(True))

        if date_filter == PostDateFilter.WEEK:
            query = query.where(and_(Post.created_at >= week_ago, Post.created_at < day_ago))
        elif date_filter == PostDateFilter.OLDER:
            query = query.where(Post.created_at < week_ago)
        else:
            query = query.where(Post.created_at >= day_ago)

        return await self._paginate_posts(query, pagination)

    async def get_user_posts(
        self, user_id: UUID, current_user: User, pagination: PaginationParams
    ) -> Dict[str, Any]:
        """Posts of one user. Hidden posts are listed for the owner and admins."""
        user = await self.db.get(User, user_id)
        if not user:
            raise NotFoundError("user_not_found")

        query = self._posts_query().where(Post.user_id == user_id)
        if current_user.id != user_id and not current_user.is_admin:
            query = query.where(Post.is_public.is_(True))

        return await self._paginate_posts(query, pagination)

    async def update_post(self, post_id: UUID, content: str, user_id: UUID) -> Dict[str, Any]:
        post = await self.db.get(Post, post_id)
        if not post:
            raise NotFoundError("post_not_found")
        if post.user_id != user_id:
            raise AppPermissionError("unauthorized_post_update")

        post.content = content
        await self._commit()
        return await self.get_post(post_id)

    async def delete_post(self, post_id: UUID, current_user: User, as_admin: bool = False) -> None:
        """Delete a post, removing the stored object of its file first.

        Comments, likes and the file row go with the cascading foreign keys.
        """
        post = await self._get_post_with_relations(post_id)
        if not post:
            raise NotFoundError("post_not_found")
        if not as_admin and post.user_id != current_user.id:
            raise AppPermissionError("unauthorized_post_delete")

        if post.file:
            await self.file_service.delete_post_file(post.file.filename)

        try:
            await self.db.delete(post)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise InternalServerError() from e

        logger.info(f"Post {post_id} deleted by {current_user.id}")

    async def set_is_public(self, post_id: UUID, value: bool) -> None:
        post = await self.db.get(Post, post_id)
        if not post:
            raise NotFoundError("post_not_found")

        post.is_public = value
        await self._commit()

    # Private helper methods

    def _posts_query(self):
        return (
            select(Post)
            .options(selectinload(Post.user), selectinload(Post.file), selectinload(Post.likes))
            .order_by(desc(Post.created_at), desc(Post.id))
        )

    async def _get_post_with_relations(self, post_id: UUID) -> Optional[Post]:
        result = await self.db.execute(
            select(Post)
            .options(selectinload(Post.user), selectinload(Post.file), selectinload(Post.likes))
            .where(Post.id == post_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def _paginate_posts(self, query, pagination: PaginationParams) -> Dict[str, Any]:
        result = await paginate(self.db, query, pagination)
        posts = result["items"]
        counts = await self._comment_counts([post.id for post in posts])
        result["items"] = [self._serialize(post, counts) for post in posts]
        return result

    async def _comment_counts(self, post_ids: List[UUID]) -> Dict[UUID, int]:
        if not post_ids:
            return {}
        result = await self.db.execute(
            select(Comment.post_id, func.count(Comment.id))
            .where(Comment.post_id.in_(post_ids))
            .group_by(Comment.post_id)
        )
        return {post_id: count for post_id, count in result.all()}

    def _serialize(self, post: Post, comment_counts: Dict[UUID, int]) -> Dict[str, Any]:
        return PostResponse(
            id=post.id,
            content=post.content,
            is_public=post.is_public,
            created_at=post.created_at,
            updated_at=post.updated_at,
            user=UserBriefResponse.model_validate(post.user),
            file=FileResponse.model_validate(post.file) if post.file else None,
            likes=[like.user_id for like in post.likes],
            comments=comment_counts.get(post.id, 0),
        ).model_dump(mode="json")

    async def _commit(self) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise InternalServerError() from e
