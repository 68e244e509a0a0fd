"""Like service layer."""

from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions.base import BadRequestError, InternalServerError, NotFoundError
from models import Like, Post


class LikeService:
    """Service class for likes. A user likes a post at most once."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def add_like(self, post_id: UUID, user_id: UUID) -> Like:
        if not await self.db.get(Post, post_id):
            raise NotFoundError("post_not_found")
        if await self.db.get(Like, (user_id, post_id)):
            raise BadRequestError("like_already_exist")

        like = Like(user_id=user_id, post_id=post_id)
        try:
            self.db.add(like)
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise BadRequestError("like_already_exist") from e
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise InternalServerError() from e
        return like

    async def remove_like(self, post_id: UUID, user_id: UUID) -> None:
        if not await self.db.get(Post, post_id):
            raise NotFoundError("post_not_found")

        like = await self.db.get(Like, (user_id, post_id))
        if not like:
            raise NotFoundError("like_not_found")

        try:
            await self.db.delete(like)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise InternalServerError() from e
