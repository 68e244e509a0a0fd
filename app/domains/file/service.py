"""File service layer: upload, attach and removal of stored files."""

import base64
import binascii
import enum
import logging
import uuid
from typing import Any, Dict
from uuid import UUID

import magic
from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.domains.file.storage import UploadStorage
from app.exceptions.base import BadRequestError, InternalServerError
from app.exceptions.file import FileStorageError, UnsupportedFileTypeError
from models import File, Post
from models.base import utcnow

logger = logging.getLogger(__name__)

# MIME type -> file extension of the stored object
ALLOWED_IMAGE_TYPES = {
    "image/png": "png",
    "image/jpeg": "jpg",
}

SNIFF_BYTES = 2048


class AttachStatus(str, enum.Enum):
    """Outcome of linking an uploaded file to a post."""

    ATTACHED = "attached"
    ALREADY_ATTACHED = "already_attached"
    NOT_FOUND = "not_found"


def detect_image_type(content: bytes) -> str | None:
    """Return the MIME type sniffed from the content if it is an allowed image."""
    if not content:
        return None
    mime_type = magic.from_buffer(content[:SNIFF_BYTES], mime=True)
    return mime_type if mime_type in ALLOWED_IMAGE_TYPES else None


class FileService:
    """Service class for uploaded files."""

    def __init__(self, db: AsyncSession, storage: UploadStorage):
        self.db = db
        self.storage = storage

    async def save_file(self, content: bytes) -> Dict[str, Any]:
        """
        Store an uploaded post image and record it as unattached.

        The content type is sniffed from the bytes; the client supplied name
        or extension plays no role. Nothing is written when the type is not
        allowed, and no row is committed when the disk write fails.

        :param content: Raw bytes of the upload.
        :return: ``{"id", "filename", "file_type"}`` of the new file.
        :raises UnsupportedFileTypeError: If the content is not PNG or JPEG.
        :raises FileStorageError: If the file cannot be written or recorded.
        """
        file_type = detect_image_type(content)
        if not file_type:
            raise UnsupportedFileTypeError()

        filename = f"{uuid.uuid4()}.{ALLOWED_IMAGE_TYPES[file_type]}"

        try:
            await self.storage.write_post_file(filename, content)
        except OSError as e:
            logger.error(f"Failed to write upload {filename}: {str(e)}")
            raise FileStorageError() from e

        file = File(filename=filename, upload_date=utcnow(), file_type=file_type)
        try:
            self.db.add(file)
            await self.db.commit()
            await self.db.refresh(file)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to record upload {filename}: {str(e)}")
            await self._discard_post_file(filename)
            raise FileStorageError() from e

        logger.info(f"Stored upload {file.id} as {filename} ({file_type})")
        return {"id": file.id, "filename": file.filename, "file_type": file.file_type}

    async def associate_file_to_post(
        self, file_id: UUID, post_id: UUID, commit: bool = True
    ) -> AttachStatus:
        """
        Link a file to a post if the file exists and is not attached yet.

        Attaching a missing or already attached file is not an error; the
        returned status tells the cases apart.
        """
        try:
            result = await self.db.execute(
                update(File)
                .where(File.id == file_id, File.post_id.is_(None))
                .values(post_id=post_id)
            )
            if result.rowcount == 1:
                if commit:
                    await self.db.commit()
                return AttachStatus.ATTACHED

            existing = await self.db.execute(select(File.id).where(File.id == file_id))
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise InternalServerError() from e

        if existing.scalar_one_or_none() is None:
            logger.info(f"File {file_id} not found, post {post_id} created without file")
            return AttachStatus.NOT_FOUND

        logger.info(f"File {file_id} is already attached, post {post_id} not linked")
        return AttachStatus.ALREADY_ATTACHED

    async def delete_post_file(self, filename: str) -> None:
        """Remove the stored object of a post file, logging any failure."""
        try:
            await self.storage.remove_post_file(filename)
        except OSError as e:
            logger.error(f"Failed to remove post file {filename}: {str(e)}")

    async def delete_user_files(self, user_id: UUID) -> None:
        """Remove the stored objects of every file attached to the user's posts."""
        result = await self.db.execute(
            select(File.filename).join(Post, File.post_id == Post.id).where(Post.user_id == user_id)
        )
        for filename in result.scalars().all():
            await self.delete_post_file(filename)

    # Profile avatars

    def validate_image(self, image_as_base64: str | None) -> bytes | None:
        """
        Decode a base64 avatar and check its size and type.

        :raises BadRequestError: With the ``image`` field error set.
        """
        if not image_as_base64:
            return None

        try:
            content = base64.b64decode(image_as_base64, validate=True)
        except (binascii.Error, ValueError) as e:
            raise BadRequestError(details={"image": "unsupported_image_file"}) from e

        if len(content) >= settings.max_image_size:
            raise BadRequestError(details={"image": "profile_avatar_size"})

        if not detect_image_type(content):
            raise BadRequestError(details={"image": "unsupported_image_file"})

        return content

    async def save_profile_avatar(self, content: bytes) -> str:
        """Write an avatar and return its storage key."""
        file_type = detect_image_type(content) or "image/png"
        filename = f"{uuid.uuid4()}.{ALLOWED_IMAGE_TYPES.get(file_type, 'png')}"
        try:
            await self.storage.write_avatar(filename, content)
        except OSError as e:
            logger.error(f"Failed to write avatar {filename}: {str(e)}")
            raise InternalServerError() from e
        return filename

    async def delete_profile_avatar(self, filename: str) -> None:
        try:
            await self.storage.remove_avatar(filename)
        except OSError as e:
            logger.error(f"Failed to remove avatar {filename}: {str(e)}")
            raise InternalServerError() from e

    # Private helper methods

    async def _discard_post_file(self, filename: str) -> None:
        try:
            await self.storage.remove_post_file(filename)
        except OSError as e:
            logger.error(f"Failed to discard upload {filename}: {str(e)}")
