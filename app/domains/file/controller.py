"""File upload controller."""

import logging

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.dependencies import get_current_user, get_upload_storage
from app.core.i18n import Translator, get_translator
from app.database import get_db
from app.domains.file.service import FileService
from app.domains.file.storage import UploadStorage
from app.exceptions.base import BadRequestError
from app.exceptions.file import FileSizeLimitError
from app.schemas.base import ResponseSchema
from app.schemas.file import FileResponse
from models.user import User

logger = logging.getLogger(__name__)

router = APIRouter(prefix=f"{settings.api_prefix}/files", tags=["files"])


@router.post("/posts", response_model=ResponseSchema, status_code=201)
async def upload_post_file(
    file: UploadFile | None = File(None, description="PNG or JPEG image"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    storage: UploadStorage = Depends(get_upload_storage),
    t: Translator = Depends(get_translator),
):
    """
    Upload an image for a post that is created afterwards.

    The returned ``id`` is passed as ``file`` when creating the post. Uploads
    that are never attached are removed by the periodic cleanup.
    """
    if file is None:
        raise BadRequestError(details={"file": "unsupported_image_file"})

    # Read one byte past the limit to detect oversized uploads
    content = await file.read(settings.max_image_size + 1)
    if len(content) > settings.max_image_size:
        raise FileSizeLimitError()

    stored = await FileService(db, storage).save_file(content)
    logger.info(f"User {current_user.id} uploaded file {stored['id']}")

    return ResponseSchema(
        status="success",
        message=t("file_upload_success"),
        data=FileResponse.model_validate(stored).model_dump(mode="json"),
    )
