"""Moderation endpoints available to administrators."""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.dependencies import get_current_admin, get_upload_storage
from app.core.i18n import Translator, get_translator
from app.database import get_db
from app.domains.comment.service import CommentService
from app.domains.file.storage import UploadStorage
from app.domains.post.service import PostService
from app.domains.user.service import UserService
from app.schemas.base import ResponseSchema
from app.schemas.comment import CommentResponse
from app.schemas.user import PasswordConfirmRequest
from models.user import User

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix=f"{settings.api_prefix}/admin",
    tags=["admin"],
    dependencies=[Depends(get_current_admin)],
)


@router.put("/comments/reset/{comment_id}", response_model=ResponseSchema)
async def reset_comment(
    comment_id: UUID = Path(..., description="Comment ID"),
    db: AsyncSession = Depends(get_db),
    t: Translator = Depends(get_translator),
):
    """Replace the content of a comment with the moderation notice."""
    comment = await CommentService(db).reset_comment(comment_id)
    return ResponseSchema(
        status="success",
        message=t("comment_reset_success"),
        data=CommentResponse.model_validate(comment).model_dump(mode="json"),
    )


@router.put("/posts/hide/{post_id}", response_model=ResponseSchema)
async def hide_post(
    post_id: UUID = Path(..., description="Post ID"),
    db: AsyncSession = Depends(get_db),
    storage: UploadStorage = Depends(get_upload_storage),
    t: Translator = Depends(get_translator),
):
    await PostService(db, storage).set_is_public(post_id, False)
    return ResponseSchema(status="success", message=t("post_hidden"))


@router.put("/posts/show/{post_id}", response_model=ResponseSchema)
async def show_post(
    post_id: UUID = Path(..., description="Post ID"),
    db: AsyncSession = Depends(get_db),
    storage: UploadStorage = Depends(get_upload_storage),
    t: Translator = Depends(get_translator),
):
    await PostService(db, storage).set_is_public(post_id, True)
    return ResponseSchema(status="success", message=t("post_public"))


@router.delete("/posts/{post_id}", response_model=ResponseSchema)
async def delete_post(
    post_id: UUID = Path(..., description="Post ID"),
    admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
    storage: UploadStorage = Depends(get_upload_storage),
    t: Translator = Depends(get_translator),
):
    await PostService(db, storage).delete_post(post_id, admin, as_admin=True)
    return ResponseSchema(status="success", message=t("post_delete_success"))


@router.put("/users/ban/{user_id}", response_model=ResponseSchema)
async def ban_user(
    user_id: UUID = Path(..., description="User ID"),
    db: AsyncSession = Depends(get_db),
    storage: UploadStorage = Depends(get_upload_storage),
    t: Translator = Depends(get_translator),
):
    """Suspend an account and notify its owner by mail."""
    await UserService(db, storage).set_ban(user_id, True)
    return ResponseSchema(status="success", message=t("ban_success"))


@router.put("/users/unban/{user_id}", response_model=ResponseSchema)
async def unban_user(
    user_id: UUID = Path(..., description="User ID"),
    db: AsyncSession = Depends(get_db),
    storage: UploadStorage = Depends(get_upload_storage),
    t: Translator = Depends(get_translator),
):
    await UserService(db, storage).set_ban(user_id, False)
    return ResponseSchema(status="success", message=t("unban_success"))


@router.delete("/users/{user_id}", response_model=ResponseSchema)
async def delete_user(
    data: PasswordConfirmRequest,
    user_id: UUID = Path(..., description="User ID"),
    admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
    storage: UploadStorage = Depends(get_upload_storage),
    t: Translator = Depends(get_translator),
):
    """Delete any account after confirming the admin's password."""
    await UserService(db, storage).delete_user_as_admin(user_id, data.password, admin)
    return ResponseSchema(status="success", message=t("user_delete_success"))
