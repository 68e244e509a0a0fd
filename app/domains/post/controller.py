"""Post API controller with FastAPI endpoints."""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.dependencies import get_current_user, get_pagination, get_upload_storage, validate_token
from app.core.i18n import Translator, get_translator
from app.database import get_db
from app.domains.file.storage import UploadStorage
from app.domains.post.service import PostService
from app.schemas.base import ResponseSchema
from app.schemas.post import PostCreate, PostDateFilter, PostResponse, PostUpdate
from app.shared.pagination import PaginatedResponse, PaginationParams
from models.user import User

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix=f"{settings.api_prefix}/posts",
    tags=["posts"],
    dependencies=[Depends(validate_token)],  # Global token validation for all routes
)


def get_post_service(
    db: AsyncSession = Depends(get_db),
    storage: UploadStorage = Depends(get_upload_storage),
) -> PostService:
    return PostService(db, storage)


@router.post("/", response_model=ResponseSchema, status_code=201)
async def create_post(
    post_data: PostCreate,
    current_user: User = Depends(get_current_user),
    service: PostService = Depends(get_post_service),
    t: Translator = Depends(get_translator),
):
    """Create a new post, attaching a previously uploaded file if given."""
    post = await service.create_post(post_data, current_user.id)
    return ResponseSchema(status="success", message=t("post_create_success"), data=post)


@router.get("/", response_model=PaginatedResponse[PostResponse])
async def get_posts(
    date: PostDateFilter | None = Query(None, description="today (default), week or older"),
    pagination: PaginationParams = Depends(get_pagination),
    service: PostService = Depends(get_post_service),
):
    """Get the public feed of one age window."""
    result = await service.get_posts(date, pagination)
    return PaginatedResponse[PostResponse](
        data=result["items"],
        page=result["page"],
        size=result["size"],
        total_pages=result["total_pages"],
    )


@router.get("/{user_id}", response_model=PaginatedResponse[PostResponse])
async def get_user_posts(
    user_id: UUID = Path(..., description="User ID"),
    pagination: PaginationParams = Depends(get_pagination),
    current_user: User = Depends(get_current_user),
    service: PostService = Depends(get_post_service),
):
    result = await service.get_user_posts(user_id, current_user, pagination)
    return PaginatedResponse[PostResponse](
        data=result["items"],
        page=result["page"],
        size=result["size"],
        total_pages=result["total_pages"],
    )


@router.put("/{post_id}", response_model=ResponseSchema)
async def update_post(
    post_data: PostUpdate,
    post_id: UUID = Path(..., description="Post ID"),
    current_user: User = Depends(get_current_user),
    service: PostService = Depends(get_post_service),
    t: Translator = Depends(get_translator),
):
    post = await service.update_post(post_id, post_data.content, current_user.id)
    return ResponseSchema(status="success", message=t("post_update_success"), data=post)


@router.delete("/{post_id}", response_model=ResponseSchema)
async def delete_post(
    post_id: UUID = Path(..., description="Post ID"),
    current_user: User = Depends(get_current_user),
    service: PostService = Depends(get_post_service),
    t: Translator = Depends(get_translator),
):
    """Delete one of the caller's posts together with its file."""
    await service.delete_post(post_id, current_user)
    return ResponseSchema(status="success", message=t("post_delete_success"))
