"""Comment API controller with FastAPI endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.dependencies import get_current_user, get_pagination, validate_token
from app.core.i18n import Translator, get_translator
from app.database import get_db
from app.domains.comment.service import CommentService
from app.schemas.base import ResponseSchema
from app.schemas.comment import CommentCreate, CommentResponse, CommentUpdate
from app.shared.pagination import PaginatedResponse, PaginationParams
from models.user import User

router = APIRouter(
    prefix=f"{settings.api_prefix}/comments",
    tags=["comments"],
    dependencies=[Depends(validate_token)],
)


@router.post("/{post_id}", response_model=ResponseSchema, status_code=201)
async def add_comment(
    comment_data: CommentCreate,
    post_id: UUID = Path(..., description="Post ID"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    t: Translator = Depends(get_translator),
):
    service = CommentService(db)
    comment = await service.add_comment(post_id, current_user.id, comment_data.content)
    return ResponseSchema(
        status="success",
        message=t("comment_create_success"),
        data=CommentResponse.model_validate(comment).model_dump(mode="json"),
    )


@router.get("/{post_id}", response_model=PaginatedResponse[CommentResponse])
async def get_comments(
    post_id: UUID = Path(..., description="Post ID"),
    pagination: PaginationParams = Depends(get_pagination),
    db: AsyncSession = Depends(get_db),
):
    """Get the comments of a post, oldest first."""
    service = CommentService(db)
    result = await service.get_comments(post_id, pagination)
    return PaginatedResponse[CommentResponse](
        data=[CommentResponse.model_validate(comment) for comment in result["items"]],
        page=result["page"],
        size=result["size"],
        total_pages=result["total_pages"],
    )


@router.put("/{comment_id}", response_model=ResponseSchema)
async def update_comment(
    comment_data: CommentUpdate,
    comment_id: UUID = Path(..., description="Comment ID"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    t: Translator = Depends(get_translator),
):
    service = CommentService(db)
    comment = await service.update_comment(comment_id, comment_data.content, current_user)
    return ResponseSchema(
        status="success",
        message=t("comment_update_success"),
        data=CommentResponse.model_validate(comment).model_dump(mode="json"),
    )


@router.delete("/{comment_id}", response_model=ResponseSchema)
async def delete_comment(
    comment_id: UUID = Path(..., description="Comment ID"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    t: Translator = Depends(get_translator),
):
    service = CommentService(db)
    await service.delete_comment(comment_id, current_user)
    return ResponseSchema(status="success", message=t("comment_delete_success"))
