"""Like API controller."""

from uuid import UUID

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.dependencies import get_current_user, validate_token
from app.core.i18n import Translator, get_translator
from app.database import get_db
from app.domains.like.service import LikeService
from app.schemas.base import ResponseSchema
from models.user import User

router = APIRouter(
    prefix=f"{settings.api_prefix}/likes",
    tags=["likes"],
    dependencies=[Depends(validate_token)],
)


@router.post("/{post_id}", response_model=ResponseSchema, status_code=201)
async def add_like(
    post_id: UUID = Path(..., description="Post ID"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    t: Translator = Depends(get_translator),
):
    await LikeService(db).add_like(post_id, current_user.id)
    return ResponseSchema(status="success", message=t("like_create_success"))


@router.delete("/{post_id}", response_model=ResponseSchema)
async def remove_like(
    post_id: UUID = Path(..., description="Post ID"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    t: Translator = Depends(get_translator),
):
    await LikeService(db).remove_like(post_id, current_user.id)
    return ResponseSchema(status="success", message=t("like_delete_success"))
