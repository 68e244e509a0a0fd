"""Comment-related Pydantic schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import Field, field_validator

from .base import BaseSchema
from .user import UserBriefResponse


class CommentBase(BaseSchema):
    content: str = Field(..., min_length=1, max_length=1000)

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Content cannot be blank")
        return v


class CommentCreate(CommentBase):
    pass


class CommentUpdate(CommentBase):
    pass


class CommentResponse(BaseSchema):
    id: UUID
    post_id: UUID
    content: str
    created_at: datetime
    updated_at: datetime
    user: UserBriefResponse
