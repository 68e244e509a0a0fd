"""Post-related Pydantic schemas for request/response validation."""

from datetime import datetime
from enum import Enum
from typing import List, Optional
from uuid import UUID

from pydantic import Field, field_validator

from .base import BaseSchema
from .file import FileResponse
from .user import UserBriefResponse


class PostDateFilter(str, Enum):
    """Age window of the public feed."""

    TODAY = "today"
    WEEK = "week"
    OLDER = "older"


class PostBase(BaseSchema):
    content: str = Field(..., min_length=1, max_length=1000)

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Content cannot be blank")
        return v


class PostCreate(PostBase):
    """Schema for creating a post.

    ``file`` is the id returned by the upload endpoint.
    """

    file: Optional[UUID] = None


class PostUpdate(PostBase):
    """Schema for updating a post."""


class PostResponse(BaseSchema):
    """Schema for a post with its author, file, likes and comment count."""

    id: UUID
    content: Optional[str]
    is_public: bool
    created_at: datetime
    updated_at: datetime
    user: UserBriefResponse
    file: Optional[FileResponse] = None
    likes: List[UUID] = []
    comments: int = 0
