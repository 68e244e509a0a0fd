"""User-related Pydantic schemas for request/response validation."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import EmailStr, Field, field_validator

from .base import BaseSchema

ACCOUNT_NAME_PATTERN = r"^[A-Za-z0-9_.-]+$"


class UserSignupRequest(BaseSchema):
    """Schema for user signup request."""

    account_name: str = Field(
        ..., min_length=3, max_length=100, pattern=ACCOUNT_NAME_PATTERN, description="Unique handle"
    )
    email: EmailStr = Field(..., description="User's email address")
    password: str = Field(..., min_length=8, max_length=128)


class UserLoginRequest(BaseSchema):
    """Schema for user login request."""

    email: EmailStr
    password: str = Field(..., min_length=1)


class UserUpdateRequest(BaseSchema):
    """Schema for updating the public profile.

    ``image`` is a base64 encoded PNG or JPEG avatar.
    """

    username: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=255)
    city: Optional[str] = Field(None, max_length=255)
    birthday: Optional[datetime] = None
    image: Optional[str] = None

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("Username cannot be blank")
        return v.strip() if v else v


class PasswordConfirmRequest(BaseSchema):
    """Schema for operations confirmed with the current password."""

    password: str = Field(..., min_length=1)


class PasswordResetRequest(BaseSchema):
    email: EmailStr


class PasswordResetConfirmRequest(BaseSchema):
    password_reset_token: str = Field(..., min_length=1)
    password: str = Field(..., min_length=8, max_length=128)


class PasswordUpdateRequest(BaseSchema):
    password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=8, max_length=128)


class EmailUpdateRequest(BaseSchema):
    password: str = Field(..., min_length=1)
    new_email: EmailStr


class UserBriefResponse(BaseSchema):
    """Author data embedded in posts and comments."""

    id: UUID
    account_name: str
    username: str
    avatar: Optional[str] = None


class UserResponse(UserBriefResponse):
    """Schema for public user profile."""

    city: Optional[str] = None
    birthday: Optional[datetime] = None
    description: Optional[str] = None
    created_at: datetime


class UserPrivateResponse(UserResponse):
    """Profile returned to the account owner."""

    email: str
    is_admin: bool


class AuthResponse(BaseSchema):
    """Schema for authentication response."""

    token: str
    expires_in: int
    user: UserPrivateResponse
