"""User account controller endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.dependencies import auth, get_current_user, get_pagination, get_upload_storage
from app.core.i18n import Translator, get_translator
from app.database import get_db
from app.domains.file.storage import UploadStorage
from app.domains.user.service import UserService
from app.schemas.base import ResponseSchema
from app.schemas.user import (
    AuthResponse,
    EmailUpdateRequest,
    PasswordConfirmRequest,
    PasswordResetConfirmRequest,
    PasswordResetRequest,
    PasswordUpdateRequest,
    UserLoginRequest,
    UserPrivateResponse,
    UserResponse,
    UserSignupRequest,
    UserUpdateRequest,
)
from app.shared.pagination import PaginatedResponse, PaginationParams
from models.user import User

router = APIRouter(prefix=f"{settings.api_prefix}/users", tags=["Users"])


def get_user_service(
    db: AsyncSession = Depends(get_db),
    storage: UploadStorage = Depends(get_upload_storage),
) -> UserService:
    return UserService(db, storage)


@router.post("/", response_model=ResponseSchema, status_code=status.HTTP_201_CREATED)
async def signup(
    signup_data: UserSignupRequest,
    service: UserService = Depends(get_user_service),
    t: Translator = Depends(get_translator),
):
    """Register a new account. The account stays inactive until activated by email."""
    user = await service.create_user(
        account_name=signup_data.account_name,
        email=str(signup_data.email),
        password=signup_data.password,
    )
    return ResponseSchema(
        status="success",
        message=t("user_created"),
        data=UserPrivateResponse.model_validate(user).model_dump(mode="json"),
    )


@router.post("/activate/{token}", response_model=ResponseSchema)
async def activate_account(
    token: str = Path(..., description="Activation token from the email"),
    service: UserService = Depends(get_user_service),
    t: Translator = Depends(get_translator),
):
    await service.activate_account(token)
    return ResponseSchema(status="success", message=t("account_activation_success"))


@router.post("/auth", response_model=AuthResponse)
async def login(login_data: UserLoginRequest, service: UserService = Depends(get_user_service)):
    """Authenticate with email and password and receive a bearer token."""
    user = await service.authenticate(str(login_data.email), login_data.password)
    token, _expires_at = auth.create_access_token(
        user_id=user.id, email=user.email, account_name=user.account_name, is_admin=user.is_admin
    )
    return AuthResponse(
        token=token,
        expires_in=int(auth.expires_delta.total_seconds()),
        user=UserPrivateResponse.model_validate(user),
    )


@router.get("/", response_model=PaginatedResponse[UserResponse])
async def get_users(
    pagination: PaginationParams = Depends(get_pagination),
    current_user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    """List active users other than the caller."""
    result = await service.get_users(current_user.id, pagination)
    return PaginatedResponse[UserResponse](
        data=[UserResponse.model_validate(user) for user in result["items"]],
        page=result["page"],
        size=result["size"],
        total_pages=result["total_pages"],
    )


@router.get("/name", response_model=PaginatedResponse[UserResponse])
async def search_users(
    name: str | None = Query(None, description="Part of an account name or username"),
    pagination: PaginationParams = Depends(get_pagination),
    _current_user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    result = await service.search_users(name, pagination)
    return PaginatedResponse[UserResponse](
        data=[UserResponse.model_validate(user) for user in result["items"]],
        page=result["page"],
        size=result["size"],
        total_pages=result["total_pages"],
    )


@router.post("/password", response_model=ResponseSchema)
async def request_password_reset(
    data: PasswordResetRequest,
    service: UserService = Depends(get_user_service),
    t: Translator = Depends(get_translator),
):
    await service.request_password_reset(str(data.email))
    return ResponseSchema(status="success", message=t("password_reset_request_success"))


@router.put("/password", response_model=ResponseSchema)
async def reset_password(
    data: PasswordResetConfirmRequest,
    service: UserService = Depends(get_user_service),
    t: Translator = Depends(get_translator),
):
    await service.reset_password(data.password_reset_token, data.password)
    return ResponseSchema(status="success", message=t("password_update_success"))


@router.put("/password/{user_id}", response_model=ResponseSchema)
async def update_password(
    data: PasswordUpdateRequest,
    user_id: UUID = Path(..., description="User ID"),
    current_user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
    t: Translator = Depends(get_translator),
):
    await service.update_password(user_id, data.password, data.new_password, current_user)
    return ResponseSchema(status="success", message=t("password_update_success"))


@router.put("/email/{user_id}", response_model=ResponseSchema)
async def update_email(
    data: EmailUpdateRequest,
    user_id: UUID = Path(..., description="User ID"),
    current_user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
    t: Translator = Depends(get_translator),
):
    user = await service.update_email(user_id, data.password, str(data.new_email), current_user)
    return ResponseSchema(
        status="success",
        message=t("email_update_success"),
        data=UserPrivateResponse.model_validate(user).model_dump(mode="json"),
    )


@router.get("/{user_id}", response_model=ResponseSchema)
async def get_user(
    user_id: UUID = Path(..., description="User ID"),
    _current_user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    user = await service.get_active_user(user_id)
    return ResponseSchema(
        status="success", data=UserResponse.model_validate(user).model_dump(mode="json")
    )


@router.put("/{user_id}", response_model=ResponseSchema)
async def update_user(
    data: UserUpdateRequest,
    user_id: UUID = Path(..., description="User ID"),
    current_user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
    t: Translator = Depends(get_translator),
):
    """Update the caller's profile, optionally with a new base64 avatar."""
    user = await service.update_user(user_id, data, current_user)
    return ResponseSchema(
        status="success",
        message=t("user_update_success"),
        data=UserPrivateResponse.model_validate(user).model_dump(mode="json"),
    )


@router.delete("/{user_id}", response_model=ResponseSchema)
async def delete_user(
    data: PasswordConfirmRequest,
    user_id: UUID = Path(..., description="User ID"),
    current_user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
    t: Translator = Depends(get_translator),
):
    """Delete the caller's account together with its posts and files."""
    await service.delete_own_account(user_id, data.password, current_user)
    return ResponseSchema(status="success", message=t("user_delete_success"))
