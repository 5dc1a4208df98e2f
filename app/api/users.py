"""
User API endpoints: registration, session lifecycle and profile
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Request, Response, UploadFile, status
from pydantic import EmailStr
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings, get_settings
from app.core.dependencies import (
    ACCESS_TOKEN_COOKIE,
    REFRESH_TOKEN_COOKIE,
    get_current_user,
    get_file_service,
    get_storage_service,
    get_token_service
)
from app.core.exceptions import ConflictError, InternalError, NotFoundError, UnauthorizedError, ValidationError
from app.database import get_db
from app.models.user import User
from app.schemas.auth import (
    AccountUpdate,
    LoginResponse,
    PasswordChange,
    RefreshTokenRequest,
    TokenPair,
    UserLogin,
    UserProfile
)
from app.schemas.common import ApiResponse
from app.services.auth import AuthService
from app.services.file_service import FileService
from app.services.s3_service import IMAGES, S3Service
from app.services.token_service import TokenService

logger = logging.getLogger(__name__)

router = APIRouter()


def _set_token_cookies(response: Response, tokens: TokenPair, settings: Settings) -> None:
    for name, value in ((ACCESS_TOKEN_COOKIE, tokens.access_token), (REFRESH_TOKEN_COOKIE, tokens.refresh_token)):
        response.set_cookie(name, value, httponly=True, secure=settings.cookie_secure)


def _clear_token_cookies(response: Response, settings: Settings) -> None:
    for name in (ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE):
        response.delete_cookie(name, httponly=True, secure=settings.cookie_secure)


@router.post("/register", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
async def register_user(
    fullname: str = Form(...),
    email: EmailStr = Form(...),
    username: str = Form(..., max_length=50),
    password: str = Form(..., min_length=1, max_length=100),
    avatar: Optional[UploadFile] = File(None),
    cover_image: Optional[UploadFile] = File(None, alias="coverImage"),
    db: AsyncSession = Depends(get_db),
    file_service: FileService = Depends(get_file_service),
    storage: S3Service = Depends(get_storage_service)
) -> ApiResponse:
    """
    Register a new user with an avatar and optional cover image.

    Args:
        fullname: Display name
        email: Email address
        username: Unique handle, stored lower-cased
        password: Plain text password, stored hashed
        avatar: Required avatar image
        cover_image: Optional cover image
        db: Database session
        file_service: Upload staging
        storage: Blob storage

    Returns:
        Envelope with the created user profile

    Raises:
        ValidationError: If a field or the avatar is missing
        ConflictError: If username or email is taken
    """
    if any(not field.strip() for field in (fullname, email, username, password)):
        raise ValidationError("All fields are required")

    existing_user = await AuthService.find_by_username_or_email(db, username=username, email=email)
    if existing_user:
        raise ConflictError("User with email or username already exists")

    if avatar is None or not avatar.filename:
        raise ValidationError("Avatar is required")

    avatar_path = await file_service.stage(avatar, IMAGES)
    try:
        cover_image_path = await file_service.stage(cover_image, IMAGES)
    except Exception:
        file_service.discard([avatar_path])
        raise

    uploaded_avatar = await storage.upload(avatar_path, IMAGES)
    if not uploaded_avatar:
        file_service.discard([cover_image_path])
        raise InternalError("Failed to upload avatar")

    uploaded_cover = await storage.upload(cover_image_path, IMAGES)

    user = await AuthService.create_user(
        db,
        fullname=fullname,
        email=email,
        username=username,
        password=password,
        avatar=uploaded_avatar.url,
        cover_image=uploaded_cover.url if uploaded_cover else None
    )

    logger.info(f"Registered user {user.id} ({user.username})")
    return ApiResponse(
        status_code=201,
        data=UserProfile.model_validate(user),
        message="User registered successfully"
    )


@router.post("/login", response_model=ApiResponse)
async def login_user(
    credentials: UserLogin,
    response: Response,
    db: AsyncSession = Depends(get_db),
    token_service: TokenService = Depends(get_token_service),
    settings: Settings = Depends(get_settings)
) -> ApiResponse:
    """
    Log in with username or email and receive the token pair.

    Tokens are returned in the body and as httpOnly cookies.

    Raises:
        ValidationError: If neither username nor email is given
        NotFoundError: If no user matches
        UnauthorizedError: If the password is wrong
    """
    if not credentials.username and not credentials.email:
        raise ValidationError("Username or email is required")

    user = await AuthService.find_by_username_or_email(
        db,
        username=credentials.username,
        email=credentials.email
    )
    if not user:
        raise NotFoundError("User does not exist")

    if not AuthService.verify_password(credentials.password, user.password):
        raise UnauthorizedError("Invalid user credentials")

    tokens = await token_service.rotate_tokens(user)
    _set_token_cookies(response, tokens, settings)

    logged_in_user = await AuthService.get_identity(db, user.id)
    logger.info(f"User {user.id} logged in")

    return ApiResponse(
        status_code=200,
        data=LoginResponse(
            user=UserProfile.model_validate(logged_in_user),
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token
        ),
        message="User logged in successfully"
    )


@router.post("/logout", response_model=ApiResponse)
async def logout_user(
    response: Response,
    current_user: User = Depends(get_current_user),
    token_service: TokenService = Depends(get_token_service),
    settings: Settings = Depends(get_settings)
) -> ApiResponse:
    """
    Log out: drop the stored refresh token and clear the cookies.
    """
    await token_service.revoke(current_user)
    _clear_token_cookies(response, settings)

    logger.info(f"User {current_user.id} logged out")
    return ApiResponse(status_code=200, data={}, message="User logged out successfully")


@router.post("/refresh-token", response_model=ApiResponse)
async def refresh_access_token(
    request: Request,
    response: Response,
    refresh_request: Optional[RefreshTokenRequest] = None,
    token_service: TokenService = Depends(get_token_service),
    settings: Settings = Depends(get_settings)
) -> ApiResponse:
    """
    Exchange the refresh token (cookie first, then body) for a new pair.

    Raises:
        UnauthorizedError: If no token is sent, it is invalid, or its user is gone
        ForbiddenError: If the token is not the one currently stored
    """
    incoming_refresh_token = request.cookies.get(REFRESH_TOKEN_COOKIE)
    if not incoming_refresh_token and refresh_request:
        incoming_refresh_token = refresh_request.refresh_token

    if not incoming_refresh_token:
        raise UnauthorizedError("Refresh token is required")

    tokens = await token_service.refresh(incoming_refresh_token)
    _set_token_cookies(response, tokens, settings)

    return ApiResponse(status_code=200, data=tokens, message="Access token refreshed successfully")


@router.post("/change-password", response_model=ApiResponse)
async def change_password(
    password_change: PasswordChange,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
) -> ApiResponse:
    """
    Change the current user's password.

    Raises:
        UnauthorizedError: If the old password is wrong
    """
    user = await AuthService.get_user_by_id(db, current_user.id)
    if not user or not AuthService.verify_password(password_change.old_password, user.password):
        raise UnauthorizedError("Old password is incorrect")

    await AuthService.update_password(db, user.id, password_change.new_password)

    logger.info(f"User {user.id} changed password")
    return ApiResponse(status_code=200, data={}, message="Password changed successfully")


@router.get("/current-user", response_model=ApiResponse)
async def get_user_profile(current_user: User = Depends(get_current_user)) -> ApiResponse:
    return ApiResponse(
        status_code=200,
        data=UserProfile.model_validate(current_user),
        message="User fetched successfully"
    )


@router.patch("/update-account", response_model=ApiResponse)
async def update_account_details(
    account_update: AccountUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
) -> ApiResponse:
    """
    Update fullname and/or email.

    Raises:
        ValidationError: If neither field is given
        ConflictError: If the email belongs to another user
    """
    values = account_update.model_dump(exclude_none=True)
    if not values:
        raise ValidationError("Fullname or email is required")

    if "email" in values:
        values["email"] = values["email"].lower()

    user = await AuthService.update_user(db, current_user.id, **values)
    return ApiResponse(
        status_code=200,
        data=UserProfile.model_validate(user),
        message="Account details updated successfully"
    )


async def _replace_image(
    field: str,
    image: Optional[UploadFile],
    current_user: User,
    db: AsyncSession,
    file_service: FileService,
    storage: S3Service
) -> User:
    """Upload a new profile image and store its URL on the given column."""
    if image is None or not image.filename:
        raise ValidationError(f"{field.replace('_', ' ').capitalize()} file is missing")

    local_path = await file_service.stage(image, IMAGES)
    uploaded = await storage.upload(local_path, IMAGES)
    if not uploaded:
        raise InternalError(f"Error while uploading {field.replace('_', ' ')}")

    return await AuthService.update_user(db, current_user.id, **{field: uploaded.url})


@router.patch("/avatar", response_model=ApiResponse)
async def update_user_avatar(
    avatar: Optional[UploadFile] = File(None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    file_service: FileService = Depends(get_file_service),
    storage: S3Service = Depends(get_storage_service)
) -> ApiResponse:
    user = await _replace_image("avatar", avatar, current_user, db, file_service, storage)
    return ApiResponse(
        status_code=200,
        data=UserProfile.model_validate(user),
        message="Avatar image updated successfully"
    )


@router.patch("/cover-image", response_model=ApiResponse)
async def update_user_cover_image(
    cover_image: Optional[UploadFile] = File(None, alias="coverImage"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    file_service: FileService = Depends(get_file_service),
    storage: S3Service = Depends(get_storage_service)
) -> ApiResponse:
    user = await _replace_image("cover_image", cover_image, current_user, db, file_service, storage)
    return ApiResponse(
        status_code=200,
        data=UserProfile.model_validate(user),
        message="Cover image updated successfully"
    )
