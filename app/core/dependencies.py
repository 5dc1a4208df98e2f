"""
FastAPI dependencies for authentication, services and validation
"""

import logging
import os
from typing import Optional
from uuid import UUID

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings, get_settings
from app.core.exceptions import InternalError, UnauthorizedError, ValidationError
from app.database import get_db
from app.models.user import User
from app.services.auth import AuthService
from app.services.file_service import FileService
from app.services.s3_service import S3Service
from app.services.token_service import ACCESS, TokenService

logger = logging.getLogger(__name__)

ACCESS_TOKEN_COOKIE = "accessToken"
REFRESH_TOKEN_COOKIE = "refreshToken"

security = HTTPBearer(auto_error=False)


def get_token_service(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings)
) -> TokenService:
    return TokenService(db, settings)


def get_storage_service(settings: Settings = Depends(get_settings)) -> S3Service:
    """
    Get the blob storage collaborator.

    Raises:
        InternalError: If storage credentials are missing
    """
    try:
        return S3Service(settings)
    except ValueError as e:
        logger.error(f"Storage unavailable: {e}")
        raise InternalError("File storage is not configured")


def get_file_service(settings: Settings = Depends(get_settings)) -> FileService:
    return FileService(settings)


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    token_service: TokenService = Depends(get_token_service),
    db: AsyncSession = Depends(get_db)
) -> User:
    """
    Authenticate the request and attach the acting user to it.

    The access token is read from the accessToken cookie first, then from
    the Authorization: Bearer header.

    Args:
        request: Incoming request, receives the user on request.state
        credentials: Bearer credentials from the Authorization header
        token_service: Token verifier
        db: Database session

    Returns:
        User: Current authenticated user, without credential fields

    Raises:
        UnauthorizedError: If no valid token is presented or the user is gone
    """
    token = request.cookies.get(ACCESS_TOKEN_COOKIE)
    if not token and credentials:
        token = credentials.credentials

    if not token:
        raise UnauthorizedError("Unauthorized request")

    claims = token_service.verify(token, ACCESS)

    user = await AuthService.get_identity(db, claims.sub)
    if not user:
        raise UnauthorizedError("Invalid access token")

    request.state.user = user
    return user


def parse_object_id(value: Optional[str], label: str = "id") -> UUID:
    """
    Parse a path or query identifier.

    Args:
        value: Raw identifier
        label: Name used in the error message

    Returns:
        UUID

    Raises:
        ValidationError: If the value is not a well-formed identifier
    """
    try:
        return UUID(str(value))
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {label}")


def parse_optional_object_id(value: Optional[str]) -> Optional[UUID]:
    """Parse an identifier, returning None for absent or malformed values."""
    if not value:
        return None
    try:
        return UUID(value)
    except ValueError:
        return None


def verify_temp_directory(settings: Settings) -> bool:
    """
    Verify the staging directory exists and is writable.

    Returns:
        bool: True if directory is accessible
    """
    try:
        os.makedirs(settings.temp_directory, exist_ok=True)
        test_file = os.path.join(settings.temp_directory, ".test")
        with open(test_file, "w") as f:
            f.write("test")
        os.remove(test_file)
        return True
    except OSError:
        return False
