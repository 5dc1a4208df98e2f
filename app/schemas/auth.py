"""
Authentication and user profile schemas
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from app.schemas.common import CamelModel


class _RequestModel(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True
    )


# Token schemas
class TokenPair(CamelModel):
    """Access/refresh token pair."""

    access_token: str
    refresh_token: str


class TokenClaims(BaseModel):
    """Decoded JWT payload."""

    sub: UUID
    type: str
    email: Optional[str] = None
    fullname: Optional[str] = None
    username: Optional[str] = None
    jti: Optional[str] = None


class RefreshTokenRequest(_RequestModel):
    """Refresh token presented in the body when no cookie is sent."""

    refresh_token: Optional[str] = None


# User schemas
class UserLogin(_RequestModel):
    """Login with either username or email."""

    username: Optional[str] = None
    email: Optional[str] = None
    password: str = Field(..., min_length=1)


class UserProfile(CamelModel):
    """User profile; credentials are never part of it."""

    id: UUID
    username: str
    email: str
    fullname: str
    avatar: str
    cover_image: Optional[str] = None
    watch_history: List[str] = []
    created_at: datetime
    updated_at: datetime


class LoginResponse(CamelModel):
    user: UserProfile
    access_token: str
    refresh_token: str


class AccountUpdate(_RequestModel):
    """Profile fields a user may change; at least one is required."""

    fullname: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None


class PasswordChange(_RequestModel):
    old_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=1, max_length=100)
