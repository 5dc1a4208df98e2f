"""
Pydantic schemas for VideoTube
"""

from app.schemas.auth import (
    AccountUpdate,
    LoginResponse,
    PasswordChange,
    RefreshTokenRequest,
    TokenClaims,
    TokenPair,
    UserLogin,
    UserProfile
)
from app.schemas.comment import CommentCreate, CommentListResponse, CommentResponse, CommentUpdate
from app.schemas.common import ApiResponse, ErrorResponse, PageInfo, Pagination
from app.schemas.video import (
    OwnerProjection,
    VideoFilter,
    VideoListResponse,
    VideoResponse,
    VideoSort
)

__all__ = [
    "AccountUpdate",
    "LoginResponse",
    "PasswordChange",
    "RefreshTokenRequest",
    "TokenClaims",
    "TokenPair",
    "UserLogin",
    "UserProfile",
    "CommentCreate",
    "CommentListResponse",
    "CommentResponse",
    "CommentUpdate",
    "ApiResponse",
    "ErrorResponse",
    "PageInfo",
    "Pagination",
    "OwnerProjection",
    "VideoFilter",
    "VideoListResponse",
    "VideoResponse",
    "VideoSort"
]
