"""
Pydantic schemas for video operations
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from app.schemas.common import CamelModel, PageInfo


class OwnerProjection(CamelModel):
    """Public subset of the owning user embedded in listings."""

    username: str
    fullname: str
    avatar: str


class VideoResponse(CamelModel):
    """Video with its owner projection joined in."""

    id: UUID
    title: str
    description: str
    duration: float = 0
    video_file: str
    thumbnail: str
    is_published: bool
    owner: Optional[OwnerProjection] = None
    created_at: datetime
    updated_at: datetime


class VideoListResponse(CamelModel):
    """Paginated video feed."""

    items: List[VideoResponse]
    page_info: PageInfo


class VideoFilter(BaseModel):
    """Feed filter: free text over title/description and an optional owner."""

    query: Optional[str] = None
    owner_id: Optional[UUID] = None


class VideoSort(BaseModel):
    """Requested ordering; both fields must be set to override the default."""

    field: Optional[str] = None
    direction: Optional[str] = Field(None, description="asc or desc")
