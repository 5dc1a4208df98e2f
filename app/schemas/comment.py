"""
Pydantic schemas for comments
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.schemas.common import CamelModel, PageInfo
from app.schemas.video import OwnerProjection


class CommentCreate(CamelModel):
    """Body for adding a comment."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True
    )

    content: str = Field(..., min_length=1, max_length=5000)


class CommentUpdate(CommentCreate):
    """Body for editing a comment."""


class CommentResponse(CamelModel):
    id: UUID
    content: str
    video_id: UUID
    owner: Optional[OwnerProjection] = None
    created_at: datetime
    updated_at: datetime


class CommentListResponse(CamelModel):
    items: List[CommentResponse]
    page_info: PageInfo
