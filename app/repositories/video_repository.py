"""
Video repository: feed listing and owner-scoped mutations
"""

from typing import Any, List, Optional
from uuid import UUID

from sqlalchemy import and_, asc, delete, desc, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.comment import Comment
from app.models.like import Like
from app.models.user import User
from app.models.video import Video
from app.repositories.pagination import build_page_info
from app.schemas.common import Pagination
from app.schemas.video import (
    OwnerProjection,
    VideoFilter,
    VideoListResponse,
    VideoResponse,
    VideoSort
)

# Public sort keys accepted by the feed, camelCase as sent by clients
SORTABLE_FIELDS = {
    "createdAt": Video.created_at,
    "created_at": Video.created_at,
    "updatedAt": Video.updated_at,
    "updated_at": Video.updated_at,
    "title": Video.title,
    "duration": Video.duration,
}


def owner_columns() -> List[Any]:
    """Columns of the owner projection joined onto listings."""
    return [User.username, User.fullname, User.avatar]


def to_owner(username: Optional[str], fullname: Optional[str], avatar: Optional[str]) -> Optional[OwnerProjection]:
    # Outer join yields NULLs when the owner row is gone
    if username is None:
        return None
    return OwnerProjection(username=username, fullname=fullname, avatar=avatar)


class VideoRepository:
    """Repository for video database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    @staticmethod
    def _to_response(video: Video, username: Optional[str], fullname: Optional[str], avatar: Optional[str]) -> VideoResponse:
        return VideoResponse(
            id=video.id,
            title=video.title,
            description=video.description,
            duration=video.duration or 0,
            video_file=video.video_file,
            thumbnail=video.thumbnail,
            is_published=video.is_published,
            owner=to_owner(username, fullname, avatar),
            created_at=video.created_at,
            updated_at=video.updated_at
        )

    @staticmethod
    def _feed_conditions(video_filter: VideoFilter) -> list:
        conditions = [Video.is_published.is_(True)]

        if video_filter.query:
            conditions.append(
                or_(
                    Video.title.icontains(video_filter.query, autoescape=True),
                    Video.description.icontains(video_filter.query, autoescape=True)
                )
            )

        if video_filter.owner_id:
            conditions.append(Video.owner_id == video_filter.owner_id)

        return conditions

    @staticmethod
    def _ordering(sort: VideoSort) -> list:
        if sort.field and sort.direction:
            column = SORTABLE_FIELDS.get(sort.field, Video.created_at)
            primary = desc(column) if sort.direction == "desc" else asc(column)
        else:
            primary = desc(Video.created_at)
        # Stable order across pages when the sort key ties
        return [primary, asc(Video.id)]

    async def list_videos(
        self,
        video_filter: VideoFilter,
        sort: VideoSort,
        pagination: Pagination
    ) -> VideoListResponse:
        """
        List published videos with filtering, sorting and offset pagination.

        Args:
            video_filter: Free-text query and optional owner
            sort: Requested sort field and direction
            pagination: Page and page size

        Returns:
            VideoListResponse with the page of videos and page info
        """
        conditions = self._feed_conditions(video_filter)

        # Count against the same predicate, without offset/limit
        count_result = await self.db.execute(
            select(func.count()).select_from(Video).where(and_(*conditions))
        )
        total_items = count_result.scalar() or 0
        page_info = build_page_info(pagination, total_items)

        # Pages past the last match are empty without querying rows
        if pagination.offset >= total_items:
            return VideoListResponse(items=[], page_info=page_info)

        query = (
            select(Video, *owner_columns())
            .outerjoin(User, User.id == Video.owner_id)
            .where(and_(*conditions))
            .order_by(*self._ordering(sort))
            .offset(pagination.offset)
            .limit(pagination.limit)
        )
        result = await self.db.execute(query)

        items = [self._to_response(*row) for row in result.all()]
        return VideoListResponse(items=items, page_info=page_info)

    async def get_by_id(self, video_id: UUID) -> Optional[Video]:
        """
        Get video by ID.

        Args:
            video_id: Video ID

        Returns:
            Video if found, None otherwise
        """
        result = await self.db.execute(select(Video).where(Video.id == video_id))
        return result.scalar_one_or_none()

    async def get_with_owner(self, video_id: UUID) -> Optional[VideoResponse]:
        """
        Get a video with its owner projection, published or not.

        Args:
            video_id: Video ID

        Returns:
            VideoResponse if found, None otherwise
        """
        result = await self.db.execute(
            select(Video, *owner_columns())
            .outerjoin(User, User.id == Video.owner_id)
            .where(Video.id == video_id)
            .execution_options(populate_existing=True)
        )
        row = result.first()
        if row is None:
            return None
        return self._to_response(*row)

    async def create_video(
        self,
        owner_id: UUID,
        title: str,
        description: str,
        video_file: str,
        thumbnail: str,
        duration: Optional[float] = None
    ) -> Video:
        """
        Create new video record, published by default.

        Returns:
            Created video
        """
        video = Video(
            title=title,
            description=description,
            duration=duration or 0,
            video_file=video_file,
            thumbnail=thumbnail,
            owner_id=owner_id,
            is_published=True
        )
        self.db.add(video)
        await self.db.commit()
        return video

    async def update_video(self, video: Video, **values) -> Video:
        """
        Apply field updates to a loaded video.

        Args:
            video: Video to update
            **values: Attribute values to set

        Returns:
            Updated video
        """
        for field, value in values.items():
            setattr(video, field, value)
        await self.db.commit()
        return video

    async def toggle_publish(self, video: Video) -> Video:
        """Flip the published flag."""
        return await self.update_video(video, is_published=not video.is_published)

    async def delete_video(self, video: Video) -> None:
        """
        Delete a video together with its comments and likes.

        Args:
            video: Video to delete
        """
        comment_ids = select(Comment.id).where(Comment.video_id == video.id)
        await self.db.execute(
            delete(Like).where(or_(Like.video_id == video.id, Like.comment_id.in_(comment_ids)))
        )
        await self.db.execute(delete(Comment).where(Comment.video_id == video.id))
        await self.db.delete(video)
        await self.db.commit()

    async def exists(self, video_id: UUID) -> bool:
        result = await self.db.execute(select(func.count(Video.id)).where(Video.id == video_id))
        return (result.scalar() or 0) > 0
