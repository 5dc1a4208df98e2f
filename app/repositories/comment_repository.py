"""
Comment repository for database operations
"""

from typing import Optional
from uuid import UUID

from sqlalchemy import asc, delete, desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.comment import Comment
from app.models.like import Like
from app.models.user import User
from app.repositories.pagination import build_page_info
from app.repositories.video_repository import owner_columns, to_owner
from app.schemas.comment import CommentListResponse, CommentResponse
from app.schemas.common import Pagination


class CommentRepository:
    """Repository for comment database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    @staticmethod
    def _to_response(comment: Comment, username: Optional[str], fullname: Optional[str], avatar: Optional[str]) -> CommentResponse:
        return CommentResponse(
            id=comment.id,
            content=comment.content,
            video_id=comment.video_id,
            owner=to_owner(username, fullname, avatar),
            created_at=comment.created_at,
            updated_at=comment.updated_at
        )

    async def list_comments(self, video_id: UUID, pagination: Pagination) -> CommentListResponse:
        """
        List comments on a video, newest first.

        Args:
            video_id: Video the comments belong to
            pagination: Page and page size

        Returns:
            CommentListResponse with the page of comments and page info
        """
        count_result = await self.db.execute(
            select(func.count()).select_from(Comment).where(Comment.video_id == video_id)
        )
        total_items = count_result.scalar() or 0
        page_info = build_page_info(pagination, total_items)
        if pagination.offset >= total_items:
            return CommentListResponse(items=[], page_info=page_info)

        result = await self.db.execute(
            select(Comment, *owner_columns())
            .outerjoin(User, User.id == Comment.owner_id)
            .where(Comment.video_id == video_id)
            .order_by(desc(Comment.created_at), asc(Comment.id))
            .offset(pagination.offset)
            .limit(pagination.limit)
        )

        items = [self._to_response(*row) for row in result.all()]
        return CommentListResponse(items=items, page_info=page_info)

    async def get_by_id(self, comment_id: UUID) -> Optional[Comment]:
        result = await self.db.execute(select(Comment).where(Comment.id == comment_id))
        return result.scalar_one_or_none()

    async def get_with_owner(self, comment_id: UUID) -> Optional[CommentResponse]:
        """
        Get a comment with its owner projection.

        Args:
            comment_id: Comment ID

        Returns:
            CommentResponse if found, None otherwise
        """
        result = await self.db.execute(
            select(Comment, *owner_columns())
            .outerjoin(User, User.id == Comment.owner_id)
            .where(Comment.id == comment_id)
            .execution_options(populate_existing=True)
        )
        row = result.first()
        if row is None:
            return None
        return self._to_response(*row)

    async def create_comment(self, video_id: UUID, owner_id: UUID, content: str) -> Comment:
        comment = Comment(content=content, video_id=video_id, owner_id=owner_id)
        self.db.add(comment)
        await self.db.commit()
        return comment

    async def update_content(self, comment: Comment, content: str) -> Comment:
        comment.content = content
        await self.db.commit()
        return comment

    async def delete_comment(self, comment: Comment) -> None:
        """Delete a comment and the likes on it."""
        await self.db.execute(delete(Like).where(Like.comment_id == comment.id))
        await self.db.delete(comment)
        await self.db.commit()
