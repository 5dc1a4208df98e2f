"""
Comment API endpoints (owner-only edits)
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import get_current_user, parse_object_id
from app.core.exceptions import ForbiddenError, NotFoundError
from app.database import get_db
from app.models.comment import Comment
from app.models.user import User
from app.repositories.comment_repository import CommentRepository
from app.schemas.comment import CommentUpdate
from app.schemas.common import ApiResponse

logger = logging.getLogger(__name__)

# All comment routes require authentication
router = APIRouter(dependencies=[Depends(get_current_user)])


async def _load_owned_comment(comment_repo: CommentRepository, raw_comment_id: str, user: User, action: str) -> Comment:
    comment_id = parse_object_id(raw_comment_id, "comment id")

    comment = await comment_repo.get_by_id(comment_id)
    if not comment:
        raise NotFoundError("Comment not found")

    if comment.owner_id != user.id:
        raise ForbiddenError(f"You can only {action} your own comments")

    return comment


@router.patch("/{comment_id}", response_model=ApiResponse)
async def update_comment(
    comment_id: str,
    comment_data: CommentUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
) -> ApiResponse:
    """
    Edit the content of an owned comment.

    Args:
        comment_id: Comment id
        comment_data: New content, trimmed and non-empty
        current_user: Current authenticated user
        db: Database session

    Returns:
        Envelope with the updated comment

    Raises:
        ValidationError: If the id is malformed
        NotFoundError: If the comment does not exist
        ForbiddenError: If the current user is not the owner
    """
    comment_repo = CommentRepository(db)
    comment = await _load_owned_comment(comment_repo, comment_id, current_user, "update")

    await comment_repo.update_content(comment, comment_data.content)

    updated_comment = await comment_repo.get_with_owner(comment.id)
    return ApiResponse(status_code=200, data=updated_comment, message="Comment updated successfully")


@router.delete("/{comment_id}", response_model=ApiResponse)
async def delete_comment(
    comment_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
) -> ApiResponse:
    """
    Delete an owned comment.

    Raises:
        ValidationError: If the id is malformed
        NotFoundError: If the comment does not exist
        ForbiddenError: If the current user is not the owner
    """
    comment_repo = CommentRepository(db)
    comment = await _load_owned_comment(comment_repo, comment_id, current_user, "delete")

    await comment_repo.delete_comment(comment)

    logger.info(f"User {current_user.id} deleted comment {comment.id}")
    return ApiResponse(status_code=200, data={}, message="Comment deleted successfully")
