"""
Video API endpoints: feed, publishing and owner-only mutations
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings, get_settings
from app.core.dependencies import (
    get_current_user,
    get_file_service,
    get_storage_service,
    parse_object_id,
    parse_optional_object_id
)
from app.core.exceptions import ForbiddenError, InternalError, NotFoundError, ValidationError
from app.database import get_db
from app.models.user import User
from app.models.video import Video
from app.repositories.comment_repository import CommentRepository
from app.repositories.pagination import resolve_pagination
from app.repositories.video_repository import VideoRepository
from app.schemas.comment import CommentCreate
from app.schemas.common import ApiResponse
from app.schemas.video import VideoFilter, VideoSort
from app.services.file_service import FileService
from app.services.s3_service import IMAGES, VIDEOS, S3Service

logger = logging.getLogger(__name__)

router = APIRouter()


async def _load_owned_video(video_repo: VideoRepository, raw_video_id: str, user: User, action: str) -> Video:
    """Load a video and require the current user to own it."""
    video_id = parse_object_id(raw_video_id, "video id")

    video = await video_repo.get_by_id(video_id)
    if not video:
        raise NotFoundError("Video not found")

    if video.owner_id != user.id:
        raise ForbiddenError(f"You can only {action} your own videos")

    return video


@router.get("", response_model=ApiResponse)
async def get_all_videos(
    page: Optional[str] = Query(None, description="Page number (1-based)"),
    limit: Optional[str] = Query(None, description="Items per page"),
    query: Optional[str] = Query(None, description="Search in title and description"),
    sort_by: Optional[str] = Query(None, alias="sortBy", description="Sort field"),
    sort_type: Optional[str] = Query(None, alias="sortType", description="asc or desc"),
    user_id: Optional[str] = Query(None, alias="userId", description="Only videos of this owner"),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings)
) -> ApiResponse:
    """
    Get the paginated feed of published videos.

    Args:
        page: Page number (1-based)
        limit: Number of items per page
        query: Optional case-insensitive search term
        sort_by: Field to sort by (default: createdAt)
        sort_type: Sort order, "desc" or anything else for ascending
        user_id: Optional owner filter, ignored when malformed
        db: Database session
        settings: Application settings

    Returns:
        Envelope with the page of videos and page info
    """
    pagination = resolve_pagination(page, limit, settings.default_page_size, settings.max_page_size)

    video_repo = VideoRepository(db)
    videos = await video_repo.list_videos(
        VideoFilter(query=query or None, owner_id=parse_optional_object_id(user_id)),
        VideoSort(field=sort_by, direction=sort_type),
        pagination
    )

    return ApiResponse(status_code=200, data=videos, message="Videos retrieved successfully")


@router.post("", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
async def publish_video(
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    video_file: Optional[UploadFile] = File(None, alias="videoFile"),
    thumbnail: Optional[UploadFile] = File(None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    file_service: FileService = Depends(get_file_service),
    storage: S3Service = Depends(get_storage_service)
) -> ApiResponse:
    """
    Publish a new video from an uploaded video file and thumbnail.

    Args:
        title: Video title
        description: Video description
        video_file: Uploaded video
        thumbnail: Uploaded thumbnail image
        current_user: Current authenticated user
        db: Database session
        file_service: Upload staging
        storage: Blob storage

    Returns:
        Envelope with the created video

    Raises:
        ValidationError: If a field or file is missing
        InternalError: If an upload or the store fails
    """
    title = (title or "").strip()
    description = (description or "").strip()
    if not title or not description:
        raise ValidationError("Title and description are required")

    if video_file is None or not video_file.filename:
        raise ValidationError("Video file is required")
    if thumbnail is None or not thumbnail.filename:
        raise ValidationError("Thumbnail file is required")

    video_path = await file_service.stage(video_file, VIDEOS)
    try:
        thumbnail_path = await file_service.stage(thumbnail, IMAGES)
    except Exception:
        file_service.discard([video_path])
        raise

    uploaded_video = await storage.upload(video_path, VIDEOS)
    if not uploaded_video:
        file_service.discard([thumbnail_path])
        raise InternalError("Failed to upload video file")

    uploaded_thumbnail = await storage.upload(thumbnail_path, IMAGES)
    if not uploaded_thumbnail:
        await storage.delete_file(uploaded_video.key)
        raise InternalError("Failed to upload thumbnail")

    video_repo = VideoRepository(db)
    video = await video_repo.create_video(
        owner_id=current_user.id,
        title=title,
        description=description,
        video_file=uploaded_video.url,
        thumbnail=uploaded_thumbnail.url,
        duration=uploaded_video.duration
    )

    created_video = await video_repo.get_with_owner(video.id)
    if not created_video:
        raise InternalError("Something went wrong while creating video")

    logger.info(f"User {current_user.id} published video {video.id}")
    return ApiResponse(status_code=201, data=created_video, message="Video published successfully")


@router.get("/{video_id}", response_model=ApiResponse)
async def get_video_by_id(
    video_id: str,
    db: AsyncSession = Depends(get_db)
) -> ApiResponse:
    """
    Get a video with its owner projection.

    Raises:
        ValidationError: If the id is malformed
        NotFoundError: If no video has this id
    """
    video = await VideoRepository(db).get_with_owner(parse_object_id(video_id, "video id"))
    if not video:
        raise NotFoundError("Video not found")

    return ApiResponse(status_code=200, data=video, message="Video retrieved successfully")


@router.patch("/{video_id}", response_model=ApiResponse)
async def update_video(
    video_id: str,
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    thumbnail: Optional[UploadFile] = File(None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    file_service: FileService = Depends(get_file_service),
    storage: S3Service = Depends(get_storage_service)
) -> ApiResponse:
    """
    Update title, description and/or thumbnail of an owned video.

    Raises:
        ValidationError: If the id is malformed or a given title or description is blank
        NotFoundError: If the video does not exist
        ForbiddenError: If the current user is not the owner
        InternalError: If the thumbnail upload fails
    """
    video_repo = VideoRepository(db)
    video = await _load_owned_video(video_repo, video_id, current_user, "update")

    values = {}
    for field, value in (("title", title), ("description", description)):
        if value is None:
            continue
        if not value.strip():
            raise ValidationError(f"{field.capitalize()} cannot be empty")
        values[field] = value.strip()

    if thumbnail is not None and thumbnail.filename:
        thumbnail_path = await file_service.stage(thumbnail, IMAGES)
        uploaded_thumbnail = await storage.upload(thumbnail_path, IMAGES)
        if not uploaded_thumbnail:
            raise InternalError("Failed to upload thumbnail")
        values["thumbnail"] = uploaded_thumbnail.url

    if values:
        await video_repo.update_video(video, **values)

    updated_video = await video_repo.get_with_owner(video.id)
    return ApiResponse(status_code=200, data=updated_video, message="Video updated successfully")


@router.delete("/{video_id}", response_model=ApiResponse)
async def delete_video(
    video_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
) -> ApiResponse:
    """
    Delete an owned video with its comments.

    Raises:
        ValidationError: If the id is malformed
        NotFoundError: If the video does not exist
        ForbiddenError: If the current user is not the owner
    """
    video_repo = VideoRepository(db)
    video = await _load_owned_video(video_repo, video_id, current_user, "delete")

    await video_repo.delete_video(video)

    logger.info(f"User {current_user.id} deleted video {video.id}")
    return ApiResponse(status_code=200, data={}, message="Video deleted successfully")


@router.patch("/toggle/publish/{video_id}", response_model=ApiResponse)
async def toggle_publish_status(
    video_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
) -> ApiResponse:
    """
    Flip the published flag of an owned video.

    Raises:
        ValidationError: If the id is malformed
        NotFoundError: If the video does not exist
        ForbiddenError: If the current user is not the owner
    """
    video_repo = VideoRepository(db)
    video = await _load_owned_video(video_repo, video_id, current_user, "update publish status of")

    await video_repo.toggle_publish(video)

    updated_video = await video_repo.get_with_owner(video.id)
    return ApiResponse(status_code=200, data=updated_video, message="Video publish status updated successfully")


@router.get("/{video_id}/comments", response_model=ApiResponse)
async def get_video_comments(
    video_id: str,
    page: Optional[str] = Query(None, description="Page number (1-based)"),
    limit: Optional[str] = Query(None, description="Items per page"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings)
) -> ApiResponse:
    """
    Get the paginated comments of a video, newest first.

    Raises:
        ValidationError: If the id or pagination values are malformed
    """
    parsed_video_id = parse_object_id(video_id, "video id")
    pagination = resolve_pagination(page, limit, settings.default_page_size, settings.max_page_size)

    comments = await CommentRepository(db).list_comments(parsed_video_id, pagination)
    return ApiResponse(status_code=200, data=comments, message="Comments retrieved successfully")


@router.post("/{video_id}/comments", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
async def add_comment(
    video_id: str,
    comment_data: CommentCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
) -> ApiResponse:
    """
    Add a comment under a video.

    Raises:
        ValidationError: If the id is malformed or the content is blank
        NotFoundError: If the video does not exist
        InternalError: If the created comment cannot be read back
    """
    parsed_video_id = parse_object_id(video_id, "video id")

    if not await VideoRepository(db).exists(parsed_video_id):
        raise NotFoundError("Video not found")

    comment_repo = CommentRepository(db)
    comment = await comment_repo.create_comment(parsed_video_id, current_user.id, comment_data.content)

    created_comment = await comment_repo.get_with_owner(comment.id)
    if not created_comment:
        raise InternalError("Failed to create comment")

    return ApiResponse(status_code=201, data=created_comment, message="Comment added successfully")
