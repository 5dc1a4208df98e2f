"""
File service for staging multipart uploads on local disk
"""

import logging
import os
from typing import Iterable, Optional
from uuid import uuid4

import aiofiles
from fastapi import UploadFile

from app.config import Settings
from app.core.exceptions import PayloadTooLargeError, ValidationError
from app.services.s3_service import IMAGES, VIDEOS, remove_local_file

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024


class FileService:
    """Writes uploaded files into the temp directory before they go to storage."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def _allowed_extensions(self, kind: str) -> list:
        if kind == VIDEOS:
            return self.settings.allowed_video_types
        return self.settings.allowed_image_types

    async def stage(self, file: Optional[UploadFile], kind: str = IMAGES) -> Optional[str]:
        """
        Stage an uploaded file to a unique local path.

        Args:
            file: Uploaded file, may be None for optional fields
            kind: VIDEOS or IMAGES, selects the allowed extensions

        Returns:
            Local path of the staged file, or None if no file was sent

        Raises:
            ValidationError: If the extension is not allowed
            PayloadTooLargeError: If the file exceeds the size limit
        """
        if file is None or not file.filename:
            return None

        extension = file.filename.rsplit(".", 1)[-1].lower() if "." in file.filename else ""
        allowed = self._allowed_extensions(kind)
        if extension not in allowed:
            raise ValidationError(
                f"Unsupported file type for {file.filename}. Allowed: {', '.join(allowed)}"
            )

        os.makedirs(self.settings.temp_directory, exist_ok=True)
        local_path = os.path.join(self.settings.temp_directory, f"{uuid4()}.{extension}")
        max_size_bytes = self.settings.max_file_size_mb * 1024 * 1024

        written = 0
        await file.seek(0)
        async with aiofiles.open(local_path, 'wb') as f:
            while True:
                chunk = await file.read(CHUNK_SIZE)
                if not chunk:
                    break
                written += len(chunk)
                if written > max_size_bytes:
                    break
                await f.write(chunk)

        if written > max_size_bytes:
            remove_local_file(local_path)
            raise PayloadTooLargeError(f"File too large. Maximum size: {self.settings.max_file_size_mb}MB")

        logger.debug(f"Staged {file.filename} ({written} bytes) at {local_path}")
        return local_path

    @staticmethod
    def discard(paths: Iterable[Optional[str]]) -> None:
        """Remove staged files that will not be uploaded."""
        for path in paths:
            remove_local_file(path)
