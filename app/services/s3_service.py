"""
S3 service for pushing staged uploads to blob storage
"""

import asyncio
import json
import logging
import mimetypes
import os
import subprocess
from typing import Optional
from uuid import uuid4

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from pydantic import BaseModel

from app.config import Settings

logger = logging.getLogger(__name__)

VIDEOS = "videos"
IMAGES = "images"


class UploadResult(BaseModel):
    """Where an uploaded file ended up."""

    url: str
    key: str
    duration: Optional[float] = None


class S3Service:
    """Service for S3 file storage operations."""

    def __init__(self, settings: Settings):
        """Initialize S3 client with configuration."""
        if not settings.s3_configured:
            raise ValueError("AWS credentials and S3 bucket name must be configured")

        # No retries: a failed upload is reported straight back to the caller
        config = Config(
            region_name=settings.aws_region,
            retries={'max_attempts': 1, 'mode': 'standard'},
            max_pool_connections=50
        )

        self.s3_client = boto3.client(
            's3',
            aws_access_key_id=settings.aws_access_key_id,
            aws_secret_access_key=settings.aws_secret_access_key,
            config=config
        )

        self.settings = settings
        self.bucket_name = settings.s3_bucket_name

    async def upload(self, local_path: Optional[str], folder: str = IMAGES) -> Optional[UploadResult]:
        """
        Upload a staged local file and delete it afterwards.

        The local file is removed whether or not the upload succeeds.

        Args:
            local_path: Path of the staged file
            folder: VIDEOS or IMAGES

        Returns:
            UploadResult, or None if there was nothing to upload or it failed
        """
        if not local_path:
            return None

        try:
            s3_key = self._generate_s3_key(local_path, folder)
            content_type = mimetypes.guess_type(local_path)[0] or 'application/octet-stream'

            duration = None
            if folder == VIDEOS:
                duration = await probe_duration(local_path)

            await asyncio.to_thread(
                self.s3_client.upload_file,
                local_path,
                self.bucket_name,
                s3_key,
                ExtraArgs={'ContentType': content_type}
            )

            logger.info(f"Uploaded {local_path} to s3://{self.bucket_name}/{s3_key}")
            return UploadResult(url=self._public_url(s3_key), key=s3_key, duration=duration)

        except (ClientError, BotoCoreError, OSError) as e:
            logger.error(f"S3 upload failed for {local_path}: {e}")
            return None
        finally:
            remove_local_file(local_path)

    async def delete_file(self, s3_key: str) -> bool:
        """
        Delete a file from S3.

        Args:
            s3_key: S3 object key

        Returns:
            True if deleted successfully
        """
        try:
            await asyncio.to_thread(
                self.s3_client.delete_object,
                Bucket=self.bucket_name,
                Key=s3_key
            )
            return True

        except (ClientError, BotoCoreError) as e:
            logger.warning(f"S3 delete failed for {s3_key}: {e}")
            return False

    def _generate_s3_key(self, local_path: str, folder: str) -> str:
        """Build a unique object key under the folder prefix, keeping the extension."""
        extension = ""
        filename = os.path.basename(local_path)
        if "." in filename:
            extension = filename.rsplit(".", 1)[-1].lower()

        prefix = self.settings.s3_videos_prefix if folder == VIDEOS else self.settings.s3_images_prefix
        unique_filename = f"{uuid4()}.{extension}" if extension else str(uuid4())
        return f"{prefix}{unique_filename}"

    def _public_url(self, s3_key: str) -> str:
        if self.settings.s3_public_base_url:
            return f"{self.settings.s3_public_base_url.rstrip('/')}/{s3_key}"
        return f"https://{self.bucket_name}.s3.{self.settings.aws_region}.amazonaws.com/{s3_key}"


async def probe_duration(path: str) -> Optional[float]:
    """
    Read a media file's duration in seconds with ffprobe.

    Args:
        path: Local media file

    Returns:
        Duration in seconds, or None when it cannot be determined
    """
    ffprobe_cmd = [
        "ffprobe", "-v", "quiet",
        "-print_format", "json",
        "-show_format",
        path
    ]

    try:
        result = await asyncio.to_thread(
            subprocess.run,
            ffprobe_cmd,
            capture_output=True,
            text=True,
            timeout=30
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.debug(f"ffprobe unavailable for {path}: {e}")
        return None

    if result.returncode != 0:
        return None

    try:
        duration = json.loads(result.stdout).get("format", {}).get("duration")
        return float(duration) if duration is not None else None
    except (ValueError, TypeError):
        return None


def remove_local_file(path: Optional[str]) -> None:
    """Delete a staged file, ignoring files that are already gone."""
    if not path:
        return
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning(f"Could not remove staged file {path}: {e}")
