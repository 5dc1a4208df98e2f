"""
Business logic services for VideoTube
"""

from app.services.auth import AuthService
from app.services.file_service import FileService
from app.services.s3_service import S3Service
from app.services.token_service import TokenService

__all__ = ["AuthService", "FileService", "S3Service", "TokenService"]
