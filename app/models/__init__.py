"""
Database models for VideoTube
"""

from app.models.comment import Comment
from app.models.like import Like
from app.models.user import User
from app.models.video import Video

__all__ = ["Comment", "Like", "User", "Video"]
