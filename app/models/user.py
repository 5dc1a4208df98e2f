"""
User model for authentication
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID, uuid4

from sqlalchemy import JSON, DateTime, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base, utcnow


class User(Base):
    """User model holding credentials, profile fields and the current refresh token."""

    __tablename__ = "users"

    id: Mapped[UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid4,
        index=True
    )

    username: Mapped[str] = mapped_column(
        String(50),
        unique=True,
        index=True,
        nullable=False
    )

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        nullable=False
    )

    fullname: Mapped[str] = mapped_column(
        String(100),
        index=True,
        nullable=False
    )

    avatar: Mapped[str] = mapped_column(
        Text,
        nullable=False
    )

    cover_image: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True
    )

    # Ordered list of video ids, oldest first
    watch_history: Mapped[List[str]] = mapped_column(
        JSON,
        default=list,
        nullable=False
    )

    password: Mapped[str] = mapped_column(
        String(255),
        nullable=False
    )

    # Only the most recently issued refresh token is valid
    refresh_token: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False
    )

    def __repr__(self) -> str:
        return f"<User(id='{self.id}', email='{self.email}', username='{self.username}')>"
