"""
Shared fixtures: in-memory database, fake storage and an ASGI client
"""

import os
import tempfile

# Settings are read once on first import of the app package
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("ACCESS_TOKEN_SECRET", "test-access-secret")
os.environ.setdefault("REFRESH_TOKEN_SECRET", "test-refresh-secret")
os.environ.setdefault("COOKIE_SECURE", "false")
os.environ.setdefault("TEMP_DIRECTORY", os.path.join(tempfile.gettempdir(), "videotube-test-uploads"))

from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.config import get_settings
from app.core.dependencies import get_storage_service
from app.database import Base, get_db
from app.main import app
from app.models.user import User
from app.models.video import Video
from app.services.auth import AuthService
from app.services.s3_service import VIDEOS, UploadResult, remove_local_file
from app.services.token_service import TokenService

PASSWORD = "correct-horse-battery"


class FakeStorage:
    """Records uploads instead of talking to S3; removes staged files like the real one."""

    def __init__(self):
        self.uploaded = []
        self.deleted = []
        self.fail_uploads = False

    async def upload(self, local_path: Optional[str], folder: str = "images") -> Optional[UploadResult]:
        if not local_path:
            return None
        try:
            if self.fail_uploads:
                return None
            key = f"{folder}/{os.path.basename(local_path)}"
            self.uploaded.append(key)
            return UploadResult(
                url=f"https://cdn.example.com/{key}",
                key=key,
                duration=42.5 if folder == VIDEOS else None
            )
        finally:
            remove_local_file(local_path)

    async def delete_file(self, s3_key: str) -> bool:
        self.deleted.append(s3_key)
        return True


@pytest.fixture
def settings():
    return get_settings()


@pytest.fixture
async def engine():
    test_engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
async def client(session_factory, storage):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage_service] = lambda: storage

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost") as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session):
    async def _make_user(username: str = None, password: str = PASSWORD, fullname: str = None) -> User:
        username = username or f"user{uuid4().hex[:8]}"
        return await AuthService.create_user(
            db_session,
            fullname=fullname or username.title(),
            email=f"{username}@example.com",
            username=username,
            password=password,
            avatar=f"https://cdn.example.com/images/{username}.png"
        )
    return _make_user


@pytest.fixture
def make_video(db_session):
    async def _make_video(
        owner: User,
        title: str = "A video",
        description: str = "Something to watch",
        is_published: bool = True,
        created_at: datetime = None,
        duration: float = 10
    ) -> Video:
        video = Video(
            title=title,
            description=description,
            duration=duration,
            video_file="https://cdn.example.com/videos/file.mp4",
            thumbnail="https://cdn.example.com/images/thumb.png",
            owner_id=owner.id,
            is_published=is_published,
            created_at=created_at or datetime.now(timezone.utc)
        )
        db_session.add(video)
        await db_session.commit()
        return video
    return _make_video


@pytest.fixture
def token_service(db_session, settings):
    return TokenService(db_session, settings)


@pytest.fixture
def auth_headers(token_service):
    def _auth_headers(user: User) -> dict:
        return {"Authorization": f"Bearer {token_service.issue_access_token(user)}"}
    return _auth_headers
