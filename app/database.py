"""
Database configuration and setup
"""

from datetime import datetime, timezone
from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy import MetaData

from app.config import get_settings, get_database_url

settings = get_settings()


def _create_engine():
    """Create the async database engine for the configured URL."""
    url = get_database_url(async_driver=True)
    options = {
        "echo": settings.database_echo,
        "future": True,
    }
    if url.startswith("postgresql+asyncpg://"):
        options.update(
            pool_pre_ping=True,  # Validate connections before use
            pool_recycle=3600,   # Recycle connections every hour
            connect_args={
                "server_settings": {
                    "application_name": "videotube_api",
                }
            }
        )
    return create_async_engine(url, **options)


engine = _create_engine()
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=True
)


class Base(DeclarativeBase):
    """Base class for all database models."""
    metadata = MetaData()


def utcnow() -> datetime:
    """Timestamp default for model columns."""
    return datetime.now(timezone.utc)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency to get database session.

    Yields:
        AsyncSession: Database session
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            # Only commit if there are pending changes
            if session.dirty or session.new or session.deleted:
                await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def init_database() -> None:
    """Initialize database tables."""
    # Register every mapped table on the metadata
    import app.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_database() -> None:
    """Close database connections."""
    await engine.dispose()
