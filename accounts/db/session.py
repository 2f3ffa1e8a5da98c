"""
Async database session management.
Challenge: Connection pooling, scoped sessions, proper cleanup.
Design: One session per operation, committed on success, rolled back on error, always closed.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from accounts.config import Settings


def create_engine_from_settings(settings: Settings, url: str | None = None, **options: Any) -> AsyncEngine:
    """Async engine with connection pool. SQLite gets its dialect's default pool."""
    url = url or settings.database_url
    # hide_parameters keeps hashes and salts out of error messages
    engine_options: dict[str, Any] = {"echo": settings.debug, "hide_parameters": True}
    if make_url(url).get_backend_name() != "sqlite":
        engine_options.update(
            pool_pre_ping=True,  # Verify connections before use
            pool_size=settings.pool_size,
            max_overflow=settings.max_overflow,
        )
    engine_options.update(options)
    return create_async_engine(url, **engine_options)


def create_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@asynccontextmanager
async def session_scope(
    session_maker: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Yield a session for one operation. Ensures rollback on error; the context manager closes it."""
    async with session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
