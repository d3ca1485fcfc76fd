"""
Image Uploader Backend - Record Store Session Management
=========================================================

What:  Async SQLAlchemy engine, session factory, and FastAPI dependency.
How:   Creates an async engine with connection pooling and provides a
       per-request session that rolls back on error. Commits are issued by
       ImageService at the point each operation persists its change.
Who:   Used by route handlers via FastAPI's dependency injection system.
When:  Engine is created at module import; sessions are created per-request.
"""

from typing import Any, AsyncGenerator, Dict

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from image_uploader.config import settings


def build_engine(url: str) -> AsyncEngine:
    """
    Create the async engine for `url`.

    SQLite (used by the test suite) runs on a static or null pool, which
    rejects the queue-pool sizing arguments, so those are only passed to
    server databases.
    """
    kwargs: Dict[str, Any] = {"echo": settings.log_level == "DEBUG"}
    if not url.startswith("sqlite"):
        kwargs.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
        )
    return create_async_engine(url, **kwargs)


engine = build_engine(settings.database_url)

# expire_on_commit=False keeps record attributes readable after commit,
# which the routes rely on when serialising the response
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models."""
    pass


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the factory
        2. Yields it to the route handler
        3. On error: rolls back anything not yet committed
        4. Always: closes the session (returns connection to pool)

    Example usage in a route:
        @router.get("/allImages")
        async def list_images(db: AsyncSession = Depends(get_db_session)):
            ...
    """
    async with async_session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def dispose_engine() -> None:
    """Close every pooled connection; called from the shutdown lifespan."""
    await engine.dispose()
