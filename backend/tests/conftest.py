"""
Image Uploader Backend - Test Configuration (conftest.py)
==========================================================

What:  Shared pytest fixtures for the test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── db_engine: in-memory SQLite engine with the images table created
    ├── db_session: AsyncSession bound to db_engine
    ├── mock_db_session: AsyncMock session, for "no database call" assertions
    ├── media_host: AsyncMock MediaHost returning unique Cloudinary-like results
    ├── sample_image_data_uri: base64 JPEG data URI
    └── test_client: httpx AsyncClient wired to create_app(media_host=...)
"""

import base64
import itertools
import os
from typing import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

# Settings are read at import time; these must be set before any
# image_uploader module is imported
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["CLOUDINARY_CLOUD_NAME"] = "demo"
os.environ["CLOUDINARY_API_KEY"] = "test-key-not-real"
os.environ["CLOUDINARY_API_SECRET"] = "test-secret-not-real"
os.environ["STATIC_DIR"] = "/nonexistent-static-dir"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from image_uploader.database import Base, get_db_session
from image_uploader.models.image import ImageRecord  # noqa: F401
from image_uploader.services.media_base import MediaHost, UploadedMedia

CLOUDINARY_URL_PREFIX = "https://res.cloudinary.com/demo/image/upload/"


@pytest_asyncio.fixture
async def db_engine():
    """
    A fresh in-memory database per test.

    StaticPool keeps a single connection so every session sees the same
    in-memory database.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def mock_db_session():
    """
    A mock async session.

    Used where a test asserts that the database was never touched.
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.get = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.delete = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def media_host():
    """
    Mock Media Host.

    Each upload returns a new public_id ("uploads/img1", "uploads/img2", ...)
    and a matching secure URL.
    """
    counter = itertools.count(1)

    def _upload(data):
        n = next(counter)
        return UploadedMedia(
            url=f"{CLOUDINARY_URL_PREFIX}v1700000000/uploads/img{n}.jpg",
            media_id=f"uploads/img{n}",
        )

    host = AsyncMock(spec=MediaHost)
    host.upload.side_effect = _upload
    host.destroy.return_value = None
    host.health_check.return_value = True
    return host


@pytest.fixture
def sample_image_bytes():
    """Minimal JPEG: SOI marker + JFIF header + EOI marker."""
    return (
        b'\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00'
        b'\xff\xd9'
    )


@pytest.fixture
def sample_image_data_uri(sample_image_bytes):
    return "data:image/jpeg;base64," + base64.b64encode(sample_image_bytes).decode()


@pytest_asyncio.fixture
async def test_client(media_host, session_factory):
    """
    HTTPX AsyncClient talking to an app built around the mock Media Host.

    Requests get sessions on the per-test in-memory database.
    """
    from image_uploader.main import create_app

    app = create_app(media_host=media_host)

    async def _test_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = _test_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
