"""
Postboard Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Environment:
    Variables are set before any `postboard` import so the settings
    singleton and the database engine pick up test values: a throwaway
    SQLite file (via aiosqlite), a temporary images directory, a known
    JWT secret.

Fixtures:
    ├── mock_db_session: AsyncMock session for service unit tests
    ├── database: creates/drops the posts table on the real test engine
    ├── test_client: HTTPX AsyncClient bound to a fresh app
    ├── make_token / auth_headers: bearer tokens for a given user id
    ├── seed_posts: inserts posts with explicit, increasing created_at
    ├── fetch_post: reads a post back outside the request session
    └── png_bytes / jpeg_bytes: tiny image payloads
"""

import os
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

_TEST_DIR = tempfile.mkdtemp(prefix="postboard_test_")

os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DIR}/postboard_test.db"
os.environ["JWT_SECRET"] = "test-secret-not-real-0123456789abcdef"
os.environ["IMAGES_ROOT"] = os.path.join(_TEST_DIR, "images")
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["LEGACY_ROUTES_ENABLED"] = "false"

import jwt  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from postboard.config import settings  # noqa: E402
from postboard.database import Base, async_session_factory, engine  # noqa: E402
from postboard.models.post import Post  # noqa: E402


# ══════════════════════════════════════════════════════════════════════════
# Unit-test Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    A mock AsyncSession.

    Usage:
        mock_db_session.execute.return_value.rowcount = 0
        await post_service.delete_post(mock_db_session, post_id, "user-1")
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def images_root():
    """The configured images directory, emptied before each test."""
    root = Path(settings.images_root)
    root.mkdir(parents=True, exist_ok=True)
    for path in root.iterdir():
        if path.is_file():
            path.unlink()
    return root


@pytest.fixture
def png_bytes():
    """PNG signature plus an empty IHDR-sized tail; enough for storage tests."""
    return b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


@pytest.fixture
def jpeg_bytes():
    """Minimal JPEG: SOI + JFIF marker + EOI."""
    return (
        b'\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00'
        b'\xff\xd9'
    )


# ══════════════════════════════════════════════════════════════════════════
# Auth Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def make_token():
    """Factory for bearer tokens signed with the test secret."""
    def _make(user_id="user-1", email="user1@example.com", expires_in=3600, **claims):
        payload = {"userId": user_id, "email": email, **claims}
        if expires_in is not None:
            payload["exp"] = datetime.now(timezone.utc) + timedelta(seconds=expires_in)
        return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)
    return _make


@pytest.fixture
def auth_headers(make_token):
    """Factory for Authorization headers: auth_headers("user-2")."""
    def _headers(user_id="user-1"):
        return {"Authorization": f"Bearer {make_token(user_id=user_id)}"}
    return _headers


# ══════════════════════════════════════════════════════════════════════════
# Database / HTTP Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def database():
    """
    Fresh posts table on the test engine for each test.

    The engine is disposed afterwards so no pooled connection outlives the
    test's event loop.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def seed_posts(database):
    """
    Factory inserting posts directly, oldest first.

    Usage:
        posts = await seed_posts(5)                 # "Post 1".."Post 5" by user-1
        posts = await seed_posts(1, creator="user-2")
    """
    base_time = datetime(2024, 1, 1, tzinfo=timezone.utc)
    created = 0

    async def _seed(count, creator="user-1", image_path=None):
        nonlocal created
        posts = []
        async with async_session_factory() as session:
            for _ in range(count):
                created += 1
                post = Post(
                    title=f"Post {created}",
                    content=f"Content {created}",
                    image_path=image_path,
                    creator=creator,
                    created_at=base_time + timedelta(minutes=created),
                )
                session.add(post)
                posts.append(post)
            await session.commit()
        return posts

    return _seed


@pytest_asyncio.fixture
async def test_client(database, images_root):
    """
    HTTPX AsyncClient talking to a fresh app through ASGITransport.

    Usage:
        async def test_get(test_client):
            response = await test_client.get("/api/posts")
    """
    from postboard.main import create_app
    transport = ASGITransport(app=create_app())
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def fetch_post(database):
    """Read a post straight from the database (None if absent)."""
    async def _fetch(post_id):
        async with async_session_factory() as session:
            return await session.get(Post, post_id)
    return _fetch
