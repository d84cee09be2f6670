"""
Postboard Backend — Image Serving, Health and Startup Tests
=============================================================
"""

from unittest.mock import AsyncMock, patch

import pytest

from postboard.config import Settings
from postboard.database import wait_for_database


# ── /images ───────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_serves_stored_image(test_client, images_root, jpeg_bytes):
    (images_root / "pic.jpg-1.jpg").write_bytes(jpeg_bytes)

    response = await test_client.get("/images/pic.jpg-1.jpg")

    assert response.status_code == 200
    assert response.content == jpeg_bytes
    assert response.headers["content-type"] == "image/jpeg"
    assert "max-age" in response.headers["cache-control"]


@pytest.mark.asyncio
async def test_missing_image(test_client):
    response = await test_client.get("/images/nope.png")

    assert response.status_code == 404
    assert response.json()["message"] == "Image not found!"


@pytest.mark.asyncio
async def test_path_escape_rejected(test_client):
    response = await test_client.get("/images/..%2F..%2Fetc%2Fpasswd")
    assert response.status_code in (400, 404)


# ── /health ───────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_health_ok(test_client):
    response = await test_client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["database"] == "connected"


@pytest.mark.asyncio
async def test_health_database_down(test_client):
    with patch("postboard.routes.health.ping_database", AsyncMock(side_effect=OSError("refused"))):
        response = await test_client.get("/health")

    assert response.status_code == 503
    assert response.json()["status"] == "unhealthy"


# ── Startup ───────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_wait_for_database_succeeds_first_try():
    ping = AsyncMock()
    with patch("postboard.database.ping_database", ping):
        await wait_for_database()
    ping.assert_awaited_once()


@pytest.mark.asyncio
async def test_wait_for_database_gives_up():
    ping = AsyncMock(side_effect=OSError("connection refused"))
    with patch("postboard.database.ping_database", ping), \
         patch("postboard.database.settings", Settings(db_connect_attempts=1)):
        with pytest.raises(OSError):
            await wait_for_database()
    assert ping.await_count == 1
