"""
pytest configuration and shared fixtures for the MediaWatchdog API tests.

Key concern: tests must not download a model. AI_MOCK_MODE=true makes the
image classifier return a canned top score (0.42) instead of loading
microsoft/resnet-50. Tests that exercise the real inference path force mock
mode off and inject a fake pipeline.
"""

import base64
import io
import os

import pytest
from httpx import ASGITransport, AsyncClient

# Set env vars BEFORE importing the app so Settings picks them up correctly
os.environ.setdefault("AI_MOCK_MODE", "true")
os.environ.setdefault("ENVIRONMENT", "test")


@pytest.fixture(autouse=True)
def reset_rate_limits():
    """Clear in-memory rate-limit counters so request counts don't bleed across tests."""
    from mediawatchdog.core.rate_limit import limiter

    try:
        limiter._limiter.storage.reset()
    except Exception:
        pass  # Some storage backends don't support reset
    yield


@pytest.fixture()
async def client():
    """
    HTTPX async test client wired to the FastAPI app.

    Usage:
        async def test_something(client):
            response = await client.get("/health")
            assert response.status_code == 200
    """
    from mediawatchdog.main import app

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture()
def png_bytes() -> bytes:
    """A real 8x8 PNG, decodable by Pillow."""
    from PIL import Image

    buf = io.BytesIO()
    Image.new("RGB", (8, 8), color=(120, 80, 200)).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture()
def dummy_b64() -> str:
    return base64.b64encode(b"fake-media-content-for-testing").decode()
