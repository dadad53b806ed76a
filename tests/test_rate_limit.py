"""
test_rate_limit.py — Rate limiting on the analysis endpoints.

Strategy for the 429 test:
  Patch `limiter.limiter.hit` to return False, which tells slowapi that the
  moving-window bucket is full → raises RateLimitExceeded → 429.
  This avoids sending 20 real requests per test.
"""

import base64
from unittest.mock import patch

import pytest

_DUMMY_B64 = base64.b64encode(b"fake-media-bytes-for-testing").decode()
_WEBCAM_URL = "data:image/jpeg;base64," + _DUMMY_B64


async def _upload(client, kind="image", filename="photo.jpg"):
    return await client.post(
        f"/api/v1/analyze/{kind}",
        json={"media_b64": _DUMMY_B64, "filename": filename},
    )


# ══ Normal operation (under the limit) ════════════════════════════════════════

class TestRateLimitNormal:
    async def test_image_returns_200(self, client):
        r = await _upload(client)
        assert r.status_code == 200

    async def test_multiple_requests_within_limit_succeed(self, client):
        for _ in range(3):
            r = await _upload(client, "audio", "voice.mp3")
            assert r.status_code == 200

    async def test_report_download_is_not_limited(self, client):
        result = (await _upload(client)).json()
        from mediawatchdog.core.rate_limit import limiter

        with patch.object(limiter.limiter, "hit", return_value=False):
            r = await client.post("/api/v1/reports/download", json=result)
        assert r.status_code == 200


# ══ Rate limit exceeded (429) ══════════════════════════════════════════════════

class TestRateLimitExceeded:

    @pytest.mark.parametrize(
        "kind, filename",
        [("image", "photo.jpg"), ("video", "clip.mp4"), ("audio", "voice.mp3")],
    )
    async def test_upload_429_when_limit_exceeded(self, client, kind, filename):
        from mediawatchdog.core.rate_limit import limiter

        with patch.object(limiter.limiter, "hit", return_value=False):
            r = await _upload(client, kind, filename)

        assert r.status_code == 429

    async def test_webcam_429_when_limit_exceeded(self, client):
        from mediawatchdog.core.rate_limit import limiter

        with patch.object(limiter.limiter, "hit", return_value=False):
            r = await client.post("/api/v1/analyze/webcam", json={"image_data_url": _WEBCAM_URL})

        assert r.status_code == 429

    async def test_429_body_has_error(self, client):
        from mediawatchdog.core.rate_limit import limiter

        with patch.object(limiter.limiter, "hit", return_value=False):
            r = await _upload(client)

        assert "error" in r.json()
