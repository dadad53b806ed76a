"""
test_reports.py — Tests for the report download endpoint.

Flow under test: analyse → post the JSON result back → receive the .txt.
"""

import base64
import re

_DUMMY_B64 = base64.b64encode(b"fake-media-content-for-testing").decode()


async def _analysis(client, kind="image", filename="photo.jpg") -> dict:
    r = await client.post(
        f"/api/v1/analyze/{kind}",
        json={"media_b64": _DUMMY_B64, "filename": filename},
    )
    assert r.status_code == 200
    return r.json()


class TestDownloadReport:
    async def test_returns_plain_text_attachment(self, client):
        result = await _analysis(client)
        r = await client.post("/api/v1/reports/download", json=result)

        assert r.status_code == 200
        assert r.headers["content-type"].startswith("text/plain")
        assert re.fullmatch(
            r'attachment; filename="deepfake-analysis-\d+\.txt"',
            r.headers["content-disposition"],
        )

    async def test_report_contains_result_fields(self, client):
        result = await _analysis(client, "video", "clip.mp4")
        text = (await client.post("/api/v1/reports/download", json=result)).text

        assert "MediaWatchdog Deepfake Analysis Report" in text
        assert "Media Type: Video\n" in text
        assert "File Name: clip.mp4\n" in text
        assert f"Overall Result: {result['overallResult']}\n" in text
        assert f"Confidence Interval: {result['confidenceInterval']}\n" in text
        assert result["detailedExplanation"] in text

    async def test_every_metric_line_present(self, client):
        result = await _analysis(client, "audio", "voice.mp3")
        text = (await client.post("/api/v1/reports/download", json=result)).text

        for label in (
            "Voice Print Authenticity",
            "Background Noise Analysis",
            "Frequency Anomalies",
            "Prosody Consistency",
            "Spectrogram Patterns",
        ):
            assert re.search(rf"^{label}: \d+%$", text, re.M), label

    async def test_webcam_result_report(self, client, png_bytes):
        url = "data:image/jpeg;base64," + base64.b64encode(png_bytes).decode()
        result = (await client.post("/api/v1/analyze/webcam", json={"image_data_url": url})).json()
        text = (await client.post("/api/v1/reports/download", json=result)).text

        assert "Overall Result: Analysis Complete - Authentic Content\n" in text
        assert "Authenticity Score: 95%\n" in text
        assert "Confidence Score: 98%\n" in text

    async def test_invalid_body_returns_422(self, client):
        r = await client.post("/api/v1/reports/download", json={"fileName": "x.jpg"})
        assert r.status_code == 422

    async def test_mismatched_metrics_kind_returns_422(self, client):
        result = await _analysis(client)
        result["specificMetrics"]["kind"] = "podcast"
        r = await client.post("/api/v1/reports/download", json=result)
        assert r.status_code == 422
