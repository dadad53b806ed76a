"""
analyze.py — Media analysis endpoints.

Routes:
  POST /api/v1/analyze/image  — image upload
  POST /api/v1/analyze/video  — video upload
  POST /api/v1/analyze/audio  — audio upload
  POST /api/v1/analyze/webcam — camera still, always reported authentic

HOW THE DATA FLOWS
──────────────────
1. The front-end reads the file with FileReader.readAsDataURL() and strips
   the "data:...;base64," prefix (uploads) or sends the whole data: URL
   (webcam captures, straight from getScreenshot()).
2. The declared MIME type (or the one implied by the filename) is checked
   against the per-kind allowlist → 415 on mismatch.
3. The payload is size-checked, base64-decoded and checked again → 413 / 422.
4. ScoreGenerator.generate() builds the AnalysisResult. The image
   classifier may run for image/video; its failures never surface here.

The response uses camelCase keys (baseMetrics, specificMetrics, ...), and can
be posted back unchanged to /api/v1/reports/download.

No authentication required.
"""

import logging

from fastapi import APIRouter, Depends, Request

from mediawatchdog.core.config import settings
from mediawatchdog.core.rate_limit import limiter
from mediawatchdog.models.analysis import (
    AnalysisResult,
    MediaKind,
    MediaUploadRequest,
    WebcamCaptureRequest,
)
from mediawatchdog.services.media_validation import (
    decode_base64,
    parse_data_url,
    require_allowed_mime,
)
from mediawatchdog.services.score_generator import ScoreGenerator, get_score_generator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/analyze", tags=["analyze"])


async def _analyze_upload(
    media_kind: MediaKind,
    payload: MediaUploadRequest,
    generator: ScoreGenerator,
) -> AnalysisResult:
    require_allowed_mime(media_kind, payload.filename, payload.mime_type)
    data = decode_base64(payload.media_b64)
    logger.info("Starting %s analysis for %s (%d bytes)", media_kind.value, payload.filename, len(data))
    return await generator.generate(media_kind, payload.filename, data)


# ── Endpoints ──────────────────────────────────────────────────────────────────

@router.post("/image", response_model=AnalysisResult, status_code=200)
@limiter.limit(settings.analysis_rate_limit)
async def analyze_image(
    request: Request,
    payload: MediaUploadRequest,
    generator: ScoreGenerator = Depends(get_score_generator),
):
    """Analyse a JPEG/PNG/GIF upload."""
    return await _analyze_upload(MediaKind.IMAGE, payload, generator)


@router.post("/video", response_model=AnalysisResult, status_code=200)
@limiter.limit(settings.analysis_rate_limit)
async def analyze_video(
    request: Request,
    payload: MediaUploadRequest,
    generator: ScoreGenerator = Depends(get_score_generator),
):
    """Analyse an MP4/WebM/QuickTime upload."""
    return await _analyze_upload(MediaKind.VIDEO, payload, generator)


@router.post("/audio", response_model=AnalysisResult, status_code=200)
@limiter.limit(settings.analysis_rate_limit)
async def analyze_audio(
    request: Request,
    payload: MediaUploadRequest,
    generator: ScoreGenerator = Depends(get_score_generator),
):
    """Analyse an MP3/WAV/OGG upload. The classifier never runs for audio."""
    return await _analyze_upload(MediaKind.AUDIO, payload, generator)


@router.post("/webcam", response_model=AnalysisResult, status_code=200)
@limiter.limit(settings.analysis_rate_limit)
async def analyze_webcam(
    request: Request,
    payload: WebcamCaptureRequest,
    generator: ScoreGenerator = Depends(get_score_generator),
):
    """
    Analyse a still captured from the user's camera.

    Captures are named "webcam-capture.jpg", forced authentic, and then pinned
    to the fixed webcam metrics (authenticity 95, confidence 98).
    """
    mime_type, data = parse_data_url(payload.image_data_url)
    logger.info("Webcam image captured (%s, %d bytes), starting analysis", mime_type, len(data))
    return await generator.analyze_webcam_capture(data)
