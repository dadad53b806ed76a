"""
media_validation.py — Upload checks shared by the analysis routes.

  - MIME allowlist per media kind (declared type, or derived from the
    filename extension when the client doesn't send one)
  - strict base64 decoding
  - server-side size limit (MAX_UPLOAD_MB), checked on the encoded payload
    before decoding and on the decoded bytes
  - data: URL parsing for webcam captures

Helpers raise HTTPException directly; routes call them before any scoring
happens, so a rejected upload never produces a partial result.
"""

import base64
import binascii
import logging
import re

from fastapi import HTTPException

from mediawatchdog.core.config import settings
from mediawatchdog.models.analysis import MediaKind

logger = logging.getLogger(__name__)

ALLOWED_MIME_TYPES: dict[MediaKind, tuple[str, ...]] = {
    MediaKind.VIDEO: ("video/mp4", "video/webm", "video/quicktime"),
    MediaKind.AUDIO: ("audio/mpeg", "audio/wav", "audio/ogg"),
    MediaKind.IMAGE: ("image/jpeg", "image/png", "image/gif"),
}

_MIME_MAP = {
    ".jpg":  "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png":  "image/png",
    ".gif":  "image/gif",
    ".webp": "image/webp",
    ".mp3":  "audio/mpeg",
    ".wav":  "audio/wav",
    ".ogg":  "audio/ogg",
    ".m4a":  "audio/mp4",
    ".mp4":  "video/mp4",
    ".webm": "video/webm",
    ".mov":  "video/quicktime",
    ".avi":  "video/x-msvideo",
}

_DATA_URL_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?P<params>(;[^,]*)*),(?P<data>.*)$", re.S)


def mime_from_filename(filename: str) -> str:
    """Derive a MIME type from a filename extension."""
    ext = "." + filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
    return _MIME_MAP.get(ext, "application/octet-stream")


def is_allowed_mime(media_kind: MediaKind, mime_type: str) -> bool:
    return mime_type.lower() in ALLOWED_MIME_TYPES[media_kind]


def require_allowed_mime(media_kind: MediaKind, filename: str, mime_type: str | None = None) -> str:
    """Return the effective MIME type or raise 415."""
    effective = mime_type or mime_from_filename(filename)
    if not is_allowed_mime(media_kind, effective):
        logger.info("Rejected %s upload %s with type %s", media_kind.value, filename, effective)
        raise HTTPException(
            status_code=415,
            detail=f"Invalid file type. Please upload a valid {media_kind.value} file.",
        )
    return effective


def _too_large() -> HTTPException:
    return HTTPException(
        status_code=413,
        detail=f"File exceeds the {settings.max_upload_mb} MB upload limit.",
    )


def require_within_size_limit(data: bytes) -> bytes:
    if len(data) > settings.max_upload_bytes:
        raise _too_large()
    return data


def require_encoded_within_size_limit(payload: str) -> str:
    """Reject an oversized base64 payload before decoding it (3 bytes per 4 chars)."""
    if len(payload.rstrip("=")) * 3 // 4 > settings.max_upload_bytes:
        raise _too_large()
    return payload


def decode_base64(payload: str) -> bytes:
    """Strict base64 decode; raises 422 on malformed input."""
    require_encoded_within_size_limit(payload)
    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        raise HTTPException(status_code=422, detail="media_b64 is not valid base64.")
    return require_within_size_limit(data)


def parse_data_url(data_url: str) -> tuple[str, bytes]:
    """
    Split "data:image/jpeg;base64,<payload>" into (mime type, decoded bytes).

    Only base64-encoded image URLs are accepted.
    """
    m = _DATA_URL_RE.match(data_url.strip())
    if not m or ";base64" not in (m.group("params") or ""):
        raise HTTPException(status_code=400, detail="Could not process webcam image.")

    mime_type = (m.group("mime") or "").lower()
    if not mime_type.startswith("image/"):
        raise HTTPException(status_code=415, detail="Webcam capture must be an image.")

    encoded = require_encoded_within_size_limit(m.group("data"))
    try:
        data = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError):
        raise HTTPException(status_code=400, detail="Could not process webcam image.")
    if not data:
        raise HTTPException(status_code=400, detail="Could not capture image from webcam.")
    return mime_type, require_within_size_limit(data)
