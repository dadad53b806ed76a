"""
Unit tests for upload validation helpers.
"""

import base64

import pytest
from fastapi import HTTPException

from mediawatchdog.models.analysis import MediaKind
from mediawatchdog.services.media_validation import (
    decode_base64,
    is_allowed_mime,
    mime_from_filename,
    parse_data_url,
    require_allowed_mime,
    require_encoded_within_size_limit,
)


class TestMime:

    @pytest.mark.parametrize(
        "filename, expected",
        [
            ("photo.JPG", "image/jpeg"),
            ("clip.mov", "video/quicktime"),
            ("voice.mp3", "audio/mpeg"),
            ("archive.tar.gz", "application/octet-stream"),
            ("README", "application/octet-stream"),
        ],
    )
    def test_mime_from_filename(self, filename, expected):
        assert mime_from_filename(filename) == expected

    def test_allowlists(self):
        assert is_allowed_mime(MediaKind.IMAGE, "image/gif")
        assert is_allowed_mime(MediaKind.VIDEO, "video/webm")
        assert is_allowed_mime(MediaKind.AUDIO, "AUDIO/WAV")
        assert not is_allowed_mime(MediaKind.IMAGE, "image/webp")
        assert not is_allowed_mime(MediaKind.AUDIO, "video/mp4")

    def test_declared_type_wins_over_extension(self):
        assert require_allowed_mime(MediaKind.AUDIO, "upload.bin", "audio/ogg") == "audio/ogg"

    def test_wrong_kind_is_415(self):
        with pytest.raises(HTTPException) as exc:
            require_allowed_mime(MediaKind.VIDEO, "photo.png")
        assert exc.value.status_code == 415
        assert "valid video file" in exc.value.detail


class TestDecode:

    def test_decode_roundtrip(self):
        assert decode_base64(base64.b64encode(b"hello").decode()) == b"hello"

    def test_invalid_base64_is_422(self):
        with pytest.raises(HTTPException) as exc:
            decode_base64("not base64 !!!")
        assert exc.value.status_code == 422

    def test_size_limit_is_413(self, monkeypatch):
        from mediawatchdog.core.config import settings

        monkeypatch.setattr(settings, "max_upload_mb", 0)
        with pytest.raises(HTTPException) as exc:
            decode_base64(base64.b64encode(b"x").decode())
        assert exc.value.status_code == 413

    def test_oversized_payload_rejected_before_decoding(self, monkeypatch):
        from mediawatchdog.core.config import settings

        def no_decode(*args, **kwargs):
            raise AssertionError("payload should not be decoded")

        monkeypatch.setattr(settings, "max_upload_mb", 0)
        monkeypatch.setattr(base64, "b64decode", no_decode)
        with pytest.raises(HTTPException) as exc:
            decode_base64("@@@@ not even base64")
        assert exc.value.status_code == 413

    def test_encoded_size_ignores_padding(self, monkeypatch):
        from mediawatchdog.core.config import settings

        monkeypatch.setattr(settings, "max_upload_mb", 0)
        assert require_encoded_within_size_limit("") == ""
        assert require_encoded_within_size_limit("==") == "=="
        with pytest.raises(HTTPException):
            require_encoded_within_size_limit("QQ==")


class TestDataUrl:

    def test_parses_jpeg_data_url(self):
        url = "data:image/jpeg;base64," + base64.b64encode(b"\xff\xd8\xff").decode()
        assert parse_data_url(url) == ("image/jpeg", b"\xff\xd8\xff")

    def test_missing_prefix_is_400(self):
        with pytest.raises(HTTPException) as exc:
            parse_data_url("aGVsbG8=")
        assert exc.value.status_code == 400

    def test_non_base64_data_url_is_400(self):
        with pytest.raises(HTTPException) as exc:
            parse_data_url("data:image/png,rawbytes")
        assert exc.value.status_code == 400

    def test_non_image_is_415(self):
        with pytest.raises(HTTPException) as exc:
            parse_data_url("data:text/plain;base64,aGVsbG8=")
        assert exc.value.status_code == 415

    def test_empty_capture_is_400(self):
        with pytest.raises(HTTPException) as exc:
            parse_data_url("data:image/jpeg;base64,")
        assert exc.value.status_code == 400
