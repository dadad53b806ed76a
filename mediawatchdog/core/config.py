"""
Application configuration loaded from environment variables.

Uses pydantic-settings for type-safe env var parsing with automatic
.env file loading.

To extend: add new fields here and document them in .env.example.
See https://docs.pydantic.dev/latest/concepts/pydantic_settings/
"""

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # ─── Core ──────────────────────────────────────────────────────
    environment: str = "development"
    debug: bool = False

    # ─── CORS ──────────────────────────────────────────────────────
    # Comma-separated allowed origins for the browser front-end.
    cors_origins_str: str = "http://localhost:5173,http://localhost:3000"

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_origins_str.split(",") if o.strip()]

    # ─── Classifier ────────────────────────────────────────────────
    # When True the classifier never downloads a model and returns a
    # canned top-label score. Always True in tests.
    ai_mock_mode: bool = True

    classifier_model: str = "microsoft/resnet-50"
    classifier_revision: str = "main"
    classifier_device: str = "cpu"

    # What a failed classifier call turns into:
    #   suspicious: fixed fallback tuple (webcam → authentic, upload → deepfake)
    #   neutral:    zeroed "no signal" tuple, the score formula decides
    classifier_failure_policy: Literal["suspicious", "neutral"] = "suspicious"

    # ─── Uploads ───────────────────────────────────────────────────
    max_upload_mb: int = 50
    analysis_rate_limit: str = "20/minute"

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Don't fail on unknown env vars
    )


# Module-level singleton: import this everywhere instead of instantiating Settings()
settings = Settings()
