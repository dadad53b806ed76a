"""
analysis.py — Pydantic models for the media analysis API.

The response shape mirrors what the browser front-end already consumes:
camelCase keys (`baseMetrics`, `specificMetrics`, `confidenceInterval`, ...)
generated from the snake_case field names via an alias generator.

`specificMetrics` is a tagged union discriminated by `kind`:
  - ImageMetrics — metadata / pixel / lighting / texture / neural
  - VideoMetrics — frame / facial / A-V sync / temporal / neural
  - AudioMetrics — voiceprint / noise / frequency / prosody / spectrogram

Request models keep snake_case keys, like the rest of the upload API.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class MediaKind(str, Enum):
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"


# ── Classifier output ──────────────────────────────────────────────────────────

class ClassifierFeatures(BaseModel):
    """Feature vector synthesised from the classifier's top label score (0–100 each)."""

    artificial_patterns: float = 0.0
    natural_features:    float = 0.0
    texture_consistency: float = 0.0
    lighting:            float = 0.0


class ClassifierOutput(BaseModel):
    is_deepfake: bool = False
    confidence:  float = 0.0   # 0–100; 0 means "no classifier signal"
    features:    ClassifierFeatures = Field(default_factory=ClassifierFeatures)


# ── Result models ──────────────────────────────────────────────────────────────

class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BaseMetrics(_CamelModel):
    authenticity:             float
    manipulation_probability: float  # always 100 - authenticity
    confidence:               float


class ImageMetrics(_CamelModel):
    kind: Literal["image"] = "image"
    metadata_consistency: float
    pixel_anomalies:      float
    lighting_consistency: float
    texture_analysis:     float
    neural_inconsistency: float


class VideoMetrics(_CamelModel):
    kind: Literal["video"] = "video"
    frame_consistency:    float
    facial_anomaly:       float
    audio_video_sync:     float
    temporal_coherence:   float
    neural_inconsistency: float


class AudioMetrics(_CamelModel):
    kind: Literal["audio"] = "audio"
    voice_print_authenticity:  float
    background_noise_analysis: float
    frequency_anomalies:       float
    prosody_consistency:       float
    spectrogram_patterns:      float


SpecificMetrics = Annotated[
    Union[ImageMetrics, VideoMetrics, AudioMetrics],
    Field(discriminator="kind"),
]


class AnalysisResult(_CamelModel):
    """One analysis bundle, created fresh per request and never persisted."""

    overall_result:       str
    is_deepfake:          bool
    base_metrics:         BaseMetrics
    specific_metrics:     SpecificMetrics
    media_type:           MediaKind
    file_name:            str
    analysis_date:        datetime = Field(default_factory=lambda: datetime.now(tz=timezone.utc))
    dataset_reference:    str
    confidence_interval:  str
    analysis_version:     str
    detailed_explanation: str
    downloadable:         bool = True


# ── Request models ─────────────────────────────────────────────────────────────

class MediaUploadRequest(BaseModel):
    """Base64-encoded media file submitted for analysis."""

    media_b64: str = Field(..., min_length=1, description="Base64-encoded file contents")
    filename:  str = Field(..., min_length=1, description="Original filename (seeds the scores)")
    mime_type: Optional[str] = Field(
        default=None,
        description="Declared MIME type; derived from the filename extension when omitted",
    )


class WebcamCaptureRequest(BaseModel):
    """Still image captured from the user's camera, as a data: URL."""

    image_data_url: str = Field(
        ...,
        min_length=1,
        description='e.g. "data:image/jpeg;base64,/9j/4AAQ..."',
    )
