"""
image_classifier.py — Generic image classifier used as a soft signal by the
score generator.

Model: microsoft/resnet-50 (HuggingFace, ImageNet-1k labels)
  - NOT a deepfake model. Only the top label's score is used, scaled to
    0–100 as a "confidence"; the feature vector handed to the score
    generator is synthesised from that one number.
  - ~100 MB download, cached at ~/.cache/huggingface/ after first use

Design:
  - Lazy loading: the pipeline is built on the first classify() call, under
    a lock, so concurrent first calls build it exactly once. A failed build
    is retried on the next call; only a built pipeline is kept.
  - Thread offload: PyTorch inference is synchronous; asyncio.to_thread()
    keeps the FastAPI event loop free.
  - Mock mode: if AI_MOCK_MODE=true a canned top score is used and no model
    is downloaded.
  - Fallback: any error (download failure, undecodable image, inference
    error) returns a fixed tuple. Webcam captures fall back to "authentic",
    anything else to "suspicious" (see CLASSIFIER_FAILURE_POLICY).
"""

import asyncio
import logging
import threading
from io import BytesIO

from mediawatchdog.core.config import settings
from mediawatchdog.models.analysis import ClassifierFeatures, ClassifierOutput

logger = logging.getLogger(__name__)

# Top-label score used when AI_MOCK_MODE=true
_MOCK_TOP_SCORE = 0.42

_DEEPFAKE_THRESHOLD = 60.0

_WEBCAM_FALLBACK = ClassifierOutput(
    is_deepfake=False,
    confidence=95.0,
    features=ClassifierFeatures(
        artificial_patterns=15.0,
        natural_features=90.0,
        texture_consistency=85.0,
        lighting=90.0,
    ),
)

_UPLOAD_FALLBACK = ClassifierOutput(
    is_deepfake=True,
    confidence=65.0,
    features=ClassifierFeatures(
        artificial_patterns=75.0,
        natural_features=30.0,
        texture_consistency=35.0,
        lighting=40.0,
    ),
)


def is_webcam_name(filename: str) -> bool:
    """True for camera captures ("webcam-capture.jpg" and friends)."""
    return "webcam" in filename


class ImageClassifier:
    """
    Wraps a HuggingFace image-classification pipeline.

    Usage:
        output = await image_classifier.classify(image_bytes, "photo.jpg")
        # output.confidence  → 0–100
        # output.is_deepfake → confidence > 60 (never for webcam captures)
    """

    def __init__(self, model: str | None = None, revision: str | None = None, device: str | None = None):
        self.model = model or settings.classifier_model
        self.revision = revision or settings.classifier_revision
        self.device = device or settings.classifier_device
        self._pipe = None
        self._load_failed = False
        self._lock = threading.Lock()

    @property
    def status(self) -> str:
        """One of: "mock", "loaded", "failed", "not_loaded"."""
        if settings.ai_mock_mode:
            return "mock"
        if self._pipe is not None:
            return "loaded"
        return "failed" if self._load_failed else "not_loaded"

    # ── Model loading ─────────────────────────────────────────────────────────

    def _build_pipeline(self):
        from transformers import pipeline as hf_pipeline

        return hf_pipeline(
            "image-classification",
            model=self.model,
            revision=self.revision,
            device=self.device,
        )

    def _load(self) -> bool:
        """
        Get or build the pipeline. Returns True when a pipeline is available.

        _pipe is only assigned inside the lock once the build has finished,
        so the unlocked fast path never sees a half-built state. A failed
        build leaves _pipe as None and the next call tries again.
        """
        if self._pipe is not None:
            return True

        with self._lock:
            if self._pipe is not None:
                return True
            try:
                logger.info("Loading image classifier (%s@%s)…", self.model, self.revision)
                self._pipe = self._build_pipeline()
                self._load_failed = False
                logger.info("Image classifier loaded successfully.")
            except Exception as exc:
                logger.error("Failed to load image classifier: %s", exc)
                self._load_failed = True
            return self._pipe is not None

    # ── Result shaping ────────────────────────────────────────────────────────

    def _fallback(self, filename: str) -> ClassifierOutput:
        if settings.classifier_failure_policy == "neutral":
            return ClassifierOutput()
        template = _WEBCAM_FALLBACK if is_webcam_name(filename) else _UPLOAD_FALLBACK
        return template.model_copy(deep=True)

    @staticmethod
    def to_output(top_score: float, filename: str) -> ClassifierOutput:
        """Map a 0–1 top-label score onto the verdict + synthetic feature vector."""
        confidence = top_score * 100
        is_deepfake = False if is_webcam_name(filename) else confidence > _DEEPFAKE_THRESHOLD

        return ClassifierOutput(
            is_deepfake=is_deepfake,
            confidence=confidence,
            features=ClassifierFeatures(
                artificial_patterns=confidence if is_deepfake else 20.0,
                natural_features=20.0 if is_deepfake else confidence,
                texture_consistency=30.0 if is_deepfake else 85.0,
                lighting=25.0 if is_deepfake else 90.0,
            ),
        )

    # ── Synchronous inference ─────────────────────────────────────────────────

    def _top_score(self, data: bytes) -> float:
        from PIL import Image

        img = Image.open(BytesIO(data)).convert("RGB")
        results = self._pipe(img)
        # results is sorted by score, e.g.
        # [{"label": "tabby, tabby cat", "score": 0.61}, {"label": "tiger cat", "score": 0.2}, ...]
        if not results:
            return 0.0
        return float(results[0].get("score") or 0.0)

    def _classify_sync(self, data: bytes, filename: str) -> ClassifierOutput:
        if not self._load():
            logger.info("Image classifier unavailable, using fallback for %s", filename)
            return self._fallback(filename)

        try:
            top_score = self._top_score(data)
        except Exception as exc:
            logger.warning("Image classifier inference error for %s: %s", filename, exc)
            return self._fallback(filename)

        output = self.to_output(top_score, filename)
        logger.debug("Classifier output for %s: %s", filename, output)
        return output

    # ── Public async API ──────────────────────────────────────────────────────

    async def classify(self, data: bytes, filename: str = "") -> ClassifierOutput:
        """
        Classify raw image bytes. Never raises.

        Returns:
            ClassifierOutput with confidence 0–100 and the synthetic features.
        """
        if settings.ai_mock_mode:
            return self.to_output(_MOCK_TOP_SCORE, filename)

        try:
            return await asyncio.to_thread(self._classify_sync, data, filename)
        except Exception as exc:
            logger.warning("Image classifier async wrapper error: %s", exc)
            return self._fallback(filename)


# Module-level instance: injected into the score generator
image_classifier = ImageClassifier()
