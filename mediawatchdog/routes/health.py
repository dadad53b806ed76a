"""
Health check endpoint.

Used by:
  - Docker HEALTHCHECK instruction
  - Load balancers / orchestrators
  - Front-end to check API connectivity

Reports the classifier state alongside liveness so callers can tell
"API down" from "API up, running on fallback scores".
"""

import logging

from fastapi import APIRouter
from pydantic import BaseModel

from mediawatchdog.ai.image_classifier import image_classifier
from mediawatchdog.core.config import settings

logger = logging.getLogger(__name__)
router = APIRouter()

API_VERSION = "0.1.0"


class HealthResponse(BaseModel):
    status: str  # Always "ok" if the API process is alive
    version: str
    classifier: str  # "mock" | "loaded" | "not_loaded" | "failed"
    environment: str


@router.get("", response_model=HealthResponse, summary="API health check")
async def health_check() -> HealthResponse:
    """
    Liveness of the API plus the classifier's load state.

    A failed or not-yet-loaded classifier is still healthy: analyses fall
    back to fixed scores rather than failing.
    """
    return HealthResponse(
        status="ok",
        version=API_VERSION,
        classifier=image_classifier.status,
        environment=settings.environment,
    )
