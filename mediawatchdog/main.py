"""
MediaWatchdog API — Application entry point.

Bootstraps FastAPI, wires up middleware and registers route groups.

Extension points:
  - Add new route groups with app.include_router() below
  - Add new middleware in the middleware block
  - Change startup behaviour in the lifespan context manager

Run locally:
    uvicorn mediawatchdog.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from mediawatchdog.core.config import settings
from mediawatchdog.core.rate_limit import limiter
from mediawatchdog.routes.analyze import router as analyze_router
from mediawatchdog.routes.health import API_VERSION
from mediawatchdog.routes.health import router as health_router
from mediawatchdog.routes.reports import router as reports_router

# ─── Logging ───────────────────────────────────────────────────────────────────
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


# ─── Lifespan ──────────────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup / shutdown hooks.

    The image classifier is not loaded here; it builds on the first image
    or video analysis.
    """
    logger.info(
        "Starting MediaWatchdog API (env: %s, mock AI: %s)",
        settings.environment, settings.ai_mock_mode,
    )
    yield
    logger.info("Shutting down MediaWatchdog API")


# ─── App ───────────────────────────────────────────────────────────────────────
app = FastAPI(
    title="MediaWatchdog API",
    description=(
        "Media upload analysis with deepfake-style scoring. "
        "Scores are simulated from file name and size — not a real detector."
    ),
    version=API_VERSION,
    lifespan=lifespan,
    docs_url="/docs" if settings.environment != "production" else None,
    redoc_url="/redoc" if settings.environment != "production" else None,
)


# ─── Rate limiting ─────────────────────────────────────────────────────────────
# Routes opt-in with @limiter.limit(...) + a request: Request parameter.
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# ─── Middleware ─────────────────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition"],
)


# ─── Routes ────────────────────────────────────────────────────────────────────
app.include_router(health_router, prefix="/health", tags=["health"])
app.include_router(analyze_router)
app.include_router(reports_router)


@app.get("/", tags=["root"])
async def root():
    """API root — basic metadata."""
    return {
        "name": "MediaWatchdog API",
        "version": API_VERSION,
        "status": "running",
        "environment": settings.environment,
        "docs": "/docs",
    }
