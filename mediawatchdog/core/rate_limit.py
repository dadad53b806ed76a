"""
rate_limit.py — Global rate limiter instance.

Uses slowapi (a Starlette-compatible wrapper around the `limits` library).
Requests are keyed by client IP address.

Usage in routes:
    from fastapi import Request
    from mediawatchdog.core.rate_limit import limiter

    @router.post("/image")
    @limiter.limit(settings.analysis_rate_limit)
    async def analyze_image(request: Request, payload: MediaUploadRequest):
        ...
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)
