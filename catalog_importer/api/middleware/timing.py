"""
Request Timing Middleware
Adds X-Response-Time and flags slow requests.
"""

import logging
import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

# Store previews paginate a remote catalog, so they get a looser threshold
SLOW_REQUEST_MS = 1000.0
SLOW_PREVIEW_MS = 15000.0


class RequestTimingMiddleware(BaseHTTPMiddleware):
    """Middleware to time each request."""

    def __init__(self, app, slow_request_ms: float = SLOW_REQUEST_MS):
        super().__init__(app)
        self.slow_request_ms = slow_request_ms

    def threshold_for(self, path: str) -> float:
        if path.endswith("/preview"):
            return max(self.slow_request_ms, SLOW_PREVIEW_MS)
        return self.slow_request_ms

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"

        if duration_ms > self.threshold_for(request.url.path):
            logger.warning(
                "Slow request detected",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "duration_ms": duration_ms,
                },
            )

        return response
