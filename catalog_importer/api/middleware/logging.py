"""
Request Logging Middleware
Logs every request with its outcome and the shop it was made for.
"""

import logging
import time
import uuid
from typing import Callable, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


def shop_from_path(path: str) -> Optional[str]:
    """Extract the shop domain from /api/v1/shops/{shop}/... paths."""
    parts = path.strip("/").split("/")
    if len(parts) >= 4 and parts[:3] == ["api", "v1", "shops"]:
        return parts[3]
    return None


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware to log all HTTP requests and responses.

    A request id is taken from X-Request-ID (or generated) and echoed
    back on the response.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        context = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "shop": shop_from_path(request.url.path),
        }
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                f"{request.method} {request.url.path} failed after {duration_ms:.1f}ms",
                exc_info=True,
                extra={**context, "duration_ms": duration_ms, "error": str(e)},
            )
            raise

        duration_ms = (time.perf_counter() - start_time) * 1000
        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code}",
            extra={**context, "status_code": response.status_code, "duration_ms": duration_ms},
        )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
