"""
API Routers
FastAPI route handlers for different endpoints.
"""

from .billing import router as billing_router
from .health import router as health_router
from .imports import router as imports_router
from .webhooks import router as webhooks_router

__all__ = [
    "health_router",
    "imports_router",
    "billing_router",
    "webhooks_router",
]
