"""
Dependency Injection
FastAPI dependencies for settings and the shared service objects.

Services are built once per process and handed to every request, so
connections (HTTP sessions, database pool) are never re-created per call.
"""

import logging
from typing import Optional

from fastapi import Depends, Header, HTTPException, status

from ..billing import QuotaGovernor
from ..config import Settings, get_settings
from ..db.session import get_session_factory
from ..scraper import CatalogScraper
from ..services.imports import ImportService

logger = logging.getLogger(__name__)

_governor: Optional[QuotaGovernor] = None
_import_service: Optional[ImportService] = None


def get_governor() -> QuotaGovernor:
    """Get the quota governor (singleton)."""
    global _governor
    if _governor is None:
        _governor = QuotaGovernor(session_factory=get_session_factory())
        logger.info("Quota governor created")
    return _governor


def get_import_service(governor: QuotaGovernor = Depends(get_governor)) -> ImportService:
    """Get the import service (singleton)."""
    global _import_service
    if _import_service is None:
        _import_service = ImportService(
            governor=governor,
            scraper=CatalogScraper(),
            session_factory=get_session_factory(),
        )
        logger.info("Import service created")
    return _import_service


def get_access_token(
    x_shopify_access_token: Optional[str] = Header(None),
) -> str:
    """
    Admin API token for the destination shop.

    Session establishment happens upstream; this only requires the header.
    """
    if not x_shopify_access_token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Access token is required",
        )
    return x_shopify_access_token


def require_development(settings: Settings = Depends(get_settings)) -> Settings:
    """Guard for endpoints that bypass billing checkout."""
    if not settings.is_development:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    return settings
