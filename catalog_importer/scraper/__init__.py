"""
Catalog Scraper Package
Turns storefront URLs into normalized product records.
"""

from .catalog import CatalogScraper, normalize_origin, split_product_url
from .errors import (
    AccessDenied,
    EmptyCatalog,
    InvalidUrl,
    NotAStorefront,
    NotFound,
    RateLimited,
    RemoteUnavailable,
    ScrapeError,
    UnexpectedStatus,
    Unreachable,
)

__all__ = [
    "CatalogScraper",
    "normalize_origin",
    "split_product_url",
    "ScrapeError",
    "AccessDenied",
    "EmptyCatalog",
    "InvalidUrl",
    "NotAStorefront",
    "NotFound",
    "RateLimited",
    "RemoteUnavailable",
    "UnexpectedStatus",
    "Unreachable",
]
