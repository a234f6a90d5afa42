"""
Scraper Errors
Classified, user-facing failures raised while reading a storefront catalog.
"""

from typing import Optional

STORE = "store"
PRODUCT = "product"


class ScrapeError(Exception):
    """Base exception for scrape failures. `message` is safe to show to end users."""

    default_message = "Something went wrong while reading this store. Please try again."

    def __init__(self, message: Optional[str] = None, details: dict = None):
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)


class InvalidUrl(ScrapeError):
    default_message = "URL must contain /products/ to import a single product."


class NotFound(ScrapeError):
    default_message = "Store not found. Please check the URL and try again."

    @classmethod
    def for_context(cls, context: str) -> "NotFound":
        if context == PRODUCT:
            return cls("Product not found. Please check the URL and try again.")
        return cls()


class AccessDenied(ScrapeError):
    default_message = (
        "This store is password-protected or private. "
        "Please make the store public before importing."
    )


class RateLimited(ScrapeError):
    default_message = "The store is rate-limiting requests. Please wait a moment and try again."


class RemoteUnavailable(ScrapeError):
    default_message = "The store is currently unavailable. Please try again later."


class UnexpectedStatus(ScrapeError):
    def __init__(self, status_code: int):
        self.status_code = status_code
        super().__init__(
            f"Unexpected error (HTTP {status_code}). Please check the URL and try again.",
            details={"status_code": status_code},
        )


class Unreachable(ScrapeError):
    default_message = (
        "Could not connect to this store. Please verify the URL is a valid, "
        "publicly accessible store."
    )


class NotAStorefront(ScrapeError):
    default_message = (
        "This doesn't appear to be a public store. "
        "Please enter a valid store URL (e.g. https://example.myshopify.com)."
    )


class EmptyCatalog(ScrapeError):
    default_message = (
        "No products found in this store. The store may be empty or its "
        "catalog may not be publicly accessible."
    )


def classify_status(status_code: int, context: str = STORE) -> ScrapeError:
    """Map a non-success HTTP status to a classified error."""
    if status_code in (401, 403):
        return AccessDenied()
    if status_code == 404:
        return NotFound.for_context(context)
    if status_code == 429:
        return RateLimited()
    if status_code >= 500:
        return RemoteUnavailable()
    return UnexpectedStatus(status_code)
