"""
Error Handlers
Custom exception handlers for FastAPI.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..billing import PlanChangeError, QuotaExceeded
from ..scraper import ScrapeError

logger = logging.getLogger(__name__)


class APIError(Exception):
    """Base exception for API errors."""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: dict = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class InvalidRequestError(APIError):
    """Exception raised for invalid requests."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message=message, status_code=status.HTTP_400_BAD_REQUEST, details=details)


def _error_response(status_code: int, message: str, error_type: str, details=None) -> JSONResponse:
    content = {"error": {"message": message, "type": error_type}}
    if details is not None:
        content["error"]["details"] = details
    return JSONResponse(status_code=status_code, content=content)


def setup_error_handlers(app: FastAPI) -> None:
    """
    Set up custom error handlers for the FastAPI app.

    Args:
        app: FastAPI application instance
    """

    @app.exception_handler(APIError)
    async def api_error_handler(request: Request, exc: APIError):
        """Handle custom API errors."""
        logger.error(
            f"API error: {exc.message}",
            extra={
                "status_code": exc.status_code,
                "details": exc.details,
                "path": request.url.path,
            },
        )
        return _error_response(exc.status_code, exc.message, exc.__class__.__name__, exc.details)

    @app.exception_handler(ScrapeError)
    async def scrape_error_handler(request: Request, exc: ScrapeError):
        """Classified scrape failures are shown to the user verbatim."""
        logger.info(f"Scrape error: {exc.message}", extra={"path": request.url.path})
        return _error_response(
            status.HTTP_422_UNPROCESSABLE_ENTITY, exc.message, exc.__class__.__name__, exc.details
        )

    @app.exception_handler(QuotaExceeded)
    async def quota_error_handler(request: Request, exc: QuotaExceeded):
        """Quota errors ask the user to upgrade."""
        logger.info(f"Quota exceeded: {exc.details}", extra={"path": request.url.path})
        return _error_response(
            status.HTTP_402_PAYMENT_REQUIRED, exc.message, "QuotaExceeded", exc.details
        )

    @app.exception_handler(PlanChangeError)
    async def plan_change_error_handler(request: Request, exc: PlanChangeError):
        return _error_response(status.HTTP_400_BAD_REQUEST, exc.message, "PlanChangeError")

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return _error_response(exc.status_code, str(exc.detail), "HTTPException")

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        """Handle request validation errors."""
        logger.warning(f"Validation error: {exc}", extra={"path": request.url.path})

        # Convert error details to JSON-serializable format
        errors = []
        for error in exc.errors():
            errors.append(
                {
                    "loc": list(error.get("loc", [])),
                    "msg": str(error.get("msg", "")),
                    "type": error.get("type", ""),
                }
            )

        return _error_response(
            status.HTTP_422_UNPROCESSABLE_ENTITY, "Request validation failed", "ValidationError", errors
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions."""
        logger.error(f"Unexpected error: {exc}", exc_info=True, extra={"path": request.url.path})
        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "An unexpected error occurred. Please try again.",
            "InternalServerError",
        )
