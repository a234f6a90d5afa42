"""
Import Endpoints
POST /api/v1/shops/{shop}/preview - Scrape a store or product URL
POST /api/v1/shops/{shop}/imports - Reserve quota and queue imports
GET /api/v1/shops/{shop}/jobs - Recent import jobs with a status summary
"""

import logging

from fastapi import APIRouter, Depends, status

from ...services.imports import ImportService, summarize_jobs
from ..dependencies import get_access_token, get_import_service
from ..schemas.imports import (
    ImportJobResponse,
    JobListResponse,
    JobSummaryResponse,
    PreviewRequest,
    PreviewResponse,
    StartImportRequest,
    StartImportResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/shops/{shop}", tags=["imports"])


@router.post("/preview", response_model=PreviewResponse, status_code=status.HTTP_200_OK)
def preview(
    shop: str,
    request: PreviewRequest,
    service: ImportService = Depends(get_import_service),
) -> PreviewResponse:
    """
    Scrape the given URL.

    URLs containing /products/ fetch that one product; anything else is
    treated as a store and its whole catalog is fetched.
    Scrape failures are returned as 422 with a plain-language message.
    """
    logger.info(f"Preview requested by {shop}: {request.url}", extra={"shop": shop})
    products = service.preview(request.url)
    return PreviewResponse(products=products, count=len(products))


@router.post("/imports", response_model=StartImportResponse, status_code=status.HTTP_202_ACCEPTED)
def start_import(
    shop: str,
    request: StartImportRequest,
    access_token: str = Depends(get_access_token),
    service: ImportService = Depends(get_import_service),
) -> StartImportResponse:
    """
    Queue one import job per product.

    Returns 402 when the shop has no quota left.
    """
    result = service.start_import(shop, access_token, request.products)

    message = f"Importing {result.queued} product(s)."
    if result.truncated:
        message += " Only part of the selection fits your remaining quota; upgrade to import more."

    return StartImportResponse(queued=result.queued, truncated=result.truncated, message=message)


@router.get("/jobs", response_model=JobListResponse)
def list_jobs(
    shop: str,
    service: ImportService = Depends(get_import_service),
) -> JobListResponse:
    """Recent jobs for the progress poller."""
    jobs = service.list_jobs(shop)
    summary = summarize_jobs(jobs)

    return JobListResponse(
        jobs=[ImportJobResponse.model_validate(job) for job in jobs],
        summary=JobSummaryResponse(
            pending=summary.pending,
            completed=summary.completed,
            failed=summary.failed,
            total=summary.total,
            percent_complete=summary.percent_complete,
            is_importing=summary.is_importing,
        ),
    )
