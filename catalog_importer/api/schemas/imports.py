"""
Import request/response schemas.
Pydantic models for preview, start-import and the job poller.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ...models.product import ScrapedProduct


class PreviewRequest(BaseModel):
    """Request schema for previewing a store or product URL."""

    url: str = Field(..., min_length=1, description="Store URL or product page URL")


class PreviewResponse(BaseModel):
    """Products found at the previewed URL."""

    products: List[ScrapedProduct] = Field(..., description="Scraped products")
    count: int = Field(..., description="Number of products found")


class StartImportRequest(BaseModel):
    """Request schema for importing products chosen from a preview."""

    products: List[ScrapedProduct] = Field(..., description="Products to import")


class StartImportResponse(BaseModel):
    queued: int = Field(..., description="Number of import jobs queued")
    truncated: bool = Field(..., description="Whether the batch was cut to the remaining quota")
    message: str = Field(..., description="Human-readable outcome")


class ImportJobResponse(BaseModel):
    """One import job as shown to the poller."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    product_title: str
    status: str = Field(..., description="PENDING, COMPLETED or FAILED")
    source_url: Optional[str] = None
    product_id: Optional[str] = Field(None, description="Remote product id once created")
    error_message: Optional[str] = None
    is_finished: bool = False
    created_at: datetime
    updated_at: datetime


class JobSummaryResponse(BaseModel):
    pending: int
    completed: int
    failed: int
    total: int
    percent_complete: int
    is_importing: bool


class JobListResponse(BaseModel):
    """Recent jobs for a shop, newest first."""

    jobs: List[ImportJobResponse]
    summary: JobSummaryResponse
