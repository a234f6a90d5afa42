"""
Request/response schemas for the HTTP API.
"""

from .billing import PlanChangeRequest, SubscriptionResponse, WebhookAck
from .imports import (
    ImportJobResponse,
    JobListResponse,
    JobSummaryResponse,
    PreviewRequest,
    PreviewResponse,
    StartImportRequest,
    StartImportResponse,
)

__all__ = [
    "PreviewRequest",
    "PreviewResponse",
    "StartImportRequest",
    "StartImportResponse",
    "ImportJobResponse",
    "JobSummaryResponse",
    "JobListResponse",
    "SubscriptionResponse",
    "PlanChangeRequest",
    "WebhookAck",
]
