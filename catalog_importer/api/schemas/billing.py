"""
Billing request/response schemas.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from ...models.plans import Plan


class SubscriptionResponse(BaseModel):
    """Current plan and quota usage for a shop."""

    shop: str
    plan: Plan
    label: str
    price: Decimal = Field(..., description="Monthly price in USD")
    limit: Optional[int] = Field(None, description="Monthly import limit; null means unlimited")
    used: int = Field(..., description="Imports used in the current period")
    remaining: Optional[int] = Field(None, description="Imports left; null means unlimited")
    period_start: datetime
    trial_ends_at: Optional[datetime] = None
    trial_used: bool


class PlanChangeRequest(BaseModel):
    plan: Plan = Field(..., description="Paid plan to switch to")


class WebhookAck(BaseModel):
    """Acknowledgement returned to the webhook sender."""

    status: str = "ok"
    outcome: Optional[str] = None
