"""
Plan-change events
Applies billing subscription updates (delivered by the billing webhook) to the governor.
"""

import logging
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..models.plans import Plan, plan_from_billing_name, plan_from_price
from .quota import QuotaGovernor

logger = logging.getLogger(__name__)

# Subscription statuses that end paid access
ENDING_STATUSES = {"CANCELLED", "DECLINED", "FROZEN", "EXPIRED"}


class PlanChangeOutcome(str, Enum):
    UPGRADED = "upgraded"
    EXPIRED = "expired"
    IGNORED = "ignored"


class _PricingDetails(BaseModel):
    price: Optional[Any] = None


class _LinePlan(BaseModel):
    pricing_details: Optional[_PricingDetails] = None


class _LineItem(BaseModel):
    plan: Optional[_LinePlan] = None


class AppSubscription(BaseModel):
    """The subset of an APP_SUBSCRIPTIONS_UPDATE payload the governor needs."""

    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    status: str = "ACTIVE"
    price: Optional[Any] = None
    line_items: List[_LineItem] = Field(default_factory=list)

    @property
    def billed_price(self) -> Optional[Any]:
        price = self.price
        if price is None:
            for item in self.line_items:
                if item.plan and item.plan.pricing_details and item.plan.pricing_details.price is not None:
                    price = item.plan.pricing_details.price
                    break
        # Money objects arrive as {"amount": ..., "currency_code": ...}
        if isinstance(price, dict):
            return price.get("amount")
        return price


def resolve_plan(subscription: AppSubscription) -> Optional[Plan]:
    """
    Map a billing subscription to a plan.

    The subscription name is matched first; the billed price is only
    used when the name is not recognised.
    """
    return plan_from_billing_name(subscription.name) or plan_from_price(subscription.billed_price)


def apply_subscription_update(
    governor: QuotaGovernor, shop: str, payload: Dict[str, Any]
) -> PlanChangeOutcome:
    """
    Apply one subscription update to a shop.

    Args:
        governor: Shared quota governor
        shop: Shop domain the webhook was delivered for
        payload: Webhook body (`{"app_subscription": {...}}`)

    Returns:
        What was done with the event
    """
    subscription = AppSubscription.model_validate(payload.get("app_subscription") or {})
    status = (subscription.status or "").upper()

    if status in ENDING_STATUSES:
        governor.expire(shop)
        return PlanChangeOutcome.EXPIRED

    if status != "ACTIVE":
        logger.info(f"Ignoring {status} subscription update for {shop}", extra={"shop": shop})
        return PlanChangeOutcome.IGNORED

    plan = resolve_plan(subscription)
    if plan is None:
        logger.warning(
            f"Unrecognised subscription for {shop}: name={subscription.name!r} "
            f"price={subscription.billed_price!r}",
            extra={"shop": shop},
        )
        return PlanChangeOutcome.IGNORED

    governor.set_plan(shop, plan)
    return PlanChangeOutcome.UPGRADED
