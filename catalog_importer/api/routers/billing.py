"""
Billing Endpoints
GET /api/v1/shops/{shop}/subscription - Current plan and quota usage
POST /api/v1/shops/{shop}/plan - Switch plan directly (development only)
"""

import logging

from fastapi import APIRouter, Depends

from ...billing import QuotaGovernor, remaining_imports
from ...db.models import ShopSubscription
from ...models.plans import Plan, get_plan_config
from ..dependencies import get_governor, require_development
from ..schemas.billing import PlanChangeRequest, SubscriptionResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/shops/{shop}", tags=["billing"])


def to_subscription_response(subscription: ShopSubscription) -> SubscriptionResponse:
    config = get_plan_config(subscription.plan)
    return SubscriptionResponse(
        shop=subscription.shop,
        plan=Plan(subscription.plan),
        label=config.label,
        price=config.price,
        limit=config.limit,
        used=subscription.import_count,
        remaining=remaining_imports(subscription),
        period_start=subscription.period_start,
        trial_ends_at=subscription.trial_ends_at,
        trial_used=subscription.trial_used,
    )


@router.get("/subscription", response_model=SubscriptionResponse)
def get_subscription(
    shop: str,
    governor: QuotaGovernor = Depends(get_governor),
) -> SubscriptionResponse:
    """Current plan for a shop; first access starts the free trial."""
    return to_subscription_response(governor.get_or_create_subscription(shop))


@router.post(
    "/plan",
    response_model=SubscriptionResponse,
    dependencies=[Depends(require_development)],
)
def change_plan(
    shop: str,
    request: PlanChangeRequest,
    governor: QuotaGovernor = Depends(get_governor),
) -> SubscriptionResponse:
    """Switch to a paid plan without going through billing checkout."""
    logger.warning(f"Manual plan change for {shop} to {request.plan.value}", extra={"shop": shop})
    return to_subscription_response(governor.set_plan(shop, request.plan))
