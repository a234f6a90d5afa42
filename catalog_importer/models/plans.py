"""
Subscription plan catalogue.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional


class Plan(str, Enum):
    """Subscription plans a shop can be on."""

    TRIAL = "TRIAL"
    TRIAL_EXPIRED = "TRIAL_EXPIRED"
    STARTER = "STARTER"
    GROWTH = "GROWTH"
    UNLIMITED = "UNLIMITED"


@dataclass(frozen=True)
class PlanConfig:
    """Monthly limit and pricing for a plan."""

    label: str
    price: Decimal
    limit: Optional[int]  # None means no limit
    billing_key: Optional[str] = None

    @property
    def is_unlimited(self) -> bool:
        return self.limit is None


PLANS = {
    Plan.TRIAL: PlanConfig(label="Free Trial", price=Decimal("0"), limit=50),
    Plan.TRIAL_EXPIRED: PlanConfig(label="Trial Expired", price=Decimal("0"), limit=0),
    Plan.STARTER: PlanConfig(
        label="Starter", price=Decimal("2.99"), limit=20, billing_key="starter"
    ),
    Plan.GROWTH: PlanConfig(label="Growth", price=Decimal("4.99"), limit=100, billing_key="growth"),
    Plan.UNLIMITED: PlanConfig(
        label="Unlimited", price=Decimal("9.99"), limit=None, billing_key="unlimited"
    ),
}

PAID_PLANS = (Plan.STARTER, Plan.GROWTH, Plan.UNLIMITED)


def get_plan_config(plan) -> PlanConfig:
    """Look up a plan by enum member or stored string value."""
    return PLANS[Plan(plan)]


def plan_from_billing_name(name: Optional[str]) -> Optional[Plan]:
    """
    Map a billing subscription name to a paid plan.

    Matches the billing key ("growth") or the label ("Growth"),
    case-insensitively. Returns None for unknown names.
    """
    if not name:
        return None

    needle = name.strip().lower()
    for plan in PAID_PLANS:
        config = PLANS[plan]
        if needle in (config.billing_key, config.label.lower(), plan.value.lower()):
            return plan
    return None


def plan_from_price(price) -> Optional[Plan]:
    """Map a billed amount to a paid plan; used when the name is not recognised."""
    if price is None:
        return None
    try:
        amount = Decimal(str(price))
    except ArithmeticError:
        return None

    for plan in PAID_PLANS:
        if PLANS[plan].price == amount:
            return plan
    return None
