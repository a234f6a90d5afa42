"""
Billing Package
Quota governor, plan-change events and quota errors.
"""

from .errors import PlanChangeError, QuotaExceeded
from .events import PlanChangeOutcome, apply_subscription_update
from .quota import QuotaGovernor, remaining_imports

__all__ = [
    "PlanChangeError",
    "QuotaExceeded",
    "PlanChangeOutcome",
    "apply_subscription_update",
    "QuotaGovernor",
    "remaining_imports",
]
