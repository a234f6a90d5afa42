"""
Billing Errors
"""

from typing import Optional

from ..models.plans import Plan, get_plan_config


class QuotaExceeded(Exception):
    """Raised when a reservation would take a shop past its monthly import limit."""

    def __init__(self, plan: Plan, limit: int, used: int, requested: int):
        self.plan = Plan(plan)
        self.limit = limit
        self.used = used
        self.requested = requested

        if self.plan == Plan.TRIAL_EXPIRED:
            self.message = "Your free trial has ended. Please upgrade your plan to keep importing."
        else:
            label = get_plan_config(self.plan).label
            self.message = (
                f"Import limit reached. Your {label} plan allows {limit} imports per month. "
                f"You have used {used} and are trying to import {requested} more. "
                f"Please upgrade your plan."
            )
        super().__init__(self.message)

    @property
    def details(self) -> dict:
        return {
            "plan": self.plan.value,
            "limit": self.limit,
            "used": self.used,
            "requested": self.requested,
        }


class PlanChangeError(ValueError):
    """Raised for plan changes the governor does not allow."""

    def __init__(self, message: str, plan: Optional[str] = None):
        self.message = message
        self.plan = plan
        super().__init__(message)
