"""
Domain Models Package
Scraped product records and the subscription plan catalogue.
"""

from .plans import PLANS, Plan, PlanConfig, get_plan_config
from .product import MAX_OPTION_SLOTS, ProductOption, ScrapedProduct, ScrapedVariant

__all__ = [
    "PLANS",
    "Plan",
    "PlanConfig",
    "get_plan_config",
    "MAX_OPTION_SLOTS",
    "ProductOption",
    "ScrapedProduct",
    "ScrapedVariant",
]
