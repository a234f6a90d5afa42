"""
Webhook Endpoints
POST /webhooks/app-subscriptions-update - Plan changes from billing
POST /webhooks/shop-redact - Erase all data for an uninstalled shop
POST /webhooks/customers-redact - Acknowledged; no customer data is stored
POST /webhooks/customers-data-request - Acknowledged; no customer data is stored

Deliveries reach these routes already authenticated.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Header

from ...billing import QuotaGovernor, apply_subscription_update
from ...services.imports import ImportService
from ..dependencies import get_governor, get_import_service
from ..errors import InvalidRequestError
from ..schemas.billing import WebhookAck

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks", tags=["webhooks"])


def _resolve_shop(header_shop: Optional[str], payload: Dict[str, Any]) -> str:
    shop = header_shop or payload.get("shop_domain")
    if not shop:
        raise InvalidRequestError("Shop domain is required", details={"header": "X-Shopify-Shop-Domain"})
    return shop


@router.post("/app-subscriptions-update", response_model=WebhookAck)
def app_subscriptions_update(
    payload: Dict[str, Any] = Body(...),
    x_shopify_shop_domain: Optional[str] = Header(None),
    governor: QuotaGovernor = Depends(get_governor),
) -> WebhookAck:
    shop = _resolve_shop(x_shopify_shop_domain, payload)
    outcome = apply_subscription_update(governor, shop, payload)
    logger.info(f"Subscription update for {shop}: {outcome.value}", extra={"shop": shop})
    return WebhookAck(outcome=outcome.value)


@router.post("/shop-redact", response_model=WebhookAck)
def shop_redact(
    payload: Dict[str, Any] = Body(...),
    x_shopify_shop_domain: Optional[str] = Header(None),
    service: ImportService = Depends(get_import_service),
) -> WebhookAck:
    shop = _resolve_shop(x_shopify_shop_domain, payload)
    service.erase_shop(shop)
    return WebhookAck(outcome="erased")


@router.post("/customers-redact", response_model=WebhookAck)
def customers_redact(payload: Dict[str, Any] = Body(...)) -> WebhookAck:
    return WebhookAck(outcome="no_customer_data")


@router.post("/customers-data-request", response_model=WebhookAck)
def customers_data_request(payload: Dict[str, Any] = Body(...)) -> WebhookAck:
    return WebhookAck(outcome="no_customer_data")
