"""
Destination GraphQL client
Executes admin API requests with exponential backoff on throttling.
"""

import logging
import time
from typing import Any, Callable, Dict, Optional

import requests

from ..config import Settings, get_settings
from .errors import DestinationUnavailable, RateLimitExhausted

logger = logging.getLogger(__name__)

THROTTLED_CODE = "THROTTLED"


def backoff_delay(attempt: int, base_delay: float = 1.0) -> float:
    """
    Delay before retrying after the given (0-based) attempt.

    >>> [backoff_delay(n) for n in range(4)]
    [1.0, 2.0, 4.0, 8.0]
    """
    return base_delay * (2 ** attempt)


def is_throttled(payload: Dict[str, Any]) -> bool:
    """Check whether a response body reports the THROTTLED error code."""
    for error in payload.get("errors") or []:
        if not isinstance(error, dict):
            continue
        extensions = error.get("extensions") or {}
        if extensions.get("code") == THROTTLED_CODE:
            return True
    return False


class GraphQLClient:
    """
    Client for one shop's admin GraphQL endpoint.

    Throttled responses are retried with exponential backoff; every other
    payload (including error payloads) is returned to the caller as-is.
    """

    def __init__(
        self,
        shop: str,
        access_token: str,
        session: Optional[requests.Session] = None,
        settings: Optional[Settings] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize the client.

        Args:
            shop: Shop domain, e.g. example.myshopify.com
            access_token: Admin API token scoped to the shop
            session: HTTP session (created if not provided)
            settings: Application settings
            sleep: Called with the backoff delay in seconds; injectable for tests
        """
        self.settings = settings or get_settings()
        self.shop = shop
        self.endpoint = (
            f"https://{shop}/admin/api/{self.settings.destination_api_version}/graphql.json"
        )
        self.session = session or requests.Session()
        self.session.headers.update(
            {"Content-Type": "application/json", "X-Shopify-Access-Token": access_token}
        )
        self.max_attempts = self.settings.throttle_max_attempts
        self.base_delay = self.settings.throttle_base_delay
        self.sleep = sleep

    def _post(self, query: str, variables: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = self.session.post(
                self.endpoint,
                json={"query": query, "variables": variables},
                timeout=self.settings.destination_request_timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Request to {self.shop} failed: {e}")
            raise DestinationUnavailable()

        if response.status_code == 429:
            return {"errors": [{"message": "Throttled", "extensions": {"code": THROTTLED_CODE}}]}

        try:
            return response.json()
        except ValueError:
            logger.error(
                f"Non-JSON response from {self.shop} (HTTP {response.status_code})",
                extra={"shop": self.shop, "status_code": response.status_code},
            )
            raise DestinationUnavailable(details={"status_code": response.status_code})

    def call(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Execute one GraphQL request.

        Args:
            query: GraphQL document
            variables: Query variables

        Returns:
            Decoded response body

        Raises:
            RateLimitExhausted: If every attempt was throttled
            DestinationUnavailable: On network failure or a non-JSON response
        """
        variables = variables or {}

        for attempt in range(self.max_attempts):
            payload = self._post(query, variables)
            if not is_throttled(payload):
                return payload

            if attempt + 1 < self.max_attempts:
                delay = backoff_delay(attempt, self.base_delay)
                logger.debug(
                    f"Rate limited by {self.shop}. Retrying in {delay:.1f}s...",
                    extra={"shop": self.shop, "attempt": attempt + 1, "delay": delay},
                )
                self.sleep(delay)

        logger.warning(
            f"Max retries exceeded due to rate limiting ({self.max_attempts} attempts)",
            extra={"shop": self.shop},
        )
        raise RateLimitExhausted()

    def close(self) -> None:
        self.session.close()
