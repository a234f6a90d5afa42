"""
Remote Publisher Package
Rate-limit aware writes to the destination platform's admin API.
"""

from .client import GraphQLClient, backoff_delay, is_throttled
from .errors import (
    DestinationUnavailable,
    DownloadFailed,
    LocationUnavailable,
    ProductCreateFailed,
    PublisherError,
    RateLimitExhausted,
    StagedUploadFailed,
)
from .publisher import RemotePublisher, build_product_input, build_variant_input

__all__ = [
    "GraphQLClient",
    "backoff_delay",
    "is_throttled",
    "RemotePublisher",
    "build_product_input",
    "build_variant_input",
    "PublisherError",
    "DestinationUnavailable",
    "DownloadFailed",
    "LocationUnavailable",
    "ProductCreateFailed",
    "RateLimitExhausted",
    "StagedUploadFailed",
]
