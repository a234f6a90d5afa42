"""
Publisher Errors
Failures while writing to the destination platform. `message` is plain
language and safe to store on a job record.
"""

from typing import Optional


class PublisherError(Exception):
    """Base exception for destination-platform write failures."""

    default_message = "The product could not be created in your store. Please try again."

    def __init__(self, message: Optional[str] = None, details: dict = None):
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)


class RateLimitExhausted(PublisherError):
    default_message = "Your store is busy right now. Please try importing this product again later."


class DestinationUnavailable(PublisherError):
    default_message = "Could not reach your store. Please try again later."


class DownloadFailed(PublisherError):
    default_message = "An image could not be downloaded from the source store."


class StagedUploadFailed(PublisherError):
    default_message = "An image could not be uploaded to your store."


class ProductCreateFailed(PublisherError):
    pass


class LocationUnavailable(PublisherError):
    default_message = "Your store has no inventory location to stock imported products."
