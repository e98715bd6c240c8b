"""Errors raised by the raw API clients."""

from typing import Optional


class SDKError(Exception):
    """Base class for client errors."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class WooCommerceAPIError(SDKError):
    """WooCommerce REST API returned an error or could not be reached."""


class AfterShipAPIError(SDKError):
    """AfterShip REST API returned an error or could not be reached."""


class AfterShipNotFoundError(AfterShipAPIError):
    """Tracking does not exist for the given carrier slug."""


class AfterShipTrackingExistsError(AfterShipAPIError):
    """Create call rejected because the tracking is already registered."""


class AfterShipRateLimitError(AfterShipAPIError):
    """Account quota or rate limit reached (HTTP 429)."""


__all__ = [
    "SDKError",
    "WooCommerceAPIError",
    "AfterShipAPIError",
    "AfterShipNotFoundError",
    "AfterShipTrackingExistsError",
    "AfterShipRateLimitError",
]
