"""
AfterShip tracking adapter.

Implements ITrackingService with the create-then-read flow: register the
number (carrier auto-detected), and when it is already registered read it
back trying the hinted carrier first and then the common carriers.
"""
from typing import Optional
import logging

from core.application.dtos import TrackingInfo
from core.application.interfaces import ITrackingService
from core.domain.exceptions import TrackingUnavailableError
from core.infrastructure.adapters.aftership.mapper import (
    AfterShipTrackingMapper,
    carrier_slug,
    fallback_slugs,
)
from orderdesk_sdk.aftership import AfterShipClient
from orderdesk_sdk.errors import AfterShipAPIError, AfterShipRateLimitError


logger = logging.getLogger(__name__)


class AfterShipTrackingService(ITrackingService):
    """Carrier tracking through AfterShip."""

    def __init__(self, client: AfterShipClient):
        self._client = client

    async def get_tracking(
        self,
        tracking_number: str,
        carrier_hint: Optional[str],
        caller_id: str,
    ) -> TrackingInfo:
        # Only an explicit hint is sent on create; the number-format guess just orders the read-back
        slug = carrier_slug(carrier_hint)
        guess = slug or carrier_slug(None, tracking_number)
        logger.info(
            f"Tracking lookup {tracking_number} (carrier hint: {carrier_hint}, slug: {slug}) for {caller_id}"
        )

        try:
            tracking = await self._client.get_or_create_tracking(
                tracking_number,
                slug=slug,
                fallback_slugs=fallback_slugs(guess),
            )
        except AfterShipRateLimitError:
            logger.warning(f"AfterShip usage limit reached for {caller_id}")
            return TrackingInfo.limit_exceeded(tracking_number)
        except AfterShipAPIError as e:
            raise TrackingUnavailableError(str(e), collaborator="aftership") from e

        if tracking is None:
            return TrackingInfo.not_found(tracking_number)
        return AfterShipTrackingMapper.to_tracking_info(tracking)
