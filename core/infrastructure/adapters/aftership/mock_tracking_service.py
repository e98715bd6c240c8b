"""
Mock Tracking Service.

Returns canned tracking data keyed by tracking number.
"""
import asyncio
from typing import Dict, List, Optional
import logging

from core.application.dtos import TrackingInfo
from core.application.interfaces import ITrackingService
from core.domain.exceptions import TrackingUnavailableError


logger = logging.getLogger(__name__)


class MockTrackingService(ITrackingService):
    """
    Mock implementation of the tracking service.

    Unknown numbers come back as not found. `fail_with` raises
    TrackingUnavailableError, `limit_exceeded` reports a spent quota.
    """

    def __init__(
        self,
        shipments: Optional[Dict[str, TrackingInfo]] = None,
        fail_with: Optional[str] = None,
        limit_exceeded: bool = False,
        delay_seconds: float = 0.0,
    ):
        self._shipments: Dict[str, TrackingInfo] = dict(shipments or {})
        self.fail_with = fail_with
        self.limit_exceeded = limit_exceeded
        self.delay_seconds = delay_seconds
        self.calls: List[tuple] = []

    def add_shipment(self, info: TrackingInfo) -> None:
        self._shipments[info.tracking_number] = info

    async def get_tracking(
        self,
        tracking_number: str,
        carrier_hint: Optional[str],
        caller_id: str,
    ) -> TrackingInfo:
        self.calls.append((tracking_number, carrier_hint, caller_id))
        if self.delay_seconds:
            await asyncio.sleep(self.delay_seconds)
        if self.fail_with:
            raise TrackingUnavailableError(self.fail_with, collaborator="tracking")
        if self.limit_exceeded:
            logger.warning(f"Mock tracking quota spent for {caller_id}")
            return TrackingInfo.limit_exceeded(tracking_number)

        info = self._shipments.get(tracking_number)
        if info is None:
            return TrackingInfo.not_found(tracking_number)
        logger.info(f"Mock tracking {tracking_number}: {info.delivery_status}")
        return info
