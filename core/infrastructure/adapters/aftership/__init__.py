"""AfterShip infrastructure adapter."""

from .mapper import AfterShipTrackingMapper
from .mock_tracking_service import MockTrackingService
from .tracking_service import AfterShipTrackingService

__all__ = ["AfterShipTrackingMapper", "AfterShipTrackingService", "MockTrackingService"]
