"""
Tracking Enrichment Adapter.

Best-effort carrier tracking lookup. Callers treat every raised error
as degraded enrichment and carry on without a TrackingSnapshot.
"""
import asyncio
import logging
from typing import Optional

from core.application.dtos import TrackingInfo
from core.application.interfaces import ITrackingService
from core.domain.entities import DeliveryPrediction, TrackingCheckpoint, TrackingSnapshot
from core.domain.exceptions import TrackingUnavailableError, UsageLimitExceededError


logger = logging.getLogger(__name__)

MAX_CHECKPOINTS = 5


class TrackingEnrichmentAdapter:
    """Fetch and normalise tracking data for an order's tracking number."""

    def __init__(self, service: ITrackingService, timeout_seconds: float = 10.0):
        self._service = service
        self._timeout = timeout_seconds

    async def fetch(
        self,
        tracking_number: str,
        carrier_hint: Optional[str],
        caller_id: str,
    ) -> Optional[TrackingSnapshot]:
        """
        Look up a tracking number.

        Returns:
            TrackingSnapshot, or None when the carrier does not know the number

        Raises:
            UsageLimitExceededError: The caller's tracking quota is spent
            TrackingUnavailableError: Transport or timeout failure
        """
        try:
            info = await asyncio.wait_for(
                self._service.get_tracking(tracking_number, carrier_hint, caller_id),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError as e:
            raise TrackingUnavailableError(
                f"Tracking service timed out after {self._timeout}s",
                collaborator="tracking",
            ) from e
        except TrackingUnavailableError:
            raise
        except Exception as e:
            raise TrackingUnavailableError(str(e), collaborator="tracking") from e

        if info.usage_limit_exceeded:
            raise UsageLimitExceededError(
                f"Tracking usage limit exceeded for user {caller_id}",
                collaborator="tracking",
            )
        if not info.found:
            logger.info(f"Tracking number {tracking_number} not found")
            return None

        return to_snapshot(info, tracking_number)


def to_snapshot(info: TrackingInfo, tracking_number: str) -> TrackingSnapshot:
    """Convert a TrackingInfo into the domain snapshot (latest 5 checkpoints)."""
    prediction = None
    if info.estimated_delivery is not None:
        prediction = DeliveryPrediction(
            estimated_date=info.estimated_delivery.estimated_date,
            confidence=info.estimated_delivery.confidence,
            source=info.estimated_delivery.source,
        )

    checkpoints = tuple(
        TrackingCheckpoint(
            checkpoint_time=cp.checkpoint_time,
            status=cp.status,
            message=cp.message,
            location=cp.location,
        )
        for cp in info.checkpoints[-MAX_CHECKPOINTS:]
    )

    return TrackingSnapshot(
        tracking_number=info.tracking_number or tracking_number,
        carrier=info.carrier,
        delivery_status=info.delivery_status or "Unknown",
        delivered=info.delivered,
        prediction=prediction,
        checkpoints=checkpoints,
    )
