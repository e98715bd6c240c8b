"""AfterShip tracking JSON to TrackingInfo mapper."""

import re
from typing import Any, Dict, List, Optional, Tuple

from core.application.dtos import CheckpointDTO, DeliveryEstimateDTO, TrackingInfo


MAX_CHECKPOINTS = 5

# The nine AfterShip delivery status tags
STATUS_LABELS: Dict[str, str] = {
    "Pending": "Label Created",
    "InfoReceived": "Information Received",
    "InTransit": "In Transit",
    "OutForDelivery": "Out for Delivery",
    "AttemptFail": "Delivery Attempted",
    "Delivered": "Delivered",
    "AvailableForPickup": "Available for Pickup",
    "Exception": "Delivery Exception",
    "Expired": "Tracking Expired",
}

CONFIDENCE_LABELS: Dict[str, str] = {
    "10001": "High Confidence",
    "10002": "Medium Confidence",
    "10003": "Low Confidence",
}

CARRIER_SLUGS: Dict[str, str] = {
    "ups": "ups",
    "usps": "usps",
    "united states postal service": "usps",
    "fedex": "fedex",
    "fed ex": "fedex",
    "dhl": "dhl",
    "dhl express": "dhl",
}

# (pattern, slug) tried in order against the tracking number
TRACKING_NUMBER_FORMATS: Tuple[Tuple[re.Pattern, str], ...] = (
    (re.compile(r"^1Z[0-9A-Z]{16}$"), "ups"),
    (re.compile(r"^[0-9]{12}$"), "fedex"),
    (re.compile(r"^9[0-9]{21,22}$"), "usps"),
    (re.compile(r"^[0-9]{20,26}$"), "usps"),
    (re.compile(r"^[0-9]{15}$"), "dhl"),
)


class AfterShipTrackingMapper:
    """Mapper for converting an AfterShip `tracking` object to TrackingInfo."""

    @staticmethod
    def to_tracking_info(tracking: Dict[str, Any]) -> TrackingInfo:
        tag = tracking.get("tag") or ""
        checkpoints = tracking.get("checkpoints") or []

        return TrackingInfo(
            found=True,
            tracking_number=tracking.get("tracking_number"),
            carrier=(tracking.get("slug") or "").upper() or None,
            delivery_status=AfterShipTrackingMapper.status_label(tag),
            delivered=tag == "Delivered",
            estimated_delivery=AfterShipTrackingMapper.delivery_estimate(tracking),
            checkpoints=[
                AfterShipTrackingMapper._checkpoint(cp) for cp in checkpoints[-MAX_CHECKPOINTS:]
            ],
        )

    @staticmethod
    def status_label(tag: str) -> str:
        return STATUS_LABELS.get(tag, tag or "Unknown")

    @staticmethod
    def delivery_estimate(tracking: Dict[str, Any]) -> Optional[DeliveryEstimateDTO]:
        """
        Pick the delivery date: actual delivery date, then AfterShip's
        estimate, then the carrier's expected date.
        """
        if tracking.get("tag") == "Delivered" and tracking.get("shipment_delivery_date"):
            return DeliveryEstimateDTO(
                estimated_date=tracking["shipment_delivery_date"],
                confidence="Delivered",
                source="actual_delivery",
            )

        edd = tracking.get("aftership_estimated_delivery_date") or {}
        if edd.get("estimated_delivery_date"):
            return DeliveryEstimateDTO(
                estimated_date=edd["estimated_delivery_date"],
                confidence=CONFIDENCE_LABELS.get(str(edd.get("confidence_code")), "Estimated"),
                source="ai_prediction",
            )

        if tracking.get("expected_delivery"):
            return DeliveryEstimateDTO(
                estimated_date=tracking["expected_delivery"],
                confidence="Expected",
                source="carrier_estimate",
            )
        return None

    @staticmethod
    def _checkpoint(checkpoint: Dict[str, Any]) -> CheckpointDTO:
        location = checkpoint.get("location")
        if not location:
            parts = [checkpoint.get("city"), checkpoint.get("state"), checkpoint.get("country_name")]
            location = ", ".join(p for p in parts if p) or None
        return CheckpointDTO(
            checkpoint_time=checkpoint.get("checkpoint_time"),
            status=STATUS_LABELS.get(checkpoint.get("tag") or "", checkpoint.get("tag")),
            message=checkpoint.get("message"),
            location=location,
        )


def carrier_slug(carrier_hint: Optional[str], tracking_number: str = "") -> Optional[str]:
    """AfterShip slug for a carrier name, or a guess from the number format."""
    if carrier_hint:
        slug = CARRIER_SLUGS.get(carrier_hint.strip().lower())
        if slug:
            return slug

    number = tracking_number.strip().upper()
    for pattern, slug in TRACKING_NUMBER_FORMATS:
        if pattern.match(number):
            return slug
    return None


def fallback_slugs(preferred: Optional[str]) -> List[str]:
    """Common carriers to try when reading back an existing tracking, best guess first."""
    slugs = ["usps", "ups", "fedex", "dhl"]
    if preferred:
        slugs = [preferred] + [s for s in slugs if s != preferred]
    return slugs
