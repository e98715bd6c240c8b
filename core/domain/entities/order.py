"""
Order and tracking entities.

CRITICAL: This file must contain ZERO imports from:
- sqlalchemy
- pydantic
- aiohttp
"""
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from ..enums import LookupSource
from ..value_objects import OrderNumber


@dataclass(frozen=True)
class OrderLookupResult:
    """
    Resolved order identity plus provenance.

    `found=False` is a valid terminal value: with source CUSTOMER_LOOKUP it
    tells the orchestrator to fall back to the sender's order history.
    """
    found: bool
    source: LookupSource
    order_number: Optional[str] = None
    matched_pattern: Optional[str] = None

    @classmethod
    def extracted(cls, order_number: str, matched_pattern: str) -> "OrderLookupResult":
        return cls(
            found=True,
            source=LookupSource.EXTRACTED,
            order_number=str(OrderNumber(order_number)),
            matched_pattern=matched_pattern,
        )

    @classmethod
    def needs_customer_lookup(cls) -> "OrderLookupResult":
        return cls(found=False, source=LookupSource.CUSTOMER_LOOKUP)


@dataclass(frozen=True)
class OrderLineItem:
    """Individual line item within an order."""
    name: str
    quantity: int = 1
    price: Optional[str] = None


@dataclass(frozen=True)
class OrderRecord:
    """Canonical order as returned by the order-management system."""
    order_number: str
    status: str
    order_date: Optional[datetime] = None
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    line_items: Tuple[OrderLineItem, ...] = ()
    tracking_number: Optional[str] = None
    carrier: Optional[str] = None
    shipping_method: Optional[str] = None
    store_order_id: Optional[str] = None

    @property
    def has_tracking(self) -> bool:
        return bool(self.tracking_number and self.tracking_number.strip())


@dataclass(frozen=True)
class TrackingCheckpoint:
    """One carrier scan event."""
    checkpoint_time: Optional[str]
    status: Optional[str]
    message: Optional[str] = None
    location: Optional[str] = None


@dataclass(frozen=True)
class DeliveryPrediction:
    """
    Delivery date as reported by the tracking service.

    source is one of: actual_delivery, ai_prediction, carrier_estimate.
    """
    estimated_date: str
    confidence: str
    source: str


@dataclass(frozen=True)
class TrackingSnapshot:
    """Carrier tracking data obtained for an order (optional enrichment)."""
    tracking_number: str
    carrier: Optional[str]
    delivery_status: str
    delivered: bool = False
    prediction: Optional[DeliveryPrediction] = None
    checkpoints: Tuple[TrackingCheckpoint, ...] = ()

    @property
    def latest_checkpoint(self) -> Optional[TrackingCheckpoint]:
        return self.checkpoints[-1] if self.checkpoints else None


@dataclass(frozen=True)
class EnrichedOrder:
    """Order plus whatever tracking data could be obtained."""
    order: OrderRecord
    tracking: Optional[TrackingSnapshot] = None

    @property
    def order_number(self) -> str:
        return self.order.order_number

    def with_tracking(self, tracking: Optional[TrackingSnapshot]) -> "EnrichedOrder":
        return replace(self, tracking=tracking)

    def integrations_used(self) -> list[str]:
        used = ["order_management"]
        if self.tracking is not None:
            used.append("tracking")
        return used

    def display_fields(self) -> Dict[str, Any]:
        """Flat view for the approval queue UI; absent data stays None."""
        return {
            "order_number": self.order.order_number,
            "order_status": self.order.status,
            "tracking_number": self.order.tracking_number,
            "carrier": self.tracking.carrier if self.tracking else self.order.carrier,
            "delivery_status": self.tracking.delivery_status if self.tracking else None,
            "estimated_delivery": (
                self.tracking.prediction.estimated_date
                if self.tracking and self.tracking.prediction
                else None
            ),
        }
