"""DTOs exchanged with the carrier tracking service."""

from typing import List, Optional

from pydantic import BaseModel, Field


class CheckpointDTO(BaseModel):
    """One carrier scan event."""

    checkpoint_time: Optional[str] = None
    status: Optional[str] = None
    message: Optional[str] = None
    location: Optional[str] = None

    model_config = {"frozen": True}


class DeliveryEstimateDTO(BaseModel):
    """Delivery date reported by the tracking service."""

    estimated_date: str = Field(..., description="ISO date or datetime")
    confidence: str = Field(..., description="Human readable confidence")
    source: str = Field(..., description="actual_delivery | ai_prediction | carrier_estimate")

    model_config = {"frozen": True}


class TrackingInfo(BaseModel):
    """
    Result of a tracking lookup.

    `found=False` with `usage_limit_exceeded=False` means the carrier does
    not know the number. A quota refusal is reported through the flag
    rather than an exception so callers can tell it apart from outages.
    """

    found: bool = Field(default=False)
    usage_limit_exceeded: bool = Field(default=False)
    tracking_number: Optional[str] = None
    carrier: Optional[str] = None
    delivery_status: Optional[str] = None
    delivered: bool = False
    estimated_delivery: Optional[DeliveryEstimateDTO] = None
    checkpoints: List[CheckpointDTO] = Field(default_factory=list)

    model_config = {"frozen": True}

    @classmethod
    def not_found(cls, tracking_number: Optional[str] = None) -> "TrackingInfo":
        return cls(found=False, tracking_number=tracking_number)

    @classmethod
    def limit_exceeded(cls, tracking_number: Optional[str] = None) -> "TrackingInfo":
        return cls(found=False, usage_limit_exceeded=True, tracking_number=tracking_number)
