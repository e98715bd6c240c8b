"""Application DTOs."""

from .escalation_dto import EscalationAnalysis
from .sentiment_dto import SentimentResult
from .tracking_dto import CheckpointDTO, DeliveryEstimateDTO, TrackingInfo

__all__ = [
    "CheckpointDTO",
    "DeliveryEstimateDTO",
    "EscalationAnalysis",
    "SentimentResult",
    "TrackingInfo",
]
