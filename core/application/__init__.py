"""Application layer - services, interfaces, and DTOs."""

from .dtos import EscalationAnalysis, SentimentResult, TrackingInfo
from .interfaces import (
    ILanguageModel,
    IOrderManagementClient,
    IReplySender,
    ISentimentService,
    ITrackingService,
)
from .services import (
    ApprovalGate,
    EscalationAnalyzer,
    MetricsRecorder,
    OrderEnrichmentAdapter,
    OrderIdentityResolver,
    ResponseComposer,
    TrackingEnrichmentAdapter,
)

__all__ = [
    # DTOs
    "EscalationAnalysis",
    "SentimentResult",
    "TrackingInfo",
    # Interfaces
    "ILanguageModel",
    "IOrderManagementClient",
    "IReplySender",
    "ISentimentService",
    "ITrackingService",
    # Services
    "ApprovalGate",
    "EscalationAnalyzer",
    "MetricsRecorder",
    "OrderEnrichmentAdapter",
    "OrderIdentityResolver",
    "ResponseComposer",
    "TrackingEnrichmentAdapter",
]
