"""Application services."""
from .approval_gate import ApprovalGate, GateDecision
from .escalation_analyzer import EscalationAnalyzer
from .metrics_recorder import MetricsRecorder
from .order_enrichment import OrderEnrichmentAdapter
from .order_identity_resolver import EXTRACTION_PATTERNS, OrderIdentityResolver
from .response_composer import ComposedReply, ResponseComposer, build_prompt, fallback_reply
from .tracking_enrichment import TrackingEnrichmentAdapter

__all__ = [
    "ApprovalGate",
    "ComposedReply",
    "EXTRACTION_PATTERNS",
    "EscalationAnalyzer",
    "GateDecision",
    "MetricsRecorder",
    "OrderEnrichmentAdapter",
    "OrderIdentityResolver",
    "ResponseComposer",
    "TrackingEnrichmentAdapter",
    "build_prompt",
    "fallback_reply",
]
