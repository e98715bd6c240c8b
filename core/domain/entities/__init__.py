"""Domain entities."""

from .agent_rule import AgentMetrics, AgentRule
from .approval_item import ApprovalQueueItem
from .execution_record import ExecutionRecord
from .order import (
    DeliveryPrediction,
    EnrichedOrder,
    OrderLineItem,
    OrderLookupResult,
    OrderRecord,
    TrackingCheckpoint,
    TrackingSnapshot,
)
from .step_log import StepLog, to_jsonable

__all__ = [
    "AgentMetrics",
    "AgentRule",
    "ApprovalQueueItem",
    "DeliveryPrediction",
    "EnrichedOrder",
    "ExecutionRecord",
    "OrderLineItem",
    "OrderLookupResult",
    "OrderRecord",
    "StepLog",
    "TrackingCheckpoint",
    "TrackingSnapshot",
    "to_jsonable",
]
