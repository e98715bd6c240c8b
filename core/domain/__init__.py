"""Domain layer - pure domain models and interfaces."""

from .entities import (
    AgentMetrics,
    AgentRule,
    ApprovalQueueItem,
    EnrichedOrder,
    ExecutionRecord,
    OrderLookupResult,
    OrderRecord,
    StepLog,
    TrackingSnapshot,
)
from .enums import ApprovalStatus, ExecutionOutcome, GateAction, LookupSource, StepStatus
from .value_objects import ExecutionID, OrderNumber

__all__ = [
    "AgentMetrics",
    "AgentRule",
    "ApprovalQueueItem",
    "ApprovalStatus",
    "EnrichedOrder",
    "ExecutionID",
    "ExecutionOutcome",
    "ExecutionRecord",
    "GateAction",
    "LookupSource",
    "OrderLookupResult",
    "OrderNumber",
    "OrderRecord",
    "StepLog",
    "StepStatus",
    "TrackingSnapshot",
]
