"""In-memory persistence adapters for tests and demos."""
from .in_memory_stores import (
    InMemoryAgentRuleRepository,
    InMemoryApprovalQueueRepository,
    InMemoryAuditLogRepository,
    InMemoryExecutionRepository,
    InMemoryMetricsRepository,
)

__all__ = [
    "InMemoryAgentRuleRepository",
    "InMemoryApprovalQueueRepository",
    "InMemoryAuditLogRepository",
    "InMemoryExecutionRepository",
    "InMemoryMetricsRepository",
]
