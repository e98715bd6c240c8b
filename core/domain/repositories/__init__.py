"""Repository interfaces."""

from .audit_repositories import (
    AgentRuleRepository,
    ApprovalQueueRepository,
    AuditLogRepository,
    ExecutionRepository,
    MetricsRepository,
)

__all__ = [
    "AgentRuleRepository",
    "ApprovalQueueRepository",
    "AuditLogRepository",
    "ExecutionRepository",
    "MetricsRepository",
]
