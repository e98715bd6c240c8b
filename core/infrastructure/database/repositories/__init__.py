"""SQLAlchemy repository implementations."""
from .sqlalchemy_agent_repository import SQLAlchemyAgentRuleRepository, SQLAlchemyMetricsRepository
from .sqlalchemy_approval_queue_repository import SQLAlchemyApprovalQueueRepository
from .sqlalchemy_audit_repository import SQLAlchemyAuditLogRepository, SQLAlchemyExecutionRepository

__all__ = [
    "SQLAlchemyAgentRuleRepository",
    "SQLAlchemyApprovalQueueRepository",
    "SQLAlchemyAuditLogRepository",
    "SQLAlchemyExecutionRepository",
    "SQLAlchemyMetricsRepository",
]
