"""
SQLAlchemy ORM Models.

Maps agent audit, approval, configuration and metrics records to tables.
"""
from sqlalchemy import (
    Column, String, DateTime, Integer, Text, Boolean, Index, func, UniqueConstraint, JSON
)
from sqlalchemy.orm import declarative_base
import uuid


Base = declarative_base()


# =============================================================================
# EXECUTION LOG MODEL (append-only audit trail)
# =============================================================================

class AgentExecutionLogModel(Base):
    """
    One row per terminal pipeline step.

    Insert-only; (execution_id, step_order) is unique so concurrent runs
    never collide and a replayed append is rejected.
    """

    __tablename__ = "agent_execution_logs"

    # Primary key - auto-increment for global ordering
    id = Column(Integer, primary_key=True, autoincrement=True)

    # Run identity
    execution_id = Column(String(36), nullable=False, index=True)
    user_id = Column(String(255), nullable=False, index=True)
    agent_type = Column(String(50), nullable=False)
    message_id = Column(String(255), nullable=False)

    # Step
    step_name = Column(String(100), nullable=False)
    step_order = Column(Integer, nullable=False)
    status = Column(String(20), nullable=False)
    started_at = Column(DateTime(timezone=True), nullable=False)
    ended_at = Column(DateTime(timezone=True), nullable=False)
    duration_ms = Column(Integer, nullable=False, default=0)

    # Snapshots
    input_data = Column(JSON, nullable=True)
    output_data = Column(JSON, nullable=True)
    error_details = Column(Text, nullable=True)
    step_metadata = Column("metadata", JSON, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("execution_id", "step_order", name="uq_agent_execution_logs_step"),
        Index("ix_agent_execution_logs_user_agent", "user_id", "agent_type"),
    )

    def __repr__(self):
        return f"<AgentExecutionLogModel(execution={self.execution_id}, step={self.step_order}:{self.step_name}, status={self.status})>"


# =============================================================================
# EXECUTION MODEL (one summary row per run)
# =============================================================================

class AgentExecutionModel(Base):
    """Run summary; unique per (user_id, message_id) for dedup-on-replay."""

    __tablename__ = "agent_executions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    execution_id = Column(String(36), unique=True, nullable=False, index=True)
    user_id = Column(String(255), nullable=False)
    message_id = Column(String(255), nullable=False)
    agent_type = Column(String(50), nullable=False)

    outcome = Column(String(20), nullable=False, index=True)
    reply = Column(Text, nullable=True)
    escalation_reason = Column(Text, nullable=True)
    action = Column(String(20), nullable=True)
    approval_item_id = Column(String(36), nullable=True)

    started_at = Column(DateTime(timezone=True), nullable=False)
    finished_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "message_id", name="uq_agent_executions_message"),
    )

    def __repr__(self):
        return f"<AgentExecutionModel(execution={self.execution_id}, outcome={self.outcome})>"


# =============================================================================
# APPROVAL QUEUE MODEL
# =============================================================================

class ApprovalQueueModel(Base):
    """Replies waiting for human review."""

    __tablename__ = "automation_approval_queue"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(255), nullable=False)
    message_id = Column(String(255), nullable=False)
    agent_type = Column(String(50), nullable=False)
    execution_id = Column(String(36), nullable=False, index=True)

    # Customer context
    customer_email = Column(String(255), nullable=False)
    subject = Column(Text, nullable=True)
    body = Column(Text, nullable=True)

    # Decision
    proposed_response = Column(Text, nullable=False)
    confidence = Column(Integer, nullable=False)
    classification = Column(String(50), nullable=False, default="order_status")
    audit_trail = Column(JSON, nullable=False)
    item_metadata = Column("metadata", JSON, nullable=True)

    # Review
    status = Column(String(20), nullable=False, default="pending")
    reviewed_by = Column(String(255), nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    rejection_reason = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        Index("ix_approval_queue_user_status", "user_id", "status"),
    )

    def __repr__(self):
        return f"<ApprovalQueueModel(id={self.id}, status={self.status})>"


# =============================================================================
# AGENT RULE MODEL
# =============================================================================

class AgentRuleModel(Base):
    """Per-user agent configuration (read-only to the pipeline)."""

    __tablename__ = "agent_rules"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(255), nullable=False)
    agent_type = Column(String(50), nullable=False)
    name = Column(String(255), nullable=True)
    is_enabled = Column(Boolean, nullable=False, default=True)
    requires_approval = Column(Boolean, nullable=False, default=True)

    __table_args__ = (
        UniqueConstraint("user_id", "agent_type", name="uq_agent_rules_user_agent"),
    )


# =============================================================================
# AGENT METRICS MODEL
# =============================================================================

class AgentMetricsModel(Base):
    """Per-user, per-agent counters; updated with atomic increments."""

    __tablename__ = "agent_metrics"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(255), nullable=False)
    agent_type = Column(String(50), nullable=False)
    attempts = Column(Integer, nullable=False, default=0)
    successes = Column(Integer, nullable=False, default=0)
    failures = Column(Integer, nullable=False, default=0)
    last_activity_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        UniqueConstraint("user_id", "agent_type", name="uq_agent_metrics_user_agent"),
    )
