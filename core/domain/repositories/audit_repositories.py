"""Repository interfaces for the agent's durable stores."""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..entities import (
    AgentMetrics,
    AgentRule,
    ApprovalQueueItem,
    ExecutionRecord,
    StepLog,
)


class AuditLogRepository(ABC):
    """Append-only store of step logs, keyed by (execution_id, step_order)."""

    @abstractmethod
    async def append(
        self,
        execution_id: str,
        user_id: str,
        agent_type: str,
        message_id: str,
        step: StepLog,
    ) -> None:
        """Insert one step log.

        Args:
            execution_id: Run the step belongs to
            user_id: Owning user
            agent_type: Agent that produced the step
            message_id: Inbound message being processed
            step: Terminal step log

        Raises:
            DuplicateStepLogError: If (execution_id, step_order) is already stored
            PersistenceError: If the insert fails
        """
        pass

    @abstractmethod
    async def list_for_execution(self, execution_id: str) -> List[StepLog]:
        """Return a run's step logs ordered by step_order."""
        pass


class ExecutionRepository(ABC):
    """One summary record per run, unique per (user_id, message_id)."""

    @abstractmethod
    async def save(self, record: ExecutionRecord) -> None:
        """Persist a run record.

        Raises:
            DuplicateExecutionError: If the message already has a record
        """
        pass

    @abstractmethod
    async def find_by_message(self, user_id: str, message_id: str) -> Optional[ExecutionRecord]:
        """Return the record for a message, if one was persisted."""
        pass


class ApprovalQueueRepository(ABC):
    """Store of replies waiting for human review."""

    @abstractmethod
    async def create(self, item: ApprovalQueueItem) -> ApprovalQueueItem:
        pass

    @abstractmethod
    async def get(self, item_id: str) -> Optional[ApprovalQueueItem]:
        pass

    @abstractmethod
    async def update(self, item_id: str, patch: dict) -> Optional[ApprovalQueueItem]:
        """Apply a review patch (status/reviewer fields only)."""
        pass

    @abstractmethod
    async def list_pending(self, user_id: str) -> List[ApprovalQueueItem]:
        pass


class AgentRuleRepository(ABC):
    """Read access to per-user agent configuration."""

    @abstractmethod
    async def get_rule(self, user_id: str, agent_type: str) -> Optional[AgentRule]:
        pass


class MetricsRepository(ABC):
    """Durable per-user, per-agent counters."""

    @abstractmethod
    async def increment(self, user_id: str, agent_type: str, field: str, amount: int = 1) -> None:
        """Atomically add `amount` to one counter (no read-modify-write)."""
        pass

    @abstractmethod
    async def get(self, user_id: str, agent_type: str) -> Optional[AgentMetrics]:
        pass
