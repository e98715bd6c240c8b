"""
In-memory store implementations.

Dictionary-backed versions of every agent store for testing and demos.
They enforce the same keys as the SQL tables so behaviour matches.
"""
import asyncio
import copy
from typing import Dict, List, Optional, Tuple
import logging

from core.domain.entities import (
    AgentMetrics,
    AgentRule,
    ApprovalQueueItem,
    ExecutionRecord,
    StepLog,
)
from core.domain.exceptions import DuplicateExecutionError, DuplicateStepLogError, PersistenceError
from core.domain.repositories import (
    AgentRuleRepository,
    ApprovalQueueRepository,
    AuditLogRepository,
    ExecutionRepository,
    MetricsRepository,
)
from orderdesk_sdk.utils.datetime import utc_now


logger = logging.getLogger(__name__)


class InMemoryAuditLogRepository(AuditLogRepository):
    """Insert-only step logs keyed by (execution_id, step_order)."""

    def __init__(self):
        self._logs: Dict[Tuple[str, int], StepLog] = {}
        self.owners: Dict[str, Tuple[str, str, str]] = {}

    async def append(
        self,
        execution_id: str,
        user_id: str,
        agent_type: str,
        message_id: str,
        step: StepLog,
    ) -> None:
        key = (str(execution_id), step.step_order)
        if key in self._logs:
            raise DuplicateStepLogError(f"Step log {key} already exists")
        self._logs[key] = step
        self.owners.setdefault(str(execution_id), (user_id, agent_type, message_id))

    async def list_for_execution(self, execution_id: str) -> List[StepLog]:
        execution_id = str(execution_id)
        return [
            step
            for (eid, _), step in sorted(self._logs.items(), key=lambda kv: kv[0])
            if eid == execution_id
        ]

    def count(self) -> int:
        return len(self._logs)


class InMemoryExecutionRepository(ExecutionRepository):
    """Run records keyed by (user_id, message_id)."""

    def __init__(self):
        self._records: Dict[Tuple[str, str], ExecutionRecord] = {}

    async def save(self, record: ExecutionRecord) -> None:
        key = (record.user_id, record.message_id)
        if key in self._records:
            raise DuplicateExecutionError(
                f"Message {record.message_id} already has an execution record"
            )
        self._records[key] = record
        logger.info(f"Execution {record.execution_id} saved ({record.outcome.value})")

    async def find_by_message(self, user_id: str, message_id: str) -> Optional[ExecutionRecord]:
        return self._records.get((user_id, message_id))

    def all(self) -> List[ExecutionRecord]:
        return list(self._records.values())


class InMemoryApprovalQueueRepository(ApprovalQueueRepository):
    """Approval items keyed by id; copies are returned so callers cannot mutate state."""

    def __init__(self):
        self._items: Dict[str, ApprovalQueueItem] = {}

    async def create(self, item: ApprovalQueueItem) -> ApprovalQueueItem:
        if item.id in self._items:
            raise PersistenceError(f"Approval item {item.id} already exists")
        stored = copy.deepcopy(item)
        if stored.created_at is None:
            stored.created_at = utc_now()
        self._items[stored.id] = stored
        logger.info(f"Approval item {stored.id} queued for {stored.customer_email}")
        return copy.deepcopy(stored)

    async def get(self, item_id: str) -> Optional[ApprovalQueueItem]:
        item = self._items.get(item_id)
        return copy.deepcopy(item) if item else None

    async def update(self, item_id: str, patch: dict) -> Optional[ApprovalQueueItem]:
        item = self._items.get(item_id)
        if item is None:
            return None
        item.apply_review(patch)
        return copy.deepcopy(item)

    async def list_pending(self, user_id: str) -> List[ApprovalQueueItem]:
        return [
            copy.deepcopy(item)
            for item in self._items.values()
            if item.user_id == user_id and item.is_pending
        ]


class InMemoryAgentRuleRepository(AgentRuleRepository):
    """Agent rules keyed by (user_id, agent_type)."""

    def __init__(self, rules: Optional[List[AgentRule]] = None):
        self._rules: Dict[Tuple[str, str], AgentRule] = {}
        for rule in rules or []:
            self.put(rule)

    def put(self, rule: AgentRule) -> None:
        self._rules[(rule.user_id, rule.agent_type)] = rule

    async def get_rule(self, user_id: str, agent_type: str) -> Optional[AgentRule]:
        return self._rules.get((user_id, agent_type))


class InMemoryMetricsRepository(MetricsRepository):
    """Counters guarded by a lock so concurrent increments are not lost."""

    def __init__(self):
        self._metrics: Dict[Tuple[str, str], AgentMetrics] = {}
        self._lock = asyncio.Lock()

    async def increment(self, user_id: str, agent_type: str, field: str, amount: int = 1) -> None:
        if field not in AgentMetrics.COUNTER_FIELDS:
            raise ValueError(f"Unknown metrics counter: {field}")
        async with self._lock:
            metrics = self._metrics.setdefault(
                (user_id, agent_type), AgentMetrics(user_id=user_id, agent_type=agent_type)
            )
            setattr(metrics, field, getattr(metrics, field) + amount)
            metrics.last_activity_at = utc_now()

    async def get(self, user_id: str, agent_type: str) -> Optional[AgentMetrics]:
        metrics = self._metrics.get((user_id, agent_type))
        return copy.copy(metrics) if metrics else None
