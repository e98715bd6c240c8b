"""
Approval Gate.

Decides whether a composed reply goes straight to the customer or into
the human approval queue. Only an enabled rule with requires_approval
set to False allows auto-send; a missing or disabled rule queues.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from core.domain.entities import (
    AgentRule,
    ApprovalQueueItem,
    EnrichedOrder,
    StepLog,
    TrackingSnapshot,
)
from core.domain.enums import ApprovalStatus, GateAction
from core.domain.exceptions import PersistenceError
from core.domain.repositories import AgentRuleRepository, ApprovalQueueRepository
from orderdesk_sdk.utils.datetime import utc_now


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GateDecision:
    """Outcome of the approval gate."""
    action: GateAction
    requires_approval: bool
    rule_found: bool
    item: Optional[ApprovalQueueItem] = None

    @property
    def auto_send(self) -> bool:
        return self.action is GateAction.AUTO_SEND


class ApprovalGate:
    """Route a reply to auto-send or the approval queue."""

    def __init__(
        self,
        rules: AgentRuleRepository,
        queue: ApprovalQueueRepository,
        queued_confidence: int = 95,
        timeout_seconds: float = 5.0,
    ):
        self._rules = rules
        self._queue = queue
        self._queued_confidence = queued_confidence
        self._timeout = timeout_seconds

    async def decide(
        self,
        user_id: str,
        agent_type: str,
        reply: str,
        context,
        order: EnrichedOrder,
        tracking: Optional[TrackingSnapshot] = None,
    ) -> GateDecision:
        """
        Decide what to do with a reply.

        Args:
            user_id: Owning user
            agent_type: Agent type whose rule applies
            reply: Composed reply text
            context: Execution context; its steps so far are copied into the item
            order: Enriched order, for the reviewer's display fields
            tracking: Tracking snapshot, if one was obtained

        Returns:
            GateDecision; `item` is set when the reply was queued

        Raises:
            PersistenceError: If the rule or queue store fails or times out
        """
        rule: Optional[AgentRule] = await self._bounded(
            self._rules.get_rule(user_id, agent_type), "agent rule lookup"
        )

        if rule is not None and rule.allows_auto_send:
            logger.info(f"Auto-send enabled for {user_id}/{agent_type}")
            return GateDecision(
                action=GateAction.AUTO_SEND,
                requires_approval=False,
                rule_found=True,
            )

        if rule is None:
            logger.info(f"No {agent_type} rule for user {user_id}, approval required")
        elif not rule.is_enabled:
            logger.info(f"{agent_type} rule disabled for user {user_id}, queueing reply")

        item = ApprovalQueueItem(
            user_id=user_id,
            message_id=context.message_id,
            agent_type=agent_type,
            execution_id=str(context.execution_id),
            customer_email=context.from_address,
            subject=context.subject,
            body=context.body,
            proposed_response=reply,
            confidence=self._queued_confidence,
            audit_trail=self._audit_snapshot(context.steps),
            metadata=self._display_metadata(order, tracking),
            created_at=utc_now(),
        )
        created = await self._bounded(self._queue.create(item), "approval queue insert")
        logger.info(f"Queued reply {created.id} for review (execution {item.execution_id})")

        return GateDecision(
            action=GateAction.QUEUE,
            requires_approval=True,
            rule_found=rule is not None,
            item=created,
        )

    async def approve(self, item_id: str, reviewer_id: str) -> ApprovalQueueItem:
        """Mark a pending item approved."""
        return await self._review(
            item_id,
            {
                "status": ApprovalStatus.APPROVED,
                "reviewed_by": reviewer_id,
                "reviewed_at": utc_now(),
            },
        )

    async def reject(self, item_id: str, reviewer_id: str, reason: str) -> ApprovalQueueItem:
        """Mark a pending item rejected."""
        return await self._review(
            item_id,
            {
                "status": ApprovalStatus.REJECTED,
                "reviewed_by": reviewer_id,
                "reviewed_at": utc_now(),
                "rejection_reason": reason,
            },
        )

    async def _review(self, item_id: str, patch: Dict[str, Any]) -> ApprovalQueueItem:
        item = await self._queue.get(item_id)
        if item is None:
            raise ValueError(f"Approval item not found: {item_id}")
        if not item.is_pending:
            raise ValueError(f"Approval item {item_id} already {item.status.value}")

        updated = await self._queue.update(item_id, patch)
        logger.info(f"Approval item {item_id} {patch['status'].value} by {patch['reviewed_by']}")
        return updated

    async def _bounded(self, coro, operation: str):
        try:
            return await asyncio.wait_for(coro, timeout=self._timeout)
        except asyncio.TimeoutError as e:
            raise PersistenceError(
                f"{operation.capitalize()} timed out after {self._timeout}s",
                reason="persistence_timeout",
            ) from e

    @staticmethod
    def _audit_snapshot(steps: List[StepLog]) -> List[Dict[str, Any]]:
        return [step.to_dict() for step in steps]

    @staticmethod
    def _display_metadata(
        order: EnrichedOrder, tracking: Optional[TrackingSnapshot]
    ) -> Dict[str, Any]:
        enriched = order.with_tracking(tracking)
        metadata = enriched.display_fields()
        metadata["integrations_used"] = enriched.integrations_used()
        return metadata
