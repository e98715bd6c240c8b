"""Integration tests for the SQLAlchemy stores against SQLite."""

from datetime import timedelta

import pytest

from core.domain.entities import ApprovalQueueItem, ExecutionRecord, StepLog
from core.domain.enums import ApprovalStatus, ExecutionOutcome, GateAction, StepStatus
from core.domain.exceptions import DuplicateExecutionError, DuplicateStepLogError
from core.infrastructure.database.models import AgentRuleModel
from core.infrastructure.database.repositories import (
    SQLAlchemyAgentRuleRepository,
    SQLAlchemyApprovalQueueRepository,
    SQLAlchemyAuditLogRepository,
    SQLAlchemyExecutionRepository,
    SQLAlchemyMetricsRepository,
)
from orderdesk_sdk.utils.datetime import utc_now


def _step(order: int, name: str = "email_received", status=StepStatus.COMPLETED) -> StepLog:
    started = utc_now()
    return StepLog(
        step_name=name,
        step_order=order,
        status=status,
        started_at=started,
        ended_at=started + timedelta(milliseconds=5),
        input_data={"order": order},
        output_data={"ok": True},
        metadata={"source": "test"},
    )


def _record(execution_id: str = "exec-1", message_id: str = "msg-1") -> ExecutionRecord:
    now = utc_now()
    return ExecutionRecord(
        execution_id=execution_id,
        user_id="user-1",
        message_id=message_id,
        agent_type="wismo",
        outcome=ExecutionOutcome.RESOLVED,
        started_at=now,
        finished_at=now,
        reply="Your order shipped.",
        action=GateAction.QUEUE,
        approval_item_id="item-1",
    )


def _item(**overrides) -> ApprovalQueueItem:
    data = dict(
        user_id="user-1",
        message_id="msg-1",
        agent_type="wismo",
        execution_id="exec-1",
        customer_email="test@example.com",
        subject="Order #12345",
        body="Where is it?",
        proposed_response="Your order shipped.",
        confidence=95,
        audit_trail=[{"step_name": "email_received", "step_order": 1}],
        metadata={"carrier": "UPS"},
    )
    data.update(overrides)
    return ApprovalQueueItem(**data)


# ---------------------------------------------------------------------------
# Audit log and execution records
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_audit_log_appends_in_order(test_session_factory):
    repo = SQLAlchemyAuditLogRepository(test_session_factory)

    await repo.append("exec-1", "user-1", "wismo", "msg-1", _step(2, "order_extraction"))
    await repo.append("exec-1", "user-1", "wismo", "msg-1", _step(1))
    await repo.append("exec-2", "user-1", "wismo", "msg-2", _step(1))

    steps = await repo.list_for_execution("exec-1")
    assert [(s.step_order, s.step_name) for s in steps] == [(1, "email_received"), (2, "order_extraction")]
    assert steps[0].status is StepStatus.COMPLETED
    assert steps[0].input_data == {"order": 1}
    assert steps[0].metadata == {"source": "test"}


@pytest.mark.asyncio
async def test_audit_log_rejects_duplicate_step_order(test_session_factory):
    repo = SQLAlchemyAuditLogRepository(test_session_factory)
    await repo.append("exec-1", "user-1", "wismo", "msg-1", _step(1))

    with pytest.raises(DuplicateStepLogError, match="already exists"):
        await repo.append("exec-1", "user-1", "wismo", "msg-1", _step(1))


@pytest.mark.asyncio
async def test_execution_record_round_trip_with_steps(test_session_factory):
    audit = SQLAlchemyAuditLogRepository(test_session_factory)
    executions = SQLAlchemyExecutionRepository(test_session_factory)
    await audit.append("exec-1", "user-1", "wismo", "msg-1", _step(1))
    await audit.append("exec-1", "user-1", "wismo", "msg-1", _step(2, "order_extraction"))

    await executions.save(_record())
    found = await executions.find_by_message("user-1", "msg-1")

    assert found.execution_id == "exec-1"
    assert found.success is True
    assert found.action is GateAction.QUEUE
    assert found.approval_item_id == "item-1"
    assert [s.step_name for s in found.steps] == ["email_received", "order_extraction"]


@pytest.mark.asyncio
async def test_second_record_for_message_is_rejected(test_session_factory):
    executions = SQLAlchemyExecutionRepository(test_session_factory)
    await executions.save(_record())

    with pytest.raises(DuplicateExecutionError):
        await executions.save(_record(execution_id="exec-2"))


@pytest.mark.asyncio
async def test_unknown_message_has_no_record(test_session_factory):
    executions = SQLAlchemyExecutionRepository(test_session_factory)

    assert await executions.find_by_message("user-1", "missing") is None


# ---------------------------------------------------------------------------
# Approval queue
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_approval_queue_create_and_list(test_session_factory):
    repo = SQLAlchemyApprovalQueueRepository(test_session_factory)

    created = await repo.create(_item())
    await repo.create(_item(user_id="user-2"))

    assert created.status is ApprovalStatus.PENDING
    assert created.created_at is not None
    pending = await repo.list_pending("user-1")
    assert [p.id for p in pending] == [created.id]
    assert pending[0].audit_trail == [{"step_name": "email_received", "step_order": 1}]
    assert pending[0].metadata == {"carrier": "UPS"}


@pytest.mark.asyncio
async def test_approval_queue_review_update(test_session_factory):
    repo = SQLAlchemyApprovalQueueRepository(test_session_factory)
    created = await repo.create(_item())

    updated = await repo.update(
        created.id,
        {"status": "rejected", "reviewed_by": "reviewer-7", "reviewed_at": utc_now(), "rejection_reason": "Tone"},
    )

    assert updated.status is ApprovalStatus.REJECTED
    stored = await repo.get(created.id)
    assert stored.status is ApprovalStatus.REJECTED
    assert stored.rejection_reason == "Tone"
    assert stored.proposed_response == "Your order shipped."
    assert await repo.list_pending("user-1") == []


@pytest.mark.asyncio
async def test_approval_queue_refuses_decision_edits(test_session_factory):
    repo = SQLAlchemyApprovalQueueRepository(test_session_factory)
    created = await repo.create(_item())

    with pytest.raises(ValueError, match="immutable"):
        await repo.update(created.id, {"confidence": 10})

    assert await repo.update("missing", {"status": "approved"}) is None


# ---------------------------------------------------------------------------
# Rules and metrics
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_agent_rule_lookup(test_session_factory):
    async with test_session_factory() as session:
        session.add(
            AgentRuleModel(user_id="user-1", agent_type="wismo", name="Auto", requires_approval=False)
        )
        await session.commit()

    repo = SQLAlchemyAgentRuleRepository(test_session_factory)

    rule = await repo.get_rule("user-1", "wismo")
    assert rule.is_enabled is True
    assert rule.requires_approval is False
    assert rule.name == "Auto"
    assert await repo.get_rule("user-1", "returns") is None


@pytest.mark.asyncio
async def test_metrics_increments_accumulate(test_session_factory):
    repo = SQLAlchemyMetricsRepository(test_session_factory)

    assert await repo.get("user-1", "wismo") is None

    await repo.increment("user-1", "wismo", "attempts")
    await repo.increment("user-1", "wismo", "attempts")
    await repo.increment("user-1", "wismo", "successes")
    for _ in range(5):
        await repo.increment("user-1", "wismo", "failures")

    metrics = await repo.get("user-1", "wismo")
    assert (metrics.attempts, metrics.successes, metrics.failures) == (2, 1, 5)
    assert metrics.last_activity_at is not None


@pytest.mark.asyncio
async def test_metrics_reject_unknown_counter(test_session_factory):
    with pytest.raises(ValueError):
        await SQLAlchemyMetricsRepository(test_session_factory).increment("user-1", "wismo", "refunds")
