"""Tests for WismoOrchestrator - happy paths, routing and replay."""

import pytest

from core.domain.enums import ExecutionOutcome, GateAction, LookupSource, StepStatus
from core.infrastructure.adapters.openai.mock_language_model import DEFAULT_REPLY
from orchestration import run_agent

from tests.fakes import USER_ID

VALID_STEPS = [
    "email_received",
    "order_extraction",
    "order_details_lookup",
    "tracking_lookup",
    "response_generation",
    "queued_for_approval",
    "metrics_updated",
]


async def _run(orchestrator, message_id="msg-1", subject="Where is my order #12345?", body="Any news?",
               from_address="test@example.com"):
    return await orchestrator.run(
        user_id=USER_ID,
        message_id=message_id,
        from_address=from_address,
        subject=subject,
        body=body,
    )


@pytest.mark.asyncio
async def test_valid_order_is_queued_for_approval(orchestrator, approval_queue, audit_log, executions):
    """No agent rule: reply is queued and every step is audited."""
    result = await _run(orchestrator)

    assert result.success is True
    assert result.escalation_reason is None
    assert result.reply == DEFAULT_REPLY
    assert result.action is GateAction.QUEUE
    assert result.step_names() == VALID_STEPS
    assert all(step.status is StepStatus.COMPLETED for step in result.audit_trail)

    # Ordinals are contiguous from 1
    assert [step.step_order for step in result.audit_trail] == list(range(1, 8))

    # Audit store has every step, run record was written once
    persisted = await audit_log.list_for_execution(result.execution_id)
    assert [step.step_name for step in persisted] == VALID_STEPS
    assert len(executions.all()) == 1
    assert executions.all()[0].outcome is ExecutionOutcome.RESOLVED

    item = await approval_queue.get(result.approval_item_id)
    assert item is not None
    assert item.is_pending
    assert item.confidence == 95
    assert item.proposed_response == DEFAULT_REPLY
    assert item.customer_email == "test@example.com"
    assert item.execution_id == result.execution_id
    # Audit snapshot covers the steps run before the gate
    assert [s["step_name"] for s in item.audit_trail] == VALID_STEPS[:5]
    assert item.metadata["order_number"] == "12345"
    assert item.metadata["delivery_status"] == "In Transit"
    assert item.metadata["integrations_used"] == ["order_management", "tracking"]


@pytest.mark.asyncio
async def test_extraction_step_records_provenance(orchestrator):
    result = await _run(orchestrator)

    extraction = result.audit_trail[1]
    assert extraction.output_data["found"] is True
    assert extraction.output_data["order_number"] == "12345"
    assert extraction.output_data["source"] == LookupSource.EXTRACTED.value
    assert extraction.metadata == {"matched_pattern": "hash_marker"}


@pytest.mark.asyncio
async def test_tracking_step_output(orchestrator, tracking_service):
    result = await _run(orchestrator)

    tracking = result.audit_trail[3]
    assert tracking.output_data["found"] is True
    assert tracking.output_data["carrier"] == "UPS"
    assert tracking.output_data["estimated_delivery"] == "2026-10-20"
    assert tracking_service.calls == [("1Z999AA10123456784", "UPS", USER_ID)]


@pytest.mark.asyncio
async def test_no_order_number_uses_customer_history(orchestrator, order_client):
    result = await _run(
        orchestrator,
        subject="Order status question",
        body="Hi, I placed an order last week but haven't received any updates.",
        from_address="customer@example.com",
    )

    assert result.success is True
    assert result.step_names()[2] == "customer_lookup"
    assert ("by_customer", "customer@example.com") in order_client.calls

    lookup = result.audit_trail[2]
    assert lookup.output_data["order_number"] == "12001"
    assert lookup.metadata == {"source": LookupSource.CUSTOMER_LOOKUP.value}

    # Order 12001 has no tracking number
    tracking = result.audit_trail[3]
    assert tracking.status is StepStatus.SKIPPED
    assert tracking.metadata == {"reason": "no_tracking_number"}


@pytest.mark.asyncio
async def test_auto_send_when_rule_opts_in(auto_send, orchestrator, reply_sender, approval_queue):
    result = await _run(orchestrator)

    assert result.success is True
    assert result.action is GateAction.AUTO_SEND
    assert result.approval_item_id is None
    assert result.step_names()[-2:] == ["response_sent", "metrics_updated"]

    assert len(reply_sender.replies_sent) == 1
    sent = reply_sender.replies_sent[0]
    assert sent["to"] == "test@example.com"
    assert sent["subject"] == "Re: Where is my order #12345?"
    assert sent["execution_id"] == result.execution_id
    assert await approval_queue.list_pending(USER_ID) == []


@pytest.mark.asyncio
async def test_disabled_rule_still_queues(rules, orchestrator, reply_sender):
    from core.domain.entities import AgentRule

    rules.put(AgentRule(user_id=USER_ID, agent_type="wismo", is_enabled=False, requires_approval=False))

    result = await _run(orchestrator)

    assert result.action is GateAction.QUEUE
    assert reply_sender.replies_sent == []


@pytest.mark.asyncio
async def test_successful_run_updates_metrics(orchestrator, metrics_store):
    result = await _run(orchestrator)

    metrics = await metrics_store.get(USER_ID, "wismo")
    assert (metrics.attempts, metrics.successes, metrics.failures) == (1, 1, 0)
    assert result.audit_trail[-1].output_data == {"outcome": "resolved", "recorded": True}


@pytest.mark.asyncio
async def test_replayed_message_returns_stored_result(orchestrator, audit_log, metrics_store, language_model):
    first = await _run(orchestrator, message_id="msg-dup")
    steps_written = audit_log.count()

    second = await _run(orchestrator, message_id="msg-dup")

    assert second.replayed is True
    assert second.execution_id == first.execution_id
    assert second.step_names() == first.step_names()
    assert second.reply == first.reply
    assert audit_log.count() == steps_written
    assert len(language_model.prompts) == 1

    metrics = await metrics_store.get(USER_ID, "wismo")
    assert metrics.attempts == 1


@pytest.mark.asyncio
async def test_same_message_for_other_user_is_a_new_run(orchestrator):
    first = await _run(orchestrator, message_id="msg-shared")
    second = await orchestrator.run("user-2", "msg-shared", "test@example.com", "Order #12345", "")

    assert second.replayed is False
    assert second.execution_id != first.execution_id


@pytest.mark.asyncio
async def test_run_agent_delegates(orchestrator):
    result = await run_agent(
        orchestrator,
        user_id=USER_ID,
        message_id="msg-run-agent",
        from_address="test@example.com",
        subject="order 12345",
        body="",
    )

    assert result.success is True
    assert result.audit_trail[1].metadata == {"matched_pattern": "order_phrase"}
