"""WISMO runs wired with the SQLAlchemy stores."""

import pytest

from core.infrastructure.adapters.aftership import MockTrackingService
from core.infrastructure.adapters.openai import MockLanguageModel
from core.infrastructure.adapters.woocommerce import MockOrderManagementClient
from core.infrastructure.database.models import AgentRuleModel
from core.infrastructure.database.repositories import (
    SQLAlchemyApprovalQueueRepository,
    SQLAlchemyAuditLogRepository,
    SQLAlchemyMetricsRepository,
)
from core.settings import get_app_settings
from orchestration import create_wismo_agent

from tests.fakes import TRACKING_NUMBER, make_order, make_tracking_info


@pytest.fixture
def agent_factory(test_session_factory):
    def build():
        return create_wismo_agent(
            get_app_settings(),
            order_client=MockOrderManagementClient(orders=[make_order()]),
            tracking_service=MockTrackingService(shipments={TRACKING_NUMBER: make_tracking_info()}),
            language_model=MockLanguageModel(),
            session_factory=test_session_factory,
        )

    return build


@pytest.mark.asyncio
async def test_queued_run_is_persisted(agent_factory, test_session_factory):
    orchestrator = agent_factory()

    result = await orchestrator.run("user-1", "msg-1", "test@example.com", "Order #12345", "Where is it?")

    assert result.success is True
    steps = await SQLAlchemyAuditLogRepository(test_session_factory).list_for_execution(result.execution_id)
    assert [s.step_name for s in steps] == [
        "email_received",
        "order_extraction",
        "order_details_lookup",
        "tracking_lookup",
        "response_generation",
        "queued_for_approval",
        "metrics_updated",
    ]
    assert [s.step_order for s in steps] == list(range(1, 8))

    pending = await SQLAlchemyApprovalQueueRepository(test_session_factory).list_pending("user-1")
    assert [p.id for p in pending] == [result.approval_item_id]
    assert pending[0].execution_id == result.execution_id

    metrics = await SQLAlchemyMetricsRepository(test_session_factory).get("user-1", "wismo")
    assert (metrics.attempts, metrics.successes, metrics.failures) == (1, 1, 0)


@pytest.mark.asyncio
async def test_replayed_message_returns_first_run(agent_factory, test_session_factory):
    orchestrator = agent_factory()

    first = await orchestrator.run("user-1", "msg-1", "test@example.com", "Order #12345", "")
    second = await orchestrator.run("user-1", "msg-1", "test@example.com", "Order #12345", "")

    assert second.replayed is True
    assert second.execution_id == first.execution_id
    assert len(second.audit_trail) == len(first.audit_trail)
    pending = await SQLAlchemyApprovalQueueRepository(test_session_factory).list_pending("user-1")
    assert len(pending) == 1


@pytest.mark.asyncio
async def test_unknown_order_escalates_and_counts_failure(agent_factory, test_session_factory):
    orchestrator = agent_factory()

    result = await orchestrator.run("user-1", "msg-9", "test@example.com", "Order #99999", "")

    assert result.success is False
    assert result.escalation_reason == "Order 99999 not found in store system"
    metrics = await SQLAlchemyMetricsRepository(test_session_factory).get("user-1", "wismo")
    assert (metrics.attempts, metrics.failures) == (1, 1)


@pytest.mark.asyncio
async def test_opt_out_rule_auto_sends(agent_factory, test_session_factory):
    async with test_session_factory() as session:
        session.add(AgentRuleModel(user_id="user-1", agent_type="wismo", requires_approval=False))
        await session.commit()

    result = await agent_factory().run("user-1", "msg-2", "test@example.com", "Order #12345", "")

    assert result.success is True
    assert result.approval_item_id is None
    assert result.audit_trail[-2].step_name == "response_sent"
