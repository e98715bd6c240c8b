"""Shared fixtures: mock collaborators, in-memory stores and an orchestrator builder."""

import pytest

from core.application.services import (
    ApprovalGate,
    MetricsRecorder,
    OrderEnrichmentAdapter,
    OrderIdentityResolver,
    ResponseComposer,
    TrackingEnrichmentAdapter,
)
from core.domain.entities import AgentRule
from core.infrastructure.adapters.aftership import MockTrackingService
from core.infrastructure.adapters.notifications import MockReplySender
from core.infrastructure.adapters.openai import MockLanguageModel
from core.infrastructure.adapters.persistence import (
    InMemoryAgentRuleRepository,
    InMemoryApprovalQueueRepository,
    InMemoryAuditLogRepository,
    InMemoryExecutionRepository,
    InMemoryMetricsRepository,
)
from core.infrastructure.adapters.woocommerce import MockOrderManagementClient
from orchestration import WismoOrchestrator
from orchestration.workflow import RetryPolicy

from tests.fakes import TRACKING_NUMBER, USER_ID, make_order, make_tracking_info



@pytest.fixture
def order_client() -> MockOrderManagementClient:
    return MockOrderManagementClient(
        orders=[
            make_order(),
            make_order(
                order_number="12001",
                status="processing",
                tracking_number=None,
                carrier=None,
                customer_email="customer@example.com",
            ),
        ]
    )


@pytest.fixture
def tracking_service() -> MockTrackingService:
    return MockTrackingService(shipments={TRACKING_NUMBER: make_tracking_info()})


@pytest.fixture
def language_model() -> MockLanguageModel:
    return MockLanguageModel()


@pytest.fixture
def reply_sender() -> MockReplySender:
    return MockReplySender()


@pytest.fixture
def audit_log() -> InMemoryAuditLogRepository:
    return InMemoryAuditLogRepository()


@pytest.fixture
def executions() -> InMemoryExecutionRepository:
    return InMemoryExecutionRepository()


@pytest.fixture
def approval_queue() -> InMemoryApprovalQueueRepository:
    return InMemoryApprovalQueueRepository()


@pytest.fixture
def rules() -> InMemoryAgentRuleRepository:
    return InMemoryAgentRuleRepository()


@pytest.fixture
def metrics_store() -> InMemoryMetricsRepository:
    return InMemoryMetricsRepository()


@pytest.fixture
def auto_send(rules):
    """Opt USER_ID in to auto-send."""
    rules.put(AgentRule(user_id=USER_ID, agent_type="wismo", is_enabled=True, requires_approval=False))
    return rules


@pytest.fixture
def build_orchestrator(
    order_client,
    tracking_service,
    language_model,
    reply_sender,
    audit_log,
    executions,
    approval_queue,
    rules,
    metrics_store,
):
    """Factory fixture; keyword arguments replace individual collaborators."""

    def _build(**overrides) -> WismoOrchestrator:
        parts = {
            "resolver": OrderIdentityResolver(),
            "order_enrichment": OrderEnrichmentAdapter(
                overrides.pop("order_client", order_client), timeout_seconds=1.0
            ),
            "tracking_enrichment": TrackingEnrichmentAdapter(
                overrides.pop("tracking_service", tracking_service), timeout_seconds=1.0
            ),
            "composer": ResponseComposer(
                overrides.pop("language_model", language_model), timeout_seconds=1.0
            ),
            "gate": ApprovalGate(rules, approval_queue, timeout_seconds=0.2),
            "metrics": MetricsRecorder(metrics_store, timeout_seconds=0.2),
            "reply_sender": reply_sender,
            "audit_log": audit_log,
            "executions": executions,
            "run_budget_seconds": 5.0,
            "send_timeout_seconds": 1.0,
            "persistence_timeout_seconds": 0.2,
            "flush_timeout_seconds": 1.0,
            "flush_retry_policy": RetryPolicy(max_attempts=2),
        }
        parts.update(overrides)
        return WismoOrchestrator(**parts)

    return _build


@pytest.fixture
def orchestrator(build_orchestrator) -> WismoOrchestrator:
    return build_orchestrator()
