"""Orchestration layer - WISMO pipeline, audit scope and wiring."""

from typing import TYPE_CHECKING, Optional

from core.application.interfaces import (
    ILanguageModel,
    IOrderManagementClient,
    IReplySender,
    ITrackingService,
)
from core.application.services import (
    ApprovalGate,
    EscalationAnalyzer,
    MetricsRecorder,
    OrderEnrichmentAdapter,
    OrderIdentityResolver,
    ResponseComposer,
    TrackingEnrichmentAdapter,
)
from core.domain.repositories import AgentRuleRepository

from .models import ExecutionContext, ExecutionResult, RunOutcome
from .orchestrator import WismoOrchestrator, run_agent
from .scenarios import DEFAULT_SCENARIOS, Scenario, ScenarioReport, run_agent_tests
from .step_logger import AuditScope, StepLogger, StepScope
from .workflow import WISMO_STEPS, RetryPolicy, StepDefinition, StepPolicy, policy_for

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from core.settings import AppSettings

__all__ = [
    "AuditScope",
    "DEFAULT_SCENARIOS",
    "ExecutionContext",
    "ExecutionResult",
    "RetryPolicy",
    "RunOutcome",
    "Scenario",
    "ScenarioReport",
    "StepDefinition",
    "StepLogger",
    "StepPolicy",
    "StepScope",
    "WISMO_STEPS",
    "WismoOrchestrator",
    "create_escalation_analyzer",
    "create_wismo_agent",
    "policy_for",
    "run_agent",
    "run_agent_tests",
]


def create_wismo_agent(
    settings: Optional["AppSettings"] = None,
    *,
    order_client: Optional[IOrderManagementClient] = None,
    tracking_service: Optional[ITrackingService] = None,
    language_model: Optional[ILanguageModel] = None,
    reply_sender: Optional[IReplySender] = None,
    rules: Optional[AgentRuleRepository] = None,
    session_factory: Optional["async_sessionmaker[AsyncSession]"] = None,
    in_memory: bool = False,
) -> WismoOrchestrator:
    """Wire a WISMO orchestrator from settings.

    Collaborators that are not passed in are built from the integration
    settings (WooCommerce, AfterShip, OpenAI). Stores are SQLAlchemy-backed
    unless `in_memory` is set.

    Args:
        settings: Application settings (loaded from env if omitted)
        order_client: Order-management collaborator override
        tracking_service: Tracking collaborator override
        language_model: Language model override
        reply_sender: Outbound reply seam (logging mock if omitted)
        rules: Agent rule store override
        session_factory: Session factory for the SQL stores
        in_memory: Use dictionary-backed stores (tests and demos)

    Returns:
        WismoOrchestrator instance

    Raises:
        ValueError: If a required integration is neither passed nor configured
    """
    from core.infrastructure.adapters.notifications import MockReplySender
    from core.settings import get_app_settings

    settings = settings or get_app_settings()
    agent = settings.agent

    audit_log, executions, queue, default_rules, metrics_store = _build_stores(
        settings, session_factory, in_memory
    )
    rules = rules or default_rules

    return WismoOrchestrator(
        resolver=OrderIdentityResolver(),
        order_enrichment=OrderEnrichmentAdapter(
            order_client or _build_order_client(settings),
            timeout_seconds=agent.step_timeout_seconds,
        ),
        tracking_enrichment=TrackingEnrichmentAdapter(
            tracking_service or _build_tracking_service(settings),
            timeout_seconds=agent.step_timeout_seconds,
        ),
        composer=ResponseComposer(
            language_model or _build_language_model(settings),
            max_tokens=agent.max_tokens,
            timeout_seconds=agent.generation_timeout_seconds,
            max_reply_chars=agent.max_reply_chars,
            agent_name=agent.agent_name,
        ),
        gate=ApprovalGate(
            rules,
            queue,
            queued_confidence=agent.queued_confidence,
            timeout_seconds=agent.persistence_timeout_seconds,
        ),
        metrics=MetricsRecorder(metrics_store, timeout_seconds=agent.persistence_timeout_seconds),
        reply_sender=reply_sender or MockReplySender(),
        audit_log=audit_log,
        executions=executions,
        agent_type=agent.agent_type,
        run_budget_seconds=agent.run_budget_seconds,
        send_timeout_seconds=agent.step_timeout_seconds,
        persistence_timeout_seconds=agent.persistence_timeout_seconds,
        flush_timeout_seconds=agent.flush_timeout_seconds,
    )


def create_escalation_analyzer(settings: Optional["AppSettings"] = None) -> EscalationAnalyzer:
    """Escalation analyzer with Comprehend sentiment when it is enabled."""
    from core.settings import get_app_settings

    settings = settings or get_app_settings()
    comprehend = settings.integrations.comprehend

    sentiment_service = None
    if comprehend.enabled:
        from core.infrastructure.adapters.comprehend import ComprehendSentimentService

        sentiment_service = ComprehendSentimentService(
            region_name=comprehend.region_name,
            language_code=comprehend.language_code,
        )

    return EscalationAnalyzer(
        sentiment_service=sentiment_service,
        negative_score_threshold=settings.escalation.negative_score_threshold,
        confidence_threshold=settings.escalation.confidence_threshold,
    )


def _build_stores(settings, session_factory, in_memory: bool):
    if in_memory:
        from core.infrastructure.adapters.persistence import (
            InMemoryAgentRuleRepository,
            InMemoryApprovalQueueRepository,
            InMemoryAuditLogRepository,
            InMemoryExecutionRepository,
            InMemoryMetricsRepository,
        )

        return (
            InMemoryAuditLogRepository(),
            InMemoryExecutionRepository(),
            InMemoryApprovalQueueRepository(),
            InMemoryAgentRuleRepository(),
            InMemoryMetricsRepository(),
        )

    from core.infrastructure.database.config import create_engine, get_session_factory
    from core.infrastructure.database.repositories import (
        SQLAlchemyAgentRuleRepository,
        SQLAlchemyApprovalQueueRepository,
        SQLAlchemyAuditLogRepository,
        SQLAlchemyExecutionRepository,
        SQLAlchemyMetricsRepository,
    )

    factory = session_factory or get_session_factory(create_engine(settings.database))
    return (
        SQLAlchemyAuditLogRepository(factory),
        SQLAlchemyExecutionRepository(factory),
        SQLAlchemyApprovalQueueRepository(factory),
        SQLAlchemyAgentRuleRepository(factory),
        SQLAlchemyMetricsRepository(factory),
    )


def _build_order_client(settings) -> IOrderManagementClient:
    from core.infrastructure.adapters.woocommerce import WooCommerceOrderManagementClient
    from orderdesk_sdk.woocommerce import WooCommerceClient

    woo = settings.integrations.woocommerce
    if not woo.is_configured:
        raise ValueError("WooCommerce is not configured (WOOCOMMERCE_STORE_URL / CONSUMER_KEY / CONSUMER_SECRET)")
    return WooCommerceOrderManagementClient(
        WooCommerceClient(
            store_url=woo.store_url,
            consumer_key=woo.consumer_key,
            consumer_secret=woo.consumer_secret,
            timeout_seconds=woo.timeout_seconds,
        )
    )


def _build_tracking_service(settings) -> ITrackingService:
    from core.infrastructure.adapters.aftership import AfterShipTrackingService
    from orderdesk_sdk.aftership import AfterShipClient

    aftership = settings.integrations.aftership
    if not aftership.is_configured:
        raise ValueError("AfterShip is not configured (AFTERSHIP_API_KEY)")
    return AfterShipTrackingService(
        AfterShipClient(
            api_key=aftership.api_key,
            base_url=aftership.base_url,
            timeout_seconds=aftership.timeout_seconds,
        )
    )


def _build_language_model(settings) -> ILanguageModel:
    from core.infrastructure.adapters.openai import OpenAILanguageModel

    openai_settings = settings.integrations.openai
    if not openai_settings.is_configured:
        raise ValueError("OpenAI is not configured (OPENAI_API_KEY)")
    return OpenAILanguageModel(
        model=openai_settings.model,
        api_key=openai_settings.api_key,
        base_url=openai_settings.base_url,
    )
