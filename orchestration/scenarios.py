"""Scenario runner - canned inquiries for smoke-testing a wired orchestrator."""

from dataclasses import dataclass, field
from typing import Any
from uuid import uuid4

from orderdesk_sdk.logging import get_logger

from .orchestrator import WismoOrchestrator

logger = get_logger("orchestration.scenarios")


@dataclass(frozen=True)
class Scenario:
    name: str
    scenario: str
    subject: str
    body: str
    from_address: str
    expected_outcome: str


@dataclass
class ScenarioReport:
    test_name: str
    scenario: str
    status: str  # passed | failed | error
    expected_outcome: str
    actual_outcome: str | None = None
    execution_id: str | None = None
    audit_trail: list[dict[str, Any]] = field(default_factory=list)
    error: str | None = None


DEFAULT_SCENARIOS: tuple[Scenario, ...] = (
    Scenario(
        name="Valid Order Number",
        scenario="valid_order",
        subject="Where is my order #12345?",
        body="Hi, I placed order #12345 a few days ago and wondering when it will arrive. Thanks!",
        from_address="test@example.com",
        expected_outcome="successful_response",
    ),
    Scenario(
        name="No Order Number",
        scenario="customer_lookup",
        subject="Order status question",
        body="Hi, I placed an order last week but haven't received any updates. When will it arrive?",
        from_address="customer@example.com",
        expected_outcome="customer_lookup_required",
    ),
    Scenario(
        name="Invalid Order Number",
        scenario="invalid_order",
        subject="Where is order #99999?",
        body="I need to know the status of my order #99999 please.",
        from_address="test@example.com",
        expected_outcome="order_not_found",
    ),
)


async def run_agent_tests(
    orchestrator: WismoOrchestrator,
    user_id: str,
    scenarios: list[Scenario] | None = None,
) -> list[ScenarioReport]:
    """
    Run each scenario through the orchestrator as a fresh message.

    A scenario passes when its run succeeds; a halted run is reported as
    failed with the escalation reason as the actual outcome.
    """
    logger.info("Running WISMO agent scenarios...")
    reports: list[ScenarioReport] = []

    for test in scenarios or DEFAULT_SCENARIOS:
        logger.info(f"Running scenario: {test.name}")
        try:
            result = await orchestrator.run(
                user_id=user_id,
                message_id=f"test-{uuid4().hex}",
                from_address=test.from_address,
                subject=test.subject,
                body=test.body,
            )
        except Exception as e:
            reports.append(
                ScenarioReport(
                    test_name=test.name,
                    scenario=test.scenario,
                    status="error",
                    expected_outcome=test.expected_outcome,
                    error=str(e) or e.__class__.__name__,
                )
            )
            continue

        reports.append(
            ScenarioReport(
                test_name=test.name,
                scenario=test.scenario,
                status="passed" if result.success else "failed",
                expected_outcome=test.expected_outcome,
                actual_outcome="success" if result.success else result.escalation_reason,
                execution_id=result.execution_id,
                audit_trail=[step.to_dict() for step in result.audit_trail],
            )
        )

    passed = sum(1 for report in reports if report.status == "passed")
    logger.info(f"Scenarios completed: {passed}/{len(reports)} passed")
    return reports
