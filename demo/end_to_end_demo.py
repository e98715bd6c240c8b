"""
End-to-End Demo: WISMO Agent

This demonstrates the complete workflow:
1. Resolve the order number from the customer's message
2. Fetch the order from the store
3. Fetch carrier tracking (best effort)
4. Compose a reply (language model, template fallback)
5. Queue the reply for approval, or send it
6. Update agent metrics

Uses mock implementations (no store, AfterShip, OpenAI or database needed).
"""
import asyncio
import logging
from datetime import datetime, timezone
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables ONCE before any settings objects are created
_PROJECT_ROOT = Path(__file__).resolve().parents[1]
load_dotenv(dotenv_path=_PROJECT_ROOT / ".env")

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

from core.application.dtos import CheckpointDTO, DeliveryEstimateDTO, TrackingInfo
from core.domain.entities import AgentRule, OrderLineItem, OrderRecord
from core.infrastructure.adapters.aftership import MockTrackingService
from core.infrastructure.adapters.notifications import MockReplySender
from core.infrastructure.adapters.persistence import InMemoryAgentRuleRepository
from core.infrastructure.adapters.openai import MockLanguageModel
from core.infrastructure.adapters.woocommerce import MockOrderManagementClient
from core.settings import get_app_settings
from orchestration import create_wismo_agent, run_agent, run_agent_tests

USER_ID = "demo-user"


def build_mock_store() -> MockOrderManagementClient:
    return MockOrderManagementClient(
        orders=[
            OrderRecord(
                order_number="12345",
                status="completed",
                order_date=datetime(2026, 10, 10, 9, 30, tzinfo=timezone.utc),
                customer_name="Jane Doe",
                customer_email="test@example.com",
                line_items=(OrderLineItem(name="Ceramic Mug", quantity=2, price="18.00"),),
                tracking_number="1Z999AA10123456784",
                carrier="UPS",
                shipping_method="UPS Ground",
            ),
            OrderRecord(
                order_number="12001",
                status="processing",
                order_date=datetime(2026, 10, 14, 16, 0, tzinfo=timezone.utc),
                customer_name="Sam Lee",
                customer_email="customer@example.com",
                line_items=(OrderLineItem(name="Linen Apron"),),
            ),
        ]
    )


def build_mock_tracking() -> MockTrackingService:
    return MockTrackingService(
        shipments={
            "1Z999AA10123456784": TrackingInfo(
                found=True,
                tracking_number="1Z999AA10123456784",
                carrier="UPS",
                delivery_status="In Transit",
                estimated_delivery=DeliveryEstimateDTO(
                    estimated_date="2026-10-20",
                    confidence="High confidence",
                    source="ai_prediction",
                ),
                checkpoints=[
                    CheckpointDTO(
                        checkpoint_time="2026-10-16T08:12:00Z",
                        status="InTransit",
                        message="Departed from facility",
                        location="Louisville, KY",
                    ),
                ],
            ),
        }
    )


async def demo_scenarios():
    """Demo: canned scenarios with the approval queue (no rule = approval required)."""

    print("\n" + "=" * 80)
    print("DEMO: WISMO Scenarios (approval required)")
    print("=" * 80 + "\n")

    # =========================================================================
    # SETUP: Create mock dependencies
    # =========================================================================
    print("📦 Setting up mock dependencies...")

    orchestrator = create_wismo_agent(
        get_app_settings(),
        order_client=build_mock_store(),
        tracking_service=build_mock_tracking(),
        language_model=MockLanguageModel(),
        in_memory=True,
    )

    print("✅ Mock dependencies ready\n")

    # =========================================================================
    # RUN SCENARIOS
    # =========================================================================
    reports = await run_agent_tests(orchestrator, USER_ID)

    for report in reports:
        icon = "✅" if report.status == "passed" else "❌"
        print(f"{icon} {report.test_name}: {report.status} ({report.actual_outcome or report.error})")
        for step in report.audit_trail:
            print(f"     {step['step_order']}. {step['step_name']:<22} {step['status']}")
        print()


async def demo_auto_send():
    """Demo: auto-send enabled, language model down (template fallback)."""

    print("\n" + "=" * 80)
    print("DEMO: Auto-send with template fallback")
    print("=" * 80 + "\n")

    sender = MockReplySender()
    # Opt the demo user in to auto-send
    rules = InMemoryAgentRuleRepository(
        [AgentRule(user_id=USER_ID, agent_type="wismo", is_enabled=True, requires_approval=False)]
    )
    orchestrator = create_wismo_agent(
        get_app_settings(),
        order_client=build_mock_store(),
        tracking_service=build_mock_tracking(),
        language_model=MockLanguageModel(fail_with="model overloaded"),
        reply_sender=sender,
        rules=rules,
        in_memory=True,
    )

    result = await run_agent(
        orchestrator,
        user_id=USER_ID,
        message_id="demo-message-1",
        from_address="test@example.com",
        subject="Where is my order #12345?",
        body="Hi, any news on my mugs?",
    )

    print(f"Success: {result.success}  Action: {result.action.value if result.action else None}")
    print(f"Steps: {' -> '.join(result.step_names())}\n")
    print("📧 Reply sent:\n")
    print(sender.replies_sent[0]["body"] if sender.replies_sent else "(nothing sent)")


async def main():
    await demo_scenarios()
    await demo_auto_send()

    print("\n" + "=" * 80)
    print("✅ DEMO COMPLETE")
    print("=" * 80 + "\n")


if __name__ == "__main__":
    asyncio.run(main())
