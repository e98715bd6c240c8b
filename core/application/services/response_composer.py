"""
Response Composer.

Turns enriched order data into a customer reply using the language model,
with a deterministic template when the model fails or returns unusable text.
Both paths only mention fields that were actually obtained.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import List, Optional

from core.application.interfaces import ILanguageModel
from core.domain.entities import EnrichedOrder, TrackingSnapshot
from core.domain.exceptions import GenerationError


logger = logging.getLogger(__name__)

SOURCE_LANGUAGE_MODEL = "language_model"
SOURCE_FALLBACK_TEMPLATE = "fallback_template"


@dataclass(frozen=True)
class ComposedReply:
    """Reply text plus where it came from."""
    text: str
    source: str
    error: Optional[str] = None

    @property
    def used_fallback(self) -> bool:
        return self.source == SOURCE_FALLBACK_TEMPLATE


def build_prompt(
    order: EnrichedOrder,
    tracking: Optional[TrackingSnapshot],
    agent_name: str = "Customer Service Team",
    customer_subject: Optional[str] = None,
) -> str:
    """Build the generation prompt from obtained fields only."""
    record = order.order
    lines: List[str] = [
        "You are a customer service agent. Reply to a customer asking about "
        "their order status using only the information below.",
        "",
        "CUSTOMER CONTEXT:",
    ]
    if customer_subject:
        lines.append(f"- Customer wrote: {customer_subject}")
    lines.append(f"- Order Number: {record.order_number}")
    lines.append(f"- Order Status: {record.status}")
    if record.order_date is not None:
        lines.append(f"- Order Date: {record.order_date.date().isoformat()}")
    for item in record.line_items:
        lines.append(f"- Item: {item.name} x{item.quantity}")

    lines += ["", "SHIPPING INFORMATION:"]
    if tracking is not None:
        if tracking.carrier:
            lines.append(f"- Carrier: {tracking.carrier}")
        lines.append(f"- Tracking Number: {tracking.tracking_number}")
        lines.append(f"- Current Status: {tracking.delivery_status}")
        latest = tracking.latest_checkpoint
        if latest is not None and latest.message:
            lines.append(f"- Latest Update: {latest.message}")
    elif record.has_tracking:
        lines.append(f"- Tracking Number: {record.tracking_number}")
        if record.carrier:
            lines.append(f"- Carrier: {record.carrier}")
        lines.append("- Live tracking status not available")
    else:
        lines.append("- Tracking information not yet available")

    lines += ["", "DELIVERY PREDICTION:"]
    if tracking is not None and tracking.prediction is not None:
        prediction = tracking.prediction
        lines.append(
            f"- Estimated Delivery: {prediction.estimated_date} ({prediction.confidence})"
        )
        lines.append(f"- Prediction Source: {prediction.source}")
    else:
        lines.append("- Delivery prediction not available")

    lines += [
        "",
        "RESPONSE REQUIREMENTS:",
        "1. Be as concise as possible",
        "2. Acknowledge their order inquiry specifically",
        "3. Provide the current status clearly",
        "4. Do not invent tracking links, dates or details not listed above",
        "5. Use a professional tone",
        "",
        f"Sign the response as {agent_name}.",
    ]
    return "\n".join(lines)


def fallback_reply(
    order: EnrichedOrder,
    tracking: Optional[TrackingSnapshot],
    agent_name: str = "Customer Service Team",
) -> str:
    """Fixed template assembled from already-known fields."""
    record = order.order
    text = (
        f"Hi there!\n\nThank you for checking on your order {record.order_number}. "
        f"Your order is currently {record.status}."
    )

    if tracking is not None:
        details = ["\n\nTracking Information:"]
        if tracking.carrier:
            details.append(f"- Carrier: {tracking.carrier}")
        details.append(f"- Tracking Number: {tracking.tracking_number}")
        details.append(f"- Status: {tracking.delivery_status}")
        if tracking.prediction is not None:
            details.append(f"- Expected Delivery: {tracking.prediction.estimated_date}")
        text += "\n".join(details)
    elif record.has_tracking:
        details = ["\n\nTracking Information:"]
        if record.carrier:
            details.append(f"- Carrier: {record.carrier}")
        details.append(f"- Tracking Number: {record.tracking_number}")
        text += "\n".join(details)
    else:
        text += "\n\nWe'll send you tracking information as soon as it becomes available."

    text += (
        "\n\nIf you have any questions, please don't hesitate to reach out!"
        f"\n\nBest regards,\n{agent_name}"
    )
    return text


class ResponseComposer:
    """
    Compose a reply from the language model, or from the template.

    `compose` never raises for generation failures. `generate` and
    `fallback` are exposed separately so callers can audit each path.
    """

    def __init__(
        self,
        language_model: ILanguageModel,
        max_tokens: int = 300,
        timeout_seconds: float = 30.0,
        max_reply_chars: int = 4000,
        agent_name: str = "Customer Service Team",
    ):
        self._language_model = language_model
        self._max_tokens = max_tokens
        self._timeout = timeout_seconds
        self._max_reply_chars = max_reply_chars
        self._agent_name = agent_name

    async def compose(
        self,
        context,
        enriched_order: EnrichedOrder,
        tracking: Optional[TrackingSnapshot] = None,
    ) -> ComposedReply:
        """
        Compose a reply for a run.

        Args:
            context: Execution context of the run (subject is quoted in the prompt)
            enriched_order: Canonical order
            tracking: Tracking snapshot, if one was obtained

        Returns:
            ComposedReply from the language model, or from the fallback
            template with `error` set
        """
        try:
            return await self.generate(context, enriched_order, tracking)
        except GenerationError as e:
            logger.warning(f"Response generation failed, using template: {e}")
            return self.fallback(enriched_order, tracking, error=str(e))

    async def generate(
        self,
        context,
        enriched_order: EnrichedOrder,
        tracking: Optional[TrackingSnapshot] = None,
    ) -> ComposedReply:
        """
        Ask the language model for a reply.

        Raises:
            GenerationError: Model unavailable, timed out, or returned
                empty or over-long text
        """
        prompt = build_prompt(
            enriched_order,
            tracking,
            agent_name=self._agent_name,
            customer_subject=getattr(context, "subject", None),
        )
        try:
            raw = await asyncio.wait_for(
                self._language_model.generate(prompt, self._max_tokens),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError as e:
            raise GenerationError(
                f"Language model timed out after {self._timeout}s",
                collaborator="language_model",
            ) from e
        except GenerationError:
            raise
        except Exception as e:
            raise GenerationError(str(e) or e.__class__.__name__, collaborator="language_model") from e

        text = (raw or "").strip()
        if not text:
            raise GenerationError("Language model returned an empty reply", reason="malformed_output")
        if len(text) > self._max_reply_chars:
            raise GenerationError(
                f"Language model reply too long ({len(text)} chars)",
                reason="malformed_output",
            )
        return ComposedReply(text=text, source=SOURCE_LANGUAGE_MODEL)

    def fallback(
        self,
        enriched_order: EnrichedOrder,
        tracking: Optional[TrackingSnapshot] = None,
        error: Optional[str] = None,
    ) -> ComposedReply:
        """Template reply from already-known fields."""
        return ComposedReply(
            text=fallback_reply(enriched_order, tracking, self._agent_name),
            source=SOURCE_FALLBACK_TEMPLATE,
            error=error,
        )
