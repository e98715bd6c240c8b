"""Tests for ResponseComposer, build_prompt and fallback_reply."""

import asyncio

import pytest

from core.application.services import ResponseComposer, build_prompt, fallback_reply
from core.application.services.tracking_enrichment import to_snapshot
from core.domain.exceptions import GenerationError
from core.infrastructure.adapters.openai import MockLanguageModel

from tests.fakes import make_enriched, make_tracking_info


class _Context:
    subject = "Where is my order #12345?"


class SlowLanguageModel(MockLanguageModel):
    async def generate(self, prompt: str, max_tokens: int) -> str:
        await asyncio.sleep(1)
        return "too late"


class CrashingLanguageModel(MockLanguageModel):
    async def generate(self, prompt: str, max_tokens: int) -> str:
        raise ConnectionError("socket closed")


@pytest.fixture
def tracking():
    return to_snapshot(make_tracking_info(), "1Z999AA10123456784")


def test_prompt_uses_obtained_fields(tracking):
    prompt = build_prompt(make_enriched(), tracking, customer_subject="Where is my order?")

    assert "CUSTOMER CONTEXT:" in prompt
    assert "- Order Number: 12345" in prompt
    assert "- Order Status: completed" in prompt
    assert "- Item: Ceramic Mug x2" in prompt
    assert "- Current Status: In Transit" in prompt
    assert "- Estimated Delivery: 2026-10-20 (High confidence)" in prompt
    assert "Do not invent tracking links" in prompt


def test_prompt_without_tracking_or_prediction():
    prompt = build_prompt(make_enriched(tracking_number=None, carrier=None), None)

    assert "- Tracking information not yet available" in prompt
    assert "- Delivery prediction not available" in prompt
    assert "Tracking Number" not in prompt


def test_fallback_without_tracking_promises_no_details():
    text = fallback_reply(make_enriched(status="processing", tracking_number=None, carrier=None), None)

    assert text.startswith(
        "Hi there!\n\nThank you for checking on your order 12345. Your order is currently processing."
    )
    assert "We'll send you tracking information as soon as it becomes available." in text
    assert "http" not in text
    assert "Expected Delivery" not in text
    assert text.endswith("Best regards,\nCustomer Service Team")


def test_fallback_with_order_tracking_only():
    text = fallback_reply(make_enriched(), None, agent_name="Mug Shop")

    assert "- Carrier: UPS" in text
    assert "- Tracking Number: 1Z999AA10123456784" in text
    assert "Expected Delivery" not in text
    assert text.endswith("Mug Shop")


def test_fallback_with_snapshot_includes_prediction(tracking):
    text = fallback_reply(make_enriched(), tracking)

    assert "- Status: In Transit" in text
    assert "- Expected Delivery: 2026-10-20" in text


@pytest.mark.asyncio
async def test_generate_returns_stripped_model_text():
    model = MockLanguageModel(reply="  Your order shipped.  ")
    composer = ResponseComposer(model, max_tokens=123)

    reply = await composer.generate(_Context(), make_enriched(), None)

    assert reply.text == "Your order shipped."
    assert reply.used_fallback is False
    assert "- Customer wrote: Where is my order #12345?" in model.prompts[0]


@pytest.mark.asyncio
async def test_generate_rejects_over_long_output():
    composer = ResponseComposer(MockLanguageModel(reply="x" * 50), max_reply_chars=10)

    with pytest.raises(GenerationError) as exc_info:
        await composer.generate(_Context(), make_enriched(), None)

    assert exc_info.value.reason == "malformed_output"


@pytest.mark.asyncio
async def test_generate_times_out():
    composer = ResponseComposer(SlowLanguageModel(), timeout_seconds=0.05)

    with pytest.raises(GenerationError, match="timed out"):
        await composer.generate(_Context(), make_enriched(), None)


@pytest.mark.asyncio
async def test_generate_wraps_unexpected_errors():
    composer = ResponseComposer(CrashingLanguageModel())

    with pytest.raises(GenerationError, match="socket closed"):
        await composer.generate(_Context(), make_enriched(), None)


@pytest.mark.asyncio
async def test_compose_falls_back_on_failure():
    composer = ResponseComposer(MockLanguageModel(fail_with="quota"))

    reply = await composer.compose(_Context(), make_enriched(), None)

    assert reply.used_fallback is True
    assert reply.error == "quota"
    assert reply.text.startswith("Hi there!")
