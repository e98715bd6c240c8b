"""Tests for the OpenAI language model and Comprehend sentiment adapters."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from botocore.exceptions import ClientError
from openai import OpenAIError

from core.domain.exceptions import GenerationError, SentimentUnavailableError
from core.infrastructure.adapters.comprehend import ComprehendSentimentService
from core.infrastructure.adapters.comprehend.sentiment_service import truncate_utf8
from core.infrastructure.adapters.openai import OpenAILanguageModel


def _completion(content):
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
        usage=SimpleNamespace(total_tokens=42),
    )


def _openai_client(result=None, error=None):
    client = MagicMock()
    client.chat.completions.create = AsyncMock(return_value=result, side_effect=error)
    return client


# ---------------------------------------------------------------------------
# OpenAI
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_openai_returns_stripped_content():
    client = _openai_client(_completion("  Your order shipped.\n"))
    model = OpenAILanguageModel(model="gpt-4o-mini", client=client)

    assert await model.generate("Write a reply", max_tokens=200) == "Your order shipped."
    kwargs = client.chat.completions.create.await_args.kwargs
    assert kwargs["model"] == "gpt-4o-mini"
    assert kwargs["max_tokens"] == 200
    assert kwargs["messages"] == [{"role": "user", "content": "Write a reply"}]


@pytest.mark.asyncio
async def test_openai_without_choices_is_empty():
    client = _openai_client(SimpleNamespace(choices=[], usage=None))

    assert await OpenAILanguageModel(client=client).generate("prompt", max_tokens=10) == ""


@pytest.mark.asyncio
async def test_openai_error_becomes_generation_error():
    client = _openai_client(error=OpenAIError("rate limited"))

    with pytest.raises(GenerationError) as exc_info:
        await OpenAILanguageModel(client=client).generate("prompt", max_tokens=10)

    assert exc_info.value.collaborator == "openai"


@pytest.mark.asyncio
async def test_openai_rejects_empty_prompt():
    client = _openai_client(_completion("unused"))

    with pytest.raises(GenerationError) as exc_info:
        await OpenAILanguageModel(client=client).generate("   ", max_tokens=10)

    assert exc_info.value.reason == "malformed_input"
    client.chat.completions.create.assert_not_awaited()


# ---------------------------------------------------------------------------
# Comprehend
# ---------------------------------------------------------------------------


def test_truncate_utf8_keeps_whole_characters():
    text = "é" * 10  # 2 bytes each

    assert truncate_utf8(text, max_bytes=5) == "éé"
    assert truncate_utf8("short", max_bytes=5) == "short"


@pytest.mark.asyncio
async def test_comprehend_scores_as_percentages():
    client = MagicMock()
    client.detect_sentiment.return_value = {
        "Sentiment": "NEGATIVE",
        "SentimentScore": {"Positive": 0.01, "Negative": 0.9, "Neutral": 0.08, "Mixed": 0.01},
    }
    service = ComprehendSentimentService(client=client)

    result = await service.score_sentiment("Where is my package?!")

    assert result.sentiment == "NEGATIVE"
    assert result.negative == 90.0
    assert result.confidence == 90.0
    assert result.is_negative
    client.detect_sentiment.assert_called_once_with(Text="Where is my package?!", LanguageCode="en")


@pytest.mark.asyncio
async def test_comprehend_client_error_is_unavailable():
    client = MagicMock()
    client.detect_sentiment.side_effect = ClientError(
        {"Error": {"Code": "ThrottlingException", "Message": "slow down"}}, "DetectSentiment"
    )

    with pytest.raises(SentimentUnavailableError):
        await ComprehendSentimentService(client=client).score_sentiment("hello")


@pytest.mark.asyncio
async def test_comprehend_rejects_empty_text():
    client = MagicMock()

    with pytest.raises(SentimentUnavailableError):
        await ComprehendSentimentService(client=client).score_sentiment("  ")

    client.detect_sentiment.assert_not_called()
