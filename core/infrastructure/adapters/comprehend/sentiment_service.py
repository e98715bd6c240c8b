"""
AWS Comprehend sentiment adapter.

boto3 is synchronous, so calls run in a worker thread.
"""
import asyncio
from typing import Any, Optional
import logging

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from core.application.dtos import SentimentResult
from core.application.interfaces import ISentimentService
from core.domain.exceptions import SentimentUnavailableError


logger = logging.getLogger(__name__)

# DetectSentiment rejects documents over 5000 bytes (UTF-8)
MAX_TEXT_BYTES = 5000


def truncate_utf8(text: str, max_bytes: int = MAX_TEXT_BYTES) -> str:
    encoded = text.encode("utf-8")
    if len(encoded) <= max_bytes:
        return text
    return encoded[:max_bytes].decode("utf-8", errors="ignore")


class ComprehendSentimentService(ISentimentService):
    """ISentimentService backed by Comprehend DetectSentiment."""

    def __init__(
        self,
        region_name: str = "us-east-1",
        language_code: str = "en",
        client: Optional[Any] = None,
    ):
        self._client = client or boto3.client("comprehend", region_name=region_name)
        self._language_code = language_code

    async def score_sentiment(self, text: str) -> SentimentResult:
        if not text or not text.strip():
            raise SentimentUnavailableError("Cannot score empty text", collaborator="comprehend")

        try:
            response = await asyncio.to_thread(
                self._client.detect_sentiment,
                Text=truncate_utf8(text),
                LanguageCode=self._language_code,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Comprehend sentiment failed: {e}")
            raise SentimentUnavailableError(str(e), collaborator="comprehend") from e

        scores = response.get("SentimentScore", {})
        percents = {
            key: round(float(scores.get(name, 0.0)) * 100, 2)
            for key, name in (
                ("positive", "Positive"),
                ("negative", "Negative"),
                ("neutral", "Neutral"),
                ("mixed", "Mixed"),
            )
        }
        return SentimentResult(
            sentiment=response.get("Sentiment", "NEUTRAL"),
            confidence=max(percents.values()),
            **percents,
        )
