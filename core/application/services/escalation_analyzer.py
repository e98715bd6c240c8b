"""
Escalation Analyzer.

Keyword and sentiment based escalation priority, used when no richer
classification is available. The sentiment thresholds come from
EscalationSettings; a sentiment outage degrades to keywords only.
"""
import logging
from typing import Dict, List, Optional

from core.application.dtos import EscalationAnalysis, SentimentResult
from core.application.interfaces import ISentimentService


logger = logging.getLogger(__name__)

URGENT_KEYWORDS = ("urgent", "asap", "immediately", "emergency", "critical")
FRUSTRATION_BODY_KEYWORDS = ("frustrated", "angry")
FRUSTRATION_SUBJECT_KEYWORDS = ("complaint",)

ESCALATING_CLASSIFICATIONS = frozenset(
    {"promo_refund", "subscription_management", "billing_dispute", "technical_issue"}
)

SUGGESTED_ACTIONS: Dict[str, List[str]] = {
    "promo_refund": ["Process refund request", "Verify promo code validity", "Apply discount retroactively"],
    "subscription_management": ["Review subscription details", "Process plan change", "Check billing status"],
    "billing_dispute": ["Review billing history", "Contact billing team", "Investigate charge"],
    "order_status": ["Check order tracking", "Contact fulfillment", "Provide status update"],
    "technical_issue": ["Escalate to technical support", "Gather more details", "Test functionality"],
}
DEFAULT_ACTIONS = ["Review customer request", "Provide personalized response"]

CLASSIFICATION_NOTES: Dict[str, str] = {
    "billing_dispute": "Requires billing team review and potential refund processing",
    "subscription_management": "Account modification required - verify current plan and billing status",
    "promo_refund": "Discount code issue - verify promotion validity and process refund if applicable",
    "order_status": "Delivery inquiry - check tracking and fulfillment status",
}
DEFAULT_NOTE = "Requires human review and personalized response"


class EscalationAnalyzer:
    """Decide whether a message needs a human and how urgently."""

    def __init__(
        self,
        sentiment_service: Optional[ISentimentService] = None,
        negative_score_threshold: float = 70.0,
        confidence_threshold: float = 80.0,
    ):
        self._sentiment = sentiment_service
        self.negative_score_threshold = negative_score_threshold
        self.confidence_threshold = confidence_threshold

    async def analyze(self, classification: str, subject: str, body: str) -> EscalationAnalysis:
        subject_lower = (subject or "").lower()
        body_lower = (body or "").lower()

        urgent = any(k in subject_lower or k in body_lower for k in URGENT_KEYWORDS)
        frustrated = any(k in body_lower for k in FRUSTRATION_BODY_KEYWORDS) or any(
            k in subject_lower for k in FRUSTRATION_SUBJECT_KEYWORDS
        )

        sentiment = await self._score(body or "")
        sentiment_boost = sentiment is not None and self.is_high_negative(sentiment)

        should_escalate = (
            classification in ESCALATING_CLASSIFICATIONS or urgent or frustrated or sentiment_boost
        )

        priority = "medium"
        if urgent or frustrated:
            priority = "high"
        if classification == "billing_dispute":
            priority = "urgent"
        if sentiment_boost and priority == "medium":
            priority = "high"

        return EscalationAnalysis(
            should_escalate=should_escalate,
            priority=priority,
            reason=self._reason(classification, urgent, frustrated, sentiment_boost),
            suggested_actions=list(SUGGESTED_ACTIONS.get(classification, DEFAULT_ACTIONS)),
            notes=self._notes(classification, subject or ""),
            sentiment=sentiment.sentiment if sentiment else None,
        )

    def is_high_negative(self, sentiment: SentimentResult) -> bool:
        return (
            sentiment.is_negative
            and sentiment.negative > self.negative_score_threshold
            and sentiment.confidence > self.confidence_threshold
        )

    async def _score(self, text: str) -> Optional[SentimentResult]:
        if self._sentiment is None or not text.strip():
            return None
        try:
            return await self._sentiment.score_sentiment(text)
        except Exception as e:
            logger.warning(f"Sentiment unavailable, using keywords only: {e}")
            return None

    @staticmethod
    def _reason(classification: str, urgent: bool, frustrated: bool, sentiment_boost: bool) -> str:
        reason = f"{classification.replace('_', ' ')} requiring human review"
        if urgent:
            reason += " - customer indicates urgency"
        if frustrated:
            reason += " - customer expressing frustration"
        if sentiment_boost:
            reason += " - high negative sentiment detected"
        return reason[:1].upper() + reason[1:]

    @staticmethod
    def _notes(classification: str, subject: str) -> str:
        return " - ".join(
            [
                f"Issue: {classification.replace('_', ' ')}",
                f"Subject: {subject}",
                CLASSIFICATION_NOTES.get(classification, DEFAULT_NOTE),
            ]
        )
