from __future__ import annotations

from pydantic import Field

from core.settings.base_settings import OrderDeskBaseSettings


class EscalationSettings(OrderDeskBaseSettings):
    """
    Sentiment thresholds for escalation priority.
    A NEGATIVE message whose negative score and confidence both exceed
    these percentages raises a medium priority to high.
    """

    negative_score_threshold: float = Field(
        default=70.0, ge=0, le=100, alias="ESCALATION_NEGATIVE_SCORE_THRESHOLD"
    )
    confidence_threshold: float = Field(
        default=80.0, ge=0, le=100, alias="ESCALATION_CONFIDENCE_THRESHOLD"
    )
