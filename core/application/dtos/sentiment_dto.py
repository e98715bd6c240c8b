"""Sentiment scoring DTO."""

from pydantic import BaseModel, Field


class SentimentResult(BaseModel):
    """Sentiment of a message; scores are percentages (0-100)."""

    sentiment: str = Field(..., description="POSITIVE | NEGATIVE | NEUTRAL | MIXED")
    positive: float = Field(default=0.0, ge=0, le=100)
    negative: float = Field(default=0.0, ge=0, le=100)
    neutral: float = Field(default=0.0, ge=0, le=100)
    mixed: float = Field(default=0.0, ge=0, le=100)
    confidence: float = Field(default=0.0, ge=0, le=100, description="Highest of the four scores")

    model_config = {"frozen": True}

    @property
    def is_negative(self) -> bool:
        return self.sentiment.upper() == "NEGATIVE"
