"""Escalation analysis DTO."""

from typing import List, Optional

from pydantic import BaseModel, Field


class EscalationAnalysis(BaseModel):
    """Outcome of the fallback escalation analysis for one message."""

    should_escalate: bool = Field(default=False)
    priority: str = Field(default="medium", description="low | medium | high | urgent")
    reason: str = Field(default="")
    suggested_actions: List[str] = Field(default_factory=list)
    notes: Optional[str] = None
    sentiment: Optional[str] = None

    model_config = {"frozen": True}
