from __future__ import annotations

from pydantic import Field

from core.settings.base_settings import OrderDeskBaseSettings


class AgentSettings(OrderDeskBaseSettings):
    """
    WISMO agent pipeline settings.
    Every value has a default so the agent runs without a .env file.
    """

    agent_type: str = Field(default="wismo", alias="WISMO_AGENT_TYPE")
    agent_name: str = Field(default="Customer Service Team", alias="WISMO_AGENT_NAME")

    # Bounded timeouts (seconds)
    step_timeout_seconds: float = Field(default=10.0, gt=0, alias="WISMO_STEP_TIMEOUT_SECONDS")
    generation_timeout_seconds: float = Field(default=30.0, gt=0, alias="WISMO_GENERATION_TIMEOUT_SECONDS")
    run_budget_seconds: float = Field(default=60.0, gt=0, alias="WISMO_RUN_BUDGET_SECONDS")
    persistence_timeout_seconds: float = Field(default=5.0, gt=0, alias="WISMO_PERSISTENCE_TIMEOUT_SECONDS")
    flush_timeout_seconds: float = Field(default=30.0, gt=0, alias="WISMO_FLUSH_TIMEOUT_SECONDS")

    # Reply generation
    max_tokens: int = Field(default=300, gt=0, alias="WISMO_MAX_TOKENS")
    max_reply_chars: int = Field(default=4000, gt=0, alias="WISMO_MAX_REPLY_CHARS")

    # Approval queue
    queued_confidence: int = Field(default=95, ge=0, le=100, alias="WISMO_QUEUED_CONFIDENCE")
