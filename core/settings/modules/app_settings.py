from __future__ import annotations

from functools import lru_cache

from pydantic import BaseModel, ConfigDict

from core.infrastructure.database.config import DatabaseSettings
from core.settings.modules.agent_settings import AgentSettings
from core.settings.modules.escalation_settings import EscalationSettings
from core.settings.modules.integrations_settings import (
    AfterShipSettings,
    ComprehendSettings,
    OpenAISettings,
    WooCommerceSettings,
)


class IntegrationsSettings(BaseModel):
    """Aggregates integrations settings as nested objects."""

    model_config = ConfigDict(extra="ignore")

    woocommerce: WooCommerceSettings
    aftership: AfterShipSettings
    openai: OpenAISettings
    comprehend: ComprehendSettings


class AppSettings(BaseModel):
    """Application settings aggregator."""

    model_config = ConfigDict(arbitrary_types_allowed=True, extra="ignore")

    agent: AgentSettings
    escalation: EscalationSettings
    database: DatabaseSettings
    integrations: IntegrationsSettings


@lru_cache()
def get_app_settings() -> AppSettings:
    return AppSettings(
        agent=AgentSettings(),
        escalation=EscalationSettings(),
        database=DatabaseSettings(),
        integrations=IntegrationsSettings(
            woocommerce=WooCommerceSettings(),
            aftership=AfterShipSettings(),
            openai=OpenAISettings(),
            comprehend=ComprehendSettings(),
        ),
    )
