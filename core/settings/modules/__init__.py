# Settings modules
from .agent_settings import AgentSettings
from .app_settings import AppSettings, IntegrationsSettings, get_app_settings
from .escalation_settings import EscalationSettings
from .integrations_settings import (
    AfterShipSettings,
    ComprehendSettings,
    OpenAISettings,
    WooCommerceSettings,
)

__all__ = [
    "AppSettings",
    "get_app_settings",
    "IntegrationsSettings",
    "AgentSettings",
    "EscalationSettings",
    "WooCommerceSettings",
    "AfterShipSettings",
    "OpenAISettings",
    "ComprehendSettings",
]
