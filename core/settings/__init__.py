# Settings package
from core.settings.modules import (
    AgentSettings,
    AppSettings,
    EscalationSettings,
    IntegrationsSettings,
    get_app_settings,
)

__all__ = [
    "get_app_settings",
    "AppSettings",
    "AgentSettings",
    "EscalationSettings",
    "IntegrationsSettings",
]
