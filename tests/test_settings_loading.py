"""
Test settings loading.

Every key documented in .env.example must map to a settings field, and
values from the environment must reach the typed settings objects.
"""
from __future__ import annotations

from pathlib import Path
import re

import pytest
from pydantic import ValidationError

from core.infrastructure.database.config import DatabaseSettings
from core.settings import AgentSettings, EscalationSettings, get_app_settings
from core.settings.modules import (
    AfterShipSettings,
    ComprehendSettings,
    OpenAISettings,
    WooCommerceSettings,
)


SETTINGS_CLASSES = (
    AgentSettings,
    EscalationSettings,
    WooCommerceSettings,
    AfterShipSettings,
    OpenAISettings,
    ComprehendSettings,
)


def _parse_env_keys(env_path: Path) -> list[str]:
    text = env_path.read_text(encoding="utf-8", errors="replace")
    keys: list[str] = []
    for line in text.splitlines():
        s = line.strip()
        if not s or s.startswith("#"):
            continue
        if s.startswith("export "):
            s = s[len("export ") :].strip()
        if "=" not in s:
            continue
        k, _ = s.split("=", 1)
        k = k.strip()
        if not re.fullmatch(r"[A-Za-z_][A-Za-z0-9_]*", k):
            continue
        if k not in keys:
            keys.append(k)
    return keys


def _collect_alias_map(model_cls) -> dict[str, str]:
    """
    Return map: ENV_ALIAS -> field_name for a settings class.
    """
    return {
        field.alias: field_name
        for field_name, field in model_cls.model_fields.items()
        if field.alias
    }


def test_every_example_env_key_is_mapped():
    repo_root = Path(__file__).resolve().parents[1]
    keys = _parse_env_keys(repo_root / ".env.example")

    known: dict[str, str] = {}
    for settings_cls in SETTINGS_CLASSES:
        for alias, field_name in _collect_alias_map(settings_cls).items():
            if alias in known:
                pytest.fail(f"Duplicate env alias mapped twice: {alias}")
            known[alias] = f"{settings_cls.__name__}.{field_name}"

    # DatabaseSettings uses a DB_ prefix instead of aliases
    for field_name in DatabaseSettings.model_fields:
        known[f"DB_{field_name.upper()}"] = f"DatabaseSettings.{field_name}"

    missing = [k for k in keys if k not in known]
    assert not missing, f"Unmapped env keys: {missing}"


def test_environment_overrides_defaults(monkeypatch):
    monkeypatch.setenv("WISMO_QUEUED_CONFIDENCE", "80")
    monkeypatch.setenv("WISMO_RUN_BUDGET_SECONDS", "12.5")
    monkeypatch.setenv("AFTERSHIP_API_KEY", "key-123")
    monkeypatch.setenv("COMPREHEND_ENABLED", "true")

    assert AgentSettings().queued_confidence == 80
    assert AgentSettings().run_budget_seconds == 12.5
    assert AfterShipSettings().is_configured is True
    assert ComprehendSettings().enabled is True


def test_woocommerce_needs_all_three_credentials(monkeypatch):
    monkeypatch.delenv("WOOCOMMERCE_CONSUMER_SECRET", raising=False)
    partial = WooCommerceSettings(WOOCOMMERCE_STORE_URL="https://shop.example.com", WOOCOMMERCE_CONSUMER_KEY="ck")

    assert partial.is_configured is False


def test_out_of_range_values_are_rejected():
    with pytest.raises(ValidationError):
        AgentSettings(WISMO_QUEUED_CONFIDENCE=150)
    with pytest.raises(ValidationError):
        EscalationSettings(ESCALATION_CONFIDENCE_THRESHOLD=-1)


def test_app_settings_are_cached():
    get_app_settings.cache_clear()
    try:
        assert get_app_settings() is get_app_settings()
        assert get_app_settings().agent.agent_type
    finally:
        get_app_settings.cache_clear()
