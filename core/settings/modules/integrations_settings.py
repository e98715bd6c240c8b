from __future__ import annotations

from typing import Optional

from pydantic import Field

from core.settings.base_settings import OrderDeskBaseSettings


class WooCommerceSettings(OrderDeskBaseSettings):
    """
    WooCommerce REST API settings.
    Loaded from .env with exact variable name matching.
    """

    store_url: Optional[str] = Field(default=None, alias="WOOCOMMERCE_STORE_URL")
    consumer_key: Optional[str] = Field(default=None, alias="WOOCOMMERCE_CONSUMER_KEY")
    consumer_secret: Optional[str] = Field(default=None, alias="WOOCOMMERCE_CONSUMER_SECRET")
    timeout_seconds: float = Field(default=10.0, gt=0, alias="WOOCOMMERCE_TIMEOUT_SECONDS")

    @property
    def is_configured(self) -> bool:
        return bool(self.store_url and self.consumer_key and self.consumer_secret)


class AfterShipSettings(OrderDeskBaseSettings):
    """AfterShip tracking API settings."""

    api_key: Optional[str] = Field(default=None, alias="AFTERSHIP_API_KEY")
    base_url: str = Field(default="https://api.aftership.com/v4", alias="AFTERSHIP_BASE_URL")
    timeout_seconds: float = Field(default=10.0, gt=0, alias="AFTERSHIP_TIMEOUT_SECONDS")

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)


class OpenAISettings(OrderDeskBaseSettings):
    """OpenAI chat completion settings."""

    api_key: Optional[str] = Field(default=None, alias="OPENAI_API_KEY")
    model: str = Field(default="gpt-4", alias="OPENAI_MODEL")
    base_url: Optional[str] = Field(default=None, alias="OPENAI_BASE_URL")

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)


class ComprehendSettings(OrderDeskBaseSettings):
    """AWS Comprehend sentiment settings (credentials come from the AWS chain)."""

    region_name: str = Field(default="us-east-1", alias="AWS_REGION")
    language_code: str = Field(default="en", alias="COMPREHEND_LANGUAGE_CODE")
    enabled: bool = Field(default=False, alias="COMPREHEND_ENABLED")
