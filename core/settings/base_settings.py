from pydantic_settings import BaseSettings, SettingsConfigDict


class OrderDeskBaseSettings(BaseSettings):
    """Common loader config: .env in the working directory, unknown keys ignored."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )
