# core/settings/base_settings.py
from pydantic_settings import BaseSettings, SettingsConfigDict


class DeliveryBaseSettings(BaseSettings):
    """Common loading rules: ``.env`` file, unknown keys ignored."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )
