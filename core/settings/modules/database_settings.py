from __future__ import annotations

from pydantic_settings import SettingsConfigDict

from core.settings.base_settings import DeliveryBaseSettings


class DatabaseSettings(DeliveryBaseSettings):
    """
    Persistence for build identifiers and computed versions.

    Loaded from ``DB_*`` variables.
    """

    model_config = SettingsConfigDict(env_prefix="DB_")

    database_url: str = "sqlite+aiosqlite:///./delivery.db"
    echo_sql: bool = False
