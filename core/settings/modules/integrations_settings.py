from __future__ import annotations

from typing import Optional

from pydantic_settings import SettingsConfigDict

from core.settings.base_settings import DeliveryBaseSettings


class GitHubSettings(DeliveryBaseSettings):
    """
    Source control API settings (tag creation).
    Loaded from ``GITHUB_*`` variables.
    """

    model_config = SettingsConfigDict(env_prefix="GITHUB_")

    api_url: str = "https://api.github.com"
    token: str = ""


class WebhookSettings(DeliveryBaseSettings):
    """
    Webhook endpoints for image links and build status events.
    Loaded from ``WEBHOOK_*`` variables.
    """

    model_config = SettingsConfigDict(env_prefix="WEBHOOK_")

    image_link_url: Optional[str] = None
    build_status_url: Optional[str] = None
    timeout_seconds: float = 30.0
