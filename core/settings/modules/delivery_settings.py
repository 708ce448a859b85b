from __future__ import annotations

from typing import Optional

from pydantic_settings import SettingsConfigDict

from core.settings.base_settings import DeliveryBaseSettings


class TaggingSettings(DeliveryBaseSettings):
    """
    Build tag settings.

    ``enabled`` switches tag creation after a successful build. The tagger
    identity is recorded on every tag object.
    """

    model_config = SettingsConfigDict(env_prefix="SDM_TAG_")

    enabled: bool = True
    tagger_name: str = "Atomist"
    tagger_email: str = "info@atomist.com"
    build_suffix_prefix: str = "sdm"


class ProgressLogSettings(DeliveryBaseSettings):
    """Progress log sinks. Remote sinks are used only when configured."""

    model_config = SettingsConfigDict(env_prefix="PROGRESS_LOG_")

    rolar_base_url: Optional[str] = None
    redis_url: Optional[str] = None
    stream_name: str = "sdm:progress"
    buffer_size: int = 1000
    flush_interval: float = 2.0


class ProjectSettings(DeliveryBaseSettings):
    """Working copy checkout settings."""

    model_config = SettingsConfigDict(env_prefix="PROJECT_")

    workspace_root: Optional[str] = None
    clone_depth: int = 50
