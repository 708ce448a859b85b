from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict

from core.settings.modules.database_settings import DatabaseSettings
from core.settings.modules.delivery_settings import (
    ProgressLogSettings,
    ProjectSettings,
    TaggingSettings,
)
from core.settings.modules.docker_settings import DockerSettings
from core.settings.modules.integrations_settings import GitHubSettings, WebhookSettings

_PROJECT_ROOT = Path(__file__).resolve().parents[3]


class AppSettings(BaseModel):
    """Application settings aggregator."""

    model_config = ConfigDict(arbitrary_types_allowed=True, extra="ignore")

    database: DatabaseSettings
    docker: DockerSettings
    github: GitHubSettings
    webhooks: WebhookSettings
    tagging: TaggingSettings
    progress_log: ProgressLogSettings
    project: ProjectSettings


@lru_cache()
def get_app_settings() -> AppSettings:
    """Return cached global settings for the entire app."""
    load_dotenv(dotenv_path=_PROJECT_ROOT / ".env")
    return AppSettings(
        database=DatabaseSettings(),
        docker=DockerSettings(),
        github=GitHubSettings(),
        webhooks=WebhookSettings(),
        tagging=TaggingSettings(),
        progress_log=ProgressLogSettings(),
        project=ProjectSettings(),
    )
