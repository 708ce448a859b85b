# Settings modules
from .app_settings import AppSettings, get_app_settings
from .database_settings import DatabaseSettings
from .delivery_settings import ProgressLogSettings, ProjectSettings, TaggingSettings
from .docker_settings import DockerSettings
from .integrations_settings import GitHubSettings, WebhookSettings

__all__ = [
    "AppSettings",
    "get_app_settings",
    "DatabaseSettings",
    "DockerSettings",
    "GitHubSettings",
    "ProgressLogSettings",
    "ProjectSettings",
    "TaggingSettings",
    "WebhookSettings",
]
