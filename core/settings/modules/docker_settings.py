from __future__ import annotations

from pydantic_settings import SettingsConfigDict

from core.settings.base_settings import DeliveryBaseSettings


class DockerSettings(DeliveryBaseSettings):
    """
    Image registry credentials used by the image publish goal.

    Loaded from ``DOCKER_*`` variables.
    """

    model_config = SettingsConfigDict(env_prefix="DOCKER_")

    registry: str = "docker.io"
    user: str = ""
    password: str = ""
    dockerfile: str = "Dockerfile"
