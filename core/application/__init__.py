"""Application layer - services and collaborator interfaces."""

from .interfaces import (
    BuildStatusTarget,
    IArtifactStore,
    IBuildStatusUpdater,
    IImageLinkWebhook,
    IProgressLog,
    IProjectLoader,
    ITagClient,
    IVersionStore,
    ProjectLoadOptions,
)
from .services import BuildIdentifierService, VersionService

__all__ = [
    # Services
    "BuildIdentifierService",
    "VersionService",
    # Interfaces
    "BuildStatusTarget",
    "IArtifactStore",
    "IBuildStatusUpdater",
    "IImageLinkWebhook",
    "IProgressLog",
    "IProjectLoader",
    "ITagClient",
    "IVersionStore",
    "ProjectLoadOptions",
]
