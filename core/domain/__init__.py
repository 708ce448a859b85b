"""Domain layer - pure domain models and interfaces."""

from .entities import BuildIdentifier, ProcessResult, Project, RunningBuild
from .enums import BuildPhase, BuildStatus
from .repositories import BuildIdentifierRepository, VersionRepository
from .value_objects import (
    AppInfo,
    Fingerprint,
    ProjectCredentials,
    PushMetadata,
    RepoRef,
    Tag,
    Tagger,
)

__all__ = [
    "AppInfo",
    "BuildIdentifier",
    "BuildIdentifierRepository",
    "BuildPhase",
    "BuildStatus",
    "Fingerprint",
    "ProcessResult",
    "Project",
    "ProjectCredentials",
    "PushMetadata",
    "RepoRef",
    "RunningBuild",
    "Tag",
    "Tagger",
    "VersionRepository",
]
