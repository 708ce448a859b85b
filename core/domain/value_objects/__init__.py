"""Domain value objects."""

from .delivery import (
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
    "Fingerprint",
    "ProjectCredentials",
    "PushMetadata",
    "RepoRef",
    "Tag",
    "Tagger",
]
