"""Application layer interfaces.

Collaborators that goal execution talks to. Concrete adapters live in the
infrastructure layer; tests substitute fakes.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, TypeVar

from core.domain.entities import Project
from core.domain.enums import BuildStatus
from core.domain.value_objects import AppInfo, ProjectCredentials, PushMetadata, RepoRef, Tag

T = TypeVar("T")

# Sends a chat message to the channels linked to a repository.
AddressChannels = Callable[[str], Awaitable[None]]


class IProgressLog(ABC):
    """
    Append-only log of a goal's progress.

    ``log`` exposes buffered text for sinks that keep it (empty otherwise).
    """

    name: str = "progress"

    @abstractmethod
    async def write(self, line: str) -> None:
        """Append one line."""
        pass

    async def flush(self) -> None:
        """Push buffered lines to the backing store."""
        pass

    async def close(self) -> None:
        """Flush and release resources."""
        await self.flush()

    async def is_available(self) -> bool:
        """Report whether the sink can currently accept writes."""
        return True

    @property
    def log(self) -> str:
        return ""

    @property
    def url(self) -> Optional[str]:
        return None


@dataclass(frozen=True)
class BuildStatusTarget:
    """What a build status update refers to."""

    repo_ref: RepoRef
    team: str
    url: Optional[str] = None


class IBuildStatusUpdater(ABC):
    """Reports build state transitions to observers."""

    @abstractmethod
    async def update_build_status(
        self,
        target: BuildStatusTarget,
        status: BuildStatus,
        branch: str,
        build_no: str,
    ) -> None:
        """
        Record a build status.

        Args:
            target: Repository, team and public build URL
            status: New status
            branch: Branch being built
            build_no: Allocated build identifier
        """
        pass


class ITagClient(ABC):
    """Source control tag creation."""

    @abstractmethod
    async def create_tag(self, credentials: ProjectCredentials, repo_ref: RepoRef, tag: Tag) -> None:
        """Create the annotated tag object."""
        pass

    @abstractmethod
    async def create_tag_reference(
        self, credentials: ProjectCredentials, repo_ref: RepoRef, tag: Tag
    ) -> None:
        """Create ``refs/tags/<name>`` pointing at the tagged commit."""
        pass


@dataclass(frozen=True)
class CommitStatus:
    """A commit status as shown by the source control provider."""

    state: str
    context: str
    description: str = ""
    target_url: Optional[str] = None


class ICommitStatusClient(ABC):
    """Source control commit status creation."""

    @abstractmethod
    async def create_status(
        self, credentials: ProjectCredentials, repo_ref: RepoRef, status: CommitStatus
    ) -> None:
        pass


class IArtifactStore(ABC):
    """Stores deployable build output."""

    @abstractmethod
    async def store_file(
        self, app_info: AppInfo, local_file: str, credentials: ProjectCredentials
    ) -> str:
        """
        Store a local file.

        Returns:
            URL where the artifact can be retrieved
        """
        pass


class IImageLinkWebhook(ABC):
    """Announces produced images/artifacts for a commit."""

    @abstractmethod
    async def post_image_link(
        self, owner: str, repo: str, sha: str, image_url: str, team: str
    ) -> bool:
        """
        Link an image to a commit.

        Returns:
            True when the receiver acknowledged the link
        """
        pass


class IVersionStore(ABC):
    """Versions computed once per build and read back by later steps."""

    @abstractmethod
    async def save_version(self, push: PushMetadata, version: str) -> None:
        pass

    @abstractmethod
    async def read_version(
        self, owner: str, name: str, provider_id: str, sha: str, branch: str
    ) -> Optional[str]:
        pass


@dataclass(frozen=True)
class ProjectLoadOptions:
    """How to check out a working copy."""

    credentials: ProjectCredentials
    repo_ref: RepoRef
    read_only: bool = True


class IProjectLoader(ABC):
    """Scoped access to a working copy."""

    @abstractmethod
    async def with_project(
        self,
        options: ProjectLoadOptions,
        body: Callable[[Project], Awaitable[T]],
    ) -> T:
        """
        Check out the project, run ``body`` against it and release the
        working copy afterwards, whatever ``body`` does.
        """
        pass


__all__ = [
    "AddressChannels",
    "BuildStatusTarget",
    "CommitStatus",
    "IArtifactStore",
    "IBuildStatusUpdater",
    "ICommitStatusClient",
    "IImageLinkWebhook",
    "IProgressLog",
    "IProjectLoader",
    "ITagClient",
    "IVersionStore",
    "ProjectLoadOptions",
]
