"""Delivery value objects - immutable records passed between goal steps."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Tuple


@dataclass(frozen=True)
class RepoRef:
    """
    Reference to a remote repository at a specific commit.

    ``provider_id`` identifies the source control provider instance and is
    part of every per-repository key (build identifiers, versions).
    """

    owner: str
    repo: str
    sha: str
    branch: str
    provider_id: str = "github"
    remote_base: str = "https://github.com"

    def __post_init__(self):
        if not self.owner or not self.repo:
            raise ValueError("RepoRef requires both owner and repo")

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.repo}"

    @property
    def clone_url(self) -> str:
        return f"{self.remote_base.rstrip('/')}/{self.owner}/{self.repo}.git"

    def __str__(self) -> str:
        return f"{self.slug}@{self.sha[:7]}"


@dataclass(frozen=True)
class ProjectCredentials:
    """Token credentials for source control operations."""

    token: str

    def __repr__(self) -> str:
        return "ProjectCredentials(token='***')"


@dataclass(frozen=True)
class PushMetadata:
    """
    The push that triggered a goal.

    ``default_branch`` is the repository's default branch at push time and
    drives the branch suffix of computed versions.
    """

    owner: str
    name: str
    provider_id: str
    sha: str
    branch: str
    default_branch: str = "main"
    commit_message: str = ""
    changed_files: Tuple[str, ...] = ()

    @property
    def is_default_branch(self) -> bool:
        return self.branch == self.default_branch


@dataclass(frozen=True)
class Tagger:
    """Identity recorded on tag objects."""

    name: str
    email: str
    date: datetime


@dataclass(frozen=True)
class Tag:
    """Annotated tag pointing at a commit."""

    tag: str
    message: str
    object: str
    tagger: Tagger
    type: str = "commit"

    @property
    def ref(self) -> str:
        return f"refs/tags/{self.tag}"


@dataclass(frozen=True)
class Fingerprint:
    """A named signature of project content."""

    name: str
    sha: str
    data: str = ""
    abbreviation: Optional[str] = None
    version: str = "0.1.0"


@dataclass(frozen=True)
class AppInfo:
    """Identity of the application a build produced."""

    name: str
    version: str
    id: RepoRef
    metadata: dict = field(default_factory=dict, compare=False, hash=False)
