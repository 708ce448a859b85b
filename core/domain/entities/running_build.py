"""A build started by a backend and not yet observed to completion."""

from dataclasses import dataclass
from typing import Awaitable, Optional

from ..value_objects import AppInfo, RepoRef


@dataclass(frozen=True)
class ProcessResult:
    """Outcome of an external process or process group."""

    code: int
    message: Optional[str] = None

    @property
    def error(self) -> bool:
        return self.code != 0


@dataclass
class RunningBuild:
    """
    Handle on a backend build.

    ``build_result`` resolves when the backend finishes. The orchestrator
    awaits it but never cancels it. ``staging_dir`` holds a copy of the
    deployment unit outside the working copy and is removed by the builder
    once the artifact has been linked.
    """

    repo_ref: RepoRef
    team: str
    build_result: Awaitable[ProcessResult]
    url: Optional[str] = None
    deployment_unit_file: Optional[str] = None
    app_info: Optional[AppInfo] = None
    staging_dir: Optional[str] = None
