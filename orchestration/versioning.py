"""Versioning - computing and persisting a unique version per build.

Computing a version is pure; writing it into the project's metadata and the
version store are separate effects composed by the versioner.
"""

from collections.abc import Awaitable, Callable
from datetime import datetime

from core.application.interfaces import IProgressLog, IProjectLoader, IVersionStore, ProjectLoadOptions
from core.domain.entities import ProcessResult, Project
from core.domain.exceptions import PipelineStepError, VersionNotFoundError
from core.domain.value_objects import PushMetadata
from core.infrastructure.process import spawn_and_watch
from delivery_sdk.logging import get_logger
from delivery_sdk.utils.datetime import compact_timestamp, utc_now

from .models import ExecuteGoal, ExecuteGoalResult, GoalInvocation, failure_on_error

logger = get_logger("orchestration.versioning")

# Computes and persists the version of a checked-out project.
ProjectVersioner = Callable[[PushMetadata, Project, IProgressLog], Awaitable[str]]


def branch_suffix(branch: str, default_branch: str) -> str:
    """Empty on the default branch, otherwise the dot-normalized branch plus a dot."""
    if branch == default_branch:
        return ""
    return f"{branch.replace('/', '.')}."


def compute_version(
    declared_version: str,
    branch: str,
    default_branch: str,
    now: datetime | None = None,
) -> str:
    """
    Derive ``<declared>-<branch-suffix><yyyymmddHHMMss>``.

    >>> compute_version("1.2.0", "feature/x", "main", datetime(2024, 5, 1, 12, 30, 5))
    '1.2.0-feature.x.20240501123005'
    """
    moment = now or utc_now()
    return f"{declared_version}-{branch_suffix(branch, default_branch)}{compact_timestamp(moment)}"


def read_declared_version(project: Project) -> str:
    """Declared version from ``package.json``."""
    package = project.read_json("package.json")
    version = package.get("version") if isinstance(package, dict) else None
    if not version:
        raise VersionNotFoundError(f"No version declared in package.json of {project.id}")
    return version


async def persist_version(project: Project, version: str, log: IProgressLog) -> ProcessResult:
    """Write ``version`` into ``package.json`` without creating a git tag."""
    return await spawn_and_watch(
        "npm",
        ["--no-git-tag-version", "version", version],
        cwd=project.base_dir,
        log=log,
    )


class NodeProjectVersioner:
    """Versioner for Node projects: read, compute, persist, record."""

    def __init__(
        self,
        version_store: IVersionStore,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._version_store = version_store
        self._clock = clock

    async def __call__(self, push: PushMetadata, project: Project, log: IProgressLog) -> str:
        version = compute_version(
            read_declared_version(project),
            push.branch,
            push.default_branch,
            self._clock(),
        )
        result = await persist_version(project, version, log)
        if result.error:
            raise PipelineStepError("version", result.code, result.message)
        await self._version_store.save_version(push, version)
        logger.info("Versioned %s as %s", project.id, version)
        return version


def execute_version(project_loader: IProjectLoader, versioner: ProjectVersioner) -> ExecuteGoal:
    """Goal that computes the build version once and records it."""

    @failure_on_error("Version")
    async def execute(invocation: GoalInvocation) -> ExecuteGoalResult:
        async def version_project(project: Project) -> str:
            return await versioner(invocation.push, project, invocation.progress_log)

        version = await project_loader.with_project(
            ProjectLoadOptions(invocation.credentials, invocation.id, read_only=False),
            version_project,
        )
        await invocation.progress_log.write(f"Version is {version}")
        return ExecuteGoalResult.success(message=f"Version {version}")

    return execute


async def read_sdm_version(
    version_store: IVersionStore,
    push: PushMetadata,
    branch: str | None = None,
) -> str | None:
    """The version recorded for the push's commit, or None."""
    return await version_store.read_version(
        push.owner, push.name, push.provider_id, push.sha, branch or push.branch
    )
