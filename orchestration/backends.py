"""Build backends - strategies that actually run a build."""

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from pathlib import Path
import shutil
import tempfile

from core.application.interfaces import AddressChannels, IProgressLog, IProjectLoader, ProjectLoadOptions
from core.domain.entities import ProcessResult, Project, RunningBuild
from core.domain.exceptions import BuildStartError
from core.domain.value_objects import AppInfo, ProjectCredentials, RepoRef
from delivery_sdk.logging import get_logger

from .log_interpretation import LogInterpreter, npm_log_interpreter
from .pipeline import CommandStep, SubprocessPipeline

logger = get_logger("orchestration.backends")

StartBuild = Callable[
    [ProjectCredentials, RepoRef, str, IProgressLog, AddressChannels | None],
    Awaitable[RunningBuild],
]

ArtifactFinder = Callable[[Project], str | None]
AppInfoReader = Callable[[Project], AppInfo]


@dataclass(frozen=True)
class BuildBackend:
    """A build tool the orchestrator can drive."""

    name: str
    start_build: StartBuild
    log_interpreter: LogInterpreter


def node_app_info(project: Project) -> AppInfo:
    """App name and version from ``package.json``, falling back to the repo name."""
    package = project.read_json("package.json") or {}
    return AppInfo(
        name=package.get("name") or project.name,
        version=package.get("version") or "0.0.0",
        id=project.id,
    )


class SubprocessBuildBackend:
    """
    Runs a command list in a private working copy as a background task.

    ``start_build`` returns once the working copy is checked out; the
    ``RunningBuild.build_result`` task holds the working copy until the
    commands finish. A produced artifact is copied into ``staging_dir``
    before the working copy is released.
    """

    def __init__(
        self,
        name: str,
        project_loader: IProjectLoader,
        steps: Sequence[CommandStep],
        artifact_finder: ArtifactFinder | None = None,
        app_info_reader: AppInfoReader = node_app_info,
        log_interpreter: LogInterpreter = npm_log_interpreter,
    ) -> None:
        self.name = name
        self._project_loader = project_loader
        self._pipeline = SubprocessPipeline(steps=tuple(steps))
        self._artifact_finder = artifact_finder
        self._app_info_reader = app_info_reader
        self.log_interpreter = log_interpreter

    def as_backend(self) -> BuildBackend:
        return BuildBackend(
            name=self.name,
            start_build=self.start_build,
            log_interpreter=self.log_interpreter,
        )

    async def start_build(
        self,
        credentials: ProjectCredentials,
        repo_ref: RepoRef,
        team: str,
        log: IProgressLog,
        address_channels: AddressChannels | None = None,
    ) -> RunningBuild:
        started: asyncio.Future = asyncio.get_running_loop().create_future()
        running = RunningBuild(repo_ref=repo_ref, team=team, build_result=started, url=log.url)

        async def build(project: Project) -> ProcessResult:
            running.app_info = self._app_info_reader(project)
            if not started.done():
                started.set_result(None)
            result = await self._pipeline.run(project.base_dir, log)
            if result.code == 0 and self._artifact_finder is not None:
                self._stage_artifact(project, running)
            return result

        task = asyncio.create_task(
            self._project_loader.with_project(
                ProjectLoadOptions(credentials, repo_ref, read_only=False), build
            )
        )
        await asyncio.wait({started, task}, return_when=asyncio.FIRST_COMPLETED)
        if not started.done():
            started.cancel()
            exc = task.exception()
            raise BuildStartError(f"Unable to start {self.name} build of {repo_ref}: {exc}") from exc

        running.build_result = task
        logger.info("Started %s build of %s", self.name, repo_ref)
        return running

    def _stage_artifact(self, project: Project, running: RunningBuild) -> None:
        relative = self._artifact_finder(project)
        if not relative or not project.has_file(relative):
            return
        staging = Path(tempfile.mkdtemp(prefix="sdm-artifact-"))
        target = staging / Path(relative).name
        shutil.copy2(project.base_dir / relative, target)
        running.staging_dir = str(staging)
        running.deployment_unit_file = str(target)


def npm_build_backend(
    project_loader: IProjectLoader,
    script: str = "build",
    artifact_finder: ArtifactFinder | None = None,
) -> BuildBackend:
    """``npm ci`` followed by ``npm run <script>``."""
    return SubprocessBuildBackend(
        name="npm",
        project_loader=project_loader,
        steps=[
            CommandStep("install", "npm", ("ci",)),
            CommandStep(script, "npm", ("run", script)),
        ],
        artifact_finder=artifact_finder,
    ).as_backend()
