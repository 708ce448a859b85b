"""Build lifecycle orchestration - LocalBuilder and its state machine."""

import shutil
from typing import Protocol

from core.application.interfaces import (
    AddressChannels,
    BuildStatusTarget,
    IArtifactStore,
    IBuildStatusUpdater,
    IImageLinkWebhook,
    IProgressLog,
)
from core.domain.entities import RunningBuild
from core.domain.enums import BuildPhase, BuildStatus
from core.domain.exceptions import BuildRunError
from core.domain.value_objects import ProjectCredentials, PushMetadata, RepoRef
from delivery_sdk.logging import get_logger

from .backends import BuildBackend
from .log_interpretation import LogInterpreter
from .models import ExecuteGoal, ExecuteGoalResult, GoalInvocation, HandlerContext
from .tag import BuildTagger

logger = get_logger("orchestration.builder")


class BuildIdentifierAllocator(Protocol):
    async def allocate(self, owner: str, name: str, provider_id: str) -> str:
        ...


_TRANSITIONS: dict[BuildPhase, frozenset[BuildPhase]] = {
    BuildPhase.NOT_STARTED: frozenset({BuildPhase.STARTED, BuildPhase.FAILED}),
    BuildPhase.STARTED: frozenset({BuildPhase.RUNNING, BuildPhase.FAILED}),
    BuildPhase.RUNNING: frozenset({BuildPhase.PASSED, BuildPhase.FAILED}),
}

_REPORTED: dict[BuildPhase, BuildStatus] = {
    BuildPhase.STARTED: BuildStatus.STARTED,
    BuildPhase.PASSED: BuildStatus.PASSED,
    BuildPhase.FAILED: BuildStatus.FAILED,
}


class BuildLifecycle:
    """
    State of one build attempt.

    Each reported transition triggers exactly one status update. Status
    updates are best-effort: a failing updater is logged and the build goes on.
    """

    def __init__(
        self,
        status_updater: IBuildStatusUpdater,
        repo_ref: RepoRef,
        team: str,
        build_no: str,
    ) -> None:
        self.phase = BuildPhase.NOT_STARTED
        self.history: list[BuildPhase] = []
        self._status_updater = status_updater
        self._repo_ref = repo_ref
        self._team = team
        self._build_no = build_no

    async def transition(self, phase: BuildPhase, url: str | None = None) -> None:
        if phase not in _TRANSITIONS.get(self.phase, frozenset()):
            raise ValueError(f"Illegal build transition {self.phase.value} -> {phase.value}")
        self.phase = phase
        self.history.append(phase)
        status = _REPORTED.get(phase)
        if status is not None:
            await self._report(status, url)

    async def _report(self, status: BuildStatus, url: str | None) -> None:
        try:
            await self._status_updater.update_build_status(
                BuildStatusTarget(repo_ref=self._repo_ref, team=self._team, url=url),
                status,
                self._repo_ref.branch,
                self._build_no,
            )
        except Exception as exc:
            logger.warning(
                "Unable to report build status %s for %s: %s",
                status.value,
                self._repo_ref,
                exc,
            )


class LocalBuilder:
    """
    Drives a build through NotStarted -> Started -> Running -> Passed | Failed.

    The backend starts the build; this class allocates the build number,
    reports status, tags successful builds and links produced artifacts.
    """

    def __init__(
        self,
        backend: BuildBackend,
        identifier_allocator: BuildIdentifierAllocator,
        status_updater: IBuildStatusUpdater,
        tagger: BuildTagger | None = None,
        artifact_store: IArtifactStore | None = None,
        image_link_webhook: IImageLinkWebhook | None = None,
    ) -> None:
        """
        Args:
            backend: Build tool strategy
            identifier_allocator: Per-repository build number allocator
            status_updater: Receives one update per reported transition
            tagger: Creates the build tag on success (no tag when None)
            artifact_store: Stores a produced deployment unit
            image_link_webhook: Announces the stored artifact
        """
        self.backend = backend
        self._allocator = identifier_allocator
        self._status_updater = status_updater
        self._tagger = tagger
        self._artifact_store = artifact_store
        self._image_link_webhook = image_link_webhook

    @property
    def name(self) -> str:
        return self.backend.name

    @property
    def log_interpreter(self) -> LogInterpreter:
        return self.backend.log_interpreter

    def as_goal(self) -> ExecuteGoal:
        async def execute(invocation: GoalInvocation) -> ExecuteGoalResult:
            return await self.initiate_build(
                invocation.credentials,
                invocation.id,
                invocation.address_channels,
                invocation.push,
                invocation.progress_log,
                invocation.context,
            )

        return execute

    async def initiate_build(
        self,
        credentials: ProjectCredentials,
        repo_ref: RepoRef,
        address_channels: AddressChannels | None,
        push: PushMetadata,
        log: IProgressLog,
        context: HandlerContext,
    ) -> ExecuteGoalResult:
        """Run one build attempt and return its outcome.

        Returns:
            ExecuteGoalResult reflecting the build, never tag or link problems
        """
        try:
            build_no = await self._allocator.allocate(
                repo_ref.owner, repo_ref.repo, repo_ref.provider_id
            )
        except Exception as exc:
            logger.error("Unable to allocate build identifier for %s: %s", repo_ref, exc, exc_info=True)
            await log.write(f"Unable to allocate build identifier: {exc}")
            return ExecuteGoalResult.failure(exc)

        lifecycle = BuildLifecycle(self._status_updater, repo_ref, context.team_id, build_no)
        await log.write(f"Starting {self.name} build #{build_no} of {repo_ref}")

        try:
            running = await self.backend.start_build(
                credentials, repo_ref, context.team_id, log, address_channels
            )
        except Exception as exc:
            logger.warning("Build #%s of %s failed to start: %s", build_no, repo_ref, exc)
            await log.write(f"Build failed to start: {exc}")
            await lifecycle.transition(BuildPhase.FAILED)
            return ExecuteGoalResult.failure(exc)

        await lifecycle.transition(BuildPhase.STARTED, running.url)
        await lifecycle.transition(BuildPhase.RUNNING)

        try:
            result = await running.build_result
        except Exception as exc:
            logger.warning("Build #%s of %s raised: %s", build_no, repo_ref, exc)
            await log.write(f"Build failed: {exc}")
            await lifecycle.transition(BuildPhase.FAILED, running.url)
            return ExecuteGoalResult.failure(BuildRunError(f"Build #{build_no} of {repo_ref} failed: {exc}"))

        if result.error:
            await lifecycle.transition(BuildPhase.FAILED, running.url)
            await self._explain_failure(log)
            return ExecuteGoalResult(
                code=result.code,
                message=result.message or f"Build #{build_no} failed",
                target_url=running.url,
            )

        await lifecycle.transition(BuildPhase.PASSED, running.url)
        await self._after_success(credentials, repo_ref, push, build_no, running)
        await log.write(f"Build #{build_no} of {repo_ref} passed")
        return ExecuteGoalResult.success(
            message=f"Build #{build_no} passed", target_url=running.url
        )

    async def _explain_failure(self, log: IProgressLog) -> None:
        interpretation = self.log_interpreter(log.log)
        if interpretation is None:
            return
        await log.write(f"Build failure: {interpretation.message}")
        await log.write(interpretation.relevant_part)

    async def _after_success(
        self,
        credentials: ProjectCredentials,
        repo_ref: RepoRef,
        push: PushMetadata,
        build_no: str,
        running: RunningBuild,
    ) -> None:
        # Tag and link problems never change the build result
        if self._tagger is not None:
            try:
                await self._tagger.create_build_tag(credentials, repo_ref, push, build_no)
            except Exception as exc:
                logger.warning("Unable to tag build #%s of %s: %s", build_no, repo_ref, exc)

        try:
            if not running.deployment_unit_file:
                logger.warning("No artifact generated by build #%s of %s", build_no, repo_ref)
                return
            try:
                await self._link_artifact(credentials, repo_ref, running)
            except Exception as exc:
                logger.warning("Unable to link artifact of build #%s of %s: %s", build_no, repo_ref, exc)
        finally:
            if running.staging_dir:
                shutil.rmtree(running.staging_dir, ignore_errors=True)

    async def _link_artifact(
        self, credentials: ProjectCredentials, repo_ref: RepoRef, running: RunningBuild
    ) -> None:
        if self._artifact_store is None or self._image_link_webhook is None:
            logger.warning("No artifact store configured, not linking %s", running.deployment_unit_file)
            return
        if running.app_info is None:
            raise ValueError("Build produced an artifact without app info")
        url = await self._artifact_store.store_file(
            running.app_info, running.deployment_unit_file, credentials
        )
        linked = await self._image_link_webhook.post_image_link(
            repo_ref.owner, repo_ref.repo, repo_ref.sha, url, running.team
        )
        if not linked:
            logger.warning("Image link for %s was not acknowledged", url)
        else:
            logger.info("Linked artifact %s to %s", url, repo_ref)
