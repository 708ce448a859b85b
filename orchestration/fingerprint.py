"""Fingerprinting - computing project fingerprints and fanning them out."""

from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass

from core.application.interfaces import IProjectLoader, ProjectLoadOptions
from core.domain.entities import Project
from core.domain.exceptions import ListenerDeliveryError
from core.domain.value_objects import Fingerprint, ProjectCredentials, PushMetadata, RepoRef
from delivery_sdk.logging import get_logger

from .fanout import gather_isolated
from .models import ExecuteGoal, ExecuteGoalResult, GoalInvocation, HandlerContext, failure_on_error

logger = get_logger("orchestration.fingerprint")

PushTest = Callable[[PushMetadata, Project], bool]
Fingerprinter = Callable[[Project], Awaitable[Sequence[Fingerprint]]]


def any_push(push: PushMetadata, project: Project) -> bool:
    return True


@dataclass(frozen=True)
class FingerprinterRegistration:
    """An analyzer and the pushes it applies to."""

    name: str
    action: Fingerprinter
    push_test: PushTest = any_push


@dataclass(frozen=True)
class FingerprintListenerInvocation:
    """What a fingerprint listener receives, one per fingerprint."""

    id: RepoRef
    credentials: ProjectCredentials
    context: HandlerContext
    fingerprint: Fingerprint


FingerprintListener = Callable[[FingerprintListenerInvocation], Awaitable[None]]


async def compute_fingerprints(
    registrations: Sequence[FingerprinterRegistration],
    push: PushMetadata,
    project: Project,
) -> list[Fingerprint]:
    """Run every registration whose push test matches, in order."""
    fingerprints: list[Fingerprint] = []
    for registration in registrations:
        if not registration.push_test(push, project):
            logger.info("Fingerprinter %s does not apply to %s", registration.name, project.id)
            continue
        fingerprints.extend(await registration.action(project))
    return fingerprints


async def send_fingerprints_to_listeners(
    invocation: GoalInvocation,
    fingerprints: Sequence[Fingerprint],
    listeners: Sequence[FingerprintListener],
) -> int:
    """
    Deliver every fingerprint to every listener concurrently.

    Raises:
        ListenerDeliveryError: One or more deliveries failed; all were attempted
    """
    outcome = await gather_isolated(
        listener(
            FingerprintListenerInvocation(
                id=invocation.id,
                credentials=invocation.credentials,
                context=invocation.context,
                fingerprint=fingerprint,
            )
        )
        for listener in listeners
        for fingerprint in fingerprints
    )
    if outcome.failed:
        raise ListenerDeliveryError(outcome.errors)
    return outcome.attempted


def execute_fingerprinting(
    project_loader: IProjectLoader,
    registrations: Sequence[FingerprinterRegistration],
    listeners: Sequence[FingerprintListener],
) -> ExecuteGoal:
    """
    Goal that fingerprints the project and notifies listeners.

    Listener failures are isolated: they are logged and reported in the result
    message, and the goal still succeeds.
    """

    @failure_on_error("Fingerprint")
    async def execute(invocation: GoalInvocation) -> ExecuteGoalResult:
        if not registrations:
            return ExecuteGoalResult.success(message="No fingerprinters registered")

        async def fingerprint(project: Project) -> list[Fingerprint]:
            return await compute_fingerprints(registrations, invocation.push, project)

        fingerprints = await project_loader.with_project(
            ProjectLoadOptions(invocation.credentials, invocation.id, read_only=True),
            fingerprint,
        )
        await invocation.progress_log.write(
            f"Computed {len(fingerprints)} fingerprint(s) for {invocation.id}"
        )

        try:
            await send_fingerprints_to_listeners(invocation, fingerprints, listeners)
        except ListenerDeliveryError as exc:
            for error in exc.errors:
                logger.warning("Fingerprint listener failed for %s: %s", invocation.id, error)
            await invocation.progress_log.write(str(exc))
            return ExecuteGoalResult.success(
                message=f"Computed {len(fingerprints)} fingerprint(s); {exc}"
            )

        return ExecuteGoalResult.success(message=f"Computed {len(fingerprints)} fingerprint(s)")

    return execute
