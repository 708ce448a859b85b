"""Deployment status reaction - notifying listeners when a commit is deployed."""

from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass

from core.domain.value_objects import ProjectCredentials, RepoRef
from delivery_sdk.logging import get_logger

from .fanout import gather_isolated
from .models import ExecuteGoalResult, HandlerContext

logger = get_logger("orchestration.deploy")

STAGING_DEPLOY_CONTEXT = "deploy/staging"


@dataclass(frozen=True)
class StatusEvent:
    """A commit status changed."""

    id: RepoRef
    context: str
    state: str
    target_url: str | None = None
    description: str = ""


@dataclass(frozen=True)
class DeploymentListenerInvocation:
    id: RepoRef
    credentials: ProjectCredentials
    context: HandlerContext
    environment: str
    endpoint: str | None


DeploymentListener = Callable[[DeploymentListenerInvocation], Awaitable[None]]


class OnDeployStatus:
    """Calls every deployment listener when the staging deploy status arrives."""

    def __init__(
        self,
        listeners: Sequence[DeploymentListener],
        context: str = STAGING_DEPLOY_CONTEXT,
    ) -> None:
        self._listeners = list(listeners)
        self._context = context

    async def handle(
        self,
        event: StatusEvent,
        credentials: ProjectCredentials,
        handler_context: HandlerContext,
    ) -> ExecuteGoalResult:
        if event.context != self._context:
            return ExecuteGoalResult.success(message=f"Ignored status {event.context}")

        invocation = DeploymentListenerInvocation(
            id=event.id,
            credentials=credentials,
            context=handler_context,
            environment=self._context.split("/")[-1],
            endpoint=event.target_url,
        )
        outcome = await gather_isolated(listener(invocation) for listener in self._listeners)
        for error in outcome.errors:
            logger.warning("Deployment listener failed for %s: %s", event.id, error)
        return ExecuteGoalResult.success(
            message=f"Notified {len(outcome.results)} of {outcome.attempted} deployment listener(s)"
        )
