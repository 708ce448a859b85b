"""Orchestration models - GoalInvocation, ExecuteGoalResult, HandlerContext."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
import functools
import logging
from uuid import uuid4

from core.application.interfaces import AddressChannels, IProgressLog
from core.domain.entities import ProcessResult
from core.domain.value_objects import ProjectCredentials, PushMetadata, RepoRef

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HandlerContext:
    """Who a goal runs for."""

    team_id: str
    correlation_id: str = field(default_factory=lambda: str(uuid4()))


@dataclass(frozen=True)
class GoalMetadata:
    """Descriptive data about the goal being executed."""

    name: str
    unique_name: str | None = None
    environment: str = "code"
    description: str | None = None

    @property
    def key(self) -> str:
        return self.unique_name or self.name


@dataclass(frozen=True)
class GoalInvocation:
    """Everything a goal needs; one per dispatched goal, shared by its steps."""

    id: RepoRef
    credentials: ProjectCredentials
    progress_log: IProgressLog
    goal: GoalMetadata
    push: PushMetadata
    context: HandlerContext
    address_channels: AddressChannels | None = None

    @property
    def sha(self) -> str:
        return self.id.sha

    @property
    def branch(self) -> str:
        return self.id.branch


@dataclass(frozen=True)
class ExecuteGoalResult:
    """Outcome of a goal. ``code`` 0 means success."""

    code: int = 0
    message: str | None = None
    target_url: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.code == 0

    @classmethod
    def success(cls, message: str | None = None, target_url: str | None = None) -> "ExecuteGoalResult":
        return cls(code=0, message=message, target_url=target_url)

    @classmethod
    def failure(cls, error: BaseException | str, code: int = 1) -> "ExecuteGoalResult":
        if isinstance(error, BaseException):
            code = getattr(error, "code", code) or code
            message = str(error) or error.__class__.__name__
        else:
            message = error
        return cls(code=code, message=message)

    @classmethod
    def from_process(cls, result: ProcessResult) -> "ExecuteGoalResult":
        return cls(code=result.code, message=result.message)


# A goal implementation.
ExecuteGoal = Callable[[GoalInvocation], Awaitable[ExecuteGoalResult]]


def failure_on_error(goal_name: str) -> Callable[[ExecuteGoal], ExecuteGoal]:
    """Map any exception escaping a goal to a failing result."""

    def decorate(fn: ExecuteGoal) -> ExecuteGoal:
        @functools.wraps(fn)
        async def wrapper(invocation: GoalInvocation) -> ExecuteGoalResult:
            try:
                return await fn(invocation)
            except Exception as exc:
                logger.warning("Goal %s failed on %s: %s", goal_name, invocation.id, exc, exc_info=True)
                await invocation.progress_log.write(f"{goal_name} failed: {exc}")
                return ExecuteGoalResult.failure(exc)

        return wrapper

    return decorate
