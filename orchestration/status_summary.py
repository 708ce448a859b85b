"""Commit status summary of a goal set."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum

from core.application.interfaces import CommitStatus, ICommitStatusClient
from core.domain.value_objects import ProjectCredentials, RepoRef
from delivery_sdk.logging import get_logger

logger = get_logger("orchestration.status_summary")

GOAL_SET_STATUS_CONTEXT = "sdm/goals"


class GoalState(str, Enum):
    PLANNED = "planned"
    REQUESTED = "requested"
    IN_PROCESS = "in_process"
    SUCCESS = "success"
    FAILURE = "failure"
    SKIPPED = "skipped"

    @property
    def is_done(self) -> bool:
        return self in (GoalState.SUCCESS, GoalState.FAILURE, GoalState.SKIPPED)


@dataclass(frozen=True)
class GoalRecord:
    name: str
    state: GoalState


@dataclass(frozen=True)
class GoalSetEvent:
    """The goals planned for one push and their current states."""

    goal_set_id: str
    id: RepoRef
    goals: tuple[GoalRecord, ...]
    target_url: str | None = None


GoalSetListener = Callable[[GoalSetEvent, ProjectCredentials], Awaitable[None]]


async def _post(
    client: ICommitStatusClient,
    credentials: ProjectCredentials,
    event: GoalSetEvent,
    status: CommitStatus,
) -> None:
    try:
        await client.create_status(credentials, event.id, status)
    except Exception as exc:
        logger.warning("Unable to set commit status on %s: %s", event.id, exc)


def pending_status_on_goal_set(client: ICommitStatusClient) -> GoalSetListener:
    """Mark the commit pending as soon as its goals are planned."""

    async def on_goal_set(event: GoalSetEvent, credentials: ProjectCredentials) -> None:
        await _post(
            client,
            credentials,
            event,
            CommitStatus(
                state="pending",
                context=GOAL_SET_STATUS_CONTEXT,
                description=f"Planned {len(event.goals)} goal(s)",
                target_url=event.target_url,
            ),
        )

    return on_goal_set


def status_on_goal_completion(client: ICommitStatusClient) -> GoalSetListener:
    """Mark the commit failed on the first failed goal, successful when all are done."""

    async def on_goal_completed(event: GoalSetEvent, credentials: ProjectCredentials) -> None:
        failed = [g.name for g in event.goals if g.state == GoalState.FAILURE]
        if failed:
            status = CommitStatus(
                state="failure",
                context=GOAL_SET_STATUS_CONTEXT,
                description=f"Failed goal(s): {', '.join(failed)}",
                target_url=event.target_url,
            )
        elif all(g.state.is_done for g in event.goals):
            status = CommitStatus(
                state="success",
                context=GOAL_SET_STATUS_CONTEXT,
                description=f"All {len(event.goals)} goal(s) completed",
                target_url=event.target_url,
            )
        else:
            return
        await _post(client, credentials, event, status)

    return on_goal_completed


@dataclass(frozen=True)
class GoalSetStatusListeners:
    on_goal_set: GoalSetListener
    on_goal_completed: GoalSetListener


def summarize_goals_in_commit_status(client: ICommitStatusClient) -> GoalSetStatusListeners:
    """Listeners keeping one commit status in step with a goal set."""
    return GoalSetStatusListeners(
        on_goal_set=pending_status_on_goal_set(client),
        on_goal_completed=status_on_goal_completion(client),
    )
