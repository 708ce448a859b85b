"""Goal runner - executes goals with eventing and a guaranteed result."""

from delivery_sdk.logging import get_logger
from delivery_sdk.utils.datetime import utc_now

from .bus import EventBusProtocol
from .events import Event, EventMetadata
from .models import ExecuteGoal, ExecuteGoalResult, GoalInvocation


class GoalRunner:
    """Runs one goal per invocation and always yields exactly one result."""

    def __init__(self, event_bus: EventBusProtocol | None = None) -> None:
        """Initialize goal runner.

        Args:
            event_bus: Optional EventBusProtocol for goal lifecycle events
        """
        self._event_bus = event_bus
        self._logger = get_logger("orchestration.goal_runner")

    async def run(self, goal: ExecuteGoal, invocation: GoalInvocation) -> ExecuteGoalResult:
        """Run a goal.

        Unexpected exceptions become a failing result. The progress log gets
        the terminal outcome and is closed afterwards.

        Args:
            goal: Goal implementation
            invocation: GoalInvocation to run it with

        Returns:
            ExecuteGoalResult of the goal
        """
        started_at = utc_now()
        log = invocation.progress_log
        self._logger.info(
            "goal_starting goal=%s repo=%s sha=%s",
            invocation.goal.key,
            invocation.id.slug,
            invocation.sha,
        )
        await self._publish_event("goal.started", invocation, {})

        try:
            result = await goal(invocation)
        except Exception as exc:
            self._logger.error(
                "goal_error goal=%s repo=%s error=%s",
                invocation.goal.key,
                invocation.id.slug,
                exc,
                exc_info=True,
            )
            result = ExecuteGoalResult.failure(exc)

        outcome = "succeeded" if result.succeeded else f"failed with code {result.code}"
        try:
            await log.write(
                f"Goal {invocation.goal.name} {outcome}"
                + (f": {result.message}" if result.message else "")
            )
            await log.close()
        except Exception as exc:
            self._logger.warning("progress_log_close_failed goal=%s error=%s", invocation.goal.key, exc)

        finished_at = utc_now()
        await self._publish_event(
            "goal.finished",
            invocation,
            {"code": result.code, "message": result.message, "target_url": result.target_url},
        )
        self._logger.info(
            "goal_finished goal=%s code=%d duration_ms=%d",
            invocation.goal.key,
            result.code,
            int((finished_at - started_at).total_seconds() * 1000),
        )
        return result

    async def _publish_event(
        self, name: str, invocation: GoalInvocation, payload: dict[str, object]
    ) -> None:
        """Publish a goal lifecycle event.

        Args:
            name: Event name
            invocation: GoalInvocation the event is about
            payload: Event payload
        """
        if self._event_bus is None:
            return
        event = Event(
            name=name,
            payload=payload,
            metadata=EventMetadata(
                goal=invocation.goal.key,
                repo=invocation.id.slug,
                sha=invocation.sha,
                team_id=invocation.context.team_id,
                timestamp=utc_now(),
            ),
        )
        await self._event_bus.publish(event)
