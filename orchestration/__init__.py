"""Orchestration package - goal execution on top of the core layers."""

from .bus import EventBusProtocol, InMemoryEventBus
from .events import Event, EventMetadata
from .models import ExecuteGoal, ExecuteGoalResult, GoalInvocation, GoalMetadata, HandlerContext
from .orchestrator import GoalRunner

__all__ = [
    "Event",
    "EventBusProtocol",
    "EventMetadata",
    "ExecuteGoal",
    "ExecuteGoalResult",
    "GoalInvocation",
    "GoalMetadata",
    "GoalRunner",
    "HandlerContext",
    "InMemoryEventBus",
]
