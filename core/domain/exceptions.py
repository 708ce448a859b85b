"""
Goal execution errors.

Every goal maps these to a failing ExecuteGoalResult; none of them escape a
goal invocation.
"""
from typing import List, Optional


class GoalExecutionError(Exception):
    """Base error for goal execution."""

    code: int = 1


class BuildStartError(GoalExecutionError):
    """The backend could not begin a build."""


class BuildRunError(GoalExecutionError):
    """The backend ran and reported an erroneous outcome."""


class PipelineStepError(GoalExecutionError):
    """A subprocess step returned a non-zero exit code."""

    def __init__(self, step: str, code: int, message: Optional[str] = None):
        self.step = step
        self.code = code
        super().__init__(message or f"Step '{step}' failed with exit code {code}")


class AnnouncementError(GoalExecutionError):
    """An artifact was produced but announcing it failed."""


class ProjectAccessError(GoalExecutionError):
    """A working copy could not be obtained."""


class VersionNotFoundError(GoalExecutionError):
    """No version was persisted for the commit."""


class ListenerDeliveryError(GoalExecutionError):
    """One or more listener invocations failed."""

    def __init__(self, errors: List[BaseException]):
        self.errors = list(errors)
        super().__init__(
            f"{len(self.errors)} listener invocation(s) failed: "
            + "; ".join(str(e) for e in self.errors)
        )
