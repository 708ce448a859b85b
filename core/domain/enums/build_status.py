"""
Build Status Enums.

``BuildStatus`` is what gets reported to status observers.
``BuildPhase`` is the lifecycle state of a single build attempt.
"""
from enum import Enum


class BuildStatus(str, Enum):
    """Status values reported to build status updaters."""

    STARTED = "started"
    FAILED = "failed"
    ERROR = "error"
    PASSED = "passed"
    CANCELED = "canceled"


class BuildPhase(str, Enum):
    """Lifecycle of one build attempt."""

    NOT_STARTED = "not_started"
    STARTED = "started"
    RUNNING = "running"
    PASSED = "passed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (BuildPhase.PASSED, BuildPhase.FAILED)
