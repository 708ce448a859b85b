"""Progress log sinks."""
from .factory import ProgressLogFactory, progress_log_factory
from .progress_logs import (
    EphemeralProgressLog,
    LoggingProgressLog,
    WriteToAllProgressLog,
    first_available_progress_log,
)

__all__ = [
    "EphemeralProgressLog",
    "LoggingProgressLog",
    "ProgressLogFactory",
    "WriteToAllProgressLog",
    "first_available_progress_log",
    "progress_log_factory",
]
