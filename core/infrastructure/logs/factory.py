"""
Progress log factory.

Each goal gets a log that writes both to an in-memory buffer (used for log
interpretation) and to the first available persistent sink.
"""
import logging
from typing import Awaitable, Callable, List, Optional, Sequence

from core.application.interfaces import IProgressLog
from core.settings.modules.delivery_settings import ProgressLogSettings

from .progress_logs import (
    EphemeralProgressLog,
    LoggingProgressLog,
    WriteToAllProgressLog,
    first_available_progress_log,
)


logger = logging.getLogger(__name__)

ProgressLogFactory = Callable[[str, Sequence[str]], Awaitable[IProgressLog]]


def progress_log_factory(settings: Optional[ProgressLogSettings] = None) -> ProgressLogFactory:
    """
    Build a factory producing goal progress logs.

    Persistent sinks are tried in order: remote log service, Redis stream,
    then the Python logger as the fallback.

    Returns:
        Async callable ``(goal_name, log_path) -> IProgressLog``
    """
    settings = settings or ProgressLogSettings()
    if settings.rolar_base_url:
        logger.info("Logging with remote log service: %s", settings.rolar_base_url)

    async def create(goal_name: str, log_path: Sequence[str] = ()) -> IProgressLog:
        candidates: List[IProgressLog] = []
        if settings.rolar_base_url:
            from .remote_progress_log import RemoteProgressLog

            candidates.append(
                RemoteProgressLog(
                    settings.rolar_base_url,
                    list(log_path) or [goal_name],
                    name=goal_name,
                    buffer_size=settings.buffer_size,
                    flush_interval=settings.flush_interval,
                )
            )
        if settings.redis_url:
            from .redis_progress_log import RedisStreamProgressLog

            candidates.append(
                RedisStreamProgressLog(goal_name, settings.redis_url, settings.stream_name)
            )
        candidates.append(LoggingProgressLog(goal_name, "info"))

        persistent = await first_available_progress_log(*candidates)
        return WriteToAllProgressLog(goal_name, EphemeralProgressLog(goal_name), persistent)

    return create
