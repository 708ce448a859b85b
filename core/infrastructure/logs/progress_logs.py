"""
Progress log sinks that need no external service.
"""
import logging
from typing import List, Optional

from core.application.interfaces import IProgressLog


logger = logging.getLogger(__name__)


class LoggingProgressLog(IProgressLog):
    """Writes every line to the Python logger. Always available."""

    def __init__(self, name: str, level: str = "info"):
        self.name = name
        self._level = logging.getLevelName(level.upper())
        if not isinstance(self._level, int):
            self._level = logging.INFO
        self._logger = logging.getLogger(f"{__name__}.{name}")

    async def write(self, line: str) -> None:
        self._logger.log(self._level, line.rstrip("\n"))


class EphemeralProgressLog(IProgressLog):
    """Keeps lines in memory so they can be interpreted after the fact."""

    def __init__(self, name: str):
        self.name = name
        self._lines: List[str] = []
        self.closed = False

    async def write(self, line: str) -> None:
        self._lines.append(line.rstrip("\n"))

    async def close(self) -> None:
        self.closed = True

    @property
    def lines(self) -> List[str]:
        return list(self._lines)

    @property
    def log(self) -> str:
        return "\n".join(self._lines)


class WriteToAllProgressLog(IProgressLog):
    """
    Fan-out sink.

    Every call is forwarded to every backing log. A backing log that raises is
    logged and skipped; the remaining logs still receive the call and the
    caller never sees the error.
    """

    def __init__(self, name: str, *logs: IProgressLog):
        self.name = name
        self.logs = list(logs)

    async def write(self, line: str) -> None:
        for target in self.logs:
            try:
                await target.write(line)
            except Exception as e:
                logger.warning("Progress log '%s' failed to write: %s", target.name, e)

    async def flush(self) -> None:
        for target in self.logs:
            try:
                await target.flush()
            except Exception as e:
                logger.warning("Progress log '%s' failed to flush: %s", target.name, e)

    async def close(self) -> None:
        for target in self.logs:
            try:
                await target.close()
            except Exception as e:
                logger.warning("Progress log '%s' failed to close: %s", target.name, e)

    async def is_available(self) -> bool:
        return True

    @property
    def log(self) -> str:
        for target in self.logs:
            if target.log:
                return target.log
        return ""

    @property
    def url(self) -> Optional[str]:
        for target in self.logs:
            if target.url:
                return target.url
        return None


async def first_available_progress_log(*logs: IProgressLog) -> IProgressLog:
    """
    Return the first log reporting itself available.

    The last log is the fallback and is returned without probing.
    """
    if not logs:
        raise ValueError("At least one progress log is required")
    for candidate in logs[:-1]:
        try:
            if await candidate.is_available():
                return candidate
        except Exception as e:
            logger.warning("Progress log '%s' availability check failed: %s", candidate.name, e)
        logger.info("Progress log '%s' unavailable, trying next", candidate.name)
    return logs[-1]
