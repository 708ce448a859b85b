"""
Remote Progress Log.

Ships buffered log lines to a Rolar-style log service over HTTP.
"""
from datetime import datetime, timezone
import logging
import time
from typing import List, Optional, Sequence

import aiohttp

from core.application.interfaces import IProgressLog


logger = logging.getLogger(__name__)


class RemoteProgressLog(IProgressLog):
    """
    Buffers lines and POSTs them to ``<base_url>/api/logs/<path>``.

    The buffer is flushed when it reaches ``buffer_size`` lines, when more
    than ``flush_interval`` seconds passed since the last flush, and on
    ``close()``. Lines that could not be delivered stay buffered for the next
    flush, up to ``buffer_size`` of the most recent ones.
    """

    def __init__(
        self,
        base_url: str,
        log_path: Sequence[str],
        name: str = "remote",
        buffer_size: int = 1000,
        flush_interval: float = 2.0,
        timeout_seconds: float = 10.0,
    ):
        self.name = name
        self.base_url = base_url.rstrip("/")
        self.log_path = [segment.replace("/", "_") for segment in log_path]
        self.buffer_size = buffer_size
        self.flush_interval = flush_interval
        self._timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self._buffer: List[dict] = []
        self._last_flush = time.monotonic()

    @property
    def url(self) -> Optional[str]:
        return f"{self.base_url}/logs/{'/'.join(self.log_path)}"

    @property
    def _post_url(self) -> str:
        return f"{self.base_url}/api/logs/{'/'.join(self.log_path)}"

    async def is_available(self) -> bool:
        try:
            async with aiohttp.ClientSession(timeout=self._timeout) as session:
                async with session.head(self.base_url) as response:
                    return response.status < 500
        except (aiohttp.ClientError, OSError, TimeoutError) as e:
            logger.info("Log service %s not reachable: %s", self.base_url, e)
            return False

    async def write(self, line: str) -> None:
        self._buffer.append(
            {
                "level": "info",
                "message": line.rstrip("\n"),
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }
        )
        overdue = time.monotonic() - self._last_flush >= self.flush_interval
        if len(self._buffer) >= self.buffer_size or overdue:
            await self.flush()

    async def flush(self) -> None:
        if not self._buffer:
            return
        pending, self._buffer = self._buffer, []
        payload = {"host": "sdm", "content": pending}
        try:
            async with aiohttp.ClientSession(timeout=self._timeout) as session:
                async with session.post(self._post_url, json=payload) as response:
                    if response.status >= 400:
                        error_text = await response.text()
                        raise aiohttp.ClientResponseError(
                            response.request_info,
                            response.history,
                            status=response.status,
                            message=error_text,
                        )
        except Exception:
            self._rebuffer(pending)
            raise
        finally:
            self._last_flush = time.monotonic()

    def _rebuffer(self, pending: List[dict]) -> None:
        # At most buffer_size lines are retained; the oldest go first
        buffered = pending + self._buffer
        dropped = len(buffered) - self.buffer_size
        if dropped > 0:
            logger.warning(
                "Log service %s unreachable, dropped %d oldest line(s)", self.base_url, dropped
            )
            buffered = buffered[dropped:]
        self._buffer = buffered

    async def close(self) -> None:
        await self.flush()
