"""
Redis Stream Progress Log.

Appends each progress line to a Redis Stream so other processes can tail
goal output.
"""
from datetime import datetime, timezone
import logging
from typing import Optional

import redis.asyncio as aioredis

from core.application.interfaces import IProgressLog


logger = logging.getLogger(__name__)


class RedisStreamProgressLog(IProgressLog):
    """
    Stream format: one entry per line
    {
        "goal": str,
        "line": str,
        "timestamp": str,  # ISO format
    }
    """

    def __init__(
        self,
        name: str,
        redis_url: str = "redis://localhost:6379/0",
        stream_name: str = "sdm:progress",
        maxlen: int = 10000,
    ):
        self.name = name
        self.redis_url = redis_url
        self.stream_name = stream_name
        self.maxlen = maxlen
        self._redis_client: Optional[aioredis.Redis] = None

    async def connect(self) -> None:
        """Establish Redis connection."""
        if self._redis_client is None:
            self._redis_client = aioredis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
            )

    async def is_available(self) -> bool:
        try:
            await self.connect()
            await self._redis_client.ping()
            return True
        except Exception as e:
            logger.info("Redis %s not reachable: %s", self.redis_url, e)
            return False

    async def write(self, line: str) -> None:
        if self._redis_client is None:
            await self.connect()

        await self._redis_client.xadd(
            self.stream_name,
            {
                "goal": self.name,
                "line": line.rstrip("\n"),
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
            maxlen=self.maxlen,
        )

    async def close(self) -> None:
        """Close Redis connection."""
        if self._redis_client:
            await self._redis_client.aclose()
            self._redis_client = None
