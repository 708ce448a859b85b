"""Concurrent fan-out that never lets one failure cancel its siblings."""

import asyncio
from collections.abc import Awaitable, Iterable
from dataclasses import dataclass, field
from typing import Any


@dataclass
class GatherOutcome:
    """Results and errors of a fan-out, in no particular order."""

    results: list[Any] = field(default_factory=list)
    errors: list[BaseException] = field(default_factory=list)

    @property
    def attempted(self) -> int:
        return len(self.results) + len(self.errors)

    @property
    def failed(self) -> bool:
        return bool(self.errors)


async def gather_isolated(awaitables: Iterable[Awaitable[Any]]) -> GatherOutcome:
    """
    Await every awaitable concurrently and collect outcomes.

    Each awaitable runs to completion regardless of the others; exceptions are
    collected instead of propagated.
    """
    outcome = GatherOutcome()
    for item in await asyncio.gather(*awaitables, return_exceptions=True):
        if isinstance(item, BaseException):
            outcome.errors.append(item)
        else:
            outcome.results.append(item)
    return outcome
