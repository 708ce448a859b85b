"""
Version Service.

Persists the version computed for a commit so that later steps of the same
build read it back instead of recomputing it.
"""
import logging
from typing import Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from core.application.interfaces import IVersionStore
from core.domain.value_objects import PushMetadata
from core.infrastructure.database.unit_of_work import UnitOfWork


logger = logging.getLogger(__name__)


class VersionService(IVersionStore):
    """SQL-backed version store."""

    def __init__(self, session_factory: Callable[[], AsyncSession]):
        self._session_factory = session_factory

    async def save_version(self, push: PushMetadata, version: str) -> None:
        async with self._session_factory() as session:
            async with UnitOfWork(session) as uow:
                await uow.versions.save_version(push, version)
                await uow.commit()

    async def read_version(
        self, owner: str, name: str, provider_id: str, sha: str, branch: str
    ) -> Optional[str]:
        async with self._session_factory() as session:
            version = await UnitOfWork(session).versions.read_version(
                owner, name, provider_id, sha, branch
            )
        if version is None:
            logger.info("No version recorded for %s/%s@%s on %s", owner, name, sha[:7], branch)
        return version
