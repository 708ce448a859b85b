"""
Build Identifier Service.

Allocates monotonically increasing build numbers per repository.
"""
import asyncio
import logging
from typing import Callable, Dict, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from core.domain.entities import BuildIdentifier
from core.infrastructure.database.unit_of_work import UnitOfWork


logger = logging.getLogger(__name__)


class BuildIdentifierService:
    """
    Single-writer allocator for per-repository build numbers.

    Allocation for the same repository key is serialized in-process with an
    asyncio lock, and the read-bump-write happens inside one transaction with
    the row selected FOR UPDATE, so concurrent allocations never share a
    number. The bumped value is committed before it is returned.

    When the store holds several records for one repository, the highest
    identifier wins.
    """

    def __init__(self, session_factory: Callable[[], AsyncSession]):
        """
        Args:
            session_factory: Factory producing async sessions
        """
        self._session_factory = session_factory
        self._locks: Dict[Tuple[str, str, str], asyncio.Lock] = {}

    def _lock_for(self, key: Tuple[str, str, str]) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        return lock

    async def allocate(self, owner: str, name: str, provider_id: str) -> str:
        """
        Obtain the next build identifier for a repository.

        The first allocation for an unseen repository yields "1".

        Returns:
            The allocated identifier as a numeric string
        """
        key = (owner, name, provider_id)
        async with self._lock_for(key):
            async with self._session_factory() as session:
                async with UnitOfWork(session) as uow:
                    records = await uow.build_identifiers.find(owner, name, provider_id)
                    if len(records) > 1:
                        logger.warning(
                            "Found %d build identifier records for %s/%s, using the highest",
                            len(records), owner, name,
                        )
                    current = (
                        max(records, key=lambda r: r.number)
                        if records
                        else BuildIdentifier(owner=owner, name=name, provider_id=provider_id)
                    )
                    bumped = current.bumped()
                    await uow.build_identifiers.save(bumped)
                    await uow.commit()

        logger.info("Allocated build identifier %s for %s/%s", bumped.identifier, owner, name)
        return bumped.identifier
