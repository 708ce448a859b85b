"""
Unit of Work Pattern Implementation.

Manages database transactions and repository lifecycle.
"""
from typing import Optional
import logging
from sqlalchemy.ext.asyncio import AsyncSession

from core.infrastructure.database.repositories import (
    SQLAlchemyBuildIdentifierRepository,
    SQLAlchemyVersionRepository,
)


logger = logging.getLogger(__name__)


class UnitOfWork:
    """
    Unit of Work pattern implementation.

    Usage:
        async with UnitOfWork(session) as uow:
            records = await uow.build_identifiers.find(owner, name, provider_id)
            await uow.build_identifiers.save(records[0].bumped())
            await uow.commit()
    """

    def __init__(self, session: AsyncSession):
        """
        Initialize Unit of Work.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session
        self._build_identifiers: Optional[SQLAlchemyBuildIdentifierRepository] = None
        self._versions: Optional[SQLAlchemyVersionRepository] = None

    async def __aenter__(self):
        """Enter async context."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """
        Exit async context.

        Rolls back transaction if exception occurred.
        """
        if exc_type is not None:
            logger.error("Transaction failed: %s", exc_val)
            await self.rollback()

        # Don't close session here - it's managed externally

    @property
    def build_identifiers(self) -> SQLAlchemyBuildIdentifierRepository:
        if self._build_identifiers is None:
            self._build_identifiers = SQLAlchemyBuildIdentifierRepository(self.session)
        return self._build_identifiers

    @property
    def versions(self) -> SQLAlchemyVersionRepository:
        if self._versions is None:
            self._versions = SQLAlchemyVersionRepository(self.session)
        return self._versions

    async def commit(self):
        """Commit transaction."""
        try:
            await self.session.commit()
            logger.debug("Transaction committed")
        except Exception as e:
            logger.error("Commit failed: %s", e)
            await self.rollback()
            raise

    async def rollback(self):
        """Rollback transaction."""
        await self.session.rollback()
        logger.warning("Transaction rolled back")
