"""
SQLAlchemy Build Identifier Repository Implementation.

Implements BuildIdentifierRepository using SQLAlchemy.
"""
from typing import List
import logging
from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.domain.entities import BuildIdentifier
from core.domain.repositories import BuildIdentifierRepository
from core.infrastructure.database.models import BuildIdentifierModel


logger = logging.getLogger(__name__)


class SQLAlchemyBuildIdentifierRepository(BuildIdentifierRepository):
    """
    SQLAlchemy implementation of BuildIdentifierRepository.

    Rows are selected FOR UPDATE so that a read-bump-write cycle inside one
    transaction holds the row lock on databases that support it.
    """

    def __init__(self, session: AsyncSession):
        """
        Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def find(self, owner: str, name: str, provider_id: str) -> List[BuildIdentifier]:
        result = await self.session.execute(
            select(BuildIdentifierModel)
            .where(
                and_(
                    BuildIdentifierModel.owner == owner,
                    BuildIdentifierModel.name == name,
                    BuildIdentifierModel.provider_id == provider_id,
                )
            )
            .with_for_update()
        )
        return [self._to_domain_entity(model) for model in result.scalars().all()]

    async def save(self, identifier: BuildIdentifier) -> None:
        result = await self.session.execute(
            select(BuildIdentifierModel).where(
                and_(
                    BuildIdentifierModel.owner == identifier.owner,
                    BuildIdentifierModel.name == identifier.name,
                    BuildIdentifierModel.provider_id == identifier.provider_id,
                )
            )
        )
        existing = result.scalars().first()

        if existing:
            existing.identifier = identifier.identifier
        else:
            self.session.add(
                BuildIdentifierModel(
                    owner=identifier.owner,
                    name=identifier.name,
                    provider_id=identifier.provider_id,
                    identifier=identifier.identifier,
                )
            )
        await self.session.flush()
        logger.debug("Saved build identifier %s/%s=%s", identifier.owner, identifier.name, identifier.identifier)

        # Note: Commit is handled by Unit of Work

    @staticmethod
    def _to_domain_entity(model: BuildIdentifierModel) -> BuildIdentifier:
        return BuildIdentifier(
            owner=model.owner,
            name=model.name,
            provider_id=model.provider_id,
            identifier=model.identifier,
        )
