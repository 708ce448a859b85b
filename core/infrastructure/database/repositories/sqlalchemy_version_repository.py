"""
SQLAlchemy Version Repository Implementation.
"""
from typing import Optional
import logging
from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.domain.repositories import VersionRepository
from core.domain.value_objects import PushMetadata
from core.infrastructure.database.models import SdmVersionModel


logger = logging.getLogger(__name__)


class SQLAlchemyVersionRepository(VersionRepository):
    """Stores one version per (repository, sha, branch); later saves overwrite."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def save_version(self, push: PushMetadata, version: str) -> None:
        existing = await self._find(push.owner, push.name, push.provider_id, push.sha, push.branch)
        if existing:
            existing.version = version
        else:
            self.session.add(
                SdmVersionModel(
                    owner=push.owner,
                    name=push.name,
                    provider_id=push.provider_id,
                    sha=push.sha,
                    branch=push.branch,
                    version=version,
                )
            )
        await self.session.flush()
        logger.info("Recorded version %s for %s/%s@%s", version, push.owner, push.name, push.sha[:7])

    async def read_version(
        self, owner: str, name: str, provider_id: str, sha: str, branch: str
    ) -> Optional[str]:
        model = await self._find(owner, name, provider_id, sha, branch)
        return model.version if model else None

    async def _find(
        self, owner: str, name: str, provider_id: str, sha: str, branch: str
    ) -> Optional[SdmVersionModel]:
        result = await self.session.execute(
            select(SdmVersionModel).where(
                and_(
                    SdmVersionModel.owner == owner,
                    SdmVersionModel.name == name,
                    SdmVersionModel.provider_id == provider_id,
                    SdmVersionModel.sha == sha,
                    SdmVersionModel.branch == branch,
                )
            )
        )
        return result.scalar_one_or_none()
