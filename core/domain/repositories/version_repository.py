"""Repository interface for versions computed per commit."""

from abc import ABC, abstractmethod
from typing import Optional

from ..value_objects import PushMetadata


class VersionRepository(ABC):
    """Computed build versions keyed by repository, commit and branch."""

    @abstractmethod
    async def save_version(self, push: PushMetadata, version: str) -> None:
        """Record the version computed for a push."""
        pass

    @abstractmethod
    async def read_version(
        self, owner: str, name: str, provider_id: str, sha: str, branch: str
    ) -> Optional[str]:
        """Return the stored version, or None."""
        pass
