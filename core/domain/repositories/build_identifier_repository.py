"""Repository interface for per-repository build identifiers."""

from abc import ABC, abstractmethod
from typing import List

from ..entities.build_identifier import BuildIdentifier


class BuildIdentifierRepository(ABC):
    """Persisted build counters keyed by (owner, name, provider_id)."""

    @abstractmethod
    async def find(self, owner: str, name: str, provider_id: str) -> List[BuildIdentifier]:
        """Return every stored record for the repository.

        More than one record means the store holds duplicates; callers pick.
        """
        pass

    @abstractmethod
    async def save(self, identifier: BuildIdentifier) -> None:
        """Insert or update the record for the identifier's repository."""
        pass
