from .build_identifier_repository import BuildIdentifierRepository
from .version_repository import VersionRepository

__all__ = ["BuildIdentifierRepository", "VersionRepository"]
