"""Application services."""
from .build_identifier_service import BuildIdentifierService
from .version_service import VersionService

__all__ = ["BuildIdentifierService", "VersionService"]
