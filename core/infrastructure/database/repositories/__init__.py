from .sqlalchemy_build_identifier_repository import SQLAlchemyBuildIdentifierRepository
from .sqlalchemy_version_repository import SQLAlchemyVersionRepository

__all__ = ["SQLAlchemyBuildIdentifierRepository", "SQLAlchemyVersionRepository"]
