"""
SQLAlchemy ORM Models.

Persisted state for build identifiers and computed versions.
"""
from datetime import datetime

from sqlalchemy import Column, DateTime, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import declarative_base


Base = declarative_base()


# =============================================================================
# BUILD IDENTIFIER MODEL
# =============================================================================

class BuildIdentifierModel(Base):
    """
    Build counter per repository.

    One row per (owner, name, provider_id); ``identifier`` holds the last
    number handed out.
    """

    __tablename__ = "sdm_build_identifiers"

    id = Column(Integer, primary_key=True, autoincrement=True)

    owner = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)
    provider_id = Column(String(255), nullable=False)

    identifier = Column(String(32), nullable=False, default="0")

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("owner", "name", "provider_id", name="uq_build_identifier_repo"),
    )

    def __repr__(self):
        return (
            f"<BuildIdentifierModel({self.owner}/{self.name}@{self.provider_id}"
            f"={self.identifier})>"
        )


# =============================================================================
# VERSION MODEL
# =============================================================================

class SdmVersionModel(Base):
    """Version computed for a commit on a branch."""

    __tablename__ = "sdm_versions"

    id = Column(Integer, primary_key=True, autoincrement=True)

    owner = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)
    provider_id = Column(String(255), nullable=False)
    sha = Column(String(64), nullable=False)
    branch = Column(String(255), nullable=False)

    version = Column(String(255), nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("owner", "name", "provider_id", "sha", "branch", name="uq_sdm_version_commit"),
        Index("ix_sdm_versions_sha", "sha"),
    )

    def __repr__(self):
        return f"<SdmVersionModel({self.owner}/{self.name}@{self.sha[:7]}={self.version})>"
