"""
Database configuration.

Builds the async engine and session factory from DatabaseSettings.
"""
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
import logging

from core.settings.modules.database_settings import DatabaseSettings


logger = logging.getLogger(__name__)


# =============================================================================
# ENGINE CREATION
# =============================================================================

def create_engine(settings: Optional[DatabaseSettings] = None) -> AsyncEngine:
    """
    Create async SQLAlchemy engine.

    Args:
        settings: Database settings (loaded from the environment if omitted)

    Returns:
        Configured async engine
    """
    settings = settings or DatabaseSettings()
    logger.info("Creating database engine for %s", settings.database_url.split("@")[-1])

    return create_async_engine(
        settings.database_url,
        echo=settings.echo_sql,
        pool_pre_ping=True,
    )


# Global engine instance
engine: Optional[AsyncEngine] = None


def get_engine() -> AsyncEngine:
    """Get or create global engine instance."""
    global engine

    if engine is None:
        engine = create_engine()

    return engine


# =============================================================================
# SESSION FACTORY
# =============================================================================

def get_session_factory(bind: Optional[AsyncEngine] = None) -> async_sessionmaker[AsyncSession]:
    """
    Get session factory.

    Args:
        bind: Engine to bind (defaults to the global engine)

    Returns:
        Session factory for creating sessions
    """
    return async_sessionmaker(
        bind=bind or get_engine(),
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


# =============================================================================
# DATABASE INITIALIZATION
# =============================================================================

async def init_database(bind: Optional[AsyncEngine] = None) -> None:
    """Create all tables if they don't exist."""
    from core.infrastructure.database.models import Base

    logger.info("Initializing database...")

    async with (bind or get_engine()).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.info("Database initialized")


async def close_database() -> None:
    """Close database connections."""
    global engine

    if engine:
        logger.info("Closing database connections...")
        await engine.dispose()
        engine = None
