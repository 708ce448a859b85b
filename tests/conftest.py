"""Shared fixtures."""

import json
from pathlib import Path

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from core.domain.value_objects import ProjectCredentials, PushMetadata, RepoRef
from core.infrastructure.database.models import Base
from core.infrastructure.logs.progress_logs import EphemeralProgressLog
from orchestration.models import GoalInvocation, GoalMetadata, HandlerContext
from tests.fakes import FakeProjectLoader


# Use in-memory SQLite for testing
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def test_engine():
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(test_engine):
    """Create test session factory."""
    yield async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def repo_ref() -> RepoRef:
    return RepoRef(owner="acme", repo="widget", sha="a1b2c3d4e5f6", branch="feature/x")


@pytest.fixture
def push(repo_ref) -> PushMetadata:
    return PushMetadata(
        owner=repo_ref.owner,
        name=repo_ref.repo,
        provider_id=repo_ref.provider_id,
        sha=repo_ref.sha,
        branch=repo_ref.branch,
        default_branch="main",
        commit_message="Add widgets",
    )


@pytest.fixture
def credentials() -> ProjectCredentials:
    return ProjectCredentials(token="ghp_secret")


@pytest.fixture
def progress_log() -> EphemeralProgressLog:
    return EphemeralProgressLog("test")


@pytest.fixture
def node_project_dir(tmp_path) -> Path:
    (tmp_path / "package.json").write_text(
        json.dumps({"name": "widget", "version": "1.2.0"}), encoding="utf-8"
    )
    return tmp_path


@pytest.fixture
def project_loader(node_project_dir) -> FakeProjectLoader:
    return FakeProjectLoader(node_project_dir)


@pytest.fixture
def invocation(repo_ref, push, credentials, progress_log) -> GoalInvocation:
    return GoalInvocation(
        id=repo_ref,
        credentials=credentials,
        progress_log=progress_log,
        goal=GoalMetadata(name="build"),
        push=push,
        context=HandlerContext(team_id="T123"),
    )
