"""Tests for version computation and persistence."""

from datetime import datetime, timezone
import json
import re

import pytest

from core.domain.entities import ProcessResult, Project
from core.domain.exceptions import PipelineStepError, VersionNotFoundError
from orchestration import versioning
from orchestration.versioning import (
    NodeProjectVersioner,
    compute_version,
    execute_version,
    read_declared_version,
    read_sdm_version,
)
from tests.fakes import FakeVersionStore

MOMENT = datetime(2024, 5, 1, 12, 30, 5, tzinfo=timezone.utc)


class FakeNpm:
    def __init__(self, code: int = 0) -> None:
        self.code = code
        self.calls: list[list[str]] = []

    async def __call__(self, command, args, cwd, log, error_finder=None, env=None, secrets=()):
        self.calls.append([command, *args])
        return ProcessResult(code=self.code, message=None if self.code == 0 else "npm version failed")


@pytest.fixture
def npm(monkeypatch):
    fake = FakeNpm()
    monkeypatch.setattr(versioning, "spawn_and_watch", fake)
    return fake


def test_default_branch_has_no_branch_suffix():
    assert compute_version("1.2.0", "main", "main", MOMENT) == "1.2.0-20240501123005"


def test_other_branch_is_dot_normalized():
    version = compute_version("1.2.0", "feature/x", "main", MOMENT)

    assert version == "1.2.0-feature.x.20240501123005"


@pytest.mark.parametrize("branch", ["fix/deep/nested", "release-2", "a/b"])
def test_branch_suffix_is_literal_substring(branch):
    version = compute_version("0.1.0", branch, "main", MOMENT)

    assert f"{branch.replace('/', '.')}." in version


def test_timestamp_has_fourteen_digits():
    assert re.fullmatch(r"1\.2\.0-feature\.x\.\d{14}", compute_version("1.2.0", "feature/x", "main"))


def test_read_declared_version(tmp_path, repo_ref):
    (tmp_path / "package.json").write_text(json.dumps({"version": "3.0.1"}), encoding="utf-8")

    assert read_declared_version(Project(base_dir=tmp_path, id=repo_ref)) == "3.0.1"


def test_missing_package_json_raises(tmp_path, repo_ref):
    with pytest.raises(VersionNotFoundError):
        read_declared_version(Project(base_dir=tmp_path, id=repo_ref))


@pytest.mark.asyncio
async def test_versioner_persists_and_records(npm, node_project_dir, repo_ref, push, progress_log):
    store = FakeVersionStore()
    versioner = NodeProjectVersioner(store, clock=lambda: MOMENT)

    version = await versioner(push, Project(base_dir=node_project_dir, id=repo_ref), progress_log)

    assert version == "1.2.0-feature.x.20240501123005"
    assert npm.calls == [["npm", "--no-git-tag-version", "version", version]]
    assert await read_sdm_version(store, push) == version


@pytest.mark.asyncio
async def test_failed_persist_is_not_recorded(monkeypatch, node_project_dir, repo_ref, push, progress_log):
    monkeypatch.setattr(versioning, "spawn_and_watch", FakeNpm(code=1))
    store = FakeVersionStore()
    versioner = NodeProjectVersioner(store, clock=lambda: MOMENT)

    with pytest.raises(PipelineStepError):
        await versioner(push, Project(base_dir=node_project_dir, id=repo_ref), progress_log)

    assert store.versions == {}


@pytest.mark.asyncio
async def test_version_goal(npm, project_loader, invocation):
    store = FakeVersionStore()
    goal = execute_version(project_loader, NodeProjectVersioner(store, clock=lambda: MOMENT))

    result = await goal(invocation)

    assert result.code == 0
    assert result.message == "Version 1.2.0-feature.x.20240501123005"
    assert project_loader.calls[0].read_only is False


@pytest.mark.asyncio
async def test_version_goal_maps_errors_to_failure(monkeypatch, project_loader, invocation):
    monkeypatch.setattr(versioning, "spawn_and_watch", FakeNpm(code=7))
    goal = execute_version(project_loader, NodeProjectVersioner(FakeVersionStore()))

    result = await goal(invocation)

    assert result.code == 7
