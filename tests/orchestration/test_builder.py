"""Tests for LocalBuilder."""

import asyncio
from pathlib import Path

import pytest

from core.domain.entities import ProcessResult, RunningBuild
from core.domain.enums import BuildPhase
from core.domain.value_objects import AppInfo
from core.settings.modules.delivery_settings import TaggingSettings
from orchestration import pipeline
from orchestration.backends import BuildBackend, npm_build_backend
from orchestration.builder import BuildLifecycle, LocalBuilder
from orchestration.log_interpretation import InterpretedLog
from orchestration.tag import BuildTagger
from tests.fakes import (
    FakeArtifactStore,
    FakeImageLinkWebhook,
    FakeStatusUpdater,
    FakeTagClient,
    FakeVersionStore,
)


class FakeAllocator:
    def __init__(self) -> None:
        self.next = 0

    async def allocate(self, owner, name, provider_id) -> str:
        self.next += 1
        return str(self.next)


def _completed(result: ProcessResult) -> asyncio.Future:
    future = asyncio.get_running_loop().create_future()
    future.set_result(result)
    return future


def _backend(start_build, interpreter=None) -> BuildBackend:
    return BuildBackend(
        name="fake",
        start_build=start_build,
        log_interpreter=interpreter or (lambda log: InterpretedLog(relevant_part="ERR line", message="compile error")),
    )


def _running(repo_ref, result: ProcessResult, deployment_unit_file=None) -> RunningBuild:
    return RunningBuild(
        repo_ref=repo_ref,
        team="T123",
        build_result=_completed(result),
        url="https://logs.example.com/build/1",
        deployment_unit_file=deployment_unit_file,
        app_info=AppInfo(name="widget", version="1.2.0", id=repo_ref),
    )


@pytest.fixture
def status_updater():
    return FakeStatusUpdater()


@pytest.fixture
def tag_client():
    return FakeTagClient()


@pytest.fixture
def tagger(tag_client, push):
    versions = FakeVersionStore(
        {(push.owner, push.name, push.provider_id, push.sha, push.branch): "1.2.0-feature.x.20240501123005"}
    )
    return BuildTagger(tag_client, versions, TaggingSettings(enabled=True))


async def _initiate(builder, credentials, repo_ref, push, progress_log, invocation):
    return await builder.initiate_build(
        credentials, repo_ref, None, push, progress_log, invocation.context
    )


@pytest.mark.asyncio
async def test_start_failure_reports_failed_once(
    status_updater, tagger, credentials, repo_ref, push, progress_log, invocation
):
    async def start_build(*args):
        raise RuntimeError("docker daemon unreachable")

    builder = LocalBuilder(_backend(start_build), FakeAllocator(), status_updater, tagger)

    result = await _initiate(builder, credentials, repo_ref, push, progress_log, invocation)

    assert result.code != 0
    assert "docker daemon unreachable" in result.message
    assert status_updater.updates == [("failed", None, "feature/x", "1")]


@pytest.mark.asyncio
async def test_successful_build_without_artifact_passes_and_tags(
    status_updater, tag_client, tagger, credentials, repo_ref, push, progress_log, invocation, caplog
):
    async def start_build(*args):
        return _running(repo_ref, ProcessResult(code=0))

    store = FakeArtifactStore()
    builder = LocalBuilder(
        _backend(start_build), FakeAllocator(), status_updater, tagger, store, FakeImageLinkWebhook()
    )

    result = await _initiate(builder, credentials, repo_ref, push, progress_log, invocation)

    assert result.code == 0
    assert result.target_url == "https://logs.example.com/build/1"
    assert status_updater.statuses == ["started", "passed"]
    assert [t.tag for t in tag_client.tags] == ["1.2.0-feature.x.20240501123005+sdm.1"]
    assert tag_client.refs == ["refs/tags/1.2.0-feature.x.20240501123005+sdm.1"]
    assert store.stored == []
    assert "No artifact generated" in caplog.text


@pytest.mark.asyncio
async def test_successful_build_links_artifact(
    status_updater, tagger, credentials, repo_ref, push, progress_log, invocation
):
    async def start_build(*args):
        return _running(repo_ref, ProcessResult(code=0), deployment_unit_file="/tmp/widget.tgz")

    store = FakeArtifactStore()
    webhook = FakeImageLinkWebhook()
    builder = LocalBuilder(_backend(start_build), FakeAllocator(), status_updater, tagger, store, webhook)

    result = await _initiate(builder, credentials, repo_ref, push, progress_log, invocation)

    assert result.code == 0
    assert store.stored == ["/tmp/widget.tgz"]
    assert webhook.links == [
        ("acme", "widget", repo_ref.sha, "https://artifacts.example.com/widget/1.2.0", "T123")
    ]


@pytest.mark.asyncio
async def test_tag_and_link_errors_do_not_fail_successful_build(
    status_updater, push, credentials, repo_ref, progress_log, invocation
):
    versions = FakeVersionStore(
        {(push.owner, push.name, push.provider_id, push.sha, push.branch): "1.2.0"}
    )
    tagger = BuildTagger(FakeTagClient(fail=True), versions)

    class BrokenStore(FakeArtifactStore):
        async def store_file(self, app_info, local_file, credentials):
            raise OSError("disk full")

    async def start_build(*args):
        return _running(repo_ref, ProcessResult(code=0), deployment_unit_file="/tmp/widget.tgz")

    builder = LocalBuilder(
        _backend(start_build), FakeAllocator(), status_updater, tagger, BrokenStore(), FakeImageLinkWebhook()
    )

    result = await _initiate(builder, credentials, repo_ref, push, progress_log, invocation)

    assert result.code == 0
    assert status_updater.statuses == ["started", "passed"]


@pytest.mark.asyncio
async def test_run_failure_reports_failed_and_interprets_log(
    status_updater, tag_client, tagger, credentials, repo_ref, push, progress_log, invocation
):
    async def start_build(*args):
        return _running(repo_ref, ProcessResult(code=2, message="npm run build failed"))

    builder = LocalBuilder(_backend(start_build), FakeAllocator(), status_updater, tagger)

    result = await _initiate(builder, credentials, repo_ref, push, progress_log, invocation)

    assert result.code == 2
    assert result.message == "npm run build failed"
    assert status_updater.statuses == ["started", "failed"]
    assert tag_client.tags == []
    assert "Build failure: compile error" in progress_log.lines
    assert "ERR line" in progress_log.lines


@pytest.mark.asyncio
async def test_awaiting_result_raises_reports_failed(
    status_updater, tagger, credentials, repo_ref, push, progress_log, invocation
):
    async def explode() -> ProcessResult:
        raise ConnectionResetError("backend vanished")

    async def start_build(*args):
        return RunningBuild(repo_ref=repo_ref, team="T123", build_result=explode())

    builder = LocalBuilder(_backend(start_build), FakeAllocator(), status_updater, tagger)

    result = await _initiate(builder, credentials, repo_ref, push, progress_log, invocation)

    assert result.code != 0
    assert result.message.startswith("Build #1 of ")
    assert "backend vanished" in result.message
    assert status_updater.statuses == ["started", "failed"]


@pytest.mark.asyncio
async def test_status_update_failures_do_not_change_outcome(
    tagger, credentials, repo_ref, push, progress_log, invocation
):
    updater = FakeStatusUpdater(fail=True)

    async def start_build(*args):
        return _running(repo_ref, ProcessResult(code=0))

    builder = LocalBuilder(_backend(start_build), FakeAllocator(), updater, tagger)

    result = await _initiate(builder, credentials, repo_ref, push, progress_log, invocation)

    assert result.code == 0
    assert updater.statuses == ["started", "passed"]


@pytest.mark.asyncio
async def test_allocation_failure_returns_failure_without_status(
    status_updater, credentials, repo_ref, push, progress_log, invocation
):
    class BrokenAllocator:
        async def allocate(self, owner, name, provider_id):
            raise RuntimeError("database locked")

    async def start_build(*args):
        raise AssertionError("must not start")

    builder = LocalBuilder(_backend(start_build), BrokenAllocator(), status_updater)

    result = await _initiate(builder, credentials, repo_ref, push, progress_log, invocation)

    assert result.code != 0
    assert status_updater.updates == []


@pytest.mark.asyncio
async def test_each_build_gets_a_new_number(
    status_updater, credentials, repo_ref, push, progress_log, invocation
):
    async def start_build(*args):
        return _running(repo_ref, ProcessResult(code=0))

    builder = LocalBuilder(_backend(start_build), FakeAllocator(), status_updater)

    await _initiate(builder, credentials, repo_ref, push, progress_log, invocation)
    await _initiate(builder, credentials, repo_ref, push, progress_log, invocation)

    assert [u[3] for u in status_updater.updates] == ["1", "1", "2", "2"]


@pytest.mark.asyncio
async def test_lifecycle_rejects_illegal_transition(repo_ref):
    lifecycle = BuildLifecycle(FakeStatusUpdater(), repo_ref, "T123", "1")

    with pytest.raises(ValueError):
        await lifecycle.transition(BuildPhase.PASSED)

    await lifecycle.transition(BuildPhase.STARTED)
    await lifecycle.transition(BuildPhase.RUNNING)
    await lifecycle.transition(BuildPhase.PASSED)
    assert lifecycle.phase.is_terminal


@pytest.mark.asyncio
async def test_staged_artifact_is_removed_after_linking(
    monkeypatch, status_updater, project_loader, credentials, repo_ref, push, progress_log, invocation
):
    async def fake_npm(command, args, cwd, log, error_finder=None, env=None, secrets=()):
        if list(args[:2]) == ["run", "build"]:
            (Path(cwd) / "dist").mkdir(exist_ok=True)
            (Path(cwd) / "dist" / "widget.tgz").write_text("bundle", encoding="utf-8")
        return ProcessResult(code=0)

    monkeypatch.setattr(pipeline, "spawn_and_watch", fake_npm)
    backend = npm_build_backend(project_loader, artifact_finder=lambda project: "dist/widget.tgz")
    store = FakeArtifactStore()
    builder = LocalBuilder(backend, FakeAllocator(), status_updater, None, store, FakeImageLinkWebhook())

    result = await _initiate(builder, credentials, repo_ref, push, progress_log, invocation)

    assert result.code == 0
    staged = Path(store.stored[0])
    assert staged.name == "widget.tgz"
    assert not staged.exists()
    assert not staged.parent.exists()


@pytest.mark.asyncio
async def test_staged_artifact_is_removed_when_linking_is_skipped(
    tmp_path, status_updater, credentials, repo_ref, push, progress_log, invocation
):
    staging = tmp_path / "staging"
    staging.mkdir()
    (staging / "widget.tgz").write_text("bundle", encoding="utf-8")

    async def start_build(*args):
        running = _running(repo_ref, ProcessResult(code=0), deployment_unit_file=str(staging / "widget.tgz"))
        running.staging_dir = str(staging)
        return running

    builder = LocalBuilder(_backend(start_build), FakeAllocator(), status_updater)

    result = await _initiate(builder, credentials, repo_ref, push, progress_log, invocation)

    assert result.code == 0
    assert not staging.exists()
