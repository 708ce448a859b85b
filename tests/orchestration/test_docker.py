"""Tests for the image publish goal."""

import pytest

from core.domain.entities import ProcessResult
from orchestration import pipeline
from orchestration.docker import (
    IMAGE_LINK_FAILED,
    DockerImageName,
    DockerOptions,
    default_image_name_creator,
    execute_docker_build,
    registry_login_args,
)
from orchestration.models import ExecuteGoalResult
from tests.fakes import FakeImageLinkWebhook, FakeVersionStore


class FakeDocker:
    """Records docker invocations; fails the named subcommand."""

    def __init__(self, fail_on: str | None = None, code: int = 1) -> None:
        self.fail_on = fail_on
        self.code = code
        self.calls: list[list[str]] = []

    async def __call__(self, command, args, cwd, log, error_finder=None, env=None, secrets=()):
        self.calls.append([command, *args])
        if args[0] == self.fail_on:
            return ProcessResult(code=self.code, message=f"docker {args[0]} failed")
        return ProcessResult(code=0)

    @property
    def subcommands(self) -> list[str]:
        return [call[1] for call in self.calls]


@pytest.fixture
def docker(monkeypatch):
    fake = FakeDocker()
    monkeypatch.setattr(pipeline, "spawn_and_watch", fake)
    return fake


@pytest.fixture
def options():
    return DockerOptions(registry="my-registry.example.com:5000", user="ci", password="hunter2")


@pytest.fixture
def version_store(push):
    return FakeVersionStore(
        {(push.owner, push.name, push.provider_id, push.sha, push.branch): "1.2.0-feature.x.20240501123005"}
    )


def test_docker_hub_login_omits_registry():
    args = registry_login_args(DockerOptions(registry="docker.io", user="ci", password="pw"))

    assert args == ["login", "--username", "ci", "--password", "pw"]


def test_private_registry_login_includes_registry():
    args = registry_login_args(
        DockerOptions(registry="my-registry.example.com:5000", user="ci", password="pw")
    )

    assert args[-1] == "my-registry.example.com:5000"


def test_bare_alphanumeric_registry_is_omitted():
    args = registry_login_args(DockerOptions(registry="localregistry", user="ci", password="pw"))

    assert "localregistry" not in args


def test_image_name_format():
    assert DockerImageName("docker.io", "widget", "1.2.0").image == "docker.io/widget:1.2.0"


@pytest.mark.asyncio
async def test_publishes_image_in_order(docker, options, version_store, project_loader, invocation):
    webhook = FakeImageLinkWebhook()
    goal = execute_docker_build(project_loader, default_image_name_creator(version_store), webhook, options)

    result = await goal(invocation)

    image = "my-registry.example.com:5000/widget:1.2.0-feature.x.20240501123005"
    assert result.code == 0
    assert docker.subcommands == ["login", "build", "push"]
    assert docker.calls[1] == ["docker", "build", ".", "-f", "Dockerfile", "-t", image]
    assert docker.calls[2] == ["docker", "push", image]
    assert webhook.links == [("acme", "widget", invocation.sha, image, "T123")]
    assert project_loader.calls[0].read_only is False


@pytest.mark.asyncio
@pytest.mark.parametrize("failing_step, executed", [
    ("login", ["login"]),
    ("build", ["login", "build"]),
    ("push", ["login", "build", "push"]),
])
async def test_failing_step_stops_pipeline_with_its_code(
    monkeypatch, failing_step, executed, options, version_store, project_loader, invocation
):
    docker = FakeDocker(fail_on=failing_step, code=42)
    monkeypatch.setattr(pipeline, "spawn_and_watch", docker)
    webhook = FakeImageLinkWebhook()
    goal = execute_docker_build(project_loader, default_image_name_creator(version_store), webhook, options)

    result = await goal(invocation)

    assert result.code == 42
    assert docker.subcommands == executed
    assert webhook.links == []


@pytest.mark.asyncio
async def test_failed_preparation_stops_before_docker(docker, options, version_store, project_loader, invocation):
    prepared: list[str] = []

    async def compile_sources(project, inv):
        prepared.append("compile")
        return ExecuteGoalResult(code=3, message="tsc failed")

    async def never(project, inv):
        prepared.append("never")
        return ExecuteGoalResult.success()

    goal = execute_docker_build(
        project_loader,
        default_image_name_creator(version_store),
        FakeImageLinkWebhook(),
        options,
        preparations=[compile_sources, never],
    )

    result = await goal(invocation)

    assert result.code == 3
    assert prepared == ["compile"]
    assert docker.calls == []


@pytest.mark.asyncio
async def test_unacknowledged_image_link_fails_goal(docker, options, version_store, project_loader, invocation):
    goal = execute_docker_build(
        project_loader,
        default_image_name_creator(version_store),
        FakeImageLinkWebhook(acknowledge=False),
        options,
    )

    result = await goal(invocation)

    assert docker.subcommands == ["login", "build", "push"]
    assert result.code == 1
    assert result.message == IMAGE_LINK_FAILED


@pytest.mark.asyncio
async def test_missing_version_fails_before_login(docker, options, project_loader, invocation):
    goal = execute_docker_build(
        project_loader, default_image_name_creator(FakeVersionStore()), FakeImageLinkWebhook(), options
    )

    result = await goal(invocation)

    assert result.code != 0
    assert "No version found" in result.message
    assert docker.calls == []


@pytest.mark.asyncio
async def test_password_is_not_echoed(monkeypatch, options, version_store, project_loader, invocation, progress_log):
    goal = execute_docker_build(
        project_loader, default_image_name_creator(version_store), FakeImageLinkWebhook(), options
    )
    monkeypatch.setattr(pipeline, "spawn_and_watch", _echoing_spawn)

    await goal(invocation)

    assert "hunter2" not in progress_log.log


async def _echoing_spawn(command, args, cwd, log, error_finder=None, env=None, secrets=()):
    line = " ".join([command, *args])
    for secret in secrets:
        line = line.replace(secret, "***")
    await log.write(f"Running: {line}")
    return ProcessResult(code=0)


@pytest.mark.asyncio
async def test_image_link_transport_error_fails_goal(docker, options, version_store, project_loader, invocation):
    class UnreachableWebhook(FakeImageLinkWebhook):
        async def post_image_link(self, owner, repo, sha, image_url, team) -> bool:
            raise ConnectionRefusedError("webhook down")

    goal = execute_docker_build(
        project_loader, default_image_name_creator(version_store), UnreachableWebhook(), options
    )

    result = await goal(invocation)

    assert result.code == 1
    assert result.message.startswith(IMAGE_LINK_FAILED)
    assert "webhook down" in result.message
