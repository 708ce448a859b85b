"""Tests for tagging."""

import pytest

from core.settings.modules.delivery_settings import TaggingSettings
from orchestration.tag import BuildTagger, execute_tag
from tests.fakes import FakeTagClient, FakeVersionStore


@pytest.fixture
def versions(push):
    return FakeVersionStore(
        {(push.owner, push.name, push.provider_id, push.sha, push.branch): "1.2.0-feature.x.20240501123005"}
    )


@pytest.mark.asyncio
async def test_tag_goal_tags_commit_with_persisted_version(project_loader, invocation, versions):
    client = FakeTagClient()
    goal = execute_tag(project_loader, BuildTagger(client, versions))

    result = await goal(invocation)

    assert result.code == 0
    tag = client.tags[0]
    assert tag.tag == "1.2.0-feature.x.20240501123005"
    assert tag.object == invocation.sha
    assert tag.message == "Add widgets"
    assert tag.tagger.name == "Atomist"
    assert client.refs == ["refs/tags/1.2.0-feature.x.20240501123005"]


@pytest.mark.asyncio
async def test_tag_goal_without_version_fails(project_loader, invocation):
    client = FakeTagClient()
    goal = execute_tag(project_loader, BuildTagger(client, FakeVersionStore()))

    result = await goal(invocation)

    assert result.code == 1
    assert client.tags == []


@pytest.mark.asyncio
async def test_tagger_identity_comes_from_settings(credentials, repo_ref, push, versions):
    client = FakeTagClient()
    tagger = BuildTagger(
        client, versions, TaggingSettings(tagger_name="Release Bot", tagger_email="bot@example.com")
    )

    tag = await tagger.create_build_tag(credentials, repo_ref, push, "12")

    assert tag.tag == "1.2.0-feature.x.20240501123005+sdm.12"
    assert (tag.tagger.name, tag.tagger.email) == ("Release Bot", "bot@example.com")


@pytest.mark.asyncio
async def test_disabled_build_tagging_creates_nothing(credentials, repo_ref, push, versions):
    client = FakeTagClient()
    tagger = BuildTagger(client, versions, TaggingSettings(enabled=False))

    assert await tagger.create_build_tag(credentials, repo_ref, push, "12") is None
    assert client.tags == []
