"""Tests for OnDeployStatus."""

import pytest

from orchestration.deploy import OnDeployStatus, StatusEvent


@pytest.mark.asyncio
async def test_other_contexts_are_ignored(repo_ref, credentials, invocation):
    called: list[object] = []

    async def listener(dli):
        called.append(dli)

    handler = OnDeployStatus([listener])

    result = await handler.handle(
        StatusEvent(id=repo_ref, context="sdm/build", state="success"), credentials, invocation.context
    )

    assert result.code == 0
    assert called == []


@pytest.mark.asyncio
async def test_staging_deploy_notifies_all_listeners(repo_ref, credentials, invocation):
    endpoints: list[str] = []

    async def broken(dli):
        raise RuntimeError("chat down")

    async def listener(dli):
        endpoints.append(f"{dli.environment}:{dli.endpoint}")

    handler = OnDeployStatus([broken, listener])

    result = await handler.handle(
        StatusEvent(
            id=repo_ref,
            context="deploy/staging",
            state="success",
            target_url="https://staging.example.com",
        ),
        credentials,
        invocation.context,
    )

    assert result.code == 0
    assert endpoints == ["staging:https://staging.example.com"]
    assert result.message == "Notified 1 of 2 deployment listener(s)"
