"""Tests for gather_isolated."""

import asyncio

import pytest

from orchestration.fanout import gather_isolated


@pytest.mark.asyncio
async def test_failure_does_not_cancel_siblings():
    finished: list[str] = []

    async def fail_fast():
        raise ValueError("nope")

    async def slow():
        await asyncio.sleep(0.01)
        finished.append("slow")
        return "slow"

    outcome = await gather_isolated([fail_fast(), slow()])

    assert finished == ["slow"]
    assert outcome.results == ["slow"]
    assert [str(e) for e in outcome.errors] == ["nope"]
    assert outcome.failed
    assert outcome.attempted == 2


@pytest.mark.asyncio
async def test_empty_fanout():
    outcome = await gather_isolated([])

    assert outcome.attempted == 0
    assert not outcome.failed
