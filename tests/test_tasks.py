"""
Tests for all-settle task execution
"""

import asyncio

import pytest

from pageaudit.core.tasks import UnitTimeoutError, gather_settled, settle


async def succeed(value, delay=0.0):
    await asyncio.sleep(delay)
    return value


async def fail(message):
    raise RuntimeError(message)


@pytest.mark.asyncio
async def test_gather_waits_for_every_unit():
    outcomes = await gather_settled([
        ("slow", lambda: succeed("slow", 0.05)),
        ("broken", lambda: fail("bad input")),
        ("fast", lambda: succeed("fast")),
    ])

    assert [o.name for o in outcomes] == ["slow", "broken", "fast"]
    assert outcomes[0].ok and outcomes[0].value == "slow"
    assert not outcomes[1].ok
    assert outcomes[1].error_message == "bad input"
    assert outcomes[2].value == "fast"


@pytest.mark.asyncio
async def test_per_unit_timeout():
    outcomes = await gather_settled([
        ("slow", lambda: succeed("slow", 5)),
        ("fast", lambda: succeed("fast")),
    ], timeout=0.05)

    assert isinstance(outcomes[0].error, UnitTimeoutError)
    assert outcomes[0].error_message == "timeout after 0.05s"
    assert outcomes[1].ok


@pytest.mark.asyncio
async def test_empty_units():
    assert await gather_settled([]) == []


@pytest.mark.asyncio
async def test_settle_uses_class_name_for_blank_errors():
    async def blank():
        raise KeyError()

    outcome = await settle("blank", blank)
    assert outcome.error_message == "KeyError"
    assert outcome.duration_ms >= 0


@pytest.mark.asyncio
async def test_cancellation_propagates():
    async def cancelled():
        raise asyncio.CancelledError()

    with pytest.raises(asyncio.CancelledError):
        await settle("cancelled", cancelled)
