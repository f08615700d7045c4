import asyncio

import pytest

from unified_search.services.debounce import DebounceScheduler


def test_delay_adapts_to_query_length():
    debouncer = DebounceScheduler()
    assert debouncer.delay_for("du") == 0.5
    assert debouncer.delay_for("dun") == 0.3
    assert debouncer.delay_for("dune") == 0.3
    assert debouncer.delay_for("dune 2") == 0.2
    assert debouncer.delay_for("  d  ") == 0.5


@pytest.mark.asyncio
async def test_single_call_fires_after_delay():
    debouncer = DebounceScheduler(short_ms=10, medium_ms=10, long_ms=10)
    assert await debouncer.schedule("box", "dune") is True
    assert debouncer.pending == 0


@pytest.mark.asyncio
async def test_burst_keeps_only_last_call():
    debouncer = DebounceScheduler(short_ms=40, medium_ms=30, long_ms=20)
    first = asyncio.create_task(debouncer.schedule("box", "d"))
    await asyncio.sleep(0.005)
    second = asyncio.create_task(debouncer.schedule("box", "du"))
    await asyncio.sleep(0.005)
    third = asyncio.create_task(debouncer.schedule("box", "dune"))

    assert await asyncio.gather(first, second, third) == [False, False, True]
    assert debouncer.pending == 0


@pytest.mark.asyncio
async def test_superseded_call_resolves_immediately():
    debouncer = DebounceScheduler(short_ms=1000, medium_ms=1000, long_ms=1000)
    first = asyncio.create_task(debouncer.schedule("box", "dune"))
    await asyncio.sleep(0)
    second = asyncio.create_task(debouncer.schedule("box", "dune 2"))
    assert await asyncio.wait_for(first, timeout=0.5) is False
    debouncer.cancel_all()
    assert await second is False


@pytest.mark.asyncio
async def test_keys_are_independent():
    debouncer = DebounceScheduler(short_ms=10, medium_ms=10, long_ms=10)
    results = await asyncio.gather(
        debouncer.schedule("left", "dune"),
        debouncer.schedule("right", "dune"),
    )
    assert results == [True, True]


@pytest.mark.asyncio
async def test_cancelled_waiter_cleans_up():
    debouncer = DebounceScheduler(short_ms=1000, medium_ms=1000, long_ms=1000)
    task = asyncio.create_task(debouncer.schedule("box", "dune"))
    await asyncio.sleep(0)
    assert debouncer.pending == 1
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    assert debouncer.pending == 0
