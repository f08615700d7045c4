import time

import pytest

from unified_search.data_providers.base import AdapterError
from unified_search.services.metrics import SearchMetrics
from unified_search.services.orchestrator import ParallelFetchOrchestrator

from catalog_fakes import FakeAdapter, make_item


TIMEOUTS = {"film": 0.2, "book": 0.2, "game": 0.1, "music": 0.2}


@pytest.mark.asyncio
async def test_results_follow_canonical_catalog_order(four_catalogs):
    orchestrator = ParallelFetchOrchestrator(four_catalogs, TIMEOUTS)
    results = await orchestrator.aggregate("star", ["music", "film", "game"])
    assert [r.category for r in results] == ["film", "game", "music"]
    assert all(r.success and len(r.items) == 5 for r in results)
    assert four_catalogs["book"].calls == []


@pytest.mark.asyncio
async def test_branches_run_concurrently():
    adapters = {
        c: FakeAdapter(c, [make_item(f"{c} hit", c)], delay=0.1)
        for c in ("film", "book", "game", "music")
    }
    orchestrator = ParallelFetchOrchestrator(adapters, {c: 1.0 for c in adapters})
    t0 = time.perf_counter()
    results = await orchestrator.aggregate("hit", adapters)
    assert time.perf_counter() - t0 < 0.3
    assert sum(len(r.items) for r in results) == 4


@pytest.mark.asyncio
async def test_hanging_adapter_is_cut_at_its_deadline(four_catalogs):
    four_catalogs["game"] = FakeAdapter("game", hang=True)
    metrics = SearchMetrics()
    orchestrator = ParallelFetchOrchestrator(four_catalogs, TIMEOUTS, metrics)

    t0 = time.perf_counter()
    results = await orchestrator.aggregate("star", ["film", "book", "game", "music"])
    elapsed = time.perf_counter() - t0

    assert elapsed < 0.5
    game = results[2]
    assert game.category == "game"
    assert not game.success
    assert game.items == []
    assert "timed out after 100ms" in game.error
    assert metrics.snapshot().adapter_failures == {"game": 1}
    assert all(r.success for r in results if r.category != "game")


@pytest.mark.asyncio
async def test_adapter_errors_are_isolated(four_catalogs):
    four_catalogs["music"] = FakeAdapter("music", error=AdapterError("HTTP 503"))
    four_catalogs["book"] = FakeAdapter("book", error=RuntimeError("boom"))
    metrics = SearchMetrics()
    orchestrator = ParallelFetchOrchestrator(four_catalogs, TIMEOUTS, metrics)

    results = {r.category: r for r in await orchestrator.aggregate("star", four_catalogs)}

    assert results["film"].success and results["game"].success
    assert results["music"].error == "AdapterError: HTTP 503"
    assert results["book"].error == "RuntimeError: boom"
    assert metrics.snapshot().adapter_failures == {"music": 1, "book": 1}


@pytest.mark.asyncio
async def test_missing_adapter_is_reported_not_raised():
    orchestrator = ParallelFetchOrchestrator({"film": FakeAdapter("film")}, TIMEOUTS)
    results = await orchestrator.aggregate("star", ["film", "music"])
    assert results[0].success
    assert not results[1].success
    assert "music" in results[1].error


@pytest.mark.asyncio
async def test_unknown_catalog_falls_back_to_default_deadline():
    orchestrator = ParallelFetchOrchestrator({}, {"film": 0.05})
    assert orchestrator.timeout_for("film") == 0.05
    assert orchestrator.timeout_for("music") == 2.0
    await orchestrator.aggregate("star", [])
    assert orchestrator.fan_outs == 1
