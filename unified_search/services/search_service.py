from __future__ import annotations

import asyncio
import itertools
import time
from collections import Counter
from typing import Mapping

from loguru import logger

from unified_search.config import Settings, settings as default_settings
from unified_search.data_providers.base import CatalogAdapter
from unified_search.data_providers.google_books import GoogleBooksClient
from unified_search.data_providers.itunes import ITunesClient
from unified_search.data_providers.omdb import OMDbClient
from unified_search.data_providers.rawg import RAWGClient
from unified_search.ranking.composer import FinalScoreComposer
from unified_search.ranking.diversity import DiversityRanker
from unified_search.ranking.pipeline import RankingPipeline
from unified_search.schemas import (
    ALL_CATALOGS,
    CatalogTag,
    Query,
    RankedResult,
    ScoredItem,
    SearchMetricsSnapshot,
    SearchOptions,
    SearchResponse,
)
from unified_search.services.cache import IntelligentCache
from unified_search.services.debounce import DebounceScheduler
from unified_search.services.metrics import SearchMetrics
from unified_search.services.orchestrator import ParallelFetchOrchestrator


class SearchService:
    """Engine entry point: debounce, cache, single-flight fan-out and ranking."""

    def __init__(
        self,
        adapters: Mapping[CatalogTag, CatalogAdapter],
        settings: Settings = default_settings,
        cache: IntelligentCache | None = None,
        metrics: SearchMetrics | None = None,
        debouncer: DebounceScheduler | None = None,
        pipeline: RankingPipeline | None = None,
    ) -> None:
        self.settings = settings
        self.metrics = metrics if metrics is not None else SearchMetrics(settings.popular_queries_table_size)
        self.cache = cache if cache is not None else IntelligentCache(
            ttl_seconds=settings.cache_ttl_seconds,
            max_size=settings.cache_max_size,
            cleanup_interval_seconds=settings.cache_cleanup_interval_seconds,
        )
        self.debouncer = debouncer if debouncer is not None else DebounceScheduler(
            short_ms=settings.debounce_short_ms,
            medium_ms=settings.debounce_medium_ms,
            long_ms=settings.debounce_long_ms,
        )
        self.pipeline = pipeline if pipeline is not None else RankingPipeline(
            composer=FinalScoreComposer(),
            diversity=DiversityRanker(
                top_results=settings.diversity_top_results,
                max_per_catalog=settings.diversity_max_per_catalog,
                total_display=settings.diversity_total_display,
            ),
        )
        self.orchestrator = ParallelFetchOrchestrator(
            adapters,
            timeouts=settings.catalog_timeouts(),
            metrics=self.metrics,
        )
        self._in_flight: dict[str, asyncio.Task] = {}
        self._latest_ticket: dict[str, int] = {}
        self._active_searches: Counter[str] = Counter()
        self._tickets = itertools.count(1)

    @classmethod
    def from_settings(cls, settings: Settings = default_settings) -> "SearchService":
        adapters: dict[CatalogTag, CatalogAdapter] = {
            "film": OMDbClient(settings),
            "book": GoogleBooksClient(settings),
            "game": RAWGClient(settings),
            "music": ITunesClient(settings),
        }
        return cls(adapters, settings=settings)

    async def __aenter__(self) -> "SearchService":
        self.cache.start_sweeper()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        self.debouncer.cancel_all()
        await self.cache.stop_sweeper()

    def clear_cache(self) -> None:
        self.cache.clear()

    def get_metrics(self) -> SearchMetricsSnapshot:
        return self.metrics.snapshot()

    async def search(self, query: str, options: SearchOptions | None = None) -> SearchResponse:
        start = time.perf_counter()
        opts = options or SearchOptions()
        q = Query.from_text(query, opts.categories)
        if len(q.normalized) < self.settings.min_query_length:
            return SearchResponse()

        self.cache.start_sweeper()
        key = opts.debounce_key
        if not key:
            # No input source to supersede; identical queries meet in single-flight.
            return await self._run(q, opts, start)

        ticket = next(self._tickets)
        self._latest_ticket[key] = ticket
        self._active_searches[key] += 1
        try:
            return await self._run(q, opts, start, key, ticket)
        finally:
            self._active_searches[key] -= 1
            if not self._active_searches[key]:
                del self._active_searches[key]
                del self._latest_ticket[key]

    async def _run(
        self,
        q: Query,
        opts: SearchOptions,
        start: float,
        key: str | None = None,
        ticket: int = 0,
    ) -> SearchResponse:
        if key and opts.debounce and not await self.debouncer.schedule(key, q.normalized):
            logger.debug(f"[Search] Dropped superseded query '{q.normalized}' | key={key}")
            return SearchResponse(superseded=True, response_time_ms=round(_elapsed_ms(start), 2))

        cache_key = self.cache_key(q, opts)
        cached = self.cache.get(cache_key)
        if cached is not None:
            elapsed = _elapsed_ms(start)
            self.metrics.record_search(q.normalized, elapsed, cache_hit=True)
            logger.debug(f"[Search] Cache hit for '{q.normalized}' in {elapsed:.1f}ms")
            return self._response(cached, opts.limit, elapsed, from_cache=True)

        ranked = await self._single_flight(cache_key, q)
        elapsed = _elapsed_ms(start)
        self.metrics.record_search(q.normalized, elapsed, cache_hit=False)
        if key and self._latest_ticket[key] > ticket:
            logger.debug(f"[Search] Discarded stale result for '{q.normalized}' | key={key}")
            return SearchResponse(superseded=True, response_time_ms=round(elapsed, 2))

        logger.info(f"[Search] '{q.normalized}' -> {len(ranked)} results in {elapsed:.0f}ms")
        return self._response(ranked, opts.limit, elapsed, from_cache=False)

    @staticmethod
    def cache_key(q: Query, opts: SearchOptions) -> str:
        catalogs = ",".join(sorted(opts.categories))
        return f"unified_search|{q.normalized}|{catalogs}|{opts.limit}"

    async def _single_flight(self, cache_key: str, q: Query) -> tuple[ScoredItem, ...]:
        task = self._in_flight.get(cache_key)
        if task is None:
            task = asyncio.create_task(self._execute(cache_key, q))
            self._in_flight[cache_key] = task
            task.add_done_callback(lambda t, key=cache_key: self._forget(key, t))
        else:
            logger.debug(f"[Search] Joined in-flight search for '{q.normalized}'")
        # Shielded so one caller's cancellation does not cancel the shared fan-out.
        return await asyncio.shield(task)

    def _forget(self, cache_key: str, task: asyncio.Task) -> None:
        if self._in_flight.get(cache_key) is task:
            del self._in_flight[cache_key]

    async def _execute(self, cache_key: str, q: Query) -> tuple[ScoredItem, ...]:
        categories = [c for c in ALL_CATALOGS if c in q.catalogs]
        branches = await self.orchestrator.aggregate(q.text, categories, self.settings.adapter_max_results)
        candidates = [item for branch in branches if branch.success for item in branch.items]
        ranked = tuple(self.pipeline.rank(q.normalized, candidates))
        self.cache.set(cache_key, ranked, issued_at=q.issued_at)
        return ranked

    @staticmethod
    def _response(ranked: tuple[ScoredItem, ...], limit: int, elapsed_ms: float, from_cache: bool) -> SearchResponse:
        results = [
            RankedResult(
                **scored.item.model_dump(),
                rank=idx,
                final_score=round(scored.final_score, 3),
                text_relevance=round(scored.text_relevance, 3),
            )
            for idx, scored in enumerate(ranked[:limit], start=1)
        ]
        return SearchResponse(
            results=results,
            total_count=len(results),
            response_time_ms=round(elapsed_ms, 2),
            from_cache=from_cache,
        )


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000
