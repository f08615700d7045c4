"""Parallel fetch orchestrator: fans one query out to every selected catalog.

Every catalog call runs as its own task raced against that catalog's
deadline. A timeout or adapter error turns into an empty, unsuccessful
branch plus a metrics record; the aggregation itself never fails and never
waits longer than the slowest deadline.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional

from loguru import logger

from unified_search.data_providers.base import AdapterError, AdapterTimeout, CatalogAdapter
from unified_search.schemas import ALL_CATALOGS, CatalogItem, CatalogTag
from unified_search.services.metrics import SearchMetrics

DEFAULT_TIMEOUT_SECONDS = 2.0


@dataclass
class CatalogFetchResult:
    category: CatalogTag
    items: list[CatalogItem] = field(default_factory=list)
    success: bool = True
    error: Optional[str] = None
    elapsed_ms: float = 0.0


class ParallelFetchOrchestrator:
    def __init__(
        self,
        adapters: Mapping[CatalogTag, CatalogAdapter],
        timeouts: Mapping[str, float] | None = None,
        metrics: SearchMetrics | None = None,
    ) -> None:
        self.adapters = dict(adapters)
        self.timeouts = dict(timeouts or {})
        self.metrics = metrics or SearchMetrics()
        self.fan_outs = 0

    def timeout_for(self, category: CatalogTag) -> float:
        return self.timeouts.get(category, DEFAULT_TIMEOUT_SECONDS)

    async def aggregate(
        self,
        query: str,
        categories: Iterable[CatalogTag],
        max_results: int = 20,
    ) -> list[CatalogFetchResult]:
        selected = set(categories)
        ordered = [c for c in ALL_CATALOGS if c in selected]
        self.fan_outs += 1
        logger.debug(f"[Orchestrator] Fan-out query='{query}' catalogs={ordered}")
        tasks = [self._fetch(category, query, max_results) for category in ordered]
        return list(await asyncio.gather(*tasks))

    async def _fetch(self, category: CatalogTag, query: str, max_results: int) -> CatalogFetchResult:
        adapter = self.adapters.get(category)
        if adapter is None:
            return self._failure(category, f"No adapter registered for '{category}'", 0.0)

        deadline = self.timeout_for(category)
        t0 = time.perf_counter()
        try:
            items = await asyncio.wait_for(adapter.search(query, max_results), timeout=deadline)
        except asyncio.TimeoutError:
            error = AdapterTimeout(f"{adapter.name()} timed out after {deadline * 1000:.0f}ms")
            return self._failure(category, str(error), _elapsed_ms(t0))
        except AdapterError as exc:
            return self._failure(category, f"{exc.__class__.__name__}: {exc}", _elapsed_ms(t0))
        except Exception as exc:
            # A misbehaving adapter must not take the other catalogs down with it.
            logger.opt(exception=exc).error(f"[Orchestrator] Unexpected {category} adapter failure")
            return self._failure(category, f"{exc.__class__.__name__}: {exc}", _elapsed_ms(t0))

        elapsed = _elapsed_ms(t0)
        logger.debug(f"[Orchestrator] {category} returned {len(items)} items in {elapsed:.0f}ms")
        return CatalogFetchResult(category=category, items=list(items), elapsed_ms=elapsed)

    def _failure(self, category: CatalogTag, error: str, elapsed_ms: float) -> CatalogFetchResult:
        logger.warning(f"[Orchestrator] {category} search failed: {error}")
        self.metrics.record_adapter_failure(category)
        return CatalogFetchResult(category=category, success=False, error=error, elapsed_ms=elapsed_ms)


def _elapsed_ms(t0: float) -> float:
    return (time.perf_counter() - t0) * 1000
