from __future__ import annotations

import threading
from collections import Counter

from unified_search.schemas import SearchMetricsSnapshot

POPULAR_QUERIES_SHOWN = 10


class SearchMetrics:
    """Process-wide search counters. Purely observational."""

    def __init__(self, popular_queries_table_size: int = 500) -> None:
        self.popular_queries_table_size = popular_queries_table_size
        self._lock = threading.Lock()
        self.reset()

    def reset(self) -> None:
        with self._lock:
            self._searches = 0
            self._total_response_time_ms = 0.0
            self._cache_hits = 0
            self._cache_misses = 0
            self._adapter_failures: Counter[str] = Counter()
            self._popular_queries: Counter[str] = Counter()

    def record_search(self, query: str, response_time_ms: float, cache_hit: bool = False) -> None:
        with self._lock:
            self._searches += 1
            self._total_response_time_ms += max(0.0, response_time_ms)
            if cache_hit:
                self._cache_hits += 1
            else:
                self._cache_misses += 1
            self._popular_queries[query] += 1
            if len(self._popular_queries) > self.popular_queries_table_size:
                least_frequent, _ = min(self._popular_queries.items(), key=lambda kv: kv[1])
                del self._popular_queries[least_frequent]

    def record_adapter_failure(self, catalog_name: str) -> None:
        with self._lock:
            self._adapter_failures[catalog_name] += 1

    def snapshot(self) -> SearchMetricsSnapshot:
        with self._lock:
            lookups = self._cache_hits + self._cache_misses
            hit_rate = self._cache_hits / lookups if lookups else 0.0
            return SearchMetricsSnapshot(
                searches=self._searches,
                average_response_time_ms=round(self._total_response_time_ms / self._searches, 2) if self._searches else 0.0,
                cache_hits=self._cache_hits,
                cache_misses=self._cache_misses,
                cache_hit_rate=round(hit_rate, 2),
                adapter_failures=dict(self._adapter_failures),
                popular_queries=self._popular_queries.most_common(POPULAR_QUERIES_SHOWN),
            )
