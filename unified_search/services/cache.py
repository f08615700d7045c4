"""In-memory result cache with TTL expiry and LRU eviction.

Entries expire ``ttl_seconds`` after insertion whether or not they are read.
Reads refresh the last-access time used for eviction once ``max_size`` is
exceeded. A background sweep drops expired entries that are never read
again, so memory stays bounded for one-off queries.
"""

from __future__ import annotations

import asyncio
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable

from loguru import logger


@dataclass
class CacheEntry:
    key: str
    value: Any
    created_at: float
    last_access: float
    issued_at: float = 0.0


class IntelligentCache:
    def __init__(
        self,
        ttl_seconds: float = 600.0,
        max_size: int = 1000,
        cleanup_interval_seconds: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self.max_size = max_size
        self.cleanup_interval_seconds = cleanup_interval_seconds
        self._clock = clock
        self._data: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = threading.RLock()
        self._sweeper: asyncio.Task | None = None

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            entry = self._data.get(key)
            return entry is not None and not self._expired(entry, self._clock())

    def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._data.get(key)
            if entry is None:
                return None
            now = self._clock()
            if self._expired(entry, now):
                del self._data[key]
                logger.debug(f"[Cache] Expired on read | key={key}")
                return None
            entry.last_access = now
            self._data.move_to_end(key)
            return entry.value

    def set(self, key: str, value: Any, issued_at: float | None = None) -> bool:
        """Publish *value*; refuse when the current entry came from a newer query.

        Writes without *issued_at* are unordered and always accepted.
        """
        with self._lock:
            now = self._clock()
            existing = self._data.get(key)
            if (
                issued_at is not None
                and existing is not None
                and not self._expired(existing, now)
                and existing.issued_at > issued_at
            ):
                logger.debug(f"[Cache] Ignored stale write | key={key}")
                return False
            self._data[key] = CacheEntry(
                key=key,
                value=value,
                created_at=now,
                last_access=now,
                issued_at=issued_at or 0.0,
            )
            self._data.move_to_end(key)
            while len(self._data) > self.max_size:
                evicted, _ = self._data.popitem(last=False)
                logger.debug(f"[Cache] Evicted least recently used | key={evicted}")
            return True

    def invalidate(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()
        logger.info("[Cache] Cleared")

    def purge_expired(self) -> int:
        with self._lock:
            now = self._clock()
            stale = [k for k, e in self._data.items() if self._expired(e, now)]
            for key in stale:
                del self._data[key]
        if stale:
            logger.debug(f"[Cache] Sweep removed {len(stale)} expired entries")
        return len(stale)

    def start_sweeper(self) -> None:
        """Start the periodic sweep on the running event loop (idempotent)."""
        if self._sweeper is not None and not self._sweeper.done():
            return
        self._sweeper = asyncio.get_running_loop().create_task(self._sweep_loop())

    async def stop_sweeper(self) -> None:
        if self._sweeper is None:
            return
        self._sweeper.cancel()
        try:
            await self._sweeper
        except asyncio.CancelledError:
            pass
        self._sweeper = None

    async def _sweep_loop(self) -> None:
        while True:
            await asyncio.sleep(self.cleanup_interval_seconds)
            self.purge_expired()

    def _expired(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.created_at >= self.ttl_seconds
