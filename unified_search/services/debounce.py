from __future__ import annotations

import asyncio

from loguru import logger


class DebounceScheduler:
    """
    Coalesce bursts of keystroke-driven searches per key.

    ``schedule`` resolves ``True`` once the adaptive delay elapses without a
    newer call for the same key, and ``False`` as soon as it is superseded.
    Short queries wait longer since they change the most while typing.
    """

    def __init__(self, short_ms: int = 500, medium_ms: int = 300, long_ms: int = 200) -> None:
        self.short_ms = short_ms
        self.medium_ms = medium_ms
        self.long_ms = long_ms
        self._pending: dict[str, tuple[asyncio.TimerHandle, asyncio.Future]] = {}

    def delay_for(self, query: str) -> float:
        length = len((query or "").strip())
        if length <= 2:
            return self.short_ms / 1000
        if length <= 4:
            return self.medium_ms / 1000
        return self.long_ms / 1000

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def schedule(self, key: str, query: str) -> bool:
        loop = asyncio.get_running_loop()
        self._supersede(key)

        future: asyncio.Future = loop.create_future()
        handle = loop.call_later(self.delay_for(query), self._fire, key, future)
        self._pending[key] = (handle, future)
        try:
            return await future
        except asyncio.CancelledError:
            handle.cancel()
            if self._pending.get(key, (None, None))[1] is future:
                del self._pending[key]
            raise

    def cancel_all(self) -> None:
        for key in list(self._pending):
            self._supersede(key)

    def _supersede(self, key: str) -> None:
        previous = self._pending.pop(key, None)
        if previous is None:
            return
        handle, future = previous
        handle.cancel()
        if not future.done():
            future.set_result(False)
            logger.debug(f"[Debounce] Superseded pending search | key={key}")

    def _fire(self, key: str, future: asyncio.Future) -> None:
        if self._pending.get(key, (None, None))[1] is future:
            del self._pending[key]
        if not future.done():
            future.set_result(True)
