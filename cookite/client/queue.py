import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar


logger = logging.getLogger(__name__)

T = TypeVar("T")


class RequestQueue:
    """Runs outbound calls one at a time, in arrival order, spaced by ``min_interval`` seconds.

    The interval is measured between the *starts* of consecutive operations. A
    failing operation raises to its own caller only; the queue moves on.
    """

    def __init__(self, min_interval: float = 0.1) -> None:
        self.min_interval = min_interval
        self._lock = asyncio.Lock()
        self._last_start: float | None = None

    async def enqueue(self, operation: Callable[[], Awaitable[T]]) -> T:
        async with self._lock:
            loop = asyncio.get_running_loop()
            if self._last_start is not None:
                remaining = self.min_interval - (loop.time() - self._last_start)
                while remaining > 0:
                    await asyncio.sleep(remaining)
                    remaining = self.min_interval - (loop.time() - self._last_start)

            self._last_start = loop.time()
            try:
                return await operation()
            except Exception as exc:
                logger.warning("Queued request failed: %s", exc)
                raise
