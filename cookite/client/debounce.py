import asyncio
from collections.abc import Callable


class Debouncer:
    """Run a callback once the caller has been quiet for ``delay`` seconds."""

    def __init__(self, delay: float) -> None:
        self.delay = delay
        self._task: asyncio.Task | None = None

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def schedule(self, callback: Callable[[], None]) -> None:
        self.cancel()
        self._task = asyncio.get_running_loop().create_task(self._fire(callback))

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def wait(self) -> None:
        """Wait for the pending callback, if any, to run."""
        if self._task is not None:
            await asyncio.wait({self._task})

    async def _fire(self, callback: Callable[[], None]) -> None:
        await asyncio.sleep(self.delay)
        callback()
