import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from typing import TypeVar

from cookite.client.errors import TransientServerError


logger = logging.getLogger(__name__)

T = TypeVar("T")

TRANSIENT_MARKERS = ("500", "502", "503")
MAX_JITTER_SECONDS = 1.0


def is_transient(error: Exception) -> bool:
    if isinstance(error, TransientServerError):
        return True
    message = str(error)
    return any(marker in message for marker in TRANSIENT_MARKERS)


def backoff_delay(attempt: int, base_delay: float) -> float:
    return base_delay * 2 ** (attempt - 1) + random.uniform(0, MAX_JITTER_SECONDS)


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = 3,
    base_delay: float = 1.0,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Await ``operation()``, retrying transient server errors with exponential backoff.

    Anything that is not a 500/502/503 is raised immediately. When every attempt
    fails the last error is raised.
    """
    for attempt in range(1, max_attempts + 1):
        try:
            return await operation()
        except Exception as exc:
            if attempt == max_attempts or not is_transient(exc):
                raise
            delay = backoff_delay(attempt, base_delay)
            logger.info("Attempt %s failed (%s), retrying in %.2fs", attempt, exc, delay)
            await sleep(delay)

    raise ValueError("max_attempts must be at least 1")
