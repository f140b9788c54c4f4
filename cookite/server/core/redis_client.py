"""Process-wide Redis connection holding the reservation store.

Keys written through it: ``reservation:{id}`` (one JSON record per
reservation), ``all_reservations`` (list of ids in creation order) and
``reminders_sent_{N}days`` (ids already reminded at each milestone). The
connection stays ``None`` until the app lifespan opens it, which request
handlers report as 503.
"""

import redis.asyncio as redis

from cookite.server.core.config import settings


redis_client: redis.Redis | None = None


async def init_redis() -> None:
    """Open the connection used by :class:`~cookite.server.db.store.ReservationStore`.

    Responses are decoded to ``str`` since every value stored is JSON or an id.
    """
    global redis_client
    redis_client = redis.from_url(
        settings.REDIS_URL,
        decode_responses=True,
    )


async def close_redis() -> None:
    """Close the connection on shutdown and mark the store unavailable."""
    global redis_client
    if redis_client is not None:
        await redis_client.aclose()
        redis_client = None
