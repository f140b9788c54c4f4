from collections.abc import AsyncGenerator

import redis.asyncio as redis
from fastapi import status

from cookite.server.core import redis_client as redis_module
from cookite.server.core.errors import ApiException
from cookite.server.routers.schemas import Reservation


INDEX_KEY = "all_reservations"
MILESTONES = (7, 3, 1)


def reservation_key(reservation_id: str) -> str:
    return f"reservation:{reservation_id}"


def reminders_key(days: int) -> str:
    return f"reminders_sent_{days}days"


class ReservationStore:
    """Reservation records, the reservation index and reminder bookkeeping in Redis."""

    def __init__(self, client: redis.Redis) -> None:
        self.client = client

    async def exists(self, reservation_id: str) -> bool:
        return bool(await self.client.exists(reservation_key(reservation_id)))

    async def save(self, reservation: Reservation) -> None:
        """Write the record and append its id to the index in one MULTI/EXEC."""
        async with self.client.pipeline(transaction=True) as pipe:
            pipe.set(reservation_key(reservation.id), reservation.model_dump_json())
            pipe.rpush(INDEX_KEY, reservation.id)
            await pipe.execute()

    async def get(self, reservation_id: str) -> Reservation | None:
        raw = await self.client.get(reservation_key(reservation_id))
        if raw is None:
            return None
        return Reservation.model_validate_json(raw)

    async def index(self) -> list[str]:
        return await self.client.lrange(INDEX_KEY, 0, -1)

    async def load_indexed(self, ids: list[str] | None = None) -> list[Reservation]:
        """Every reservation referenced by the index, in index order; dangling ids are skipped."""
        if ids is None:
            ids = await self.index()
        if not ids:
            return []
        raws = await self.client.mget([reservation_key(rid) for rid in ids])
        return [Reservation.model_validate_json(raw) for raw in raws if raw is not None]

    async def reminded(self, days: int) -> list[str]:
        return await self.client.lrange(reminders_key(days), 0, -1)

    async def mark_reminded(self, days: int, reservation_id: str) -> None:
        await self.client.rpush(reminders_key(days), reservation_id)


async def get_store() -> AsyncGenerator[ReservationStore, None]:
    """Yield a store bound to the shared Redis connection for request handling."""
    if redis_module.redis_client is None:
        raise ApiException(status.HTTP_503_SERVICE_UNAVAILABLE, "Redis unavailable")
    yield ReservationStore(redis_module.redis_client)
