from datetime import datetime, timezone

from fastapi import APIRouter, Depends, status
from redis.exceptions import RedisError

from cookite.server.core.config import settings
from cookite.server.core.errors import ApiException
from cookite.server.db.store import ReservationStore, get_store
from cookite.server.routers.schemas import HealthOut


router = APIRouter()


@router.get("/health", response_model=HealthOut)
async def health() -> HealthOut:
    """Basic liveness probe."""
    return HealthOut(
        status="healthy",
        timestamp=datetime.now(timezone.utc).isoformat(),
        service=settings.SERVICE_NAME,
    )


@router.get("/readiness")
async def readiness(store: ReservationStore = Depends(get_store)) -> dict[str, bool]:
    """Ensure the Redis store is reachable."""
    try:
        await store.client.ping()
    except RedisError as exc:
        raise ApiException(status.HTTP_503_SERVICE_UNAVAILABLE, "Redis unavailable") from exc

    return {"ready": True}
