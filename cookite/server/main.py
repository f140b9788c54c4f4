import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cookite.server.core.config import settings
from cookite.server.core.errors import register_exception_handlers
from cookite.server.core.logging import setup_logging
from cookite.server.core.redis_client import close_redis, init_redis
import cookite.server.routers.admin as admin
import cookite.server.routers.health as health
import cookite.server.routers.reservations as reservations
import cookite.server.routers.validation as validation


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    await init_redis()
    logger.info("%s started", settings.SERVICE_NAME)
    try:
        yield
    finally:
        await close_redis()


app = FastAPI(
    title=settings.SERVICE_NAME,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(health.router, prefix=settings.API_PREFIX)
app.include_router(validation.router, prefix=settings.API_PREFIX)
app.include_router(reservations.router, prefix=settings.API_PREFIX)
app.include_router(admin.router, prefix=settings.API_PREFIX)
