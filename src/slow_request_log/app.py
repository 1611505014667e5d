from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import redis.asyncio as aioredis
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from slow_request_log.api.middleware.slow_request import SlowRequestMiddleware
from slow_request_log.api.v1.routers import demo, health
from slow_request_log.application.exceptions import TimingError
from slow_request_log.application.options import TimingOptions
from slow_request_log.application.ports.sink import LogSink
from slow_request_log.config import Settings, settings as default_settings
from slow_request_log.infrastructure.sinks.logging_sink import LoggingSink
from slow_request_log.infrastructure.sinks.redis_pubsub import RedisPubSubSink

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown lifecycle."""
    yield

    redis = getattr(app.state, "redis", None)
    if redis is not None:
        await redis.aclose()
        logger.info("Redis connection pool closed")


def _build_sink(app: FastAPI, settings: Settings) -> LogSink:
    if settings.SINK == "redis":
        # from_url does not connect until the first publish.
        app.state.redis = aioredis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_timeout=settings.REDIS_SOCKET_TIMEOUT,
            socket_connect_timeout=settings.REDIS_SOCKET_TIMEOUT,
        )
        logger.info("Slow request records go to redis channel=%s", settings.REDIS_LOG_CHANNEL)
        return RedisPubSubSink(app.state.redis, settings.REDIS_LOG_CHANNEL)
    return LoggingSink()


def create_app(
    settings: Settings | None = None,
    *,
    sink: LogSink | None = None,
) -> FastAPI:
    settings = settings or default_settings
    app = FastAPI(
        title="Slow Request Log",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        SlowRequestMiddleware,
        options=TimingOptions.from_settings(settings),
        sink=sink or _build_sink(app, settings),
    )

    _register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(demo.router)

    return app


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(TimingError)
    async def _timing_error(_req: Request, exc: TimingError) -> JSONResponse:
        logger.error("Request timing misuse: %s", exc.detail)
        return JSONResponse(status_code=500, content={"detail": exc.detail})
