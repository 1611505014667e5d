"""Shared test fixtures."""
from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from typing import Annotated, Any

import pytest
from fastapi import APIRouter, Depends, FastAPI, Header, HTTPException
from redis.exceptions import ConnectionError as RedisConnectionError

from slow_request_log.api.context import TimingDep, authenticated, timing_end, timing_start
from slow_request_log.api.middleware.slow_request import SlowRequestMiddleware
from slow_request_log.api.routing import TimedRoute, slow_request_options
from slow_request_log.application.options import TimingOptions
from slow_request_log.infrastructure.sinks.memory import MemorySink


@dataclass
class FakeClock:
    """Manually advanced clock, in milliseconds."""

    now: float = 1_000.0

    def now_ms(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


@dataclass
class FailingSink:
    calls: int = 0

    def emit(self, tags: frozenset[str], payload: dict[str, Any]) -> None:
        self.calls += 1
        raise ConnectionError("sink is down")


@dataclass
class AsyncMemorySink:
    records: list[tuple[frozenset[str], dict[str, Any]]] = field(default_factory=list)

    async def emit(self, tags: frozenset[str], payload: dict[str, Any]) -> None:
        await asyncio.sleep(0)
        self.records.append((tags, payload))


@dataclass
class FakeRedis:
    published: list[tuple[str, str]] = field(default_factory=list)

    async def publish(self, channel: str, message: str) -> int:
        self.published.append((channel, message))
        return 1


async def _require_token(x_token: Annotated[str | None, Header()] = None) -> str:
    if x_token != "secret":
        raise HTTPException(status_code=401, detail="bad token")
    return x_token


def build_app(sink: Any, **options: Any) -> FastAPI:
    """Small app with one route per timing scenario."""
    app = FastAPI()
    app.add_middleware(SlowRequestMiddleware, options=TimingOptions(**options), sink=sink)
    router = APIRouter(route_class=TimedRoute)

    @router.get("/slow")
    async def slow() -> dict[str, str]:
        await asyncio.sleep(0.05)
        return {"status": "done"}

    @router.get("/fast")
    async def fast() -> dict[str, str]:
        return {"status": "done"}

    @router.get("/sync")
    def sync_slow() -> dict[str, str]:
        time.sleep(0.05)
        return {"status": "done"}

    @router.get("/override")
    @slow_request_options(threshold=10)
    async def override() -> dict[str, str]:
        await asyncio.sleep(0.05)
        return {"status": "done"}

    @router.get("/off")
    @slow_request_options(threshold=False)
    async def off() -> dict[str, str]:
        await asyncio.sleep(0.05)
        return {"status": "done"}

    @router.get("/templated/{item_id}")
    async def templated(item_id: int) -> dict[str, int]:
        await asyncio.sleep(0.05)
        return {"item_id": item_id}

    @router.get("/segments")
    async def segments(timing: TimingDep) -> dict[str, str]:
        timing_start("call db")
        timing.start("process data")
        await asyncio.sleep(0.05)
        timing_end("call db")
        await asyncio.sleep(0.02)
        timing.end("process data")
        return {"status": "done"}

    @router.get("/leaky")
    async def leaky() -> dict[str, str]:
        timing_start("x")
        return {"status": "done"}

    @router.get("/unknown-end")
    async def unknown_end() -> dict[str, str]:
        timing_end("never started")
        return {"status": "done"}

    @router.get("/private")
    async def private(token: Annotated[str, Depends(authenticated(_require_token))]) -> dict[str, str]:
        await asyncio.sleep(0.01)
        return {"status": "done"}

    @router.get("/boom")
    async def boom() -> dict[str, str]:
        raise RuntimeError("handler exploded")

    app.include_router(router)
    return app


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sink() -> MemorySink:
    return MemorySink()


@dataclass
class BrokenRedis:
    async def publish(self, channel: str, message: str) -> int:
        raise RedisConnectionError("connection refused")
