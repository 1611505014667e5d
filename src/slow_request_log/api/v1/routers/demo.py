"""Example routes exercising manual segments, overrides and the auth phase marker."""
from __future__ import annotations

import asyncio
from typing import Annotated

from fastapi import APIRouter, Depends, Header, HTTPException, Query, status

from slow_request_log.api.context import TimingDep, authenticated, timing_end, timing_start
from slow_request_log.api.routing import TimedRoute, slow_request_options

router = APIRouter(prefix="/api/v1/demo", tags=["demo"], route_class=TimedRoute)


async def require_api_key(x_api_key: Annotated[str | None, Header()] = None) -> str:
    if not x_api_key:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing API key")
    return x_api_key


ApiKey = Annotated[str, Depends(authenticated(require_api_key))]


@router.get("/sleep")
async def sleep(delay_ms: Annotated[int, Query(ge=0, le=60_000)] = 0) -> dict[str, int]:
    await asyncio.sleep(delay_ms / 1000)
    return {"slept_ms": delay_ms}


@router.get("/segments")
async def segments(timing: TimingDep, delay_ms: Annotated[int, Query(ge=0, le=60_000)] = 0) -> dict[str, float | None]:
    timing_start("call db")
    with timing.segment("process data"):
        await asyncio.sleep(delay_ms / 1000)
        timing_end("call db")
    db = timing.ledger.get("call db")
    return {"call db": db.elapsed if db else None}


@router.get("/fast-only")
@slow_request_options(threshold=10)
async def fast_only(delay_ms: Annotated[int, Query(ge=0, le=60_000)] = 0) -> dict[str, int]:
    await asyncio.sleep(delay_ms / 1000)
    return {"slept_ms": delay_ms}


@router.get("/quiet")
@slow_request_options(threshold=False)
async def quiet(delay_ms: Annotated[int, Query(ge=0, le=60_000)] = 0) -> dict[str, int]:
    await asyncio.sleep(delay_ms / 1000)
    return {"slept_ms": delay_ms}


@router.get("/private")
async def private(api_key: ApiKey) -> dict[str, str]:
    return {"key": api_key[:4]}
