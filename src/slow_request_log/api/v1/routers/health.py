from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from slow_request_log.api.routing import TimedRoute, slow_request_options

router = APIRouter(tags=["health"], route_class=TimedRoute)


@router.get("/healthz")
@slow_request_options(threshold=False)
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/readyz")
@slow_request_options(threshold=False)
async def readyz(request: Request) -> JSONResponse:
    redis = getattr(request.app.state, "redis", None)
    if redis is None:
        return JSONResponse(content={"status": "ready"})

    try:
        await redis.ping()
    except Exception as exc:  # noqa: BLE001
        return JSONResponse(
            status_code=503,
            content={"status": "unavailable", "errors": [f"redis: {exc}"]},
        )
    return JSONResponse(content={"status": "ready"})
