"""Handler-facing timing API for the request currently being processed."""
from __future__ import annotations

from contextvars import ContextVar, Token
from typing import Annotated, Any, Callable

from fastapi import Depends, Request

from slow_request_log.application.exceptions import NoActiveRequestError
from slow_request_log.domain.entities.segment import TimingSegment
from slow_request_log.domain.value_objects.enums import LifecyclePhase
from slow_request_log.services.request_timing import RequestTiming

# Attribute on request.state reserved for this package.
STATE_KEY = "slow_request_log"

request_timing_ctx: ContextVar[RequestTiming | None] = ContextVar("request_timing", default=None)


def bind_timing(timing: RequestTiming) -> Token[RequestTiming | None]:
    return request_timing_ctx.set(timing)


def unbind_timing(token: Token[RequestTiming | None]) -> None:
    request_timing_ctx.reset(token)


def current_timing() -> RequestTiming:
    timing = request_timing_ctx.get()
    if timing is None:
        raise NoActiveRequestError("no request is being timed in this context")
    return timing


def timing_start(name: str) -> TimingSegment | None:
    return current_timing().start(name)


def timing_end(name: str) -> TimingSegment | None:
    return current_timing().end(name)


def mark_phase(phase: LifecyclePhase) -> None:
    """Signal a lifecycle boundary; a no-op outside a timed request."""
    timing = request_timing_ctx.get()
    if timing is not None:
        timing.enter_phase(phase)


def get_request_timing(request: Request) -> RequestTiming:
    timing = getattr(request.state, STATE_KEY, None)
    if timing is None:
        raise NoActiveRequestError("SlowRequestMiddleware is not installed")
    return timing


TimingDep = Annotated[RequestTiming, Depends(get_request_timing)]


def authenticated(dependency: Callable[..., Any]) -> Callable[..., Any]:
    """Wrap an auth dependency so its resolution marks the post-auth phase."""

    async def _authenticated(principal: Any = Depends(dependency)) -> Any:
        mark_phase(LifecyclePhase.ON_POST_AUTH)
        return principal

    return _authenticated
