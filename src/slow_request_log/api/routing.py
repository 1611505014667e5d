"""Route class and per-route options for request timing."""
from __future__ import annotations

import functools
import inspect
from typing import Any, Callable, Coroutine, Mapping

from fastapi import Request, Response
from fastapi.routing import APIRoute

from slow_request_log.api.context import mark_phase
from slow_request_log.domain.value_objects.enums import LifecyclePhase

ROUTE_OPTIONS_ATTR = "__slow_request_log__"
_MARKED_ATTR = "__slow_request_log_marked__"


def slow_request_options(*, threshold: float | bool) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Per-route override: a threshold in ms, or ``False`` to never log the route."""

    def decorator(endpoint: Callable[..., Any]) -> Callable[..., Any]:
        setattr(endpoint, ROUTE_OPTIONS_ATTR, {"threshold": threshold})
        return endpoint

    return decorator


def route_override(scope: Mapping[str, Any], route_thresholds: Mapping[str, Any]) -> Any:
    """Find the override for the route matched in ``scope``, if any.

    Endpoint decorator options win over the path-template mapping.
    """
    endpoint = scope.get("endpoint")
    options = getattr(endpoint, ROUTE_OPTIONS_ATTR, None)
    if options is not None:
        return options.get("threshold")

    route = scope.get("route")
    path = getattr(route, "path", None)
    if path is not None and path in route_thresholds:
        return route_thresholds[path]
    return None


def _mark_handler(endpoint: Callable[..., Any]) -> Callable[..., Any]:
    """Wrap an endpoint so its call brackets the pre/post handler phases."""
    if getattr(endpoint, _MARKED_ATTR, False):
        # include_router rebuilds routes from already wrapped endpoints
        return endpoint

    if inspect.iscoroutinefunction(endpoint):

        @functools.wraps(endpoint)
        async def async_endpoint(*args: Any, **kwargs: Any) -> Any:
            mark_phase(LifecyclePhase.ON_PRE_HANDLER)
            try:
                return await endpoint(*args, **kwargs)
            finally:
                mark_phase(LifecyclePhase.ON_POST_HANDLER)

        return _finish_wrapper(async_endpoint, endpoint)

    @functools.wraps(endpoint)
    def sync_endpoint(*args: Any, **kwargs: Any) -> Any:
        mark_phase(LifecyclePhase.ON_PRE_HANDLER)
        try:
            return endpoint(*args, **kwargs)
        finally:
            mark_phase(LifecyclePhase.ON_POST_HANDLER)

    return _finish_wrapper(sync_endpoint, endpoint)


def _finish_wrapper(wrapper: Callable[..., Any], endpoint: Callable[..., Any]) -> Callable[..., Any]:
    # FastAPI resolves string annotations against the wrapper's globals, so
    # hand it a signature already evaluated in the endpoint's own module.
    wrapper.__signature__ = inspect.signature(endpoint, eval_str=True)  # type: ignore[attr-defined]
    setattr(wrapper, _MARKED_ATTR, True)
    return wrapper


class TimedRoute(APIRoute):
    """APIRoute that reports route-matched and handler boundaries to the lifecycle tracker.

    Use with ``APIRouter(route_class=TimedRoute)``.
    """

    def __init__(self, path: str, endpoint: Callable[..., Any], **kwargs: Any) -> None:
        super().__init__(path, _mark_handler(endpoint), **kwargs)

    def get_route_handler(self) -> Callable[[Request], Coroutine[Any, Any, Response]]:
        handler = super().get_route_handler()

        async def timed_handler(request: Request) -> Response:
            mark_phase(LifecyclePhase.ON_PRE_AUTH)
            return await handler(request)

        return timed_handler
