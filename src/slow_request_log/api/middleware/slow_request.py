"""Times every request and logs the ones slower than their route's threshold."""
from __future__ import annotations

import logging
import uuid

from starlette.background import BackgroundTasks
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from slow_request_log.api.context import STATE_KEY, bind_timing, unbind_timing
from slow_request_log.api.routing import route_override
from slow_request_log.application.dto.request_info import RequestInfo
from slow_request_log.application.options import TimingOptions
from slow_request_log.application.ports.clock import Clock, MonotonicClock
from slow_request_log.application.ports.sink import LogSink
from slow_request_log.infrastructure.sinks.logging_sink import LoggingSink
from slow_request_log.services.emitter import Emission, decide, deliver
from slow_request_log.services.request_timing import RequestTiming

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


def request_info(request: Request, request_id: str) -> RequestInfo:
    return RequestInfo(
        path=request.url.path,
        method=request.method,
        fragment=request.url.fragment,
        user_agent=request.headers.get("user-agent"),
        referrer=request.headers.get("referer") or request.headers.get("referrer"),
        request_id=request_id,
    )


class SlowRequestMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app: ASGIApp,
        options: TimingOptions | None = None,
        sink: LogSink | None = None,
        clock: Clock | None = None,
    ) -> None:
        super().__init__(app)
        self.options = options or TimingOptions()
        self.sink = sink or LoggingSink()
        self.clock = clock or MonotonicClock()

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        timing = RequestTiming(
            request_id,
            clock=self.clock,
            lifecycle=self.options.request_lifecycle,
        )
        setattr(request.state, STATE_KEY, timing)
        token = bind_timing(timing)
        try:
            response = await call_next(request)
        except Exception:
            timing.discard()
            raise
        finally:
            unbind_timing(token)

        override = route_override(request.scope, self.options.route_thresholds)
        try:
            emission = decide(timing, request_info(request, request_id), override, self.options)
        except Exception:
            logger.exception("Request timing failed for %s %s", request.method, request.url.path)
            return response

        if emission is not None:
            _deliver_after_response(response, self.sink, emission)
        return response


def _deliver_after_response(response: Response, sink: LogSink, emission: Emission) -> None:
    """Run the sink hand-off once the body has been sent, after any existing task."""
    tasks = BackgroundTasks()
    if response.background is not None:
        tasks.add_task(response.background)
    tasks.add_task(deliver, sink, emission)
    response.background = tasks
