from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class RequestInfo:
    """Request metadata captured by the host adapter at completion."""

    path: str
    method: str
    fragment: str = ""
    user_agent: str | None = None
    referrer: str | None = None
    request_id: str | None = None
