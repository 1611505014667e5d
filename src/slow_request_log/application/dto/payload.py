from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class LogPayload:
    """Structured record for one slow (or verbose) request."""

    response_time: float
    threshold: float | None
    path: str
    fragment: str
    method: str
    user_agent: str | None
    referrer: str | None = None
    request_id: str | None = None
    timings: dict[str, dict[str, Any]] | None = None

    @property
    def message(self) -> str:
        return f"request took {self.response_time:.0f}ms to process"

    def to_dict(self) -> dict[str, Any]:
        """Emitted shape. Absent optional fields are left out rather than nulled."""
        data: dict[str, Any] = {
            "message": self.message,
            "responseTime": self.response_time,
            "threshold": self.threshold,
            "path": self.path,
            "fragment": self.fragment,
            "method": self.method,
            "userAgent": self.user_agent,
        }
        if self.referrer is not None:
            data["referrer"] = self.referrer
        if self.request_id is not None:
            data["id"] = self.request_id
        if self.timings is not None:
            data["timings"] = copy.deepcopy(self.timings)
        return data
