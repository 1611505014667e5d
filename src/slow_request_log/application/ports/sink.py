from __future__ import annotations

from typing import Any, Awaitable, Protocol


class LogSink(Protocol):
    """Destination for emissions. May return an awaitable; the emitter awaits it."""

    def emit(self, tags: frozenset[str], payload: dict[str, Any]) -> Awaitable[None] | None: ...
