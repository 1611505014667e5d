"""Per-request collection of named timing segments."""
from __future__ import annotations

import threading
from typing import Any, Iterator

from slow_request_log.application.exceptions import UnknownSegmentError
from slow_request_log.domain.entities.segment import TimingSegment


class TimingLedger:
    """Ordered mapping of segment name to :class:`TimingSegment`.

    A ledger belongs to exactly one request. The lock only matters when a
    handler fans timing calls out to several threads for the same request.
    """

    def __init__(self) -> None:
        self._segments: dict[str, TimingSegment] = {}
        self._lock = threading.Lock()

    def start(self, name: str, at: float) -> TimingSegment:
        """Open ``name``; restarting an existing name replaces it in place."""
        segment = TimingSegment(name=name, start=at)
        with self._lock:
            self._segments[name] = segment
        return segment

    def end(self, name: str, at: float) -> TimingSegment:
        with self._lock:
            segment = self._segments.get(name)
            if segment is None:
                raise UnknownSegmentError(f"timing segment {name!r} was never started")
            if segment.closed:
                raise UnknownSegmentError(f"timing segment {name!r} is not open")
            segment.end = at
        return segment

    def get(self, name: str) -> TimingSegment | None:
        return self._segments.get(name)

    def closed_segments(self) -> list[TimingSegment]:
        with self._lock:
            return [s for s in self._segments.values() if s.closed]

    def snapshot(self, origin: float = 0.0) -> dict[str, dict[str, Any]]:
        with self._lock:
            return {name: s.snapshot(origin) for name, s in self._segments.items()}

    def __contains__(self, name: object) -> bool:
        return name in self._segments

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._segments))

    def __len__(self) -> int:
        return len(self._segments)
