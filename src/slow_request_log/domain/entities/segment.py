from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(slots=True)
class TimingSegment:
    """One named span inside a request. Timestamps are monotonic milliseconds."""

    name: str
    start: float
    end: float | None = None

    @property
    def closed(self) -> bool:
        return self.end is not None

    @property
    def elapsed(self) -> float | None:
        if self.end is None:
            return None
        return self.end - self.start

    def snapshot(self, origin: float = 0.0) -> dict[str, Any]:
        """Plain-dict view with times relative to ``origin``."""
        elapsed = self.elapsed
        return {
            "name": self.name,
            "start": round(self.start - origin, 3),
            "end": None if self.end is None else round(self.end - origin, 3),
            "elapsed": None if elapsed is None else round(elapsed, 3),
        }
