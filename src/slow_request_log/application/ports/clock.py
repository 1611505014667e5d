from __future__ import annotations

import time
from typing import Protocol


class Clock(Protocol):
    def now_ms(self) -> float: ...


class MonotonicClock:
    """Default clock: ``time.perf_counter`` in milliseconds."""

    def now_ms(self) -> float:
        return time.perf_counter() * 1000
