from __future__ import annotations

from dataclasses import dataclass
from typing import Any

DEFAULT_THRESHOLD_MS = 1000


@dataclass(frozen=True, slots=True)
class EffectiveThreshold:
    """Resolved threshold in milliseconds; ``ms is None`` means emission is disabled."""

    ms: float | None

    @property
    def disabled(self) -> bool:
        return self.ms is None

    def exceeded_by(self, response_time: float) -> bool:
        if self.ms is None:
            return False
        return response_time > self.ms


DISABLED = EffectiveThreshold(None)


def resolve_threshold(global_ms: float | None, route_override: Any = None) -> EffectiveThreshold:
    """Apply a route override on top of the global default.

    The override may be ``None`` (use the global value), ``False`` (disable),
    ``True`` (explicitly use the global value), a number, or a mapping with a
    ``threshold`` key holding one of those.
    """
    if isinstance(route_override, dict):
        route_override = route_override.get("threshold")

    if route_override is False:
        return DISABLED

    base = DEFAULT_THRESHOLD_MS if global_ms is None else global_ms
    if route_override is None or route_override is True:
        return EffectiveThreshold(base)
    return EffectiveThreshold(route_override)
