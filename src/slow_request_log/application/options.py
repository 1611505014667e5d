from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Mapping

from slow_request_log.domain.value_objects.threshold import DEFAULT_THRESHOLD_MS

if TYPE_CHECKING:
    from slow_request_log.config import Settings


@dataclass(frozen=True, slots=True)
class TimingOptions:
    """Middleware options. ``route_thresholds`` is keyed by route path template."""

    threshold: float = DEFAULT_THRESHOLD_MS
    tags: frozenset[str] = frozenset()
    verbose: bool = False
    include_id: bool = False
    request_lifecycle: bool = False
    segment_records: bool = False
    route_thresholds: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.tags, frozenset):
            object.__setattr__(self, "tags", frozenset(self.tags))

    @classmethod
    def from_settings(cls, settings: Settings) -> TimingOptions:
        return cls(
            threshold=settings.SLOW_THRESHOLD_MS,
            tags=frozenset(settings.SLOW_TAGS),
            verbose=settings.SLOW_VERBOSE,
            include_id=settings.SLOW_INCLUDE_ID,
            request_lifecycle=settings.SLOW_REQUEST_LIFECYCLE,
            segment_records=settings.SLOW_SEGMENT_RECORDS,
            route_thresholds=dict(settings.ROUTE_THRESHOLDS),
        )
