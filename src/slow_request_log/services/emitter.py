"""Completion-time decision: resolve the threshold, decide, build and hand off the record."""
from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from typing import Any, Iterable

from slow_request_log.application.dto.payload import LogPayload
from slow_request_log.application.dto.request_info import RequestInfo
from slow_request_log.application.options import TimingOptions
from slow_request_log.application.ports.sink import LogSink
from slow_request_log.domain.value_objects.threshold import EffectiveThreshold, resolve_threshold
from slow_request_log.services.request_timing import RequestTiming

logger = logging.getLogger(__name__)

BASE_TAG = "slow-request"
SLOW_TAG = "warning"


def should_emit(response_time: float, threshold: EffectiveThreshold, verbose: bool) -> bool:
    if threshold.disabled:
        return False
    return verbose or threshold.exceeded_by(response_time)


def build_tags(extra: Iterable[str], exceeded: bool) -> frozenset[str]:
    tags = {BASE_TAG, *extra}
    if exceeded:
        tags.add(SLOW_TAG)
    return frozenset(tags)


def build_payload(
    timing: RequestTiming,
    info: RequestInfo,
    response_time: float,
    threshold: EffectiveThreshold,
    options: TimingOptions,
) -> LogPayload:
    timings = None
    if len(timing.ledger) or timing.lifecycle:
        timings = timing.ledger.snapshot(origin=timing.received_at)
    return LogPayload(
        response_time=round(response_time, 3),
        threshold=threshold.ms,
        path=info.path,
        fragment=info.fragment,
        method=info.method.lower(),
        user_agent=info.user_agent,
        referrer=info.referrer or None,
        request_id=info.request_id if options.include_id else None,
        timings=timings,
    )


def segment_records(timing: RequestTiming, options: TimingOptions) -> list[dict[str, Any]]:
    records = []
    for segment in timing.ledger.closed_segments():
        record: dict[str, Any] = {"name": segment.name, "elapsed": round(segment.elapsed or 0.0, 3)}
        if options.include_id:
            record["id"] = timing.request_id
        records.append(record)
    return records


async def emit(sink: LogSink, tags: frozenset[str], payload: dict[str, Any]) -> bool:
    """Hand one record to the sink. Sink errors are logged, never raised."""
    try:
        result = sink.emit(tags, payload)
        if inspect.isawaitable(result):
            await result
    except Exception:
        logger.exception("Log sink %s failed; emission dropped", type(sink).__name__)
        return False
    return True


@dataclass(frozen=True, slots=True)
class Emission:
    """Records decided at completion, delivered to the sink afterwards."""

    tags: frozenset[str]
    payload: LogPayload
    segments: tuple[dict[str, Any], ...] = ()


def decide(
    timing: RequestTiming,
    info: RequestInfo,
    route_override: Any,
    options: TimingOptions,
    *,
    completed_at: float | None = None,
) -> Emission | None:
    """Finish the request and build its emission, or ``None`` when suppressed.

    The timing context is discarded either way.
    """
    try:
        response_time = timing.finish(completed_at)
        threshold = resolve_threshold(options.threshold, route_override)
        if not should_emit(response_time, threshold, options.verbose):
            timing.settle(emitted=False)
            return None

        emission = Emission(
            tags=build_tags(options.tags, threshold.exceeded_by(response_time)),
            payload=build_payload(timing, info, response_time, threshold, options),
            segments=tuple(segment_records(timing, options)) if options.segment_records else (),
        )
        timing.settle(emitted=True)
        return emission
    finally:
        timing.discard()


async def deliver(sink: LogSink, emission: Emission) -> None:
    for record in emission.segments:
        await emit(sink, emission.tags, record)
    await emit(sink, emission.tags, emission.payload.to_dict())


async def complete_request(
    timing: RequestTiming,
    info: RequestInfo,
    route_override: Any,
    options: TimingOptions,
    sink: LogSink,
    *,
    completed_at: float | None = None,
) -> LogPayload | None:
    """Decide and deliver in one step. Returns the emitted payload, if any."""
    emission = decide(timing, info, route_override, options, completed_at=completed_at)
    if emission is None:
        return None
    await deliver(sink, emission)
    return emission.payload
