"""Per-request timing context handed to handler code."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from slow_request_log.application.exceptions import UnknownSegmentError
from slow_request_log.application.ports.clock import Clock, MonotonicClock
from slow_request_log.domain.entities.ledger import TimingLedger
from slow_request_log.domain.entities.segment import TimingSegment
from slow_request_log.domain.value_objects.enums import LifecyclePhase, RequestState
from slow_request_log.services.lifecycle_tracker import LifecycleTracker

logger = logging.getLogger(__name__)


class RequestTiming:
    """Owns one request's ledger from receipt until it is discarded."""

    def __init__(
        self,
        request_id: str,
        *,
        clock: Clock | None = None,
        lifecycle: bool = False,
        received_at: float | None = None,
    ) -> None:
        self.request_id = request_id
        self.clock = clock or MonotonicClock()
        self.received_at = self.clock.now_ms() if received_at is None else received_at
        self.completed_at: float | None = None
        self.ledger = TimingLedger()
        self.state = RequestState.CREATED
        self.tracker: LifecycleTracker | None = None
        if lifecycle:
            self.tracker = LifecycleTracker(self.ledger)
            self.tracker.enter(LifecyclePhase.ON_REQUEST, self.received_at)

    @property
    def lifecycle(self) -> bool:
        return self.tracker is not None

    @property
    def active(self) -> bool:
        return self.state == RequestState.CREATED

    def start(self, name: str) -> TimingSegment | None:
        if not self.active:
            logger.warning("timing_start(%r) after request %s completed", name, self.request_id)
            return None
        return self.ledger.start(name, self.clock.now_ms())

    def end(self, name: str) -> TimingSegment | None:
        """Close ``name``. An unknown name is logged and ignored."""
        if not self.active:
            logger.warning("timing_end(%r) after request %s completed", name, self.request_id)
            return None
        try:
            return self.ledger.end(name, self.clock.now_ms())
        except UnknownSegmentError as exc:
            logger.warning("Request %s: %s", self.request_id, exc.detail)
            return None

    @contextmanager
    def segment(self, name: str) -> Iterator[None]:
        self.start(name)
        try:
            yield
        finally:
            self.end(name)

    def enter_phase(self, phase: LifecyclePhase) -> None:
        if self.tracker is None or not self.active:
            return
        self.tracker.enter(phase, self.clock.now_ms())

    def finish(self, completed_at: float | None = None) -> float:
        """Move to COMPLETING and return the total response time in ms."""
        if self.state != RequestState.CREATED:
            raise RuntimeError(f"request {self.request_id} already {self.state}")
        self.completed_at = self.clock.now_ms() if completed_at is None else completed_at
        if self.tracker is not None:
            self.tracker.finish(self.completed_at)
        self.state = RequestState.COMPLETING
        return self.completed_at - self.received_at

    def settle(self, emitted: bool) -> None:
        self.state = RequestState.EMITTED if emitted else RequestState.SUPPRESSED

    def discard(self) -> None:
        self.state = RequestState.DISCARDED
