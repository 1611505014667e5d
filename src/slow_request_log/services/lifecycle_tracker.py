"""Automatic segments for each host pipeline phase."""
from __future__ import annotations

import logging

from slow_request_log.application.exceptions import UnknownSegmentError
from slow_request_log.domain.entities.ledger import TimingLedger
from slow_request_log.domain.value_objects.enums import LIFECYCLE_PHASES, LifecyclePhase

logger = logging.getLogger(__name__)


class LifecycleTracker:
    """Walks the fixed phase list, closing the previous phase as each new one opens.

    Phases the host never signals are recorded as zero-length segments at the
    moment the next phase (or completion) is reached, so a finished ledger
    always holds every phase in order.
    """

    def __init__(
        self,
        ledger: TimingLedger,
        phases: tuple[LifecyclePhase, ...] = LIFECYCLE_PHASES,
    ) -> None:
        self._ledger = ledger
        self._phases = phases
        self._index = -1
        self._finished = False

    @property
    def current(self) -> LifecyclePhase | None:
        if self._index < 0:
            return None
        return self._phases[self._index]

    def enter(self, phase: LifecyclePhase, at: float) -> None:
        if self._finished:
            return
        target = self._phases.index(phase)
        if target <= self._index:
            logger.debug("Ignoring out-of-order lifecycle phase %s (at %s)", phase, self.current)
            return
        self._advance(target, at)
        self._ledger.start(phase, at)
        self._index = target

    def finish(self, at: float) -> None:
        """Close the open phase and fill any phases never reached."""
        if self._finished:
            return
        self._advance(len(self._phases), at)
        self._index = len(self._phases) - 1
        self._finished = True

    def _advance(self, target: int, at: float) -> None:
        if self._index >= 0:
            try:
                self._ledger.end(self._phases[self._index], at)
            except UnknownSegmentError as exc:
                logger.warning("Lifecycle phase already closed: %s", exc.detail)
        for skipped in self._phases[self._index + 1:target]:
            self._ledger.start(skipped, at)
            self._ledger.end(skipped, at)
