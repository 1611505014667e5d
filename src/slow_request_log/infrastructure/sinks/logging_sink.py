from __future__ import annotations

import logging
from typing import Any

from slow_request_log.services.emitter import SLOW_TAG

EMISSION_LOGGER = "slow_request_log.emissions"


class LoggingSink:
    """Writes emissions to a stdlib logger; ``warning``-tagged ones at WARNING."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger(EMISSION_LOGGER)

    def emit(self, tags: frozenset[str], payload: dict[str, Any]) -> None:
        level = logging.WARNING if SLOW_TAG in tags else logging.INFO
        message = payload.get("message") or f"segment {payload.get('name')} took {payload.get('elapsed')}ms"
        self._logger.log(level, message, extra={"tags": sorted(tags), "payload": payload})
