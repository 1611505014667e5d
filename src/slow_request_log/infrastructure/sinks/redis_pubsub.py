"""Redis Pub/Sub sink: publishes each emission as a JSON envelope."""
from __future__ import annotations

import logging
from typing import Any

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from slow_request_log.application.exceptions import SinkFailureError
from slow_request_log.infrastructure.sinks.serializer import serialize_record

logger = logging.getLogger(__name__)


class RedisPubSubSink:
    """Implements application.ports.sink.LogSink."""

    def __init__(self, redis: aioredis.Redis, channel: str) -> None:
        self._redis = redis
        self._channel = channel

    async def emit(self, tags: frozenset[str], payload: dict[str, Any]) -> None:
        raw = serialize_record(tags, payload)
        try:
            receivers = await self._redis.publish(self._channel, raw)
        except RedisError as exc:
            raise SinkFailureError(f"publish to {self._channel} failed: {exc}") from exc
        logger.debug("Published slow-request record to %s (receivers=%s)", self._channel, receivers)
