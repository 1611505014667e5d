from __future__ import annotations

import json
import logging

import pytest

from slow_request_log.application.exceptions import SinkFailureError
from slow_request_log.infrastructure.sinks.logging_sink import EMISSION_LOGGER, LoggingSink
from slow_request_log.infrastructure.sinks.redis_pubsub import RedisPubSubSink
from slow_request_log.infrastructure.sinks.serializer import deserialize_record, serialize_record
from slow_request_log.logging_config import JsonFormatter
from slow_request_log.services.emitter import emit
from tests.conftest import BrokenRedis, FakeRedis


def test_logging_sink_levels(caplog):
    sink = LoggingSink()

    with caplog.at_level(logging.INFO, logger=EMISSION_LOGGER):
        sink.emit(frozenset({"slow-request", "warning"}), {"message": "request took 300ms to process"})
        sink.emit(frozenset({"slow-request"}), {"message": "request took 3ms to process"})

    slow, verbose = caplog.records
    assert slow.levelno == logging.WARNING
    assert slow.tags == ["slow-request", "warning"]
    assert verbose.levelno == logging.INFO
    assert verbose.payload == {"message": "request took 3ms to process"}


def test_logging_sink_segment_message(caplog):
    with caplog.at_level(logging.INFO, logger=EMISSION_LOGGER):
        LoggingSink().emit(frozenset({"slow-request"}), {"name": "call db", "elapsed": 12.5})

    assert caplog.records[0].getMessage() == "segment call db took 12.5ms"


@pytest.mark.asyncio
async def test_redis_sink_publishes_envelope():
    redis = FakeRedis()
    sink = RedisPubSubSink(redis, "slow-log")

    await sink.emit(frozenset({"warning", "slow-request"}), {"responseTime": 12.0})

    channel, raw = redis.published[0]
    assert channel == "slow-log"
    tags, data = deserialize_record(raw)
    assert tags == {"warning", "slow-request"}
    assert data == {"responseTime": 12.0}
    assert json.loads(raw)["tags"] == ["slow-request", "warning"]


@pytest.mark.asyncio
async def test_redis_errors_become_sink_failures():
    sink = RedisPubSubSink(BrokenRedis(), "slow-log")

    with pytest.raises(SinkFailureError):
        await sink.emit(frozenset({"slow-request"}), {"responseTime": 1.0})

    assert await emit(sink, frozenset({"slow-request"}), {"responseTime": 1.0}) is False


def test_json_formatter_includes_extras():
    record = logging.LogRecord(
        name=EMISSION_LOGGER,
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg="request took %dms",
        args=(250,),
        exc_info=None,
    )
    record.tags = ["slow-request"]
    record.payload = {"responseTime": 250}

    data = json.loads(JsonFormatter().format(record))

    assert data["message"] == "request took 250ms"
    assert data["level"] == "WARNING"
    assert data["tags"] == ["slow-request"]
    assert data["payload"] == {"responseTime": 250}


def test_serialized_record_is_plain_json():
    payload = {
        "responseTime": 250.5,
        "referrer": None,
        "timings": {"call db": {"name": "call db", "start": 0.0, "end": 200.0, "elapsed": 200.0}},
    }

    raw = serialize_record(frozenset({"warning", "slow-request"}), payload)

    assert json.loads(raw) == {"tags": ["slow-request", "warning"], "data": payload}
