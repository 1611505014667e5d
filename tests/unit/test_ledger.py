from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import pytest

from slow_request_log.application.exceptions import UnknownSegmentError
from slow_request_log.domain.entities.ledger import TimingLedger
from slow_request_log.services.request_timing import RequestTiming


def test_end_computes_elapsed():
    ledger = TimingLedger()
    ledger.start("call db", at=100.0)

    segment = ledger.end("call db", at=325.5)

    assert segment.name == "call db"
    assert segment.elapsed == pytest.approx(225.5)
    assert segment.closed is True


def test_end_without_start_raises():
    ledger = TimingLedger()

    with pytest.raises(UnknownSegmentError) as exc_info:
        ledger.end("missing", at=1.0)

    assert "missing" in exc_info.value.detail


def test_end_twice_raises():
    ledger = TimingLedger()
    ledger.start("x", at=0.0)
    ledger.end("x", at=5.0)

    with pytest.raises(UnknownSegmentError):
        ledger.end("x", at=9.0)

    assert ledger.get("x").end == 5.0


def test_restart_overwrites_and_keeps_position():
    ledger = TimingLedger()
    ledger.start("a", at=0.0)
    ledger.start("b", at=1.0)
    ledger.end("a", at=2.0)

    ledger.start("a", at=10.0)

    assert list(ledger) == ["a", "b"]
    assert ledger.get("a").start == 10.0
    assert ledger.get("a").end is None


def test_overlapping_segments_are_pending_together():
    ledger = TimingLedger()
    ledger.start("outer", at=0.0)
    ledger.start("inner", at=1.0)

    assert ledger.closed_segments() == []

    ledger.end("inner", at=3.0)
    ledger.end("outer", at=4.0)

    assert [s.name for s in ledger.closed_segments()] == ["outer", "inner"]


def test_snapshot_is_relative_to_origin():
    ledger = TimingLedger()
    ledger.start("call db", at=1_000.0)
    ledger.end("call db", at=1_200.0)
    ledger.start("open", at=1_250.0)

    snapshot = ledger.snapshot(origin=1_000.0)

    assert snapshot == {
        "call db": {"name": "call db", "start": 0.0, "end": 200.0, "elapsed": 200.0},
        "open": {"name": "open", "start": 250.0, "end": None, "elapsed": None},
    }


def test_concurrent_calls_on_distinct_names():
    ledger = TimingLedger()

    def work(i: int) -> None:
        name = f"job-{i}"
        ledger.start(name, at=float(i))
        ledger.end(name, at=float(i) + 1)

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(work, range(200)))

    assert len(ledger) == 200
    assert all(s.elapsed == 1.0 for s in ledger.closed_segments())


def test_concurrent_restarts_of_one_name_stay_consistent():
    timing = RequestTiming("req-1")

    def work(_: int) -> None:
        for _ in range(50):
            timing.start("shared")
            timing.end("shared")

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(work, range(8)))

    assert list(timing.ledger) == ["shared"]
    segment = timing.ledger.get("shared")
    assert segment.name == "shared"
    assert segment.end is None or segment.elapsed >= 0
