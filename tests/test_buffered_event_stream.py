"""
Tests for the buffered event stream.
"""

from __future__ import annotations

from typing import List

import pytest

from livelog.platform.buffered_event_stream import BufferedEventStream
from livelog.platform.events import LOG_ENTRY_EVENT, EventBatch, EventBus, LogRecordEvent
from livelog.utils.cleanup import ShutdownContext


class RecordingSink:
    def __init__(self, result: bool = True) -> None:
        self.batches: List[EventBatch] = []
        self.result = result

    def send(self, batch: EventBatch) -> bool:
        self.batches.append(batch)
        return self.result


class RaisingSink:
    def __init__(self) -> None:
        self.calls = 0

    def send(self, batch: EventBatch) -> bool:
        self.calls += 1
        raise RuntimeError("collector down")


def _record(i: int) -> LogRecordEvent:
    return LogRecordEvent(key=f"k{i}", revision=0, msg=f"message {i}")


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


def _stream(sink, scheduler, **kwargs) -> BufferedEventStream:
    return BufferedEventStream(sink=sink, session_id="s1", scheduler=scheduler, **kwargs)


def test_periodic_flush_respects_batch_cap(sink, scheduler) -> None:
    """Verify 250 buffered records ship as 200 then 50 on consecutive ticks."""
    stream = _stream(sink, scheduler)
    for i in range(250):
        stream.stream_log_entry(_record(i))

    scheduler.advance(3)
    assert [len(b) for b in sink.batches] == [200]
    assert len(stream) == 50

    scheduler.advance(3)
    assert [len(b) for b in sink.batches] == [200, 50]
    assert len(stream) == 0

    scheduler.advance(3)
    assert len(sink.batches) == 2


def test_events_take_priority_over_log_entries(sink, scheduler) -> None:
    stream = _stream(sink, scheduler, max_batch_size=5)
    for i in range(4):
        stream.stream_log_entry(_record(i))
    for i in range(3):
        stream.stream_event("taskComplete", {"i": i})

    batch = stream.flush()

    assert [e.payload["i"] for e in batch.events] == [0, 1, 2]
    assert [r.key for r in batch.log_entries] == ["k0", "k1"]
    assert stream.pending_log_entries == 2


def test_batches_preserve_fifo_order(sink, scheduler) -> None:
    stream = _stream(sink, scheduler, max_batch_size=3)
    for i in range(7):
        stream.stream_log_entry(_record(i))

    while stream.flush() is not None:
        pass

    keys = [r.key for b in sink.batches for r in b.log_entries]
    assert keys == [f"k{i}" for i in range(7)]


def test_flush_all_ignores_cap(sink, scheduler) -> None:
    stream = _stream(sink, scheduler)
    for i in range(450):
        stream.stream_log_entry(_record(i))

    batch = stream.flush(flush_all=True)

    assert len(batch) == 450
    assert len(stream) == 0


def test_flush_of_empty_buffer_sends_nothing(sink, scheduler) -> None:
    stream = _stream(sink, scheduler)
    assert stream.flush() is None
    assert sink.batches == []


def test_close_runs_final_flush_once(sink, scheduler) -> None:
    """Verify close cancels the timer and flushes everything exactly once."""
    context = ShutdownContext()
    stream = _stream(sink, scheduler, context=context)
    for i in range(300):
        stream.stream_log_entry(_record(i))

    context.run_cleanup()
    stream.close()
    context.run_cleanup()

    assert [len(b) for b in sink.batches] == [300]
    assert scheduler.pending == []

    scheduler.advance(10)
    assert len(sink.batches) == 1


def test_failed_batch_is_dropped_not_retried(scheduler) -> None:
    sink = RecordingSink(result=False)
    stream = _stream(sink, scheduler)
    stream.stream_event("a", None)

    stream.flush()
    stream.flush()

    assert len(sink.batches) == 1
    assert len(stream) == 0


def test_sink_exception_is_logged(scheduler, caplog) -> None:
    sink = RaisingSink()
    stream = _stream(sink, scheduler)
    stream.stream_event("a", None)

    batch = stream.flush()

    assert batch is not None
    assert sink.calls == 1
    assert "Dropped batch" in caplog.text


def test_event_bus_routes_by_event_name(sink, scheduler) -> None:
    bus = EventBus()
    stream = _stream(sink, scheduler, event_bus=bus)

    bus.emit(LOG_ENTRY_EVENT, _record(1))
    bus.emit("taskComplete", {"ok": True})

    assert stream.pending_log_entries == 1
    assert stream.pending_events == 1

    stream.close()
    bus.emit("afterClose", {})
    assert stream.pending_events == 0


def test_batch_payload_uses_wire_names(sink, scheduler) -> None:
    stream = _stream(sink, scheduler)
    stream.stream_log_entry(LogRecordEvent(key="c", parent_key="p", revision=2, msg="hi"))

    payload = stream.flush().to_payload()

    assert payload["sessionId"] == "s1"
    assert payload["logEntries"] == [{"key": "c", "parentKey": "p", "revision": 2, "msg": "hi"}]
    assert payload["events"] == []
