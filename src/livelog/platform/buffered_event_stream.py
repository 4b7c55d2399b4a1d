"""
Buffer events and log entries and periodically ship them to a sink.

Delivery is best-effort: a batch is removed from the buffer before it is
sent and is not retried if the sink fails. Records still buffered when the
process dies without running the shutdown context are lost.
"""

from __future__ import annotations

import logging
import threading
import uuid
from collections import deque
from typing import Any, Callable, Deque, List, Optional

from ..utils.cleanup import ShutdownContext
from ..utils.timers import Scheduler, ThreadingScheduler, TimerHandle
from .events import (
    LOGGER_EVENT_NAMES,
    EventBatch,
    EventBus,
    LogRecordEvent,
    OutboundEvent,
    StructuredEvent,
)
from .sinks import OutboundSink

logger = logging.getLogger(__name__)

FLUSH_INTERVAL_MSEC = 3000
MAX_BATCH_SIZE = 200


class BufferedEventStream:
    """
    Two FIFO queues (structured events, log records) flushed in bounded batches.

    A periodic flush removes at most ``max_batch_size`` records, events
    first and log records filling the remainder. ``flush(flush_all=True)``
    drains both queues regardless of the cap and runs exactly once at
    shutdown via the shutdown context.
    """

    def __init__(
        self,
        sink: OutboundSink,
        session_id: Optional[str] = None,
        event_bus: Optional[EventBus] = None,
        context: Optional[ShutdownContext] = None,
        scheduler: Optional[Scheduler] = None,
        flush_interval_ms: int = FLUSH_INTERVAL_MSEC,
        max_batch_size: int = MAX_BATCH_SIZE,
        start: bool = True,
    ) -> None:
        self.session_id = session_id or uuid.uuid4().hex
        self.max_batch_size = max_batch_size
        self._sink = sink
        self._scheduler = scheduler or ThreadingScheduler()
        self._flush_interval = flush_interval_ms / 1000
        self._events: Deque[StructuredEvent] = deque()
        self._log_entries: Deque[LogRecordEvent] = deque()
        self._lock = threading.Lock()
        # Serializes pop + send so batches reach the sink in buffer order.
        self._send_lock = threading.Lock()
        self._timer: Optional[TimerHandle] = None
        self._unsubscribe: Optional[Callable[[], None]] = None
        self.closed = False

        if event_bus is not None:
            self._unsubscribe = event_bus.on_any(self._on_event)
        if start:
            self.start()
        if context is not None:
            context.register("flushAllBufferedEventsAndLogEntries", self.close)

    @property
    def pending_events(self) -> int:
        return len(self._events)

    @property
    def pending_log_entries(self) -> int:
        return len(self._log_entries)

    def __len__(self) -> int:
        return self.pending_events + self.pending_log_entries

    def start(self) -> None:
        """Start the periodic flush timer."""
        with self._lock:
            if self._timer is not None or self.closed:
                return
            self._timer = self._scheduler.call_every(
                self._flush_interval, lambda: self.flush(flush_all=False)
            )

    def _on_event(self, name: str, payload: Any) -> None:
        if name in LOGGER_EVENT_NAMES:
            self.stream_log_entry(payload)
        else:
            self.stream_event(name, payload)

    def stream_event(self, name: str, payload: Any) -> None:
        self.enqueue(StructuredEvent(name=name, payload=payload))

    def stream_log_entry(self, record: LogRecordEvent) -> None:
        self.enqueue(record)

    def enqueue(self, event: OutboundEvent) -> None:
        with self._lock:
            if isinstance(event, LogRecordEvent):
                self._log_entries.append(event)
            else:
                self._events.append(event)

    def _take(self, queue: Deque[Any], count: int) -> List[Any]:
        return [queue.popleft() for _ in range(min(count, len(queue)))]

    def flush(self, flush_all: bool = False) -> Optional[EventBatch]:
        """
        Remove a batch from the buffer and hand it to the sink.

        Args:
            flush_all: Drain both queues completely instead of one capped batch

        Returns:
            The batch handed to the sink, or None if the buffer was empty
        """
        with self._send_lock:
            with self._lock:
                if flush_all:
                    events = self._take(self._events, len(self._events))
                    log_entries = self._take(self._log_entries, len(self._log_entries))
                else:
                    events = self._take(self._events, self.max_batch_size)
                    log_entries = self._take(self._log_entries, self.max_batch_size - len(events))

            if not events and not log_entries:
                return None

            batch = EventBatch(session_id=self.session_id, events=events, log_entries=log_entries)
            try:
                delivered = self._sink.send(batch)
            except Exception:
                logger.warning("Event sink raised while sending a batch", exc_info=True)
                delivered = False
            if not delivered:
                logger.warning(
                    "Dropped batch of %d events and %d log entries (sink failed)",
                    len(events),
                    len(log_entries),
                )
            else:
                logger.debug("Flushed %d events and %d log entries", len(events), len(log_entries))
            return batch

    flush_buffered = flush

    def close(self) -> None:
        """Cancel the flush timer and flush everything. Runs once."""
        with self._lock:
            if self.closed:
                return
            self.closed = True
            timer = self._timer
            self._timer = None
            unsubscribe = self._unsubscribe
            self._unsubscribe = None
        if timer is not None:
            timer.cancel()
        if unsubscribe is not None:
            unsubscribe()
        self.flush(flush_all=True)
