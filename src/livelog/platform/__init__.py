"""
Event stream to the remote event collector: event bus, batching and sinks.
"""

from .buffered_event_stream import FLUSH_INTERVAL_MSEC, MAX_BATCH_SIZE, BufferedEventStream
from .events import (
    LOG_ENTRY_EVENT,
    LOGGER_EVENT_NAMES,
    EventBatch,
    EventBus,
    LogRecordEvent,
    OutboundEvent,
    StructuredEvent,
    connect_log_graph,
    format_for_event_stream,
)
from .sinks import ConsoleSink, HttpSink, OutboundSink

__all__ = [
    "BufferedEventStream",
    "ConsoleSink",
    "EventBatch",
    "EventBus",
    "FLUSH_INTERVAL_MSEC",
    "HttpSink",
    "LOG_ENTRY_EVENT",
    "LOGGER_EVENT_NAMES",
    "LogRecordEvent",
    "MAX_BATCH_SIZE",
    "OutboundEvent",
    "OutboundSink",
    "StructuredEvent",
    "connect_log_graph",
    "format_for_event_stream",
]
