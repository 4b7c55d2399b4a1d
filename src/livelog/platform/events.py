"""
Event bus and the outbound event models shipped to the event collector.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from ..logger.log_entry import LogEntry
from ..logger.log_graph import LogGraph
from ..logger.renderers import chain_messages

logger = logging.getLogger(__name__)

LOG_ENTRY_EVENT = "logEntry"
LOGGER_EVENT_NAMES = (LOG_ENTRY_EVENT,)

Listener = Callable[[Any], None]
AnyListener = Callable[[str, Any], None]


class StructuredEvent(BaseModel):
    """A named event with an arbitrary JSON payload."""

    name: str
    payload: Any = None


class LogRecordEvent(BaseModel):
    """One revision of a log entry, as shipped to the collector."""

    model_config = ConfigDict(populate_by_name=True)

    key: str
    parent_key: Optional[str] = Field(default=None, alias="parentKey")
    revision: int
    msg: Union[str, List[str]] = ""
    data: Optional[Any] = None
    section: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None


OutboundEvent = Union[StructuredEvent, LogRecordEvent]


class EventBatch(BaseModel):
    """The payload of one sink call."""

    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(alias="sessionId")
    events: List[StructuredEvent] = Field(default_factory=list)
    log_entries: List[LogRecordEvent] = Field(default_factory=list, alias="logEntries")

    def __len__(self) -> int:
        return len(self.events) + len(self.log_entries)

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def format_for_event_stream(entry: LogEntry) -> LogRecordEvent:
    """Snapshot an entry's current state as a LogRecordEvent."""
    state = entry.get_message_state()
    chain = chain_messages(entry.get_message_states())
    msg: Union[str, List[str]] = chain[0] if len(chain) == 1 else chain
    metadata = entry.metadata.to_dict() or None
    return LogRecordEvent(
        key=entry.key,
        parent_key=entry.parent_key,
        revision=entry.revision,
        msg=msg,
        data=state.data,
        section=state.section,
        metadata=metadata,
    )


class EventBus:
    """Synchronous pub/sub keyed by event name, plus catch-all listeners."""

    def __init__(self) -> None:
        self._listeners: Dict[str, List[Listener]] = {}
        self._any_listeners: List[AnyListener] = []
        self._lock = threading.Lock()

    def on(self, name: str, listener: Listener) -> Callable[[], None]:
        with self._lock:
            self._listeners.setdefault(name, []).append(listener)

        def unsubscribe() -> None:
            with self._lock:
                listeners = self._listeners.get(name, [])
                if listener in listeners:
                    listeners.remove(listener)

        return unsubscribe

    def on_any(self, listener: AnyListener) -> Callable[[], None]:
        with self._lock:
            self._any_listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._any_listeners:
                    self._any_listeners.remove(listener)

        return unsubscribe

    def emit(self, name: str, payload: Any = None) -> None:
        """Call every listener for ``name`` and every catch-all listener."""
        with self._lock:
            listeners = list(self._listeners.get(name, []))
            any_listeners = list(self._any_listeners)
        if not listeners and not any_listeners:
            return
        for listener in listeners:
            try:
                listener(payload)
            except Exception:
                logger.exception("Listener for event %s failed", name)
        for any_listener in any_listeners:
            try:
                any_listener(name, payload)
            except Exception:
                logger.exception("Catch-all listener failed on event %s", name)


def connect_log_graph(graph: LogGraph, bus: EventBus) -> Callable[[], None]:
    """Emit a ``logEntry`` event on ``bus`` for every change in ``graph``."""

    def forward(entry: LogEntry, _graph: LogGraph) -> None:
        bus.emit(LOG_ENTRY_EVENT, format_for_event_stream(entry))

    return graph.on_change(forward)
