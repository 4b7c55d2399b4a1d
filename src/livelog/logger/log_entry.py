"""
Log entries: mutable, hierarchical nodes of the log graph.

Each entry keeps the full history of its message states so renderers can
chain appended messages. Entries never hold references to their parent or
children, only keys into the owning LogGraph arena.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Dict, List, Literal, Optional, Protocol

from .levels import LogLevel

if TYPE_CHECKING:
    from .log_graph import LogGraph


EntryStatus = Literal["active", "done", "error", "unknown"]
EntrySymbol = Literal["info", "success", "warning", "error", "empty"]


class LogEntryView(Protocol):
    """Read-only view of an entry, as consumed by the terminal writer."""

    key: str
    parent_key: Optional[str]
    level: LogLevel
    revision: int

    @property
    def status(self) -> EntryStatus: ...

    @property
    def from_live_stream(self) -> bool: ...


@dataclass
class MessageState:
    """One revision of an entry's message."""

    msg: Optional[str] = None
    section: Optional[str] = None
    symbol: Optional[EntrySymbol] = None
    status: Optional[EntryStatus] = None
    data: Optional[Any] = None
    append: bool = False


@dataclass
class LogEntryMetadata:
    """Free-form metadata attached to an entry and shipped with log records."""

    task: Optional[Dict[str, Any]] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = dict(self.extra)
        if self.task is not None:
            out["task"] = self.task
        return out


class LogEntry:
    """
    A single node in the log graph.

    Attributes:
        key: Stable unique id.
        parent_key: Key of the parent entry, None for root entries.
        level: Severity of the entry.
        indent: Depth in the graph, used for left padding.
        from_std_stream: True when the entry carries raw subprocess output.
        revision: Incremented on every mutation.
        child_keys: Keys of child entries in insertion order.
    """

    def __init__(
        self,
        graph: "LogGraph",
        level: LogLevel,
        state: Optional[MessageState] = None,
        key: Optional[str] = None,
        parent_key: Optional[str] = None,
        indent: int = 0,
        from_std_stream: bool = False,
        metadata: Optional[LogEntryMetadata] = None,
    ) -> None:
        self._graph = graph
        self.key = key or uuid.uuid4().hex
        self.parent_key = parent_key
        self.level = LogLevel.parse(level)
        self.indent = indent
        self.from_std_stream = from_std_stream
        self.metadata = metadata or LogEntryMetadata()
        self.revision = 0
        self.child_keys: List[str] = []
        self._states: List[MessageState] = [state or MessageState()]

    def __repr__(self) -> str:
        return (
            f"LogEntry(key={self.key!r}, level={self.level.name}, "
            f"status={self.status!r}, revision={self.revision})"
        )

    @property
    def from_live_stream(self) -> bool:
        return self.from_std_stream

    @property
    def status(self) -> EntryStatus:
        return self.get_message_state().status or "unknown"

    @property
    def parent(self) -> Optional["LogEntry"]:
        if self.parent_key is None:
            return None
        return self._graph.get(self.parent_key)

    def get_message_states(self) -> List[MessageState]:
        return list(self._states)

    def get_message_state(self) -> MessageState:
        """
        Return the latest message state merged over the earlier ones.

        Every field takes its last non-None value; ``msg`` is the latest
        message (use ``chain_messages`` to join appended messages).
        """
        merged = MessageState()
        for state in self._states:
            for name in ("msg", "section", "symbol", "status", "data"):
                value = getattr(state, name)
                if value is not None:
                    setattr(merged, name, value)
            merged.append = state.append
        return merged

    def set_state(
        self,
        msg: Optional[str] = None,
        section: Optional[str] = None,
        symbol: Optional[EntrySymbol] = None,
        status: Optional[EntryStatus] = None,
        data: Optional[Any] = None,
        append: bool = False,
    ) -> "LogEntry":
        """Push a new message state and notify graph listeners."""
        state = MessageState(
            msg=msg, section=section, symbol=symbol, status=status, data=data, append=append
        )
        self._graph._update_entry(self, state)
        return self

    def set_done(self, msg: Optional[str] = None, **kwargs: Any) -> "LogEntry":
        return self.set_state(msg=msg, status="done", **kwargs)

    def set_success(self, msg: Optional[str] = None, **kwargs: Any) -> "LogEntry":
        return self.set_state(msg=msg, status="done", symbol="success", **kwargs)

    def set_warn(self, msg: Optional[str] = None, **kwargs: Any) -> "LogEntry":
        return self.set_state(msg=msg, status="done", symbol="warning", **kwargs)

    def set_error(self, msg: Optional[str] = None, **kwargs: Any) -> "LogEntry":
        return self.set_state(msg=msg, status="error", symbol="error", **kwargs)

    def _child(self, level: LogLevel, msg: Optional[str], **kwargs: Any) -> "LogEntry":
        return self._graph.create_entry(level=level, msg=msg, parent_key=self.key, **kwargs)

    def error(self, msg: Optional[str] = None, **kwargs: Any) -> "LogEntry":
        return self._child(LogLevel.error, msg, **kwargs)

    def warn(self, msg: Optional[str] = None, **kwargs: Any) -> "LogEntry":
        return self._child(LogLevel.warn, msg, **kwargs)

    def info(self, msg: Optional[str] = None, **kwargs: Any) -> "LogEntry":
        return self._child(LogLevel.info, msg, **kwargs)

    def verbose(self, msg: Optional[str] = None, **kwargs: Any) -> "LogEntry":
        return self._child(LogLevel.verbose, msg, **kwargs)

    def debug(self, msg: Optional[str] = None, **kwargs: Any) -> "LogEntry":
        return self._child(LogLevel.debug, msg, **kwargs)

    def silly(self, msg: Optional[str] = None, **kwargs: Any) -> "LogEntry":
        return self._child(LogLevel.silly, msg, **kwargs)

    def _push_state(self, state: MessageState) -> None:
        self._states.append(replace(state))
        self.revision += 1
