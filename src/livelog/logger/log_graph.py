"""
In-memory log graph.

The graph is an arena of LogEntry objects keyed by entry key. Parent/child
links are keys, so entries never own each other. Every insert and every
mutation notifies the registered change listeners with ``(entry, graph)``.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, List, Optional

from .levels import LogLevel
from .log_entry import LogEntry, LogEntryMetadata, MessageState

logger = logging.getLogger(__name__)

ChangeListener = Callable[[LogEntry, "LogGraph"], None]


class LogGraph:
    """Tree of log entries with change notifications."""

    def __init__(self) -> None:
        self._entries: Dict[str, LogEntry] = {}
        self._root_keys: List[str] = []
        self._listeners: List[ChangeListener] = []
        self._lock = threading.RLock()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def get(self, key: str) -> Optional[LogEntry]:
        return self._entries.get(key)

    def children(self, key: Optional[str] = None) -> List[LogEntry]:
        """Return the direct children of ``key`` (root entries when None)."""
        with self._lock:
            if key is None:
                keys = list(self._root_keys)
            else:
                entry = self._entries.get(key)
                keys = list(entry.child_keys) if entry else []
            return [self._entries[k] for k in keys]

    def snapshot(self) -> List[LogEntry]:
        """
        Return every entry in depth-first order.

        Parents come before their children and siblings keep insertion order.
        """
        with self._lock:
            out: List[LogEntry] = []
            stack = list(reversed(self._root_keys))
            while stack:
                entry = self._entries[stack.pop()]
                out.append(entry)
                stack.extend(reversed(entry.child_keys))
            return out

    def on_change(self, listener: ChangeListener) -> Callable[[], None]:
        """Subscribe to graph changes. Returns a function that unsubscribes."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def create_entry(
        self,
        level: LogLevel,
        msg: Optional[str] = None,
        parent_key: Optional[str] = None,
        key: Optional[str] = None,
        section: Optional[str] = None,
        symbol: Optional[str] = None,
        status: Optional[str] = None,
        data: Optional[Any] = None,
        from_std_stream: bool = False,
        metadata: Optional[LogEntryMetadata] = None,
    ) -> LogEntry:
        """Insert a new entry (under ``parent_key`` if given) and notify listeners."""
        with self._lock:
            if key is not None and key in self._entries:
                raise ValueError(f"Duplicate log entry key: {key}")
            parent = self._entries.get(parent_key) if parent_key else None
            if parent_key and parent is None:
                raise KeyError(f"Unknown parent entry: {parent_key}")

            entry = LogEntry(
                graph=self,
                level=level,
                state=MessageState(
                    msg=msg, section=section, symbol=symbol, status=status, data=data
                ),
                key=key,
                parent_key=parent_key,
                indent=parent.indent + 1 if parent else 0,
                from_std_stream=from_std_stream,
                metadata=metadata,
            )
            self._entries[entry.key] = entry
            if parent:
                parent.child_keys.append(entry.key)
            else:
                self._root_keys.append(entry.key)

        self._notify(entry)
        return entry

    def placeholder(self, level: LogLevel = LogLevel.info, **kwargs: Any) -> LogEntry:
        """Create an empty entry that renders nothing until it gets a message."""
        return self.create_entry(level=level, **kwargs)

    def error(self, msg: Optional[str] = None, **kwargs: Any) -> LogEntry:
        return self.create_entry(level=LogLevel.error, msg=msg, **kwargs)

    def warn(self, msg: Optional[str] = None, **kwargs: Any) -> LogEntry:
        return self.create_entry(level=LogLevel.warn, msg=msg, **kwargs)

    def info(self, msg: Optional[str] = None, **kwargs: Any) -> LogEntry:
        return self.create_entry(level=LogLevel.info, msg=msg, **kwargs)

    def verbose(self, msg: Optional[str] = None, **kwargs: Any) -> LogEntry:
        return self.create_entry(level=LogLevel.verbose, msg=msg, **kwargs)

    def debug(self, msg: Optional[str] = None, **kwargs: Any) -> LogEntry:
        return self.create_entry(level=LogLevel.debug, msg=msg, **kwargs)

    def silly(self, msg: Optional[str] = None, **kwargs: Any) -> LogEntry:
        return self.create_entry(level=LogLevel.silly, msg=msg, **kwargs)

    def _update_entry(self, entry: LogEntry, state: MessageState) -> None:
        with self._lock:
            entry._push_state(state)
        self._notify(entry)

    def _notify(self, entry: LogEntry) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(entry, self)
            except Exception:
                logger.exception("Log graph listener failed for entry %s", entry.key)
