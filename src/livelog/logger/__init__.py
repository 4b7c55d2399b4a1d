"""
Log graph: levels, entries, the in-memory graph and entry renderers.
"""

from .levels import SELECTABLE_LEVELS, LogLevel
from .log_entry import EntryStatus, LogEntry, LogEntryMetadata, LogEntryView, MessageState
from .log_graph import LogGraph

__all__ = [
    "EntryStatus",
    "LogEntry",
    "LogEntryMetadata",
    "LogEntryView",
    "LogGraph",
    "LogLevel",
    "MessageState",
    "SELECTABLE_LEVELS",
]
