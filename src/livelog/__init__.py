"""
livelog: a live, fullscreen terminal view of a hierarchical log graph.
"""

from .config import LiveLogConfig, get_config
from .exceptions import LiveLogError, SinkError
from .logger import LogEntry, LogGraph, LogLevel
from .platform import BufferedEventStream, ConsoleSink, EventBus, HttpSink
from .utils.cleanup import ShutdownContext
from .utils.ui.fullscreen_writer import FullscreenTerminalWriter

__version__ = "0.1.0"

__all__ = [
    "BufferedEventStream",
    "ConsoleSink",
    "EventBus",
    "FullscreenTerminalWriter",
    "HttpSink",
    "LiveLogConfig",
    "LiveLogError",
    "LogEntry",
    "LogGraph",
    "LogLevel",
    "ShutdownContext",
    "SinkError",
    "get_config",
]
