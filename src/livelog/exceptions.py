"""
Exceptions raised by livelog.
"""


class LiveLogError(Exception):
    """Base class for livelog errors."""


class SinkError(LiveLogError):
    """An outbound sink could not deliver a batch."""
