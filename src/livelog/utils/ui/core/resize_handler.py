"""
Terminal resize handling utilities.

This module installs a SIGWINCH handler where available and provides helpers for
querying the current terminal size.
"""

from __future__ import annotations

import os
import signal
import sys
from typing import Any, Callable, Optional, Tuple


_resize_callback: Optional[Callable[[int, int], None]] = None
_previous_handler: Any = None


def setup_resize_handler(callback: Callable[[int, int], None]) -> bool:
    """
    Install a resize handler that calls the provided callback.

    Args:
        callback: Called with (columns, lines) when the terminal is resized

    Returns:
        True if a SIGWINCH handler was installed
    """
    global _resize_callback, _previous_handler
    _resize_callback = callback

    if sys.platform == "win32":
        return False
    if not hasattr(signal, "SIGWINCH"):
        return False

    previous = signal.getsignal(signal.SIGWINCH)
    _previous_handler = previous

    def handler(signum: int, frame: object) -> None:
        if callable(previous):
            try:
                previous(signum, frame)
            except Exception:
                pass

        try:
            cols, rows = get_terminal_size()
        except Exception:
            return
        cb = _resize_callback
        if cb is not None:
            cb(cols, rows)

    try:
        signal.signal(signal.SIGWINCH, handler)
    except ValueError:
        # Not on the main thread.
        _resize_callback = None
        return False
    return True


def teardown_resize_handler() -> None:
    """Drop the callback and restore the handler that was active before setup."""
    global _resize_callback, _previous_handler
    _resize_callback = None
    if _previous_handler is None or not hasattr(signal, "SIGWINCH"):
        return
    try:
        signal.signal(signal.SIGWINCH, _previous_handler)
    except (ValueError, TypeError):
        pass
    _previous_handler = None


def get_terminal_size(fallback: Tuple[int, int] = (80, 24)) -> Tuple[int, int]:
    """
    Get the current terminal size.

    Args:
        fallback: Returned if the terminal size cannot be determined

    Returns:
        Tuple of (columns, rows)
    """
    try:
        size = os.get_terminal_size()
        return (size.columns, size.lines)
    except OSError:
        return fallback
