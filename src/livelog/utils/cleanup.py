"""
Shutdown context: named cleanup functions that run exactly once.

The writer and the event stream register their teardown here instead of in
a process-global list. The owning process controller decides when to run
them (explicitly, or via the atexit hook installed by ``install``).
"""

from __future__ import annotations

import _thread
import atexit
import logging
import threading
from typing import Callable, List, Tuple

logger = logging.getLogger(__name__)


class ShutdownContext:
    """Registry of cleanup functions torn down exactly once."""

    def __init__(self) -> None:
        self._functions: List[Tuple[str, Callable[[], None]]] = []
        self._lock = threading.Lock()
        self._done = False
        self._installed = False

    @property
    def is_shut_down(self) -> bool:
        return self._done

    def register(self, name: str, fn: Callable[[], None]) -> None:
        """Register a cleanup function. Registering after teardown runs nothing."""
        with self._lock:
            if self._done:
                logger.debug("Ignoring cleanup %s registered after shutdown", name)
                return
            self._functions.append((name, fn))

    def install(self) -> "ShutdownContext":
        """Run the cleanup functions at interpreter exit."""
        with self._lock:
            if not self._installed:
                atexit.register(self.run_cleanup)
                self._installed = True
        return self

    def run_cleanup(self) -> None:
        """Run every registered function once, in registration order."""
        with self._lock:
            if self._done:
                return
            self._done = True
            functions = list(self._functions)
            self._functions.clear()

        for name, fn in functions:
            try:
                fn()
            except Exception:
                logger.exception("Cleanup function %s failed", name)

    def request_shutdown(self) -> None:
        """Tear down and interrupt the main thread (used by the quit key)."""
        self.run_cleanup()
        _thread.interrupt_main()
