"""
Cancellable timers built on ``threading.Timer``.

Components take a ``Scheduler`` so tests can drive time by hand. Every
handle's ``cancel`` is idempotent.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional, Protocol

logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def now(self) -> float: ...

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle: ...

    def call_every(self, interval: float, callback: Callable[[], None]) -> TimerHandle: ...


class RepeatingTimer:
    """Re-arms a daemon ``threading.Timer`` after each tick until cancelled."""

    def __init__(self, interval: float, callback: Callable[[], None]) -> None:
        self._interval = interval
        self._callback = callback
        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._cancelled = False

    @property
    def active(self) -> bool:
        return not self._cancelled

    def start(self) -> "RepeatingTimer":
        self._schedule()
        return self

    def _schedule(self) -> None:
        with self._lock:
            if self._cancelled:
                return
            self._timer = threading.Timer(self._interval, self._run)
            self._timer.daemon = True
            self._timer.start()

    def _run(self) -> None:
        if self._cancelled:
            return
        try:
            self._callback()
        except Exception:
            logger.exception("Repeating timer callback failed")
        self._schedule()

    def cancel(self) -> None:
        with self._lock:
            self._cancelled = True
            timer = self._timer
            self._timer = None
        if timer:
            timer.cancel()


class ThreadingScheduler:
    """Scheduler backed by daemon threads and the monotonic clock."""

    def now(self) -> float:
        return time.monotonic()

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        timer.start()
        return timer

    def call_every(self, interval: float, callback: Callable[[], None]) -> TimerHandle:
        return RepeatingTimer(interval, callback).start()
