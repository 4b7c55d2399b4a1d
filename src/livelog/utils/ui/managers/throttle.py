"""
Burst throttling for live-stream notifications.

Subprocess output can arrive far faster than a terminal can usefully
redraw. While a live-stream burst is in progress, notifications are
deferred and coalesced into a single catch-up render.

The controller is a two-state machine::

    idle --(stream notification within the throttle window)--> pending(deadline)
    pending --(a render actually reaches the canvas, or the catch-up fires)--> idle

While pending, further deferred notifications only replace the entry the
catch-up will render; they never arm a second timer. A notification that
renders now but turns out to write nothing (e.g. a filtered entry) leaves
the pending catch-up in place, so every burst gets at most one trailing
render, and never zero. Callers report real renders with ``rendered``.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional, Union

from ...timers import Scheduler, TimerHandle

THROTTLE_SEC = 0.6


class Decision(Enum):
    RENDER_NOW = "render_now"
    DEFERRED = "deferred"


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Pending:
    deadline: float
    entry: Any


ThrottleState = Union[Idle, Pending]
IDLE = Idle()


class ThrottleController:
    """Decide per notification whether to render now or defer."""

    def __init__(
        self,
        scheduler: Scheduler,
        on_catch_up: Callable[[Any], None],
        throttle: float = THROTTLE_SEC,
        on_defer: Optional[Callable[[], None]] = None,
        lock: Optional[threading.RLock] = None,
    ) -> None:
        self._scheduler = scheduler
        self._on_catch_up = on_catch_up
        self._throttle = throttle
        self._on_defer = on_defer
        self._lock = lock or threading.RLock()
        self._timer: Optional[TimerHandle] = None
        self.state: ThrottleState = IDLE
        self.last_intercept_at: Optional[float] = None

    @property
    def update_pending(self) -> bool:
        return isinstance(self.state, Pending)

    def on_notification(self, entry: Any, is_live_stream: bool, catch_up: bool = False) -> Decision:
        """
        Classify one graph-change notification.

        Args:
            entry: The entry that changed
            is_live_stream: True if the entry carries raw subprocess output
            catch_up: True when called from the deferred catch-up render

        Returns:
            RENDER_NOW, or DEFERRED if the caller must not write this cycle
        """
        with self._lock:
            if not is_live_stream or catch_up:
                return Decision.RENDER_NOW

            now = self._scheduler.now()
            if self.last_intercept_at is not None and now - self.last_intercept_at < self._throttle:
                if self._on_defer:
                    self._on_defer()
                if isinstance(self.state, Pending):
                    self.state = Pending(self.state.deadline, entry)
                else:
                    self.state = Pending(now + self._throttle, entry)
                    self._timer = self._scheduler.call_later(self._throttle, self._fire)
                return Decision.DEFERRED

            self.last_intercept_at = now
            return Decision.RENDER_NOW

    def _fire(self) -> None:
        with self._lock:
            state = self.state
            if not isinstance(state, Pending):
                return
            self._timer = None
            self.state = IDLE
            self._on_catch_up(state.entry)

    def _clear(self) -> None:
        self.state = IDLE
        timer = self._timer
        self._timer = None
        if timer is not None:
            timer.cancel()

    def rendered(self) -> None:
        """Record that a render reached the canvas; any pending catch-up is moot."""
        with self._lock:
            self._clear()

    def cancel(self) -> None:
        """Drop any pending catch-up render."""
        with self._lock:
            self._clear()
