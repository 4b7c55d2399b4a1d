"""
Spinner animation for active log entries.

Each active entry key owns a small frame state. A single repeating timer
writes the next glyph of every active spinner straight into the canvas at
its recorded coordinates; the timer only exists while at least one spinner
is active.
"""

from __future__ import annotations

import random
import threading
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from ...text import style_ansi
from ...timers import Scheduler, TimerHandle
from ..core.canvas import Canvas
from ..theme import SPINNER_FRAMES, THEME

Coords = Tuple[int, int]

SPINNER_INTERVAL_SEC = 0.06


@dataclass(frozen=True)
class SpinnerState:
    """Animation phase of one spinner."""

    phase: int = 0


def next_frame(state: SpinnerState, frames: Sequence[str] = SPINNER_FRAMES) -> Tuple[str, SpinnerState]:
    """Return the glyph for ``state`` and the state that follows it."""
    return frames[state.phase % len(frames)], SpinnerState(state.phase + 1)


class SpinnerScheduler:
    """Own per-entry spinner states and the tick loop that paints them."""

    def __init__(
        self,
        scheduler: Scheduler,
        interval: float = SPINNER_INTERVAL_SEC,
        frames: Sequence[str] = SPINNER_FRAMES,
        style: str = THEME["spinner"],
        seed: Optional[Callable[[], int]] = None,
        lock: Optional[threading.RLock] = None,
    ) -> None:
        self._scheduler = scheduler
        self._interval = interval
        self._frames = list(frames)
        self._style = style
        self._seed = seed or (lambda: random.randrange(len(self._frames)))
        self._lock = lock or threading.RLock()
        self._states: Dict[str, SpinnerState] = {}
        self._loop: Optional[TimerHandle] = None
        # All frames are single glyphs, so every styled frame has this length.
        self.glyph_length = len(style_ansi(self._frames[0], style))

    def __contains__(self, key: object) -> bool:
        return key in self._states

    @property
    def keys(self) -> List[str]:
        return list(self._states)

    @property
    def running(self) -> bool:
        return self._loop is not None

    def tick(self, key: str) -> str:
        """Advance the spinner for ``key`` and return its styled glyph."""
        with self._lock:
            state = self._states.get(key)
            if state is None:
                state = SpinnerState(self._seed())
            glyph, self._states[key] = next_frame(state, self._frames)
            return style_ansi(glyph, self._style)

    def forget(self, key: str) -> None:
        with self._lock:
            self._states.pop(key, None)

    def spin(self, canvas: Canvas, entries: Sequence[Tuple[str, Coords]]) -> None:
        """Paint the next frame of every spinner in ``entries`` and repaint once."""
        with self._lock:
            for key, (x, y) in entries:
                line = canvas.get_line(y)
                canvas.set_line(y, line[:x] + self.tick(key) + line[x + self.glyph_length :])
            canvas.render()

    def start_loop(self, canvas: Canvas, entries: Sequence[Tuple[str, Coords]]) -> None:
        """(Re)start the tick loop on exactly ``entries``; stop it if empty."""
        with self._lock:
            self.stop_loop()
            if not entries:
                return
            entries = list(entries)
            handle: Optional[TimerHandle] = None

            def on_tick() -> None:
                with self._lock:
                    if self._loop is not handle:
                        return
                    self.spin(canvas, entries)

            handle = self._scheduler.call_every(self._interval, on_tick)
            self._loop = handle

    def stop_loop(self) -> None:
        with self._lock:
            loop = self._loop
            self._loop = None
        if loop is not None:
            loop.cancel()
