"""
Pytest configuration and fixtures.
"""

import sys
from pathlib import Path
from typing import Callable, List, Optional, Tuple

import pytest


def pytest_configure(config):
    """Configure pytest."""
    # Add src to path
    src_path = Path(__file__).parent.parent / "src"
    sys.path.insert(0, str(src_path))


class ManualHandle:
    """Timer handle of the manual scheduler."""

    def __init__(self, due: float, callback: Callable[[], None], interval: Optional[float]) -> None:
        self.due = due
        self.callback = callback
        self.interval = interval
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """
    Scheduler whose clock only moves when a test calls ``advance``.

    Timers fire in due order, on the calling thread.
    """

    def __init__(self, start: float = 1000.0) -> None:
        self.time = start
        self.handles: List[ManualHandle] = []

    def now(self) -> float:
        return self.time

    def call_later(self, delay: float, callback: Callable[[], None]) -> ManualHandle:
        handle = ManualHandle(self.time + delay, callback, None)
        self.handles.append(handle)
        return handle

    def call_every(self, interval: float, callback: Callable[[], None]) -> ManualHandle:
        handle = ManualHandle(self.time + interval, callback, interval)
        self.handles.append(handle)
        return handle

    @property
    def pending(self) -> List[ManualHandle]:
        return [h for h in self.handles if not h.cancelled]

    def advance(self, seconds: float) -> None:
        target = self.time + seconds
        while True:
            due = [h for h in self.pending if h.due <= target + 1e-9]
            if not due:
                break
            handle = min(due, key=lambda h: h.due)
            self.time = max(self.time, handle.due)
            if handle.interval is None:
                handle.cancelled = True
            else:
                handle.due += handle.interval
            handle.callback()
        self.time = target


class RecordingCanvas:
    """In-memory canvas that records every row write and repaint."""

    def __init__(self, width: int = 80, height: int = 20) -> None:
        self.width = width
        self.height = height
        self.lines: List[str] = []
        self.widgets: list = []
        self.writes: List[Tuple[int, str]] = []
        self.renders = 0
        self.scroll = 0
        self.destroyed = False

    def set_line(self, row: int, text: str) -> None:
        if row >= len(self.lines):
            self.lines.extend([""] * (row + 1 - len(self.lines)))
        self.lines[row] = text
        self.writes.append((row, text))

    def get_line(self, row: int) -> str:
        return self.lines[row] if 0 <= row < len(self.lines) else ""

    def set_content(self, text: str) -> None:
        self.lines = text.split("\n") if text else []
        self.scroll = 0

    def _max_scroll(self) -> int:
        return max(len(self.lines) - self.height, 0)

    def get_scroll(self) -> int:
        return self.scroll

    def scroll_to(self, offset: int) -> None:
        self.scroll = min(max(offset, 0), self._max_scroll())

    def get_scroll_percent(self) -> int:
        max_scroll = self._max_scroll()
        return 100 if max_scroll == 0 else round(self.scroll * 100 / max_scroll)

    def set_scroll_percent(self, percent: int) -> None:
        self.scroll = round(self._max_scroll() * percent / 100)

    def append(self, widget) -> None:
        self.widgets.append(widget)

    def remove(self, widget) -> None:
        if widget in self.widgets:
            self.widgets.remove(widget)

    def render(self) -> None:
        self.renders += 1

    def destroy(self) -> None:
        self.destroyed = True

    def reset_counts(self) -> None:
        self.writes = []
        self.renders = 0


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def canvas() -> RecordingCanvas:
    return RecordingCanvas()
