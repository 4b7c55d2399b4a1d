"""
Terminal canvas for the fullscreen writer.

The canvas is a scrollable buffer of ANSI-styled lines plus a stack of
bottom widgets (flash messages, the command line). Writers mutate lines and
then call ``render`` once; painting goes through a Rich Live display on the
alternate screen with manual refresh, so nothing is drawn between renders.
"""

from __future__ import annotations

import threading
from typing import Callable, List, Optional, Protocol

from rich.console import Console, Group, RenderableType
from rich.live import Live
from rich.text import Text

from .resize_handler import setup_resize_handler, teardown_resize_handler


class Canvas(Protocol):
    """Operations the writer needs from a terminal canvas."""

    @property
    def width(self) -> int: ...

    @property
    def height(self) -> int: ...

    def set_line(self, row: int, text: str) -> None: ...

    def get_line(self, row: int) -> str: ...

    def set_content(self, text: str) -> None: ...

    def get_scroll(self) -> int: ...

    def scroll_to(self, offset: int) -> None: ...

    def get_scroll_percent(self) -> int: ...

    def set_scroll_percent(self, percent: int) -> None: ...

    def append(self, widget: RenderableType) -> None: ...

    def remove(self, widget: RenderableType) -> None: ...

    def render(self) -> None: ...

    def destroy(self) -> None: ...


class RichCanvas:
    """Line-addressable canvas painted with Rich Live."""

    # Rows reserved below the main area for the command line.
    BOTTOM_ROWS = 2

    def __init__(
        self,
        console: Optional[Console] = None,
        handle_resize: bool = True,
    ) -> None:
        self.console = console or Console(force_terminal=True, force_interactive=True)
        self._lines: List[str] = []
        self._widgets: List[RenderableType] = []
        self._scroll = 0
        self._lock = threading.RLock()
        self._live: Optional[Live] = None
        self._resize_listeners: List[Callable[[int, int], None]] = []
        self._cols, self._rows = self.console.size
        self._handles_resize = handle_resize and setup_resize_handler(self._on_resize)

    @property
    def width(self) -> int:
        return self._cols

    @property
    def height(self) -> int:
        """Rows available to the main (scrollable) area."""
        return max(self._body_rows(), 1)

    @property
    def line_count(self) -> int:
        return len(self._lines)

    @property
    def is_live(self) -> bool:
        return self._live is not None

    def on_resize(self, listener: Callable[[int, int], None]) -> None:
        self._resize_listeners.append(listener)

    def _on_resize(self, cols: int, rows: int) -> None:
        with self._lock:
            self._cols, self._rows = cols, rows
            self.scroll_to(self._scroll)
        for listener in list(self._resize_listeners):
            listener(cols, rows)

    def start(self) -> None:
        """Switch to the alternate screen and start accepting renders."""
        with self._lock:
            if self._live is not None:
                return
            self._live = Live(
                console=self.console,
                screen=True,
                auto_refresh=False,
                transient=True,
                redirect_stdout=False,
                redirect_stderr=False,
            )
            self._live.start()

    def set_line(self, row: int, text: str) -> None:
        with self._lock:
            if row >= len(self._lines):
                self._lines.extend([""] * (row + 1 - len(self._lines)))
            self._lines[row] = text

    def get_line(self, row: int) -> str:
        with self._lock:
            if 0 <= row < len(self._lines):
                return self._lines[row]
            return ""

    def set_content(self, text: str) -> None:
        with self._lock:
            self._lines = text.split("\n") if text else []
            self._scroll = 0

    def _body_rows(self) -> int:
        # Widgets taller than the reserved rows push the body up.
        with self._lock:
            return max(self._rows - max(self._widget_rows(), self.BOTTOM_ROWS), 0)

    def _max_scroll(self) -> int:
        return max(len(self._lines) - self._body_rows(), 0)

    def get_scroll(self) -> int:
        return self._scroll

    def scroll_to(self, offset: int) -> None:
        with self._lock:
            self._scroll = min(max(offset, 0), self._max_scroll())

    def get_scroll_percent(self) -> int:
        with self._lock:
            max_scroll = self._max_scroll()
            if max_scroll == 0:
                return 100
            return round(self._scroll * 100 / max_scroll)

    def set_scroll_percent(self, percent: int) -> None:
        with self._lock:
            self._scroll = round(self._max_scroll() * min(max(percent, 0), 100) / 100)

    def append(self, widget: RenderableType) -> None:
        with self._lock:
            at_bottom = self._scroll >= self._max_scroll()
            self._widgets.append(widget)
            self._keep_bottom(at_bottom)

    def remove(self, widget: RenderableType) -> None:
        with self._lock:
            if widget not in self._widgets:
                return
            at_bottom = self._scroll >= self._max_scroll()
            self._widgets.remove(widget)
            self._keep_bottom(at_bottom)

    def _keep_bottom(self, at_bottom: bool) -> None:
        max_scroll = self._max_scroll()
        self._scroll = max_scroll if at_bottom else min(self._scroll, max_scroll)

    def _widget_rows(self) -> int:
        options = self.console.options.update(width=self._cols)
        return sum(len(self.console.render_lines(w, options, pad=False)) for w in self._widgets)

    def compose(self) -> Group:
        """Build the renderable for the current scroll window."""
        with self._lock:
            body_rows = self._body_rows()
            visible = self._lines[self._scroll : self._scroll + body_rows]
            visible = visible + [""] * (body_rows - len(visible))
            rows = [Text.from_ansi(line, no_wrap=True, overflow="crop") for line in visible]
            return Group(*rows, *self._widgets)

    def render(self) -> None:
        with self._lock:
            if self._live is None:
                return
            self._live.update(self.compose(), refresh=True)

    def destroy(self) -> None:
        """Leave the alternate screen. Safe to call more than once."""
        with self._lock:
            live = self._live
            self._live = None
        if live is not None:
            live.stop()
        if self._handles_resize:
            teardown_resize_handler()
            self._handles_resize = False
