"""
Fullscreen terminal writer.

This module renders the live log graph to a fullscreen canvas. It wires the
focused components in ``managers`` together: every graph change goes through
the throttle controller, then the snapshot builder, the diff writer and
finally the spinner loop.

All mutable writer state is guarded by one re-entrant lock, because
notifications arrive on the producer thread while spinner ticks, catch-up
renders, flash removals and key presses arrive on timer/reader threads.
"""

from __future__ import annotations

import _thread
import logging
import sys
import threading
from collections import OrderedDict
from typing import Callable, Dict, List, Optional, TextIO

from rich.align import Align
from rich.panel import Panel
from rich.text import Text

from ...config import LiveLogConfig
from ...logger.levels import SELECTABLE_LEVELS, LogLevel
from ...logger.log_entry import LogEntry
from ...logger.log_graph import LogGraph
from ...logger.renderers import basic_render
from ..cleanup import ShutdownContext
from ..timers import Scheduler, ThreadingScheduler
from .core import Canvas, KeyDispatcher, KeyHandler, RichCanvas
from .managers import Decision, DiffWriter, RenderRecord, SnapshotBuilder, SpinnerScheduler, ThrottleController
from .theme import THEME

logger = logging.getLogger(__name__)


def _start_rich_canvas() -> Canvas:
    canvas = RichCanvas()
    canvas.start()
    return canvas


class FullscreenTerminalWriter:
    """
    Render the log graph to a fullscreen, scrollable terminal canvas.

    The canvas is created lazily on the first notification. Key bindings:
    page-up/page-down scroll, 0-4 change the log level, ctrl-c quits.
    """

    def __init__(
        self,
        level: Optional[LogLevel] = None,
        context: Optional[ShutdownContext] = None,
        config: Optional[LiveLogConfig] = None,
        canvas_factory: Callable[[], Canvas] = _start_rich_canvas,
        keys: Optional[KeyDispatcher] = None,
        scheduler: Optional[Scheduler] = None,
        read_keys: bool = True,
        spinner_seed: Optional[Callable[[], int]] = None,
        stdout: Optional[TextIO] = None,
    ) -> None:
        self.config = config or LiveLogConfig()
        self.level = LogLevel.parse(level if level is not None else self.config.level)
        self.keys = keys or KeyDispatcher()
        self.canvas: Optional[Canvas] = None
        self.initialized = False
        self.stopped = False

        self._context = context
        self._canvas_factory = canvas_factory
        self._read_keys = read_keys
        self._stdout = stdout
        self._lock = threading.RLock()
        self._scheduler = scheduler or ThreadingScheduler()
        self._graph: Optional[LogGraph] = None
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._diff: Optional[DiffWriter] = None
        self._command_line: Optional[Text] = None
        self._error_messages: Dict[str, str] = OrderedDict()

        self._spinners = SpinnerScheduler(
            self._scheduler,
            interval=self.config.spinner_interval_ms / 1000,
            seed=spinner_seed,
            lock=self._lock,
        )
        self._builder = SnapshotBuilder(self._spinners)
        self._throttle = ThrottleController(
            self._scheduler,
            on_catch_up=self._on_catch_up,
            throttle=self.config.throttle_ms / 1000,
            on_defer=self._spinners.stop_loop,
            lock=self._lock,
        )

        if context is not None:
            context.register("fullscreenTerminalWriter", self.stop)

    @property
    def spinners(self) -> SpinnerScheduler:
        return self._spinners

    @property
    def throttle(self) -> ThrottleController:
        return self._throttle

    @property
    def diff_writer(self) -> Optional[DiffWriter]:
        return self._diff

    @property
    def error_messages(self) -> List[str]:
        return list(self._error_messages.values())

    def attach(self, graph: LogGraph) -> None:
        """Subscribe to every change of ``graph``."""
        with self._lock:
            if self._unsubscribe:
                self._unsubscribe()
            self._graph = graph
            self._unsubscribe = graph.on_change(self.on_graph_change)

    def _init(self) -> None:
        canvas = self._canvas_factory()
        self.canvas = canvas
        self._diff = DiffWriter(canvas)

        self.keys.add(KeyHandler(keys=["c-c"], listener=self._on_quit))
        level_keys = [str(int(level)) for level in SELECTABLE_LEVELS]
        self.keys.add(KeyHandler(keys=level_keys, listener=self._on_level_key))
        self.keys.add(KeyHandler(keys=["pageup"], listener=self._on_page_up))
        self.keys.add(KeyHandler(keys=["pagedown"], listener=self._on_page_down))

        on_resize = getattr(canvas, "on_resize", None)
        if on_resize is not None:
            on_resize(lambda cols, rows: self._scheduler.call_later(0, self.redraw))

        self._set_command_line()
        canvas.render()
        if self._read_keys:
            self.keys.start()
        self.initialized = True

    def render_command_line(self) -> str:
        level = f"{int(self.level)}={self.level.name}"
        return f"[page-up/down]: scroll   [0-4]: set log level ({level})   [ctrl-c]: quit"

    def _set_command_line(self) -> None:
        if self.canvas is None:
            return
        if self._command_line is not None:
            self.canvas.remove(self._command_line)
        self._command_line = Text(self.render_command_line(), style=THEME["command_line"])
        self.canvas.append(self._command_line)

    def flash_message(self, message: str, duration: Optional[float] = None) -> None:
        """Show ``message`` in a bordered box for ``duration`` seconds."""
        if duration is None:
            duration = self.config.flash_duration_ms / 1000
        with self._lock:
            if self.canvas is None or self.stopped:
                return
            box = Align.center(
                Panel(Text.from_markup(message), expand=False, border_style=THEME["flash_border"])
            )
            self.canvas.append(box)
            self.canvas.render()

        def remove_box() -> None:
            with self._lock:
                if self.canvas is None or self.stopped:
                    return
                self.canvas.remove(box)
                self.canvas.render()

        self._scheduler.call_later(duration, remove_box)

    def change_level(self, level: LogLevel) -> None:
        """Switch the severity threshold and redraw everything."""
        with self._lock:
            self.level = LogLevel.parse(level)
            self.redraw()

    def redraw(self) -> None:
        """Clear the canvas and render the whole graph again."""
        with self._lock:
            if self._graph is None or self.canvas is None or self._diff is None or self.stopped:
                return
            self._diff.force_full_redraw()
            self.canvas.set_content("")
            try:
                self._render(self._full_render(self._graph))
                self._throttle.rendered()
            except Exception:
                logger.debug("Full redraw failed", exc_info=True)

    def _on_quit(self, key: str) -> None:
        if self._context is not None:
            self._context.request_shutdown()
            return
        self.stop()
        _thread.interrupt_main()

    def _on_level_key(self, key: str) -> None:
        with self._lock:
            self.change_level(LogLevel(int(key)))
            self._set_command_line()
        self.flash_message(f"Set log level to [{THEME['flash_level']}]{self.level.name}[/] [{int(self.level)}]")

    def _on_page_up(self, key: str) -> None:
        with self._lock:
            if self.canvas is None or self._diff is None:
                return
            self._diff.scrolling = True
            self.canvas.scroll_to(self.canvas.get_scroll() - self.canvas.height - 2)
            self.canvas.render()

    def _on_page_down(self, key: str) -> None:
        with self._lock:
            if self.canvas is None or self._diff is None:
                return
            self.canvas.scroll_to(self.canvas.get_scroll() + self.canvas.height - 2)
            if self.canvas.get_scroll_percent() == 100:
                self._diff.scrolling = False
            self.canvas.render()

    def on_graph_change(self, entry: LogEntry, graph: LogGraph) -> None:
        """Handle one graph-change notification."""
        with self._lock:
            if self.stopped:
                return

            if entry.level == LogLevel.error:
                out = basic_render(entry, self.level)
                if out:
                    self._error_messages[entry.key] = out

            if not self.initialized:
                self._init()

            self._handle_graph_change(entry, graph, catch_up=False)

    def _on_catch_up(self, entry: LogEntry) -> None:
        with self._lock:
            if self.stopped or self._graph is None:
                return
            self._handle_graph_change(entry, self._graph, catch_up=True)

    def _handle_graph_change(self, entry: LogEntry, graph: LogGraph, catch_up: bool) -> None:
        self._graph = graph

        decision = self._throttle.on_notification(entry, entry.from_live_stream, catch_up=catch_up)
        if decision is Decision.DEFERRED:
            return

        try:
            records = self._full_render(graph)
            # Nothing to do, e.g. because the entry is above the writer level.
            # A catch-up always renders: earlier lines of the burst may be visible.
            if not catch_up and not any(r.key == entry.key for r in records):
                return
            self._render(records)
            self._throttle.rendered()
        except Exception:
            logger.debug("Rendering entry %s failed", entry.key, exc_info=True)

    def _full_render(self, graph: LogGraph) -> List[RenderRecord]:
        assert self.canvas is not None
        return self._builder.build(graph.snapshot(), self.level, self.canvas.width)

    def _render(self, records: List[RenderRecord]) -> None:
        assert self.canvas is not None and self._diff is not None
        self._diff.apply(records)

        spinning = [(r.key, r.spinner_coords) for r in records if r.spinner_coords]
        if spinning:
            self._spinners.start_loop(self.canvas, spinning)
        else:
            self._spinners.stop_loop()

    def stop(self) -> None:
        """
        Stop rendering and release the terminal.

        Stops the spinner loop and any pending catch-up render, detaches from
        the graph, destroys the canvas, then prints the buffered error
        messages to stdout. Safe to call more than once.
        """
        with self._lock:
            if self.stopped:
                return
            self.stopped = True
            self._spinners.stop_loop()
            self._throttle.cancel()
            if self._unsubscribe:
                self._unsubscribe()
                self._unsubscribe = None

        self.keys.stop()

        with self._lock:
            if self.canvas is not None:
                self.canvas.destroy()
            out = self._stdout or sys.stdout
            for line in self._error_messages.values():
                out.write(line)
            out.flush()
            self._error_messages.clear()

    cleanup = stop
