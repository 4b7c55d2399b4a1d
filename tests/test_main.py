"""
Tests for the command line entry point.
"""

from __future__ import annotations

import re
import sys
import threading
import time
from pathlib import Path
from types import SimpleNamespace

import pytest
from conftest import RecordingCanvas

from livelog import main as main_module
from livelog.logger import LogGraph
from livelog.platform.events import EventBus
from livelog.utils import cleanup
from livelog.utils.cleanup import ShutdownContext
from livelog.utils.ui.fullscreen_writer import FullscreenTerminalWriter


def _session() -> SimpleNamespace:
    return SimpleNamespace(graph=LogGraph(), bus=EventBus(), context=ShutdownContext())


def test_run_command_streams_output_under_active_root() -> None:
    """Verify subprocess lines become live-stream children of the command entry."""
    session = _session()
    events = []
    session.bus.on_any(lambda name, payload: events.append(name))

    code = main_module.run_command(
        session, [sys.executable, "-c", "print('alpha'); print('beta')"]
    )

    assert code == 0
    root, *children = session.graph.snapshot()
    assert root.status == "done"
    assert root.get_message_state().symbol == "success"
    assert [c.get_message_state().msg for c in children] == ["alpha", "beta"]
    assert all(c.from_live_stream for c in children)
    assert events == ["commandStarted", "commandFinished"]


def test_run_command_marks_failures() -> None:
    session = _session()
    code = main_module.run_command(session, [sys.executable, "-c", "import sys; sys.exit(3)"])

    assert code == 3
    root = session.graph.snapshot()[0]
    assert root.status == "error"
    assert any("exited with code 3" in (c.get_message_state().msg or "") for c in session.graph.children(root.key))


def test_run_command_reports_missing_program() -> None:
    session = _session()
    code = main_module.run_command(session, ["definitely-not-a-real-program-xyz"])
    assert code == 127
    assert session.graph.snapshot()[0].status == "error"


def test_run_without_command_is_a_usage_error(monkeypatch) -> None:
    monkeypatch.setattr(main_module, "setup_logging", lambda **kwargs: None)
    with pytest.raises(SystemExit) as exc:
        main_module.cli(["run", "--"])
    assert exc.value.code == 2


def test_invalid_level_is_a_usage_error(monkeypatch) -> None:
    monkeypatch.setattr(main_module, "setup_logging", lambda **kwargs: None)
    with pytest.raises(SystemExit):
        main_module.cli(["--level", "shouty", "demo"])


def test_cli_runs_command_in_a_session(monkeypatch) -> None:
    closed = []
    ran = []

    class FakeSession:
        def __init__(self, config):
            self.config = config

        def close(self):
            closed.append(True)

    def fake_run(session, cmd):
        ran.append((session.config.level, cmd))
        return 0

    monkeypatch.setattr(main_module, "setup_logging", lambda **kwargs: None)
    monkeypatch.setattr(main_module, "Session", FakeSession)
    monkeypatch.setattr(main_module, "run_command", fake_run)

    assert main_module.cli(["--level", "3", "run", "--", "make", "-j4"]) == 0
    assert ran == [(3, ["make", "-j4"])]
    assert closed == [True]


def test_interrupt_exits_with_130(monkeypatch) -> None:
    closed = []

    class FakeSession:
        def __init__(self, config):
            pass

        def close(self):
            closed.append(True)

    def interrupted(session):
        raise KeyboardInterrupt

    monkeypatch.setattr(main_module, "setup_logging", lambda **kwargs: None)
    monkeypatch.setattr(main_module, "Session", FakeSession)
    monkeypatch.setattr(main_module, "run_demo", interrupted)

    assert main_module.cli(["demo"]) == 130
    assert closed == [True]


def test_shutdown_terminates_running_command() -> None:
    """Verify tearing the session down ends a blocked command instead of waiting it out."""
    session = _session()
    timer = threading.Timer(0.3, session.context.run_cleanup)
    timer.start()

    started = time.monotonic()
    code = main_module.run_command(session, [sys.executable, "-c", "import time; time.sleep(10)"])
    timer.join()

    assert time.monotonic() - started < 5
    assert code != 0
    assert session.graph.snapshot()[0].status == "error"


def test_command_started_after_shutdown_is_terminated() -> None:
    session = _session()
    session.context.run_cleanup()

    started = time.monotonic()
    code = main_module.run_command(session, [sys.executable, "-c", "import time; time.sleep(10)"])

    assert time.monotonic() - started < 5
    assert code != 0


def test_quit_key_ends_running_command(monkeypatch) -> None:
    interrupts = []
    monkeypatch.setattr(cleanup._thread, "interrupt_main", lambda: interrupts.append(True))
    session = _session()
    canvas = RecordingCanvas()
    writer = FullscreenTerminalWriter(
        context=session.context, canvas_factory=lambda: canvas, read_keys=False
    )
    writer.attach(session.graph)
    timer = threading.Timer(0.5, writer.keys.dispatch, args=("c-c",))
    timer.start()

    started = time.monotonic()
    code = main_module.run_command(session, [sys.executable, "-c", "import time; time.sleep(10)"])
    timer.join()

    assert time.monotonic() - started < 5
    assert code != 0
    assert writer.stopped
    assert canvas.destroyed
    assert interrupts == [True]


def test_console_script_points_at_cli() -> None:
    setup_py = (Path(__file__).parent.parent / "setup.py").read_text()
    match = re.search(r'"livelog=livelog\.main:(\w+)"', setup_py)

    assert match is not None
    assert getattr(main_module, match.group(1)) is main_module.cli
