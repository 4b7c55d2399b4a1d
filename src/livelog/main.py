"""
Main entry point for the livelog command line.
"""

from __future__ import annotations

import subprocess
import sys
import threading
import time
from typing import IO, List, Optional

from .config import LiveLogConfig
from .logger import LogEntry, LogGraph
from .platform import BufferedEventStream, ConsoleSink, EventBus, HttpSink, connect_log_graph
from .platform.sinks import OutboundSink
from .utils.cleanup import ShutdownContext
from .utils.logging import setup_logging
from .utils.ui import THEME
from .utils.ui.fullscreen_writer import FullscreenTerminalWriter


class Session:
    """
    One livelog session: graph, fullscreen writer and event stream.

    The writer and the event stream register their teardown with the
    session's shutdown context, writer first, so buffered error messages are
    printed before the final event flush.
    """

    def __init__(self, config: LiveLogConfig, read_keys: bool = True) -> None:
        self.config = config
        self.context = ShutdownContext().install()
        self.graph = LogGraph()
        self.bus = EventBus()

        self.writer = FullscreenTerminalWriter(
            context=self.context, config=config, read_keys=read_keys
        )
        self.writer.attach(self.graph)

        self.stream = BufferedEventStream(
            sink=self._make_sink(),
            session_id=config.session_id,
            event_bus=self.bus,
            context=self.context,
            flush_interval_ms=config.flush_interval_ms,
            max_batch_size=config.max_batch_size,
        )
        self._disconnect = connect_log_graph(self.graph, self.bus)
        self.context.register("disconnectLogGraph", self._disconnect)

    def _make_sink(self) -> OutboundSink:
        if self.config.platform_url:
            return HttpSink(self.config.platform_url, self.config.client_auth_token)
        return ConsoleSink()

    def close(self) -> None:
        self.context.run_cleanup()


def _pump(stream: IO[str], parent: LogEntry) -> None:
    for line in iter(stream.readline, ""):
        parent.info(line.rstrip("\r\n"), from_std_stream=True)
    stream.close()


def run_command(session: Session, command: List[str]) -> int:
    """
    Run ``command`` and stream its output into the session's log graph.

    Args:
        session: The active session
        command: Program and arguments

    Returns:
        The process exit code
    """
    name = " ".join(command)
    root = session.graph.info(msg=f"Running {name}", section=command[0], status="active")
    session.bus.emit("commandStarted", {"command": command})

    try:
        process = subprocess.Popen(
            command,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            bufsize=1,
        )
    except OSError as e:
        root.set_error(f"Could not start {name}: {e}")
        session.bus.emit("commandFailed", {"command": command, "error": str(e)})
        return 127

    def terminate() -> None:
        if process.poll() is None:
            process.terminate()

    # Shutdown (e.g. the quit key) ends the child, so wait() below returns.
    session.context.register("terminateCommand", terminate)
    if session.context.is_shut_down:
        terminate()

    pumps = [
        threading.Thread(target=_pump, args=(process.stdout, root), daemon=True),
        threading.Thread(target=_pump, args=(process.stderr, root), daemon=True),
    ]
    for pump in pumps:
        pump.start()

    try:
        code = process.wait()
    except KeyboardInterrupt:
        process.terminate()
        process.wait()
        raise
    for pump in pumps:
        pump.join()

    if code == 0:
        root.set_success(f"Finished {name}")
    else:
        root.error(f"{name} exited with code {code}")
        root.set_error(f"Failed {name}")
    session.bus.emit("commandFinished", {"command": command, "exitCode": code})
    return code


def run_demo(session: Session, delay: float = 0.4) -> int:
    """Render a synthetic graph: a few tasks with spinners, streamed output and an error."""
    graph = session.graph
    build = graph.info(msg="Building modules", section="build", status="active")
    deploy = graph.info(msg="Deploying services", section="deploy", status="active")

    for i in range(1, 6):
        build.info(f"step {i}/5: compiling", from_std_stream=True)
        time.sleep(delay / 2)
    build.verbose("Compiled 5 modules", data={"modules": 5, "cache": "hit"})
    build.set_success("Built modules")

    for name in ("api", "worker", "frontend"):
        service = deploy.info(msg=f"Deploying {name}", section=name, status="active")
        time.sleep(delay)
        if name == "worker":
            service.warn("Health check slow", status="done")
        service.set_success(f"Deployed {name}")

    failing = graph.info(msg="Running smoke tests", section="test", status="active")
    time.sleep(delay)
    failing.error("Smoke test 'login' failed", data={"expected": 200, "actual": 500})
    failing.set_error("Smoke tests failed")
    deploy.set_warn("Deployed with warnings")
    session.bus.emit("demoFinished", {"services": 3})

    time.sleep(delay * 5)
    return 1


def cli(argv: Optional[List[str]] = None) -> int:
    """CLI entry point with argument parsing."""
    import argparse

    parser = argparse.ArgumentParser(
        prog="livelog",
        description="Live, fullscreen log rendering for long-running commands",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Write debug logs of livelog itself (see --log-file)",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        default=None,
        help="File that receives livelog's own diagnostic logs",
    )
    parser.add_argument(
        "--level",
        type=str,
        default=None,
        help="Terminal log level (0-5 or error, warn, info, verbose, debug, silly)",
    )
    parser.add_argument("--session-id", type=str, default=None, help="Session id sent with every batch")
    parser.add_argument("--platform-url", type=str, default=None, help="Event collector base URL")

    subparsers = parser.add_subparsers(dest="command", required=True)
    run_parser = subparsers.add_parser("run", help="Run a command and render its output live")
    run_parser.add_argument("cmd", nargs=argparse.REMAINDER, help="Command to run, after --")
    subparsers.add_parser("demo", help="Render a synthetic log graph")

    args = parser.parse_args(argv)

    cmd = list(args.cmd) if args.command == "run" else []
    if cmd and cmd[0] == "--":
        cmd = cmd[1:]
    if args.command == "run" and not cmd:
        parser.error("run needs a command, e.g. livelog run -- make build")

    setup_logging(verbose=args.verbose, log_file=args.log_file)

    try:
        config = LiveLogConfig.from_env(
            level=args.level, session_id=args.session_id, platform_url=args.platform_url
        )
    except ValueError as e:
        parser.error(str(e))

    session = Session(config)
    try:
        if args.command == "run":
            code = run_command(session, cmd)
        else:
            code = run_demo(session)
    except KeyboardInterrupt:
        code = 130
    finally:
        session.close()

    if code == 130:
        from rich.console import Console

        Console(stderr=True).print(f"[{THEME['muted']}]Interrupted[/]")
    return code


if __name__ == "__main__":
    sys.exit(cli())
