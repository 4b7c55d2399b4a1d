"""
Key-press dispatch for the fullscreen writer.

Handlers map key names to listeners. Names follow prompt_toolkit's key
naming ("pageup", "pagedown", "c-c") and single characters ("0".."4").
``start`` reads raw key presses from stdin on a daemon thread.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Union

from prompt_toolkit.input import Input, create_input
from prompt_toolkit.keys import Keys

logger = logging.getLogger(__name__)


@dataclass
class KeyHandler:
    """Listener for one or more key names."""

    keys: Sequence[str]
    listener: Callable[[str], None]


def key_name(key: Union[Keys, str]) -> str:
    """Normalize a prompt_toolkit key to the name handlers register for."""
    if isinstance(key, Keys):
        return key.value
    return key


class KeyDispatcher:
    """Route key presses to registered handlers."""

    def __init__(self) -> None:
        self._handlers: List[KeyHandler] = []
        self._lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._stop_event: Optional[asyncio.Event] = None

    @property
    def handlers(self) -> List[KeyHandler]:
        with self._lock:
            return list(self._handlers)

    def add(self, handler: KeyHandler) -> KeyHandler:
        with self._lock:
            self._handlers.append(handler)
        return handler

    def remove(self, handler: KeyHandler) -> None:
        with self._lock:
            if handler in self._handlers:
                self._handlers.remove(handler)

    def dispatch(self, key: str) -> bool:
        """
        Call every listener registered for ``key``.

        Returns:
            True if at least one listener handled the key
        """
        matched = [h for h in self.handlers if key in h.keys]
        for handler in matched:
            try:
                handler.listener(key)
            except Exception:
                logger.exception("Key handler for %r failed", key)
        return bool(matched)

    def start(self, input_: Optional[Input] = None) -> None:
        """Read key presses from the terminal until ``stop`` is called."""
        if self._thread is not None:
            return
        self._thread = threading.Thread(
            target=self._run, args=(input_,), name="livelog-keys", daemon=True
        )
        self._thread.start()

    def stop(self) -> None:
        loop, stop_event = self._loop, self._stop_event
        if loop is not None and stop_event is not None and not loop.is_closed():
            try:
                loop.call_soon_threadsafe(stop_event.set)
            except RuntimeError:
                pass
        thread = self._thread
        self._thread = None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=1.0)

    def _run(self, input_: Optional[Input]) -> None:
        try:
            asyncio.run(self._read_keys(input_ or create_input()))
        except Exception:
            logger.exception("Key reader stopped")

    async def _read_keys(self, input_: Input) -> None:
        self._loop = asyncio.get_running_loop()
        self._stop_event = asyncio.Event()

        def keys_ready() -> None:
            for key_press in input_.read_keys():
                self.dispatch(key_name(key_press.key))

        with input_.raw_mode():
            with input_.attach(keys_ready):
                await self._stop_event.wait()
