"""
Tests for key dispatch.
"""

from __future__ import annotations

from prompt_toolkit.keys import Keys

from livelog.utils.ui.core.key_dispatcher import KeyDispatcher, KeyHandler, key_name


def test_key_names_match_handler_names() -> None:
    assert key_name(Keys.PageUp) == "pageup"
    assert key_name(Keys.PageDown) == "pagedown"
    assert key_name(Keys.ControlC) == "c-c"
    assert key_name("3") == "3"


def test_dispatch_calls_matching_handlers() -> None:
    keys = KeyDispatcher()
    seen = []
    keys.add(KeyHandler(keys=["0", "1"], listener=lambda k: seen.append(("level", k))))
    keys.add(KeyHandler(keys=["pageup"], listener=lambda k: seen.append(("up", k))))

    assert keys.dispatch("1")
    assert keys.dispatch("pageup")
    assert not keys.dispatch("x")
    assert seen == [("level", "1"), ("up", "pageup")]


def test_removed_handler_is_not_called() -> None:
    keys = KeyDispatcher()
    seen = []
    handler = keys.add(KeyHandler(keys=["a"], listener=seen.append))
    keys.remove(handler)
    assert not keys.dispatch("a")
    assert seen == []


def test_failing_listener_does_not_stop_dispatch() -> None:
    keys = KeyDispatcher()
    seen = []

    def broken(key):
        raise RuntimeError("boom")

    keys.add(KeyHandler(keys=["a"], listener=broken))
    keys.add(KeyHandler(keys=["a"], listener=seen.append))
    assert keys.dispatch("a")
    assert seen == ["a"]


def test_stop_without_start_is_safe() -> None:
    keys = KeyDispatcher()
    keys.stop()
    keys.stop()
