"""
Tests for live-stream burst throttling.
"""

from __future__ import annotations

from livelog.utils.ui.managers.throttle import IDLE, Decision, Pending, ThrottleController


def _controller(scheduler, caught_up, deferred=None) -> ThrottleController:
    return ThrottleController(
        scheduler,
        on_catch_up=caught_up.append,
        throttle=0.6,
        on_defer=(lambda: deferred.append(1)) if deferred is not None else None,
    )


def test_regular_entries_always_render_now(scheduler) -> None:
    caught_up = []
    throttle = _controller(scheduler, caught_up)
    for _ in range(10):
        assert throttle.on_notification("e", is_live_stream=False) is Decision.RENDER_NOW
    assert throttle.state == IDLE
    assert scheduler.pending == []


def test_first_stream_line_renders_immediately(scheduler) -> None:
    throttle = _controller(scheduler, [])
    assert throttle.on_notification("e", is_live_stream=True) is Decision.RENDER_NOW
    assert throttle.last_intercept_at == scheduler.now()


def test_burst_is_coalesced_into_one_catch_up(scheduler) -> None:
    """Verify a burst of stream lines produces exactly one trailing render of the last entry."""
    caught_up, deferred = [], []
    throttle = _controller(scheduler, caught_up, deferred)

    assert throttle.on_notification("line-0", True) is Decision.RENDER_NOW
    for i in range(1, 50):
        scheduler.advance(0.01)
        assert throttle.on_notification(f"line-{i}", True) is Decision.DEFERRED

    assert isinstance(throttle.state, Pending)
    assert len(scheduler.pending) == 1
    assert len(deferred) == 49

    scheduler.advance(0.6)
    assert caught_up == ["line-49"]
    assert throttle.state == IDLE

    scheduler.advance(5)
    assert caught_up == ["line-49"]


def test_pending_keeps_first_deadline(scheduler) -> None:
    throttle = _controller(scheduler, [])
    throttle.on_notification("a", True)
    scheduler.advance(0.1)
    throttle.on_notification("b", True)
    deadline = throttle.state.deadline
    scheduler.advance(0.1)
    throttle.on_notification("c", True)

    assert throttle.state == Pending(deadline, "c")


def test_reported_render_cancels_pending_catch_up(scheduler) -> None:
    """Verify a render that reached the canvas makes the trailing catch-up unnecessary."""
    caught_up = []
    throttle = _controller(scheduler, caught_up)
    throttle.on_notification("a", True)
    scheduler.advance(0.1)
    throttle.on_notification("b", True)

    assert throttle.on_notification("regular", False) is Decision.RENDER_NOW
    assert isinstance(throttle.state, Pending)
    throttle.rendered()
    assert throttle.state == IDLE

    scheduler.advance(1)
    assert caught_up == []


def test_unreported_render_keeps_pending_catch_up(scheduler) -> None:
    """Verify an entry that was filtered out does not drop the burst's catch-up."""
    caught_up = []
    throttle = _controller(scheduler, caught_up)
    throttle.on_notification("a", True)
    scheduler.advance(0.1)
    throttle.on_notification("b", True)

    assert throttle.on_notification("hidden", False) is Decision.RENDER_NOW

    scheduler.advance(1)
    assert caught_up == ["b"]
    assert throttle.state == IDLE


def test_catch_up_notification_is_never_deferred(scheduler) -> None:
    throttle = _controller(scheduler, [])
    throttle.on_notification("a", True)
    scheduler.advance(0.1)
    assert throttle.on_notification("b", True, catch_up=True) is Decision.RENDER_NOW


def test_stream_after_quiet_period_renders_immediately(scheduler) -> None:
    caught_up = []
    throttle = _controller(scheduler, caught_up)
    throttle.on_notification("a", True)
    scheduler.advance(0.7)
    assert throttle.on_notification("b", True) is Decision.RENDER_NOW
    assert caught_up == []


def test_cancel_drops_pending_render(scheduler) -> None:
    caught_up = []
    throttle = _controller(scheduler, caught_up)
    throttle.on_notification("a", True)
    scheduler.advance(0.1)
    throttle.on_notification("b", True)

    throttle.cancel()
    scheduler.advance(1)

    assert caught_up == []
    assert not throttle.update_pending
