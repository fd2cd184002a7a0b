"""EventEmitter unit tests: ordering, once, off during dispatch, propagation."""
from __future__ import annotations

import pytest

from completion_stream.base.streaming.emitter import EventEmitter
from completion_stream.base.streaming.events import EventName


def test_handlers_run_in_registration_order_with_payload():
    emitter = EventEmitter()
    calls = []
    emitter.on("content.delta", lambda e: calls.append(("a", e)))
    emitter.on(EventName.CONTENT_DELTA, lambda e: calls.append(("b", e)))
    emitter.emit(EventName.CONTENT_DELTA, 1)
    assert calls == [("a", 1), ("b", 1)]  # nosec B101


def test_unknown_channel_name_is_rejected():
    with pytest.raises(ValueError):
        EventEmitter().on("content.deltas", lambda e: None)


def test_once_fires_a_single_time():
    emitter = EventEmitter()
    calls = []
    emitter.once("end", lambda: calls.append("end"))
    emitter.emit("end")
    emitter.emit("end")
    assert calls == ["end"]  # nosec B101
    assert emitter.listener_count("end") == 0  # nosec B101


def test_off_returns_whether_a_registration_was_removed():
    emitter = EventEmitter()

    def handler(_):
        return None

    emitter.on("chunk", handler)
    assert emitter.off("chunk", handler) is True  # nosec B101
    assert emitter.off("chunk", handler) is False  # nosec B101


def test_off_inside_handler_is_safe_and_skips_removed_listener():
    emitter = EventEmitter()
    calls = []

    def second(_):
        calls.append("second")

    def first(_):
        calls.append("first")
        emitter.off("chunk", first)
        emitter.off("chunk", second)

    emitter.on("chunk", first)
    emitter.on("chunk", second)
    emitter.emit("chunk", object())
    emitter.emit("chunk", object())
    assert calls == ["first"]  # nosec B101


def test_bound_methods_can_be_removed():
    class Sink:
        def __init__(self):
            self.seen = []

        def handle(self, e):
            self.seen.append(e)

    sink = Sink()
    emitter = EventEmitter()
    emitter.on("chunk", sink.handle)
    assert emitter.off("chunk", sink.handle) is True  # nosec B101
    emitter.emit("chunk", 1)
    assert sink.seen == []  # nosec B101


def test_handler_exception_propagates_and_stops_later_handlers():
    emitter = EventEmitter()
    calls = []

    def boom(_):
        raise RuntimeError("handler failed")

    emitter.on("chunk", boom)
    emitter.on("chunk", lambda _: calls.append("after"))
    with pytest.raises(RuntimeError):
        emitter.emit("chunk", 1)
    assert calls == []  # nosec B101


def test_no_replay_for_late_subscribers():
    emitter = EventEmitter()
    emitter.emit("chunk", 1)
    calls = []
    emitter.on("chunk", calls.append)
    assert calls == []  # nosec B101
