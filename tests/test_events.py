"""
Unit tests for EventChannel and Subscription.
"""

from typing import List

from geoanchor.events import EventChannel


class TestEventChannel:
    def test_emit_calls_listeners_in_order(self) -> None:
        channel = EventChannel("test")
        calls: List[str] = []
        channel.subscribe(lambda v: calls.append(f"a{v}"))
        channel.subscribe(lambda v: calls.append(f"b{v}"))
        channel.emit(1)
        assert calls == ["a1", "b1"]

    def test_cancel_stops_delivery(self) -> None:
        channel = EventChannel("test")
        calls: List[int] = []
        sub = channel.subscribe(calls.append)
        sub.cancel()
        channel.emit(1)
        assert calls == []
        assert channel.listener_count == 0
        assert sub.active is False

    def test_cancel_is_idempotent(self) -> None:
        channel = EventChannel("test")
        calls: List[int] = []
        first = channel.subscribe(calls.append)
        channel.subscribe(calls.append)
        first.cancel()
        first.cancel()
        assert channel.listener_count == 1
        channel.emit(5)
        assert calls == [5]

    def test_listener_can_cancel_during_emit(self) -> None:
        channel = EventChannel("test")
        calls: List[str] = []
        subs = []

        def first(value: int) -> None:
            calls.append("first")
            for s in subs:
                s.cancel()

        def second(value: int) -> None:
            calls.append("second")

        subs.append(channel.subscribe(first))
        subs.append(channel.subscribe(second))
        channel.emit(1)
        channel.emit(2)
        assert calls == ["first"]

    def test_emit_without_listeners(self) -> None:
        EventChannel("empty").emit()
