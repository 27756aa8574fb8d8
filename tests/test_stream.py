"""Tests for EventStream: push-based streams carrying frame and collision events."""

from bouncy import EventStream


class TestEmitSubscribe:
    """Core emit/subscribe behavior."""

    def test_subscribe_receives_emitted_values(self):
        stream = EventStream()
        received = []
        stream.subscribe(received.append)
        stream.emit(16.0)
        stream.emit(32.0)
        assert received == [16.0, 32.0]

    def test_multiple_subscribers(self):
        stream = EventStream()
        a, b = [], []
        stream.subscribe(a.append)
        stream.subscribe(b.append)
        stream.emit("hit")
        assert a == ["hit"]
        assert b == ["hit"]

    def test_unsubscribe(self):
        stream = EventStream()
        received = []
        unsub = stream.subscribe(received.append)
        stream.emit(1)
        unsub()
        stream.emit(2)
        assert received == [1]

    def test_unsubscribe_idempotent(self):
        stream = EventStream()
        unsub = stream.subscribe(lambda v: None)
        unsub()
        unsub()  # should not raise

    def test_unsubscribe_during_emit(self):
        """A subscriber removing another mid-emit does not disturb the current emit."""
        stream = EventStream()
        log = []
        unsub_b = None

        def a(v):
            log.append(("a", v))
            unsub_b()

        def b(v):
            log.append(("b", v))

        stream.subscribe(a)
        unsub_b = stream.subscribe(b)
        stream.emit(1)
        stream.emit(2)
        assert log == [("a", 1), ("b", 1), ("a", 2)]


class TestDispose:
    def test_emit_after_dispose_is_noop(self):
        stream = EventStream()
        received = []
        stream.subscribe(received.append)
        stream.dispose()
        stream.emit(1)
        assert received == []
        assert stream.disposed

    def test_dispose_drops_subscribers(self):
        stream = EventStream()
        stream.subscribe(lambda v: None)
        stream.dispose()
        assert repr(stream) == "EventStream(disposed)"
