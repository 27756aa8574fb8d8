"""Tests for bouncy.textual: Textual timers as the frame source."""

import threading

import pytest

from bouncy import FlingConfig, FrameScheduler, ManualFrameProvider, ValueHolder, fling
from bouncy import textual as btx


class _MockTimer:
    def __init__(self, delay, callback):
        self.delay = delay
        self.callback = callback
        self.stopped = False

    def stop(self):
        self.stopped = True


class _MockApp:
    """Minimal mock matching the Textual App interface btx needs."""

    def __init__(self, *, is_running=True):
        self.is_running = is_running
        self.timers = []
        self._call_from_thread_log = []

    def set_timer(self, delay, callback):
        timer = _MockTimer(delay, callback)
        self.timers.append(timer)
        return timer

    def call_from_thread(self, fn, *args):
        self._call_from_thread_log.append((fn, args))
        fn(*args)

    def fire_latest(self):
        self.timers[-1].callback()


class _FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        self.now += 16.0
        return self.now


def _driven(app, fps=60.0):
    scheduler = FrameScheduler(ManualFrameProvider())
    provider = btx.TextualFrameProvider(app, fps, clock=_FakeClock())
    scheduler.set_provider(provider)
    sim = fling(ValueHolder(), FlingConfig(), scheduler=scheduler)
    return scheduler, provider, sim


class TestProvider:
    def test_arms_timer_at_frame_interval(self):
        app = _MockApp()
        scheduler, _, sim = _driven(app, fps=50)
        sim.set_start_velocity(1000).start()
        assert len(app.timers) == 1
        assert app.timers[0].delay == pytest.approx(0.02)

    def test_timer_delivers_frame(self):
        app = _MockApp()
        scheduler, _, sim = _driven(app)
        sim.set_start_velocity(1000).start()
        app.fire_latest()
        assert scheduler.frame_time == 16.0
        # Still moving, so the next frame is armed.
        assert len(app.timers) == 2

    def test_no_timer_when_idle(self):
        app = _MockApp()
        scheduler, _, sim = _driven(app)
        assert app.timers == []

    def test_rejects_non_positive_fps(self):
        with pytest.raises(ValueError):
            btx.TextualFrameProvider(_MockApp(), 0)

    def test_stop_cancels_pending_timer(self):
        app = _MockApp()
        _, provider, sim = _driven(app)
        sim.set_start_velocity(1000).start()
        provider.stop()
        assert app.timers[0].stopped

    def test_thread_marshal(self):
        """Frames requested from a background thread use call_from_thread."""
        app = _MockApp()
        provider = btx.TextualFrameProvider(app)
        frames = []

        t = threading.Thread(target=provider.post_frame_callback, args=(frames.append,))
        t.start()
        t.join()

        assert len(app._call_from_thread_log) == 1
        assert len(app.timers) == 1


class TestHeldFrames:
    def test_not_running_holds_frame(self):
        app = _MockApp(is_running=False)
        scheduler, _, sim = _driven(app)
        sim.set_start_velocity(1000).start()
        app.fire_latest()
        assert scheduler.frame_time == 0
        assert len(app.timers) == 2  # re-armed

        app.is_running = True
        app.fire_latest()
        assert scheduler.frame_time > 0

    def test_pause_holds_frame(self):
        app = _MockApp()
        scheduler, _, sim = _driven(app)
        sim.set_start_velocity(1000).start()
        with btx.pause(app):
            app.fire_latest()
        assert scheduler.frame_time == 0
        app.fire_latest()
        assert scheduler.frame_time > 0


class TestPause:
    def test_pause_restores_on_exception(self):
        app = _MockApp()
        assert btx.is_safe(app)

        with pytest.raises(RuntimeError):
            with btx.pause(app):
                assert not btx.is_safe(app)
                raise RuntimeError("oops")

        assert btx.is_safe(app)

    def test_pause_does_not_mutate_app(self):
        app = _MockApp()
        attrs_before = set(vars(app))
        with btx.pause(app):
            attrs_during = set(vars(app))
        assert attrs_before == attrs_during

    def test_multiple_apps_independent(self):
        app_a = _MockApp()
        app_b = _MockApp()
        with btx.pause(app_a):
            assert not btx.is_safe(app_a)
            assert btx.is_safe(app_b)


class TestDrive:
    def test_drive_installs_provider(self):
        app = _MockApp()
        scheduler = FrameScheduler(ManualFrameProvider())
        provider = btx.drive(app, scheduler, fps=30)
        assert scheduler.provider is provider
