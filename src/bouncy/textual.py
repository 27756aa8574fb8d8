"""Textual integration for bouncy. Opt-in, requires textual.

TextualFrameProvider turns one-shot Textual timers into frame pulses for
a FrameScheduler, so simulations advance on the app's event loop (the
control thread) at a fixed frame rate, and only while something moves.

Frames requested from another thread are marshaled with call_from_thread.
While the app is not running, or inside pause(app), a due frame is not
delivered; the timer is re-armed and the frame goes out once it is safe.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Callable

from textual.timer import Timer

from bouncy.scheduler import FrameScheduler, get_scheduler, uptime_millis

logger = logging.getLogger("bouncy.textual")

DEFAULT_FPS = 60.0

# Module-owned pause state, keyed by id(app) so multiple apps work in tests.
_paused_apps: set[int] = set()


@contextmanager
def pause(app):
    """Hold frame delivery during widget replacement."""
    key = id(app)
    _paused_apps.add(key)
    try:
        yield
    finally:
        _paused_apps.discard(key)


def is_safe(app) -> bool:
    """Can a frame be delivered to this app right now?"""
    return app.is_running and id(app) not in _paused_apps


class TextualFrameProvider:
    """Frame provider backed by App.set_timer."""

    def __init__(
        self,
        app,
        fps: float = DEFAULT_FPS,
        *,
        clock: Callable[[], float] = uptime_millis,
    ) -> None:
        if not fps > 0:
            raise ValueError("Frame rate must be positive.")
        self._app = app
        self._interval = 1.0 / fps
        self._clock = clock
        self._main = threading.get_ident()
        self._timer: Timer | None = None

    def post_frame_callback(self, callback: Callable[[float], None]) -> None:
        if threading.get_ident() != self._main:
            self._app.call_from_thread(self._arm, callback)
        else:
            self._arm(callback)

    def _arm(self, callback: Callable[[float], None]) -> None:
        def _fire() -> None:
            self._timer = None
            if not is_safe(self._app):
                logger.debug("Frame held: app paused or not running")
                self._arm(callback)
                return
            callback(self._clock())

        self._timer = self._app.set_timer(self._interval, _fire)

    def stop(self) -> None:
        """Cancel the pending frame, if any."""
        if self._timer is not None:
            self._timer.stop()
            self._timer = None


def drive(app, scheduler: FrameScheduler | None = None, fps: float = DEFAULT_FPS) -> TextualFrameProvider:
    """Make app's timers the frame source of scheduler (default: this thread's)."""
    scheduler = scheduler if scheduler is not None else get_scheduler()
    provider = TextualFrameProvider(app, fps)
    scheduler.set_provider(provider)
    return provider
