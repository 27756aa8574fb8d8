"""Frame scheduler: turns external timing pulses into simulation ticks.

One scheduler per control thread. Simulations register themselves when
they start and are advanced once per pulse, all with the same frame time,
until they finish or are cancelled.

Pulses come from a frame provider. The scheduler asks the provider for
exactly one pulse at a time, and only while something is registered, so
an idle scheduler costs nothing.

Removal during a sweep (a simulation finishing or cancelling itself from
inside its own tick) tombstones the slot; the list is compacted after the
sweep, never while it is being walked.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Protocol

from bouncy import _anchor
from bouncy.stream import EventStream

logger = logging.getLogger("bouncy.scheduler")


class FrameCallback(Protocol):
    def do_frame(self, frame_time: float) -> bool:
        """Advance to frame_time. Returns True when finished."""
        ...


class FrameProvider(Protocol):
    def post_frame_callback(self, callback: Callable[[float], None]) -> None:
        """Arrange for callback(frame_time) to be called once, on the control thread."""
        ...


def uptime_millis() -> float:
    return time.monotonic_ns() / 1_000_000


class ManualFrameProvider:
    """Holds the pending frame request until fire() delivers it.

    The default provider. Suits callers that already own a render loop
    (and call fire() or FrameScheduler.on_external_tick themselves) and tests.
    """

    def __init__(self) -> None:
        self._pending: Callable[[float], None] | None = None

    @property
    def pending(self) -> bool:
        return self._pending is not None

    def post_frame_callback(self, callback: Callable[[float], None]) -> None:
        self._pending = callback

    def fire(self, frame_time: float) -> bool:
        """Deliver the pending frame, if any. Returns whether one was delivered."""
        callback, self._pending = self._pending, None
        if callback is None:
            return False
        callback(frame_time)
        return True


class FrameScheduler:
    """Per-thread registry of running simulations."""

    def __init__(
        self,
        provider: FrameProvider | None = None,
        *,
        clock: Callable[[], float] = uptime_millis,
        thread: threading.Thread | None = None,
    ) -> None:
        self._provider = provider if provider is not None else ManualFrameProvider()
        self._clock = clock
        self._thread = thread if thread is not None else threading.current_thread()
        self._callbacks: list[FrameCallback | None] = []
        self._delayed_start: dict[FrameCallback, float] = {}
        self._list_dirty = False
        self._sweeping = False
        self._sweep_lock = threading.Lock()
        self._frame_pending = False
        self._frame_time: float = 0
        self.frames: EventStream[float] = EventStream()

    @property
    def thread(self) -> threading.Thread:
        """The control thread. Simulations may only start/cancel from here."""
        return self._thread

    @property
    def provider(self) -> FrameProvider:
        return self._provider

    def set_provider(self, provider: FrameProvider) -> None:
        self._provider = provider
        self._frame_pending = False
        if self.active_count:
            self._post_frame()

    @property
    def frame_time(self) -> float:
        """Frame time of the current (or most recent) sweep."""
        return self._frame_time

    @property
    def active_count(self) -> int:
        return sum(1 for cb in self._callbacks if cb is not None)

    def is_registered(self, callback: FrameCallback) -> bool:
        return callback in self._callbacks

    def register(self, callback: FrameCallback, delay_ms: float = 0) -> None:
        """Add callback to the active set.

        With delay_ms > 0 the callback is skipped until the clock passes
        now + delay_ms.
        """
        if callback not in self._callbacks:
            self._callbacks.append(callback)
            logger.debug("Registered %r (%d active)", callback, self.active_count)
        if delay_ms > 0:
            self._delayed_start[callback] = self._clock() + delay_ms
        if not self._frame_pending:
            self._post_frame()

    def unregister(self, callback: FrameCallback) -> None:
        self._delayed_start.pop(callback, None)
        try:
            index = self._callbacks.index(callback)
        except ValueError:
            return
        if self._sweeping:
            self._callbacks[index] = None
            self._list_dirty = True
        else:
            del self._callbacks[index]
        logger.debug("Unregistered %r (%d active)", callback, self.active_count)

    def on_external_tick(self, frame_time: float) -> None:
        """Advance every due callback once, all with the same frame_time.

        A pulse that arrives while a sweep is still running is dropped. The
        next frame is still requested after the sweep, even if a callback or
        frames subscriber raised.
        """
        if not self._sweep_lock.acquire(blocking=False):
            logger.warning("Dropped frame %r: a sweep is already in progress", frame_time)
            # The dropped pulse used up whatever frame was posted mid-sweep.
            self._frame_pending = False
            return
        try:
            self._frame_pending = False
            self._frame_time = frame_time
            self._sweep(frame_time)
            self.frames.emit(frame_time)
        finally:
            self._sweep_lock.release()
            if self.active_count and not self._frame_pending:
                self._post_frame()

    def _sweep(self, frame_time: float) -> None:
        now = self._clock()
        # Callbacks appended during the sweep wait for the next frame.
        count = len(self._callbacks)
        self._sweeping = True
        try:
            for i in range(count):
                callback = self._callbacks[i]
                if callback is None:
                    continue
                if self._is_due(callback, now):
                    callback.do_frame(frame_time)
        finally:
            self._sweeping = False
            self._clean_up_list()

    def _is_due(self, callback: FrameCallback, now: float) -> bool:
        start_time = self._delayed_start.get(callback)
        if start_time is None:
            return True
        if start_time < now:
            del self._delayed_start[callback]
            return True
        return False

    def _clean_up_list(self) -> None:
        if self._list_dirty:
            self._callbacks = [cb for cb in self._callbacks if cb is not None]
            self._list_dirty = False

    def _post_frame(self) -> None:
        self._frame_pending = True
        self._provider.post_frame_callback(self.on_external_tick)

    def __repr__(self) -> str:
        return f"FrameScheduler({self._thread.name}, {self.active_count} active)"


def get_scheduler() -> FrameScheduler:
    """The calling thread's scheduler, created on first use."""
    scheduler = _anchor.current()
    if scheduler is None:
        scheduler = FrameScheduler()
        _anchor.install(scheduler)
    return scheduler
