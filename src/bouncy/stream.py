"""Push-based event streams for frame and collision events.

The scheduler publishes each completed frame on a stream and the arena
publishes wall collisions on another. Subscribers run synchronously on
the emitting thread.
"""

from __future__ import annotations

from typing import Callable, Generic, TypeVar

T = TypeVar("T")

Disposer = Callable[[], None]


class EventStream(Generic[T]):
    """Synchronous push stream."""

    def __init__(self) -> None:
        self._subscribers: list[Callable[[T], None]] = []
        self._disposed = False

    @property
    def disposed(self) -> bool:
        return self._disposed

    def emit(self, value: T) -> None:
        """Push a value to every subscriber registered when the emit began."""
        if self._disposed:
            return
        # Snapshot: a subscriber may unsubscribe itself or others while we notify.
        for cb in tuple(self._subscribers):
            cb(value)

    def subscribe(self, callback: Callable[[T], None]) -> Disposer:
        """Register a callback. Returns a function that removes it."""
        self._subscribers.append(callback)

        def _unsubscribe() -> None:
            try:
                self._subscribers.remove(callback)
            except ValueError:
                pass  # already removed

        return _unsubscribe

    def dispose(self) -> None:
        """Drop every subscriber; later emits are ignored."""
        self._disposed = True
        self._subscribers.clear()

    def __repr__(self) -> str:
        state = "disposed" if self._disposed else f"{len(self._subscribers)} subscribers"
        return f"EventStream({state})"
