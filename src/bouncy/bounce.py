"""The bouncing ball: two fling simulations in a box, and the notes they play.

Arena owns the body's position (one ValueHolder per axis), the fling
simulation driving each axis, and the box it bounces in. After every
scheduler sweep it checks the walls: an axis sitting on a wall while
moving into it is cancelled and restarted with the reflected velocity,
and one Collision per frame is published on Arena.collisions.

NotePlayer listens to collisions and plays the next step of a diatonic
walk for each. Synthesis and playback run off the control thread; the
control thread only hands the work over.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable

import numpy as np

from bouncy.config import FlingConfig, NoteConfig, StringConfig
from bouncy.scheduler import FrameScheduler, get_scheduler
from bouncy.simulation import Simulation, ValueHolder, fling
from bouncy.sink import AudioSink
from bouncy.stream import Disposer, EventStream
from bouncy.synth import standard_frequency, synthesize

logger = logging.getLogger("bouncy.bounce")


class Axis(str, Enum):
    X = "x"
    Y = "y"


class Wall(str, Enum):
    LEFT = "left"
    RIGHT = "right"
    TOP = "top"
    BOTTOM = "bottom"


# Key direction -> (axis, sign). Screen coordinates: y grows downwards.
DIRECTIONS: dict[str, tuple[Axis, int]] = {
    "up": (Axis.Y, -1),
    "down": (Axis.Y, 1),
    "left": (Axis.X, -1),
    "right": (Axis.X, 1),
}

_WALLS = {Axis.X: (Wall.LEFT, Wall.RIGHT), Axis.Y: (Wall.TOP, Wall.BOTTOM)}


@dataclass(frozen=True)
class Collision:
    x: float
    y: float
    walls: tuple[Wall, ...]
    frame_time: float


class Arena:
    """A body flung around inside a rectangle."""

    def __init__(
        self,
        scheduler: FrameScheduler | None = None,
        *,
        fling_config: FlingConfig = FlingConfig(),
        radius_ratio: float = 1 / 20,
    ) -> None:
        self._scheduler = scheduler if scheduler is not None else get_scheduler()
        self._config = fling_config
        self._radius_ratio = radius_ratio
        self.radius = 0.0
        self._holders = {Axis.X: ValueHolder(), Axis.Y: ValueHolder()}
        self._sims: dict[Axis, Simulation] = {}
        self._last_velocity = {Axis.X: 0.0, Axis.Y: 0.0}
        self._limits: dict[Axis, tuple[float, float]] | None = None
        for axis, holder in self._holders.items():
            sim = fling(holder, fling_config, scheduler=self._scheduler)
            sim.add_update_listener(self._velocity_recorder(axis))
            self._sims[axis] = sim
        self.collisions: EventStream[Collision] = EventStream()
        self._unsubscribe_frames = self._scheduler.frames.subscribe(self._on_frame)

    def _velocity_recorder(self, axis: Axis):
        def _record(sim: Simulation, value: float, velocity: float) -> None:
            self._last_velocity[axis] = velocity

        return _record

    @property
    def scheduler(self) -> FrameScheduler:
        return self._scheduler

    def simulation(self, axis: Axis | str) -> Simulation:
        return self._sims[Axis(axis)]

    def get_value(self, axis: Axis | str) -> float:
        return self._holders[Axis(axis)].get()

    def limits(self, axis: Axis | str) -> tuple[float, float] | None:
        """Range of the body's centre on axis, or None before set_bounds()."""
        if self._limits is None:
            return None
        return self._limits[Axis(axis)]

    def set_bounds(self, min_x: float, max_x: float, min_y: float, max_y: float) -> None:
        """Resize the box. The body is centred the first time, clamped after."""
        width, height = max_x - min_x, max_y - min_y
        if width <= 0 or height <= 0:
            raise ValueError(f"Empty bounds: {width!r} x {height!r}")
        self.radius = min(width, height) * self._radius_ratio
        r = self.radius
        first = self._limits is None
        self._limits = {
            Axis.X: (min_x + r, max_x - r),
            Axis.Y: (min_y + r, max_y - r),
        }
        for axis, (lo, hi) in self._limits.items():
            holder = self._holders[axis]
            if first:
                holder.set((lo + hi) / 2)
            else:
                holder.set(min(max(holder.get(), lo), hi))
            self._sims[axis].set_min_value(lo).set_max_value(hi)
        logger.debug("Bounds set to x=%s y=%s radius=%.1f", self._limits[Axis.X], self._limits[Axis.Y], r)

    # --- Input ---

    def start_impulse(self, axis: Axis | str, velocity: float) -> None:
        self._sims[Axis(axis)].set_start_velocity(velocity).start()

    def key_impulse(self, direction: str) -> None:
        try:
            axis, sign = DIRECTIONS[direction]
        except KeyError:
            raise ValueError(f"Unknown direction {direction!r}") from None
        self.start_impulse(axis, sign * self._config.impulse_velocity)

    def fling(self, velocity_x: float, velocity_y: float) -> None:
        self.start_impulse(Axis.X, velocity_x)
        self.start_impulse(Axis.Y, velocity_y)

    def cancel(self, axis: Axis | str) -> None:
        self._sims[Axis(axis)].cancel()

    def drag_by(self, dx: float, dy: float) -> None:
        """Grab the body: stop both axes and move it by (dx, dy)."""
        for axis, delta in ((Axis.X, dx), (Axis.Y, dy)):
            self._sims[axis].cancel()
            holder = self._holders[axis]
            value = holder.get() + delta
            if self._limits is not None:
                lo, hi = self._limits[axis]
                value = min(max(value, lo), hi)
            holder.set(value)

    # --- Frames ---

    def advance_frame(self, timestamp: float) -> None:
        self._scheduler.on_external_tick(timestamp)

    def _on_frame(self, frame_time: float) -> None:
        if self._limits is None:
            return
        walls: list[Wall] = []
        for axis, sim in self._sims.items():
            if not sim.is_running():
                continue
            lo, hi = self._limits[axis]
            holder = self._holders[axis]
            velocity = self._last_velocity[axis]
            low_wall, high_wall = _WALLS[axis]
            if holder.get() <= lo and velocity < 0:
                holder.set(lo)
                walls.append(low_wall)
            elif holder.get() >= hi and velocity > 0:
                holder.set(hi)
                walls.append(high_wall)
            else:
                continue
            sim.cancel()
            sim.set_start_velocity(-velocity).start()
            self._last_velocity[axis] = -velocity
        if walls:
            collision = Collision(
                x=self._holders[Axis.X].get(),
                y=self._holders[Axis.Y].get(),
                walls=tuple(walls),
                frame_time=frame_time,
            )
            logger.debug("Wall hit: %s", collision)
            self.collisions.emit(collision)

    def dispose(self) -> None:
        for sim in self._sims.values():
            sim.cancel()
        self._unsubscribe_frames()
        self.collisions.dispose()

    def __repr__(self) -> str:
        return f"Arena(x={self.get_value(Axis.X):.1f}, y={self.get_value(Axis.Y):.1f})"


def spawn_daemon(fn: Callable[[], None]) -> threading.Thread:
    """Run fn in a daemon thread."""
    thread = threading.Thread(target=fn, name="bouncy-note", daemon=True)
    thread.start()
    return thread


class NotePlayer:
    """Plays one plucked note per collision, walking up and down a scale."""

    def __init__(
        self,
        sink: AudioSink,
        config: NoteConfig = NoteConfig(),
        string_config: StringConfig = StringConfig(),
        *,
        spawn: Callable[[Callable[[], None]], object] = spawn_daemon,
        seed: int | None = None,
    ) -> None:
        self._sink = sink
        self._config = config
        self._string_config = string_config
        self._spawn = spawn
        self._seeds = np.random.SeedSequence(seed)
        self._counter = 0

    def attach(self, collisions: EventStream[Collision]) -> Disposer:
        return collisions.subscribe(self.on_collision)

    def next_semitone(self) -> int:
        """Advance the walk and return the MIDI semitone of the next note."""
        self._counter += 1
        scale = self._config.scale
        return self._config.base_semitone + scale[self._counter % len(scale)]

    def on_collision(self, collision: Collision) -> None:
        self.play_next()

    def play_next(self) -> None:
        """Hand the next note of the walk to the spawner."""
        semitone = self.next_semitone()
        rng = np.random.default_rng(self._seeds.spawn(1)[0])
        self._spawn(lambda: self.play_note(semitone, rng))

    def play_note(self, semitone: float, rng: np.random.Generator | None = None) -> None:
        """Synthesize and hand the note to the sink. Never raises."""
        config = self._config
        try:
            buffer = synthesize(
                config.sample_rate,
                standard_frequency(semitone),
                config.duration,
                config=self._string_config,
                rng=rng,
            )
            self._sink.play(buffer, config.sample_rate, channel_count=1, bit_depth=16)
        except Exception:
            logger.exception("Failed to play note %s", semitone)
