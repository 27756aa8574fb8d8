"""Scalar simulations: one (value, velocity) pair driven by a force.

A Simulation is bound to a property: anything with get()/set(value),
usually a ValueHolder. Each frame it integrates its force, clamps the
value into [min, max], pushes the value to the property and then tells
its update listeners. When the force reports equilibrium (or on cancel)
it unregisters from its scheduler and tells its end listeners.

The first frame after start() only records the frame time and publishes
the start value, so consumers see the exact start value for one frame
before anything moves.

Usage:
    x = ValueHolder(0.0)
    anim = fling(x).set_start_velocity(4500)
    anim.add_end_listener(lambda a, canceled, value, velocity: ...)
    anim.start()
"""

from __future__ import annotations

import logging
import math
import threading
from typing import Callable, Protocol

from bouncy.config import MIN_VISIBLE_CHANGE_PIXELS, THRESHOLD_MULTIPLIER, FlingConfig
from bouncy.errors import ThreadAffinityError, UsageError
from bouncy.force import Force, FrictionForce
from bouncy.scheduler import FrameScheduler, get_scheduler

logger = logging.getLogger("bouncy.simulation")

UpdateListener = Callable[["Simulation", float, float], None]
EndListener = Callable[["Simulation", bool, float, float], None]


class Property(Protocol):
    def get(self) -> float: ...

    def set(self, value: float) -> None: ...


class ValueHolder:
    """A single mutable float, for simulations that drive no external object."""

    __slots__ = ("_value",)

    def __init__(self, value: float = 0.0) -> None:
        self._value = float(value)

    def get(self) -> float:
        return self._value

    def set(self, value: float) -> None:
        self._value = float(value)

    def __repr__(self) -> str:
        return f"ValueHolder({self._value!r})"


class Simulation:
    """Advances a bound property under a force until equilibrium."""

    def __init__(
        self,
        target: Property,
        force: Force,
        *,
        scheduler: FrameScheduler | None = None,
    ) -> None:
        self._target = target
        self._scheduler = scheduler if scheduler is not None else get_scheduler()
        self._value = 0.0
        self._velocity = 0.0
        self._start_value_is_set = False
        self._running = False
        self._last_frame_time: float | None = None
        self._min_value = -math.inf
        self._max_value = math.inf
        self._min_visible_change = MIN_VISIBLE_CHANGE_PIXELS
        # The simulation owns the threshold; the force is kept in step with it.
        self._force = force.with_value_threshold(self.value_threshold)
        self._update_listeners: list[UpdateListener] = []
        self._end_listeners: list[EndListener] = []

    # --- Configuration ---

    @property
    def force(self) -> Force:
        return self._force

    @property
    def scheduler(self) -> FrameScheduler:
        return self._scheduler

    @property
    def value(self) -> float:
        return self._value

    @property
    def velocity(self) -> float:
        return self._velocity

    @property
    def min_value(self) -> float:
        return self._min_value

    @property
    def max_value(self) -> float:
        return self._max_value

    @property
    def value_threshold(self) -> float:
        return self._min_visible_change * THRESHOLD_MULTIPLIER

    @property
    def min_visible_change(self) -> float:
        return self._min_visible_change

    def is_running(self) -> bool:
        return self._running

    def set_start_value(self, value: float) -> Simulation:
        self._value = float(value)
        self._start_value_is_set = True
        return self

    def set_start_velocity(self, velocity: float) -> Simulation:
        """Set the initial velocity. While running this replaces the current one."""
        self._velocity = float(velocity)
        return self

    def set_min_value(self, min_value: float) -> Simulation:
        self._min_value = float(min_value)
        return self

    def set_max_value(self, max_value: float) -> Simulation:
        self._max_value = float(max_value)
        return self

    def set_min_visible_change(self, min_visible_change: float) -> Simulation:
        if not min_visible_change > 0:
            raise ValueError("Minimum visible change must be positive.")
        self._min_visible_change = float(min_visible_change)
        self._force = self._force.with_value_threshold(self.value_threshold)
        return self

    # --- Listeners ---

    def add_update_listener(self, listener: UpdateListener) -> Simulation:
        if self._running:
            raise UsageError("Update listeners must be added before the simulation starts.")
        if listener not in self._update_listeners:
            self._update_listeners.append(listener)
        return self

    def remove_update_listener(self, listener: UpdateListener) -> None:
        if listener in self._update_listeners:
            self._update_listeners.remove(listener)

    def add_end_listener(self, listener: EndListener) -> Simulation:
        if listener not in self._end_listeners:
            self._end_listeners.append(listener)
        return self

    def remove_end_listener(self, listener: EndListener) -> None:
        if listener in self._end_listeners:
            self._end_listeners.remove(listener)

    # --- Lifecycle ---

    def start(self) -> None:
        """Begin moving. No-op if already running.

        Raises ThreadAffinityError off the scheduler's thread and UsageError
        if the start value lies outside [min, max].
        """
        self._check_thread("started")
        if self._running:
            return
        if not self._start_value_is_set:
            self._value = self._target.get()
        if not self._min_value <= self._value <= self._max_value:
            raise UsageError(
                f"Starting value {self._value!r} must be between min value "
                f"{self._min_value!r} and max value {self._max_value!r}"
            )
        self._running = True
        logger.debug("Starting %r", self)
        self._scheduler.register(self, 0)

    def cancel(self) -> None:
        """Stop immediately, notifying end listeners with canceled=True."""
        self._check_thread("canceled")
        if self._running:
            self._end(canceled=True)

    def _check_thread(self, verb: str) -> None:
        if threading.current_thread() is not self._scheduler.thread:
            raise ThreadAffinityError(
                f"Simulations may only be {verb} on the scheduler thread "
                f"({self._scheduler.thread.name})"
            )

    def do_frame(self, frame_time: float) -> bool:
        """Scheduler entry point. Returns True once the simulation has finished."""
        if self._last_frame_time is None:
            self._last_frame_time = frame_time
            self._value = min(max(self._value, self._min_value), self._max_value)
            self._publish()
            return False

        delta_t = frame_time - self._last_frame_time
        self._last_frame_time = frame_time
        finished = self.advance(delta_t)
        self._publish()
        if finished:
            self._end(canceled=False)
        return finished

    def advance(self, delta_t: float) -> bool:
        """Integrate over delta_t milliseconds. Returns whether equilibrium holds.

        Semi-implicit Euler: velocity first, then position from the new
        velocity. A dissipative force stops velocity at zero rather than
        reversing it. Only the value is clamped to [min, max].
        """
        dt = delta_t / 1000.0
        velocity = self._velocity + self._force.acceleration(self._value, self._velocity) * dt
        if self._force.dissipative and velocity * self._velocity <= 0:
            velocity = 0.0
        value = self._value + velocity * dt
        self._velocity = velocity
        self._value = min(max(value, self._min_value), self._max_value)
        return self._force.is_at_equilibrium(self._value, self._velocity)

    def _publish(self) -> None:
        self._target.set(self._value)
        for listener in tuple(self._update_listeners):
            listener(self, self._value, self._velocity)

    def _end(self, canceled: bool) -> None:
        self._running = False
        self._scheduler.unregister(self)
        self._last_frame_time = None
        self._start_value_is_set = False
        logger.debug("Ended %r (canceled=%s)", self, canceled)
        for listener in tuple(self._end_listeners):
            listener(self, canceled, self._value, self._velocity)

    def __repr__(self) -> str:
        state = "running" if self._running else "idle"
        return f"Simulation(value={self._value:.3f}, velocity={self._velocity:.3f}, {state})"


def fling(
    target: Property,
    config: FlingConfig = FlingConfig(),
    *,
    scheduler: FrameScheduler | None = None,
) -> Simulation:
    """A friction-decelerated simulation of target."""
    sim = Simulation(target, FrictionForce(friction=config.friction), scheduler=scheduler)
    return sim.set_min_visible_change(config.min_visible_change)
