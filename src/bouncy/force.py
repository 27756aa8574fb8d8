"""Force models: map a (value, velocity) pair to an acceleration.

A force is a stateless strategy: acceleration depends only on its two
arguments, so a simulation driven by it replays deterministically.

A dissipative force only ever removes energy. The integrator uses that
flag to stop velocity at zero instead of letting it swing past.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Protocol

from bouncy.config import DEFAULT_FRICTION, MIN_VISIBLE_CHANGE_PIXELS, THRESHOLD_MULTIPLIER


class Force(Protocol):
    dissipative: bool

    def acceleration(self, value: float, velocity: float) -> float: ...

    def is_at_equilibrium(self, value: float, velocity: float) -> bool: ...

    def with_value_threshold(self, threshold: float) -> Force: ...


@dataclass(frozen=True)
class FrictionForce:
    """Constant-magnitude deceleration opposing the current motion ("fling")."""

    friction: float = DEFAULT_FRICTION
    velocity_threshold: float = MIN_VISIBLE_CHANGE_PIXELS * THRESHOLD_MULTIPLIER
    dissipative: bool = True

    def __post_init__(self) -> None:
        if not self.friction > 0:
            raise ValueError("Friction must be positive.")
        if not self.velocity_threshold > 0:
            raise ValueError("Velocity threshold must be positive.")

    def acceleration(self, value: float, velocity: float) -> float:
        if velocity == 0:
            return 0.0
        return -math.copysign(self.friction, velocity)

    def is_at_equilibrium(self, value: float, velocity: float) -> bool:
        return abs(velocity) < self.velocity_threshold

    def with_value_threshold(self, threshold: float) -> FrictionForce:
        return replace(self, velocity_threshold=threshold)
