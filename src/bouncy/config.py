"""Tunable constants for the fling simulation and the string synthesizer.

None of these are discovered at runtime. The defaults reproduce the feel
of the original bouncing-ball toy; they are empirical, not derived.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

# Smallest change in a pixel-valued property that is worth a frame.
MIN_VISIBLE_CHANGE_PIXELS: float = 1.0

# Value threshold = min visible change * THRESHOLD_MULTIPLIER, for every simulation.
THRESHOLD_MULTIPLIER: float = 0.75

DEFAULT_FRICTION: float = 4200.0  # units/s^2
KEY_IMPULSE_VELOCITY: float = 4500.0  # units/s

MIDDLE_A_SEMITONE: int = 69
MIDDLE_A_FREQUENCY: float = 440.0

AUDIO_SAMPLE_RATE: int = 44100
NOTE_DURATION: float = 4.0  # seconds

# Up the major scale and back down again, one step per wall hit.
DIATONIC_WALK: tuple[int, ...] = (0, 2, 4, 5, 7, 9, 11, 12, 11, 9, 7, 5, 4, 2)


@dataclass(frozen=True)
class FlingConfig:
    friction: float = DEFAULT_FRICTION
    min_visible_change: float = MIN_VISIBLE_CHANGE_PIXELS
    impulse_velocity: float = KEY_IMPULSE_VELOCITY

    def __post_init__(self) -> None:
        if not self.friction > 0:
            raise ValueError("Friction must be positive.")
        if not self.min_visible_change > 0:
            raise ValueError("Minimum visible change must be positive.")


@dataclass(frozen=True)
class StringConfig:
    """Filter coefficients for the plucked-string model.

    p: pick-direction low-pass pole.
    beta: pick position as a fraction of the string length.
    s: string-damping mix between the current and previous delay tap.
    c: string-tuning allpass coefficient.
    l: dynamic level, in (0, 1/3).
    decay: per-period loss of the delay line.
    """

    p: float = 0.9
    beta: float = 0.1
    s: float = 0.1
    c: float = 0.1
    l: float = 0.1
    decay: float = 0.996

    def __post_init__(self) -> None:
        for name in ("p", "beta", "s", "c", "l"):
            value = getattr(self, name)
            if not 0.0 <= value < 1.0:
                raise ValueError(f"{name} must be in [0, 1), got {value!r}")
        if not 0.0 < self.decay <= 1.0:
            raise ValueError(f"decay must be in (0, 1], got {self.decay!r}")


@dataclass(frozen=True)
class NoteConfig:
    sample_rate: int = AUDIO_SAMPLE_RATE
    duration: float = NOTE_DURATION
    base_semitone: int = MIDDLE_A_SEMITONE
    scale: tuple[int, ...] = DIATONIC_WALK

    def __post_init__(self) -> None:
        if self.sample_rate <= 0:
            raise ValueError("Sample rate must be positive.")
        if not math.isfinite(self.duration) or self.duration < 0:
            raise ValueError("Duration must be a finite, non-negative number of seconds.")
        if not self.scale:
            raise ValueError("Scale must contain at least one step.")
