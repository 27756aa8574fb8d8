"""Plucked-string synthesis.

Pure functions that render a complete, normalized 16-bit waveform for a
single plucked note. The model is a Karplus-Strong style delay line fed
with commuted excitation:

1. excitation: one period of uniform noise through a pick-direction low-pass
2. comb: pick-position comb filter over the excitation
3. resonate: delay line of one period with string damping and a tuning allpass
4. shape_level: dynamic-level low-pass blended with the dry signal
5. normalize: scale to full int16 range

Every stage is a linear recurrence, so each one is a single
scipy.signal.lfilter call over a numpy array.
"""

from __future__ import annotations

import logging
import math

import numpy as np
from scipy import signal as scipy_signal

from bouncy.config import MIDDLE_A_FREQUENCY, MIDDLE_A_SEMITONE, StringConfig
from bouncy.errors import InvalidInputError

logger = logging.getLogger("bouncy.synth")

INT16_MAX = np.iinfo(np.int16).max


def standard_frequency(semitone: float) -> float:
    """12-tone equal temperament, A4 (MIDI 69) = 440 Hz."""
    return MIDDLE_A_FREQUENCY * 2.0 ** ((semitone - MIDDLE_A_SEMITONE) / 12)


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def period_length(sample_rate: int, frequency: float) -> int:
    """Delay-line length in samples, one period of the fundamental."""
    return _round_half_up(sample_rate / frequency)


def excitation(n: int, p: float, rng: np.random.Generator) -> np.ndarray:
    """n samples of uniform noise in [-1, 1] through a one-pole low-pass.

    out[i] = (1 - p) * rand[i] + p * out[i - 1], with out[-1] = 0.
    """
    rand = rng.uniform(-1.0, 1.0, n)
    return scipy_signal.lfilter([1.0 - p], [1.0, -p], rand)


def comb(excited: np.ndarray, beta: float) -> np.ndarray:
    """Pick-position comb: subtract the excitation delayed by beta of a period."""
    pick = max(1, _round_half_up(beta * len(excited)))
    noise = excited.copy()
    if pick < len(excited):
        noise[pick:] -= excited[:-pick]
    return noise


def resonate(noise: np.ndarray, length: int, config: StringConfig) -> np.ndarray:
    """Run the seeded delay line out to length samples.

    The first len(noise) samples are the seed. After that, with n the
    period, k the decay, and taps at zero before the start of the buffer:

        f0 = k * ((1 - s) * x[i - n] + s * x[i - n - 1])
        f1 = k * ((1 - s) * x[i - n - 1] + s * x[i - n - 2])
        x[i] = c * (f0 - x[i - 1]) + f1
    """
    n = len(noise)
    k, s, c = config.decay, config.s, config.c

    a = np.zeros(n + 3)
    a[0] = 1.0
    a[1] += c
    a[n] -= c * k * (1.0 - s)
    a[n + 1] -= k * (c * s + 1.0 - s)
    a[n + 2] -= k * s

    # Over the first period the delay taps point before the buffer, so
    # cancelling the c * x[i - 1] feedback makes the output equal the seed.
    drive = np.zeros(length)
    seed = noise[:length]
    drive[: len(seed)] = seed
    drive[1 : len(seed)] += c * seed[:-1]
    return scipy_signal.lfilter([1.0], a, drive)


def shape_level(samples: np.ndarray, frequency: float, sample_rate: int, l: float) -> np.ndarray:
    """Blend the signal with a bilinear one-pole low-pass at the fundamental.

    The dry signal is weighted l ** (4/3), the low-passed one (1 - l).
    """
    w = math.pi * frequency / sample_rate
    g = w / (1.0 + w)
    lowpassed = scipy_signal.lfilter([g, g], [1.0, -(1.0 - w) / (1.0 + w)], samples)
    return l ** (4.0 / 3.0) * samples + (1.0 - l) * lowpassed


def normalize(samples: np.ndarray) -> np.ndarray:
    """Scale so the peak magnitude is exactly 32767, truncating toward zero.

    A silent (or empty) buffer normalizes to zeros.
    """
    peak = float(np.max(np.abs(samples))) if samples.size else 0.0
    if peak == 0.0:
        return np.zeros(samples.shape, dtype=np.int16)
    return np.trunc(samples / peak * INT16_MAX).astype(np.int16)


def synthesize(
    sample_rate: int,
    frequency: float,
    duration_s: float,
    *,
    config: StringConfig = StringConfig(),
    rng: np.random.Generator | None = None,
) -> np.ndarray:
    """Render round(sample_rate * duration_s) samples of a plucked string.

    Returns a read-only int16 array. Raises InvalidInputError for a
    non-positive sample rate or frequency, a frequency so low the period
    overflows, or one so high the period is shorter than one sample.
    duration_s <= 0 gives an empty array.
    """
    if not sample_rate > 0:
        raise InvalidInputError(f"Sample rate must be positive, got {sample_rate!r}")
    if not (math.isfinite(frequency) and frequency > 0):
        raise InvalidInputError(f"Frequency must be positive, got {frequency!r}")
    if not math.isfinite(duration_s):
        raise InvalidInputError(f"Duration must be finite, got {duration_s!r}")
    if not math.isfinite(sample_rate / frequency):
        raise InvalidInputError(f"Frequency {frequency!r} Hz is too low for sample rate {sample_rate!r}")
    n = period_length(sample_rate, frequency)
    if n < 1:
        raise InvalidInputError(
            f"Frequency {frequency!r} Hz is too high for sample rate {sample_rate!r}"
        )

    length = _round_half_up(sample_rate * duration_s) if duration_s > 0 else 0
    if length <= 0:
        result = np.zeros(0, dtype=np.int16)
        result.flags.writeable = False
        return result

    if rng is None:
        rng = np.random.default_rng()

    noise = comb(excitation(n, config.p, rng), config.beta)
    samples = resonate(noise, length, config)
    samples = shape_level(samples, frequency, sample_rate, config.l)
    result = normalize(samples)
    result.flags.writeable = False
    logger.debug("Synthesized %d samples at %.2f Hz (period %d)", length, frequency, n)
    return result
