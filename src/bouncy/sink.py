"""Audio output sinks: where rendered notes go.

A sink receives a complete int16 buffer. Device routing, buffer
allocation and playback are the sink's business; the core never waits
on it and never sees its failures (the note player logs them).
"""

from __future__ import annotations

import itertools
import logging
import threading
from pathlib import Path
from typing import Protocol

import numpy as np
import soundfile as sf

logger = logging.getLogger("bouncy.sink")


class AudioSink(Protocol):
    def play(
        self,
        buffer: np.ndarray,
        sample_rate: int,
        channel_count: int = 1,
        bit_depth: int = 16,
    ) -> None: ...


class SoundFileSink:
    """Writes each note to its own numbered 16-bit PCM WAV file."""

    def __init__(self, directory: str | Path, prefix: str = "note") -> None:
        self._directory = Path(directory)
        self._prefix = prefix
        self._counter = itertools.count(1)
        self._lock = threading.Lock()
        self.written: list[Path] = []

    def play(
        self,
        buffer: np.ndarray,
        sample_rate: int,
        channel_count: int = 1,
        bit_depth: int = 16,
    ) -> None:
        if bit_depth != 16:
            raise ValueError(f"Only 16-bit PCM is supported, got {bit_depth}")
        data = np.asarray(buffer, dtype=np.int16)
        if channel_count > 1:
            data = data.reshape(-1, channel_count)
        self._directory.mkdir(parents=True, exist_ok=True)
        path = self._directory / f"{self._prefix}_{next(self._counter):04d}.wav"
        sf.write(str(path), data, sample_rate, subtype="PCM_16")
        with self._lock:
            self.written.append(path)
        logger.info("Wrote %s (%d frames at %d Hz)", path, len(data), sample_rate)


class MemorySink:
    """Keeps every played buffer in memory. Safe to call from any thread."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._played: list[tuple[np.ndarray, int, int, int]] = []

    @property
    def played(self) -> list[tuple[np.ndarray, int, int, int]]:
        with self._lock:
            return list(self._played)

    def play(
        self,
        buffer: np.ndarray,
        sample_rate: int,
        channel_count: int = 1,
        bit_depth: int = 16,
    ) -> None:
        with self._lock:
            self._played.append((buffer, sample_rate, channel_count, bit_depth))
