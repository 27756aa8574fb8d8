"""Bouncy: frame-clocked fling simulation and plucked-string synthesis."""

from importlib.metadata import version as _version

__version__ = _version("bouncy")

from bouncy.errors import BouncyError, UsageError, ThreadAffinityError, InvalidInputError
from bouncy.config import FlingConfig, StringConfig, NoteConfig
from bouncy.force import Force, FrictionForce
from bouncy.scheduler import FrameScheduler, ManualFrameProvider, get_scheduler
from bouncy.simulation import Simulation, ValueHolder, fling
from bouncy.stream import EventStream
from bouncy.synth import standard_frequency, synthesize
from bouncy.sink import AudioSink, MemorySink, SoundFileSink
from bouncy.bounce import Arena, Axis, Collision, NotePlayer, Wall
# textual is not auto-imported, it is opt-in

__all__ = [
    "BouncyError",
    "UsageError",
    "ThreadAffinityError",
    "InvalidInputError",
    "FlingConfig",
    "StringConfig",
    "NoteConfig",
    "Force",
    "FrictionForce",
    "FrameScheduler",
    "ManualFrameProvider",
    "get_scheduler",
    "Simulation",
    "ValueHolder",
    "fling",
    "EventStream",
    "standard_frequency",
    "synthesize",
    "AudioSink",
    "MemorySink",
    "SoundFileSink",
    "Arena",
    "Axis",
    "Collision",
    "NotePlayer",
    "Wall",
]
