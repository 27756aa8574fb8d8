"""Exception types raised by bouncy.

Usage errors are programmer mistakes (wrong thread, bad start value,
listeners added too late) and always propagate. Invalid input covers
arguments the synthesizer cannot work with.
"""


class BouncyError(Exception):
    """Base class for all bouncy errors."""


class UsageError(BouncyError, RuntimeError):
    """A simulation or scheduler was driven in a way it does not support."""


class ThreadAffinityError(UsageError):
    """start()/cancel() called off the scheduler's control thread."""


class InvalidInputError(BouncyError, ValueError):
    """Synthesis parameters that cannot produce a waveform."""
