"""Thread anchor: holds the one FrameScheduler owned by each control thread.

Kept apart from the scheduler module so the scheduler's behavior can be
replaced or reloaded without losing the schedulers already handed out.
Entries are created lazily by scheduler.get_scheduler() and never torn down.
"""

import threading

_local = threading.local()


def current():
    """The calling thread's scheduler, or None if it has not made one yet."""
    return getattr(_local, "scheduler", None)


def install(scheduler) -> None:
    _local.scheduler = scheduler
