"""Built-in dispatch schedulers and name-based lookup."""

import threading
from typing import Any

from emitlite.exceptions import SchedulerError

from .base import Scheduler
from .base import SchedulerFunc
from .base import Task
from .local import AsyncioScheduler
from .local import DeferredScheduler
from .local import ManualScheduler
from .local import ThreadScheduler
from .local import _shutdown_global_thread_scheduler

_SCHEDULER_TYPES: dict[str, type[Scheduler]] = {
    "deferred": DeferredScheduler,
    "default": DeferredScheduler,  # alias
    "asyncio": AsyncioScheduler,
    "loop": AsyncioScheduler,  # alias
    "threading": ThreadScheduler,
    "threads": ThreadScheduler,  # alias
    "manual": ManualScheduler,
}

_CACHED_SCHEDULERS: dict[str, Scheduler] = {}
_CACHE_LOCK = threading.Lock()


def get_scheduler(name: str = "") -> Scheduler:
    """
    Get or create a shared scheduler instance by name.

    Args:
        name: Name of the scheduler. If not provided, uses the default settings scheduler (which
            must then be a name).

    Returns:
        The cached instance of the requested scheduler class.

    Raises:
        SchedulerError: If the requested scheduler is unknown.
    """
    if not name:
        from emitlite.settings import get_global_settings

        configured = get_global_settings().scheduler
        if not isinstance(configured, str):
            raise SchedulerError("Default scheduler is not configured by name")
        name = configured

    with _CACHE_LOCK:
        if name not in _CACHED_SCHEDULERS:
            try:
                scheduler_class = _SCHEDULER_TYPES[name]
            except KeyError:
                raise SchedulerError(
                    f"Unknown scheduler '{name}'; available: {list(_SCHEDULER_TYPES.keys())}"
                ) from None
            _CACHED_SCHEDULERS[name] = scheduler_class()
        return _CACHED_SCHEDULERS[name]


def resolve_scheduler(value: Any) -> SchedulerFunc:
    """
    Turn a scheduler specification into a callable `schedule(task)`.

    Args:
        value: A scheduler name, a `Scheduler` instance or any callable accepting a task.

    Raises:
        SchedulerError: If the value is an unknown name or is not callable.
    """
    if isinstance(value, str):
        return get_scheduler(value)
    if callable(value):
        return value
    raise SchedulerError(f"Expected a scheduler name or callable, got {type(value).__name__}")


def shutdown_schedulers() -> None:
    """Stop all cached schedulers (and the shared fallback thread) and clear the cache."""
    with _CACHE_LOCK:
        schedulers = list(_CACHED_SCHEDULERS.values())
        _CACHED_SCHEDULERS.clear()
    for scheduler in schedulers:
        scheduler.stop()
    _shutdown_global_thread_scheduler()


__all__ = [
    "AsyncioScheduler",
    "DeferredScheduler",
    "ManualScheduler",
    "Scheduler",
    "SchedulerFunc",
    "Task",
    "ThreadScheduler",
    "get_scheduler",
    "resolve_scheduler",
    "shutdown_schedulers",
]
