from __future__ import annotations

import abc
import logging
from typing import Callable

from typing_extensions import final

logger = logging.getLogger(__name__)

Task = Callable[[], None]
SchedulerFunc = Callable[[Task], None]


class Scheduler(abc.ABC):
    """
    Abstract base class for dispatch schedulers.

    A scheduler receives zero-argument tasks and runs each of them later, after the current
    synchronous call has returned. Tasks submitted from the same call must run in submission
    order. Instances are callable so they can be used anywhere a plain `schedule(task)` function
    is accepted.
    """

    _started: bool = False

    @final
    def start(self) -> None:
        """
        Start any resources the scheduler needs.

        Subclasses should NOT override this method. Instead, override `_start()`.
        """
        if self._started:
            return
        self._start()
        self._started = True

    def _start(self) -> None:
        """
        Set up scheduler resources.

        Subclasses may override this to set up resources (threads, loops, ...).
        """
        pass

    @final
    def stop(self) -> None:
        """
        Release scheduler resources.

        Subclasses should NOT override this method. Instead, override `_stop()`.
        """
        if not self._started:
            return
        self._stop()
        self._started = False

    def _stop(self) -> None:
        """
        Clean up scheduler resources.

        Subclasses may override this to clean up resources.
        """
        pass

    @property
    def started(self) -> bool:
        """Whether the scheduler has been started."""
        return self._started

    @abc.abstractmethod
    def schedule(self, task: Task) -> None:
        """
        Schedule a task to run asynchronously.

        Args:
            task: Zero-argument callable to run later.
        """
        raise NotImplementedError()

    def __call__(self, task: Task) -> None:
        self.schedule(task)

    @staticmethod
    def _run_task(task: Task) -> None:
        """
        Run a single task, logging any exception it raises.

        Faults never escape, so one failing task cannot prevent later tasks from running.
        """
        try:
            task()
        except Exception:
            logger.exception(f"Unhandled exception in scheduled task {task!r}")
