import asyncio
import atexit
import logging
import threading
import time
from collections import deque
from queue import Empty
from queue import Queue
from threading import Thread

from typing_extensions import override

from emitlite.exceptions import SchedulerError

from .base import Scheduler
from .base import Task

logger = logging.getLogger(__name__)

_GLOBAL_THREAD_SCHEDULER: "ThreadScheduler | None" = None
_GLOBAL_THREAD_SCHEDULER_LOCK = threading.Lock()


def _get_global_thread_scheduler() -> "ThreadScheduler":
    """Get or create the shared fallback thread scheduler."""
    global _GLOBAL_THREAD_SCHEDULER
    with _GLOBAL_THREAD_SCHEDULER_LOCK:
        if _GLOBAL_THREAD_SCHEDULER is None:
            _GLOBAL_THREAD_SCHEDULER = ThreadScheduler(name="emitlite-deferred")
        return _GLOBAL_THREAD_SCHEDULER


def _shutdown_global_thread_scheduler() -> None:
    """Stop and forget the shared fallback thread scheduler, if any."""
    global _GLOBAL_THREAD_SCHEDULER
    with _GLOBAL_THREAD_SCHEDULER_LOCK:
        scheduler, _GLOBAL_THREAD_SCHEDULER = _GLOBAL_THREAD_SCHEDULER, None
    if scheduler is not None:
        scheduler.stop()


# Drain handlers still queued on the shared fallback before the interpreter exits
atexit.register(_shutdown_global_thread_scheduler)


class ManualScheduler(Scheduler):
    """
    Scheduler that queues tasks until the owner explicitly runs them.

    Nothing runs until `run_pending()` is called, which makes dispatch fully deterministic. This
    is suitable for:
    - Unit tests that need to observe state between dispatch and handler execution
    - Hosts that drive their own main loop and want to pump events at a known point
    """

    def __init__(self) -> None:
        self._tasks: deque[Task] = deque()
        self._lock = threading.Lock()

    @property
    def pending(self) -> int:
        """Number of tasks waiting to run."""
        with self._lock:
            return len(self._tasks)

    @override
    def schedule(self, task: Task) -> None:
        with self._lock:
            self._tasks.append(task)

    def run_pending(self, limit: int | None = None) -> int:
        """
        Run queued tasks in submission order.

        Tasks queued while draining (e.g. by a handler that dispatches again) are run in the same
        call, after everything that was already queued.

        Args:
            limit: Maximum number of tasks to run. If None, runs until the queue is empty.

        Returns:
            Number of tasks that were run.
        """
        count = 0
        while limit is None or count < limit:
            with self._lock:
                if not self._tasks:
                    break
                task = self._tasks.popleft()
            self._run_task(task)
            count += 1
        return count

    def clear(self) -> int:
        """Drop all queued tasks without running them and return how many were dropped."""
        with self._lock:
            count = len(self._tasks)
            self._tasks.clear()
        return count


class ThreadScheduler(Scheduler):
    """
    Scheduler that runs tasks on a single background daemon thread.

    Tasks are drained from one FIFO queue by one worker, so submission order is also execution
    order. The worker thread is started lazily by the first `schedule()` call.

    Note that handlers then run on the worker thread, not on the thread that dispatched the
    event.

    Args:
        name: Human-readable name used in log messages and as the thread name.
    """

    def __init__(self, *, name: str = "emitlite-scheduler") -> None:
        self._name = name
        self._queue: Queue[Task] = Queue()
        self._running = False
        self._thread: Thread | None = None
        self._lock = threading.Lock()

    @override
    def _start(self) -> None:
        self._running = True
        self._thread = Thread(target=self._process_loop, daemon=True, name=self._name)
        self._thread.start()
        logger.debug(f"{self._name} background thread started")

    @override
    def _stop(self) -> None:
        if self._thread is None:  # pragma: no cover
            return

        logger.debug(f"Stopping {self._name}...")

        if threading.current_thread() is self._thread:
            # Called from a task: let the worker exit after it, queued tasks stay queued
            self._running = False
            self._thread = None
            return

        # Drain remaining tasks before stopping
        self.flush()

        self._running = False
        self._thread.join(timeout=2.0)
        if self._thread.is_alive():  # pragma: no cover
            logger.warning(f"{self._name} thread did not stop cleanly")
        self._thread = None

    @override
    def schedule(self, task: Task) -> None:
        with self._lock:
            self.start()
        self._queue.put(task)

    def flush(self, timeout: float = 2.0) -> bool:
        """
        Wait for all queued tasks to finish.

        Args:
            timeout: Maximum time to wait (seconds).

        Returns:
            True if the queue drained within *timeout*, False otherwise.
        """
        start_time = time.time()
        while time.time() - start_time < timeout:
            if self._queue.unfinished_tasks == 0:
                return True
            time.sleep(0.001)
        return self._queue.unfinished_tasks == 0

    def _process_loop(self) -> None:
        """Background loop consuming tasks from the queue."""
        while self._running:
            try:
                task = self._queue.get(timeout=0.01)
            except Empty:
                continue

            try:
                self._run_task(task)
            finally:
                self._queue.task_done()

        logger.debug(f"{self._name} loop exited")


class AsyncioScheduler(Scheduler):
    """
    Scheduler that defers tasks to an asyncio event loop with `call_soon`.

    This is the closest Python analogue of a microtask queue: tasks run on the next loop
    iteration, in submission order. Exceptions raised by tasks are passed to the loop's exception
    handler.

    Args:
        loop: Loop to schedule onto. If None, the loop running in the calling thread is used and
            scheduling outside of a running loop raises `SchedulerError`. An explicit loop may be
            targeted from other threads (`call_soon_threadsafe` is used in that case).
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    @override
    def schedule(self, task: Task) -> None:
        running = _get_running_loop()

        if self._loop is None:
            if running is None:
                raise SchedulerError(
                    "AsyncioScheduler requires a running event loop or an explicit loop"
                )
            running.call_soon(task)
        elif running is self._loop:
            self._loop.call_soon(task)
        else:
            self._loop.call_soon_threadsafe(task)


class DeferredScheduler(Scheduler):
    """
    Default scheduler: defer to the running event loop, falling back to a worker thread.

    When `schedule()` is called from inside a running asyncio loop, tasks are queued with
    `call_soon`. Otherwise they go to a `ThreadScheduler`, either the one given here or a
    process-wide shared instance.

    Args:
        fallback: Scheduler used when no event loop is running in the calling thread.
    """

    def __init__(self, fallback: Scheduler | None = None) -> None:
        self._fallback = fallback

    @override
    def schedule(self, task: Task) -> None:
        loop = _get_running_loop()
        if loop is not None:
            loop.call_soon(task)
            return

        fallback = self._fallback or _get_global_thread_scheduler()
        fallback.schedule(task)


def _get_running_loop() -> asyncio.AbstractEventLoop | None:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None
