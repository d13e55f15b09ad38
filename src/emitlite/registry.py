"""Event registry: handler bookkeeping and deferred dispatch."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Hashable
from functools import partial
from numbers import Real
from typing import Any, Callable

from pluggy import PluginManager

from emitlite.context import reset_dispatch_context
from emitlite.context import set_dispatch_context
from emitlite.exceptions import InvalidArgumentError
from emitlite.exceptions import UnhandledErrorEvent
from emitlite.once import OnceHandler
from emitlite.schedulers import SchedulerFunc
from emitlite.schedulers import resolve_scheduler
from emitlite.settings import EmitliteSettings
from emitlite.settings import get_global_settings

logger = logging.getLogger(__name__)

ERROR_EVENT = "error"

Handler = Callable[..., Any]

_ALL_EVENTS: Any = object()


class EventRegistry:
    """
    Registry mapping event types to ordered handler lists, with deferred dispatch.

    Handlers registered for an event type are kept in registration order. `dispatch()` never
    calls handlers itself: it hands one task per handler to the scheduler and returns right away,
    so handlers run later and a failing handler cannot affect the others or the dispatcher.

    Args:
        max_listeners: Handler count per event type above which a one-time leak warning is
            logged. Zero or a negative value disables the warning. Defaults to the settings value.
        scheduler: Scheduler name, `Scheduler` instance or any callable `schedule(task)`.
            Defaults to the settings scheduler, looked up on every dispatch.
        settings: Settings used instead of the global settings.
        plugins: Hook implementations used by this registry in addition to the global ones.

    Examples:
        >>> from emitlite import EventRegistry
        >>> from emitlite.schedulers import ManualScheduler
        >>> scheduler = ManualScheduler()
        >>> registry = EventRegistry(scheduler=scheduler)
        >>> registry.register("data", print).dispatch("data", 42)
        True
        >>> scheduler.run_pending()
        42
        1
    """

    def __init__(
        self,
        *,
        max_listeners: int | float | None = None,
        scheduler: str | SchedulerFunc | None = None,
        settings: EmitliteSettings | None = None,
        plugins: list[Any] | None = None,
    ) -> None:
        self._handlers: dict[Hashable, list[Handler]] = {}
        self._lock = threading.RLock()
        self._settings = settings
        self._scheduler = resolve_scheduler(scheduler) if scheduler is not None else None
        self._leak_warned = False
        self._max_listeners: int | float = 0

        if max_listeners is None:
            max_listeners = self._get_settings().max_listeners
        self.set_max_listeners(max_listeners)

        if plugins:
            from emitlite.plugins.manager import create_hook_manager_with_plugins

            self._plugin_manager: PluginManager | None = create_hook_manager_with_plugins(plugins)
        else:
            self._plugin_manager = None

    # region Registration

    def register(self, event_type: Hashable, handler: Handler) -> EventRegistry:
        """
        Register a handler for an event type.

        Handlers are appended, so they run in registration order. Registering the same handler
        twice makes it run twice.

        Args:
            event_type: Type of event to handle.
            handler: Callable invoked with the dispatched arguments.

        Returns:
            The registry itself, for chaining.

        Raises:
            InvalidArgumentError: If the handler is not callable.
        """
        _check_handler(handler)
        self._add(event_type, handler)
        return self

    def register_once(self, event_type: Hashable, handler: Handler) -> EventRegistry:
        """
        Register a handler that runs for the next dispatch of an event type only.

        The handler is stored wrapped in a `OnceHandler`, which is what `listeners()` returns.
        It can be cancelled with `deregister()` using either the adapter or the original handler.

        Args:
            event_type: Type of event to handle.
            handler: Callable invoked with the dispatched arguments.

        Returns:
            The registry itself, for chaining.

        Raises:
            InvalidArgumentError: If the handler is not callable.
        """
        _check_handler(handler)
        self._add(event_type, OnceHandler(self, event_type, handler))
        return self

    def deregister(self, event_type: Hashable, handler: Handler) -> EventRegistry:
        """
        Remove the first registration of a handler for an event type.

        A one-shot registration matches both its `OnceHandler` adapter and the handler it wraps.
        Nothing happens if the handler is not registered. Tasks already scheduled by an earlier
        dispatch still run.

        Args:
            event_type: Type of event the handler was registered for.
            handler: Handler to remove.

        Returns:
            The registry itself, for chaining.

        Raises:
            InvalidArgumentError: If the handler is not callable.
        """
        _check_handler(handler)

        with self._lock:
            handlers = self._handlers.get(event_type)
            if not handlers:
                return self

            for position, registered in enumerate(handlers):
                if registered == handler or (
                    isinstance(registered, OnceHandler) and registered.handler == handler
                ):
                    del handlers[position]
                    break

            if not handlers:
                del self._handlers[event_type]

        return self

    def deregister_all(self, event_type: Hashable = _ALL_EVENTS) -> EventRegistry:
        """
        Remove every handler of one event type, or of all event types.

        Args:
            event_type: Type of event to clear. If omitted, all event types are cleared.

        Returns:
            The registry itself, for chaining.
        """
        with self._lock:
            if event_type is _ALL_EVENTS:
                self._handlers.clear()
            else:
                self._handlers.pop(event_type, None)
        return self

    # Familiar emitter-style names
    on = register
    once = register_once
    off = deregister
    remove_listener = deregister
    remove_all_listeners = deregister_all

    # region Introspection

    def listeners(self, event_type: Hashable) -> list[Handler]:
        """
        Get the handlers registered for an event type.

        Returns:
            A copy of the handler list in registration order (empty if none are registered).
        """
        with self._lock:
            return list(self._handlers.get(event_type, ()))

    def listener_count(self, event_type: Hashable) -> int:
        """Number of handlers registered for an event type."""
        with self._lock:
            return len(self._handlers.get(event_type, ()))

    def event_types(self) -> list[Hashable]:
        """Event types that currently have handlers, in first-registration order."""
        with self._lock:
            return list(self._handlers)

    def __contains__(self, event_type: Hashable) -> bool:
        with self._lock:
            return event_type in self._handlers

    def __repr__(self) -> str:
        with self._lock:
            counts = {event_type: len(handlers) for event_type, handlers in self._handlers.items()}
        return f"EventRegistry(handlers={counts!r}, max_listeners={self._max_listeners!r})"

    # region Leak detection

    @property
    def max_listeners(self) -> int | float:
        """Handler count per event type above which the leak warning is logged."""
        return self._max_listeners

    def set_max_listeners(self, value: int | float) -> EventRegistry:
        """
        Set the leak-warning threshold.

        Only affects later registrations; event types already above the new threshold are not
        re-checked.

        Args:
            value: New threshold. Zero or a negative value disables the warning.

        Returns:
            The registry itself, for chaining.

        Raises:
            InvalidArgumentError: If the value is not a number.
        """
        if isinstance(value, bool) or not isinstance(value, Real):
            raise InvalidArgumentError(f"max_listeners must be a number, got {type(value).__name__}")
        self._max_listeners = value
        return self

    @property
    def leak_warned(self) -> bool:
        """Whether this registry has already logged its leak warning."""
        return self._leak_warned

    # region Dispatch

    def dispatch(self, event_type: Hashable, *args: Any, **kwargs: Any) -> bool:
        """
        Schedule every handler of an event type with the given arguments.

        The handler list and arguments are captured now; handlers added or removed afterwards
        do not change which handlers this call runs. Each handler runs in its own scheduled task,
        in registration order, with the dispatch context pointing at this registry (see
        `emitlite.context`). Exceptions raised by handlers are reported to the
        `on_handler_error` hook and surfaced by the scheduler, never raised here.

        Dispatching "error" with no handler registered for it raises immediately: the first
        argument is raised if it is an exception, otherwise `UnhandledErrorEvent` is.

        Args:
            event_type: Type of event to dispatch.
            *args: Positional arguments for the handlers.
            **kwargs: Keyword arguments for the handlers.

        Returns:
            True if at least one handler was scheduled, False otherwise.

        Raises:
            UnhandledErrorEvent: For an unhandled "error" event with a non-exception payload.
        """
        with self._lock:
            handlers = list(self._handlers.get(event_type, ()))

        if not handlers:
            if event_type == ERROR_EVENT:
                error = args[0] if args else kwargs.get("error")
                if isinstance(error, BaseException):
                    raise error
                raise UnhandledErrorEvent(error)
            return False

        schedule = self._get_scheduler()
        for handler in handlers:
            schedule(partial(self._invoke, event_type, handler, args, kwargs))

        return True

    emit = dispatch

    def _invoke(
        self,
        event_type: Hashable,
        handler: Handler,
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
    ) -> None:
        """Run one handler inside the dispatch context; the body of each scheduled task."""
        hook = self._get_plugin_manager().hook
        tokens = set_dispatch_context(self, event_type)
        try:
            hook.before_handler_call(
                registry=self, event_type=event_type, handler=handler, args=args, kwargs=kwargs
            )
            start = time.perf_counter()
            try:
                handler(*args, **kwargs)
            except Exception as e:
                hook.on_handler_error(
                    registry=self,
                    event_type=event_type,
                    handler=handler,
                    args=args,
                    kwargs=kwargs,
                    error=e,
                    duration=time.perf_counter() - start,
                )
                raise
            hook.after_handler_call(
                registry=self,
                event_type=event_type,
                handler=handler,
                args=args,
                kwargs=kwargs,
                duration=time.perf_counter() - start,
            )
        finally:
            reset_dispatch_context(tokens)

    # region Helpers

    def _add(self, event_type: Hashable, handler: Handler) -> None:
        with self._lock:
            handlers = self._handlers.setdefault(event_type, [])
            handlers.append(handler)
            count = len(handlers)

            if not self._get_settings().warn_on_leak or self._leak_warned:
                return
            if not (self._max_listeners > 0 and count > self._max_listeners):
                return
            self._leak_warned = True

        logger.warning(
            f"Possible event registry memory leak detected: {count} handlers added for "
            f"'{event_type}'. Use set_max_listeners() to increase the threshold.",
            stack_info=True,
        )
        self._get_plugin_manager().hook.on_listener_leak(
            registry=self, event_type=event_type, count=count, max_listeners=self._max_listeners
        )

    def _get_settings(self) -> EmitliteSettings:
        return self._settings if self._settings is not None else get_global_settings()

    def _get_scheduler(self) -> SchedulerFunc:
        if self._scheduler is not None:
            return self._scheduler
        return resolve_scheduler(self._get_settings().scheduler)

    def _get_plugin_manager(self) -> PluginManager:
        if self._plugin_manager is not None:
            return self._plugin_manager

        from emitlite.plugins.manager import _get_global_plugin_manager

        return _get_global_plugin_manager()


def _check_handler(handler: Any) -> None:
    if not callable(handler):
        raise InvalidArgumentError(f"handler must be callable, got {type(handler).__name__}")
