"""Hook specifications for emitlite registry and dispatch events."""

from collections.abc import Hashable
from typing import Any, Callable

from .markers import hook_spec


class HandlerSpec:
    """Hook specifications for handler invocations, called from the scheduled task."""

    @hook_spec
    def before_handler_call(
        self,
        registry: Any,
        event_type: Hashable,
        handler: Callable[..., Any],
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
    ) -> None:
        """
        Called right before a dispatched handler is invoked.

        Args:
            registry: The EventRegistry that dispatched the event.
            event_type: Type of the dispatched event.
            handler: Handler about to be invoked (a OnceHandler for one-shot registrations).
            args: Positional arguments passed to dispatch.
            kwargs: Keyword arguments passed to dispatch.
        """

    @hook_spec
    def after_handler_call(
        self,
        registry: Any,
        event_type: Hashable,
        handler: Callable[..., Any],
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
        duration: float,
    ) -> None:
        """
        Called after a dispatched handler returns normally.

        Args:
            registry: The EventRegistry that dispatched the event.
            event_type: Type of the dispatched event.
            handler: Handler that was invoked.
            args: Positional arguments passed to dispatch.
            kwargs: Keyword arguments passed to dispatch.
            duration: Time taken by the handler in seconds.
        """

    @hook_spec
    def on_handler_error(
        self,
        registry: Any,
        event_type: Hashable,
        handler: Callable[..., Any],
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
        error: Exception,
        duration: float,
    ) -> None:
        """
        Called when a dispatched handler raises.

        The exception is re-raised afterwards and surfaced by the scheduler; it never reaches the
        caller of dispatch.

        Args:
            registry: The EventRegistry that dispatched the event.
            event_type: Type of the dispatched event.
            handler: Handler that failed.
            args: Positional arguments passed to dispatch.
            kwargs: Keyword arguments passed to dispatch.
            error: The exception that was raised.
            duration: Time taken before failure in seconds.
        """


class RegistrySpec:
    """Hook specifications for registry-level events."""

    @hook_spec
    def on_listener_leak(
        self,
        registry: Any,
        event_type: Hashable,
        count: int,
        max_listeners: int | float,
    ) -> None:
        """
        Called the first time any event type of a registry exceeds its handler threshold.

        Called at most once per registry.

        Args:
            registry: The EventRegistry that crossed the threshold.
            event_type: Event type whose handler count exceeded the threshold.
            count: Current number of handlers for that event type.
            max_listeners: Threshold in effect at the time.
        """
