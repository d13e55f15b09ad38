"""One-shot handler adapter."""

from __future__ import annotations

import functools
import threading
from collections.abc import Hashable
from typing import TYPE_CHECKING, Any, Callable

if TYPE_CHECKING:
    from emitlite.registry import EventRegistry


class OnceHandler:
    """
    Adapter that removes itself from its registry before calling the wrapped handler.

    Instances are what `EventRegistry.register_once()` stores, so they are what `listeners()`
    returns. The adapter runs the wrapped handler at most once, even when several dispatches
    captured it before its first scheduled call ran.

    Args:
        registry: Registry the adapter is registered with.
        event_type: Event type the adapter is registered for.
        handler: The wrapped handler.
    """

    def __init__(
        self, registry: EventRegistry, event_type: Hashable, handler: Callable[..., Any]
    ) -> None:
        functools.update_wrapper(self, handler)
        self._registry = registry
        self._event_type = event_type
        self._handler = handler
        self._fired = False
        self._lock = threading.Lock()

    @property
    def handler(self) -> Callable[..., Any]:
        """The wrapped handler."""
        return self._handler

    @property
    def event_type(self) -> Hashable:
        """Event type this adapter is registered for."""
        return self._event_type

    @property
    def fired(self) -> bool:
        """Whether the wrapped handler has already been called."""
        return self._fired

    def cancel(self) -> None:
        """Deregister the adapter without calling the wrapped handler."""
        self._registry.deregister(self._event_type, self)

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        with self._lock:
            if self._fired:
                return None
            self._fired = True

        self._registry.deregister(self._event_type, self)
        return self._handler(*args, **kwargs)

    def __repr__(self) -> str:
        return f"OnceHandler({self._event_type!r}, {self._handler!r})"
