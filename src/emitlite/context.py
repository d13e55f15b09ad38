"""Dispatch context exposed to handlers while they run."""

from collections.abc import Hashable
from contextvars import ContextVar
from contextvars import Token
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from emitlite.registry import EventRegistry

_current_registry: ContextVar["EventRegistry | None"] = ContextVar(
    "emitlite_registry", default=None
)
_current_event_type: ContextVar[Hashable | None] = ContextVar("emitlite_event_type", default=None)


def set_dispatch_context(
    registry: "EventRegistry", event_type: Hashable
) -> tuple[Token[Any], Token[Any]]:
    """
    Set the dispatch context for the handler about to run.

    Args:
        registry: Registry that dispatched the event.
        event_type: Type of the dispatched event.

    Returns:
        Tokens to pass to `reset_dispatch_context()` once the handler returns.
    """
    return _current_registry.set(registry), _current_event_type.set(event_type)


def reset_dispatch_context(tokens: tuple[Token[Any], Token[Any]]) -> None:
    """Restore the context that was active before `set_dispatch_context()`."""
    registry_token, event_token = tokens
    _current_registry.reset(registry_token)
    _current_event_type.reset(event_token)


def get_current_registry() -> "EventRegistry | None":
    """
    Get the registry whose event is being handled.

    Returns:
        The dispatching EventRegistry inside a handler, None anywhere else.
    """
    return _current_registry.get()


def get_current_event_type() -> Hashable | None:
    """
    Get the type of the event being handled.

    Returns:
        The dispatched event type inside a handler, None anywhere else.
    """
    return _current_event_type.get()
