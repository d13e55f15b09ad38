"""
Logging plugin for handler lifecycle events.

Attaching this plugin to a registry (or registering it globally) logs every handler invocation
through Python's standard logging system, which helps when tracing events whose handlers run on
a scheduler thread or event loop far away from the dispatch call.

Example:
    >>> import logging
    >>> from emitlite import EventRegistry
    >>> from emitlite.plugins import LoggingPlugin
    >>>
    >>> registry = EventRegistry(plugins=[LoggingPlugin(level=logging.INFO)])
"""

import logging
from collections.abc import Hashable
from typing import Any, Callable

from emitlite.plugins.hooks.markers import hook_impl

DEFAULT_LOGGER_NAME = "emitlite.handlers"
DEFAULT_LOGGER_FORMAT = "%(asctime)s - Event: %(emitlite_event_type)s - %(levelname)s - %(message)s"


class LoggingPlugin:
    """
    Plugin that logs handler calls, handler failures and listener leaks.

    Each record carries `emitlite_event_type` and `emitlite_handler` in its `extra` so they can be
    used in formatters (see `DEFAULT_LOGGER_FORMAT`).

    Args:
        level: Level used for the call/return records. Failures are always logged at ERROR and
            leaks at WARNING.
        logger_name: Name of the logger to write to.
    """

    def __init__(self, level: int = logging.DEBUG, logger_name: str | None = None):
        self._level = level
        self._logger = logging.getLogger(logger_name or DEFAULT_LOGGER_NAME)

    @hook_impl
    def before_handler_call(self, event_type: Hashable, handler: Callable[..., Any]) -> None:
        self._logger.log(
            self._level,
            f"Calling {_describe(handler)} for '{event_type}'",
            extra=_extra(event_type, handler),
        )

    @hook_impl
    def after_handler_call(
        self, event_type: Hashable, handler: Callable[..., Any], duration: float
    ) -> None:
        self._logger.log(
            self._level,
            f"Handler {_describe(handler)} for '{event_type}' completed in {duration:.3f}s",
            extra=_extra(event_type, handler),
        )

    @hook_impl
    def on_handler_error(
        self, event_type: Hashable, handler: Callable[..., Any], error: Exception, duration: float
    ) -> None:
        self._logger.error(
            f"Handler {_describe(handler)} for '{event_type}' failed after {duration:.3f}s: "
            f"{type(error).__name__}: {error}",
            extra=_extra(event_type, handler),
        )

    @hook_impl
    def on_listener_leak(
        self, event_type: Hashable, count: int, max_listeners: int | float
    ) -> None:
        self._logger.warning(
            f"'{event_type}' has {count} handlers (threshold {max_listeners})",
            extra={"emitlite_event_type": event_type, "emitlite_handler": None},
        )


def _describe(handler: Callable[..., Any]) -> str:
    return getattr(handler, "__qualname__", None) or repr(handler)


def _extra(event_type: Hashable, handler: Callable[..., Any]) -> dict[str, Any]:
    return {"emitlite_event_type": event_type, "emitlite_handler": _describe(handler)}
