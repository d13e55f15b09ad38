"""
Centralized exception classes for the emitlite library.

All emitlite-specific exceptions inherit from EmitliteError for easy catching.
"""

from typing import Any


class EmitliteError(Exception):
    """Base exception for all emitlite errors."""


class InvalidArgumentError(EmitliteError, TypeError):
    """Raised when a registry method receives an argument of the wrong kind."""


class SchedulerError(EmitliteError):
    """Raised when there's an error with scheduler configuration or lookup."""


class UnhandledErrorEvent(EmitliteError):
    """
    Raised when an "error" event is dispatched without any registered handlers.

    Only used when the dispatched payload is not itself an exception; exception payloads are
    raised as-is.
    """

    def __init__(self, value: Any = None) -> None:
        super().__init__(f'Unhandled "error" event ({value!r}).')
        self.value = value
