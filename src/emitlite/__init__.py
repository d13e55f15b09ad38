"""Emitlite: Lightweight event registry with deferred, scheduler-driven dispatch."""

__version__ = "0.1.0"

from . import schedulers
from . import settings
from .context import get_current_event_type
from .context import get_current_registry
from .exceptions import EmitliteError
from .exceptions import InvalidArgumentError
from .exceptions import SchedulerError
from .exceptions import UnhandledErrorEvent
from .once import OnceHandler
from .plugins.manager import _initialize_plugin_system
from .registry import EventRegistry

# Initialize hooks system on module import
_initialize_plugin_system()

__all__ = [
    "EmitliteError",
    "EventRegistry",
    "InvalidArgumentError",
    "OnceHandler",
    "SchedulerError",
    "UnhandledErrorEvent",
    "get_current_event_type",
    "get_current_registry",
    "schedulers",
    "settings",
]
