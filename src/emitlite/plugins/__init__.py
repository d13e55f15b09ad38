from emitlite.plugins.default import LoggingPlugin

from .hooks.markers import hook_impl
from .manager import register_hooks
from .manager import unregister_hooks

__all__ = [
    "hook_impl",
    "LoggingPlugin",
    "register_hooks",
    "unregister_hooks",
]
