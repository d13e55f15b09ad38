from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Callable

_GLOBAL_EMITLITE_SETTINGS: EmitliteSettings | None = None
_SETTINGS_LOCK = threading.RLock()


@dataclass(frozen=True)
class EmitliteSettings:
    """Configuration settings for emitlite."""

    warn_on_leak: bool = True
    """
    Whether registries warn about possible handler leaks.

    When False, no registry logs the leak warning regardless of its threshold.
    """

    max_listeners: int | float = 10
    """
    Default per-type handler threshold for new registries.

    Zero or a negative value disables the leak warning.
    """

    scheduler: str | Callable[[Callable[[], None]], None] = "deferred"
    """
    Default scheduler used by registries that were not given one.

    Either the name of a built-in scheduler or any callable accepting a zero-argument task.
    """


def get_global_settings() -> EmitliteSettings:
    """
    Get the global emitlite settings instance (thread-safe).

    If no global settings have been set, returns a default instance.
    """
    with _SETTINGS_LOCK:
        global _GLOBAL_EMITLITE_SETTINGS
        if _GLOBAL_EMITLITE_SETTINGS is None:
            _GLOBAL_EMITLITE_SETTINGS = EmitliteSettings()
        return _GLOBAL_EMITLITE_SETTINGS


def set_global_settings(settings: EmitliteSettings) -> None:
    """
    Set the global emitlite settings instance (thread-safe).

    Note: Settings should be configured once at startup. Registries created without explicit
    settings read the global instance on every registration and dispatch, so replacing it while
    events are in flight affects subsequent calls only.

    Args:
        settings (EmitliteSettings): Settings to set as global.
    """
    with _SETTINGS_LOCK:
        global _GLOBAL_EMITLITE_SETTINGS
        _GLOBAL_EMITLITE_SETTINGS = settings


def reset_global_settings() -> None:
    """Restore the default global settings (mostly useful in tests)."""
    with _SETTINGS_LOCK:
        global _GLOBAL_EMITLITE_SETTINGS
        _GLOBAL_EMITLITE_SETTINGS = None
