"""Utility functions to manage the project-wide hook configuration."""

import logging
from inspect import isclass
from typing import Any

from pluggy import PluginManager

from .hooks.markers import HOOK_NAMESPACE
from .hooks.specs import HandlerSpec
from .hooks.specs import RegistrySpec

logger = logging.getLogger(__name__)

_PLUGIN_MANAGER: PluginManager | None = None


# region API


def register_hooks(*hooks: Any) -> None:
    """Register specified emitlite pluggy hooks globally."""
    hook_manager = _get_global_plugin_manager()
    for hooks_collection in hooks:
        if not hook_manager.is_registered(hooks_collection):
            _check_not_class(hooks_collection)
            hook_manager.register(hooks_collection)


def unregister_hooks(*hooks: Any) -> None:
    """Unregister previously registered global emitlite hooks."""
    hook_manager = _get_global_plugin_manager()
    for hooks_collection in hooks:
        if hook_manager.is_registered(hooks_collection):
            hook_manager.unregister(hooks_collection)


def create_hook_manager_with_plugins(plugins: list[Any]) -> PluginManager:
    """
    Create a new hook manager with both global and registry-specific plugins.

    Global hooks are copied at creation time; hooks registered globally afterwards are not seen
    by the returned manager.

    Args:
        plugins: Additional hook implementations to register.

    Returns:
        A new PluginManager with global + registry-specific hooks.
    """
    manager = _create_plugin_manager()

    global_manager = _get_global_plugin_manager()
    for plugin in global_manager.get_plugins():
        if not manager.is_registered(plugin):  # pragma: no branch
            manager.register(plugin)

    for plugin in plugins:
        if not manager.is_registered(plugin):  # pragma: no branch
            _check_not_class(plugin)
            manager.register(plugin)

    return manager


# region Helpers


def _initialize_plugin_system() -> PluginManager:
    """Initializes hooks for the emitlite library."""
    manager = _create_plugin_manager()
    global _PLUGIN_MANAGER
    _PLUGIN_MANAGER = manager
    return manager


def _get_global_plugin_manager() -> PluginManager:
    """Returns initialized global plugin manager, creating it on first use."""
    plugin_manager = _PLUGIN_MANAGER
    if plugin_manager is None:
        plugin_manager = _initialize_plugin_system()
    return plugin_manager


def _create_plugin_manager() -> PluginManager:
    """Create a new PluginManager instance and register emitlite's hook specs."""
    manager = PluginManager(HOOK_NAMESPACE)
    manager.trace.root.setwriter(
        logger.debug if logger.getEffectiveLevel() == logging.DEBUG else None
    )
    manager.enable_tracing()
    manager.add_hookspecs(HandlerSpec)
    manager.add_hookspecs(RegistrySpec)
    return manager


def _check_not_class(plugin: Any) -> None:
    if isclass(plugin):
        raise TypeError(
            "emitlite expects hooks to be registered as instances. "
            "Have you forgotten the `()` when registering a hook class?"
        )
