"""Conftest for all pytest configuration - fixtures, hooks, and doctest setup."""

import doctest

import pytest

from emitlite.plugins.manager import _initialize_plugin_system
from emitlite.schedulers import ManualScheduler
from emitlite.schedulers import shutdown_schedulers
from emitlite.settings import reset_global_settings

# Doctest Configuration


def pytest_configure(config):
    """Configure pytest with custom doctest options."""
    doctest.ELLIPSIS_MARKER = "..."


def pytest_collection_modifyitems(items):
    """Automatically mark doctest items with the 'doctest' marker."""
    for item in items:
        if isinstance(item, pytest.DoctestItem):
            item.add_marker(pytest.mark.doctest)


# Test fixtures


@pytest.fixture(autouse=True)
def isolated_global_state():
    """
    Reset global settings, plugins and cached schedulers around every test.

    Tests that change the global configuration would otherwise leak into each other.
    """
    reset_global_settings()
    _initialize_plugin_system()
    yield
    shutdown_schedulers()
    reset_global_settings()
    _initialize_plugin_system()


@pytest.fixture
def scheduler() -> ManualScheduler:
    """Deterministic scheduler; call `run_pending()` to run dispatched handlers."""
    return ManualScheduler()
