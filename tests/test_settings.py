"""Tests for global emitlite settings."""

import dataclasses

import pytest

from emitlite.settings import EmitliteSettings
from emitlite.settings import get_global_settings
from emitlite.settings import reset_global_settings
from emitlite.settings import set_global_settings


class TestSettings:
    """Tests for EmitliteSettings and the global accessors."""

    def test_defaults(self) -> None:
        """Default settings warn on leaks above ten handlers and use the deferred scheduler."""
        settings = get_global_settings()

        assert settings.warn_on_leak is True
        assert settings.max_listeners == 10
        assert settings.scheduler == "deferred"

    def test_get_returns_same_instance(self) -> None:
        """The lazily created default instance is reused."""
        assert get_global_settings() is get_global_settings()

    def test_set_and_reset(self) -> None:
        """set_global_settings() replaces the instance and reset restores defaults."""
        custom = EmitliteSettings(warn_on_leak=False, max_listeners=3, scheduler="threads")

        set_global_settings(custom)
        assert get_global_settings() is custom

        reset_global_settings()
        assert get_global_settings() == EmitliteSettings()

    def test_settings_are_frozen(self) -> None:
        """Settings can't be mutated in place."""
        settings = EmitliteSettings()

        with pytest.raises(dataclasses.FrozenInstanceError):
            settings.max_listeners = 5  # type: ignore[misc]

    def test_new_registries_use_settings_threshold(self, scheduler) -> None:
        """The default threshold of new registries comes from the settings."""
        from emitlite import EventRegistry

        set_global_settings(EmitliteSettings(max_listeners=3))

        assert EventRegistry(scheduler=scheduler).max_listeners == 3
        assert EventRegistry(scheduler=scheduler, max_listeners=7).max_listeners == 7
