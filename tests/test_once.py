"""Unit tests for one-shot registrations and the OnceHandler adapter."""

import logging

import pytest

from emitlite import EventRegistry
from emitlite import InvalidArgumentError
from emitlite import OnceHandler


class TestRegisterOnce:
    """Tests for EventRegistry.register_once()."""

    def test_once_handler_runs_for_one_dispatch(self, scheduler) -> None:
        """A one-shot handler runs once, then its event type is gone."""
        registry = EventRegistry(scheduler=scheduler)
        calls = []

        registry.register_once("ready", calls.append)

        assert registry.dispatch("ready", 1) is True
        scheduler.run_pending()

        assert calls == [1]
        assert registry.listeners("ready") == []
        assert registry.dispatch("ready", 2) is False

    def test_two_dispatches_before_running_call_once(self, scheduler) -> None:
        """Both dispatches capture the adapter, but the handler still runs only once."""
        registry = EventRegistry(scheduler=scheduler)
        calls = []

        registry.register_once("ready", calls.append)
        registry.dispatch("ready", "first")
        registry.dispatch("ready", "second")
        scheduler.run_pending()

        assert calls == ["first"]
        assert registry.listeners("ready") == []

    def test_listeners_return_adapter(self, scheduler) -> None:
        """The stored entry is a OnceHandler wrapping the original handler."""
        registry = EventRegistry(scheduler=scheduler)

        def on_ready() -> None:
            """Original docstring."""

        registry.register_once("ready", on_ready)
        (adapter,) = registry.listeners("ready")

        assert isinstance(adapter, OnceHandler)
        assert adapter.handler is on_ready
        assert adapter.event_type == "ready"
        assert adapter.fired is False
        assert adapter.__name__ == "on_ready"
        assert adapter.__doc__ == "Original docstring."

    def test_deregister_by_original_handler(self, scheduler) -> None:
        """A one-shot registration can be cancelled with the original handler."""
        registry = EventRegistry(scheduler=scheduler)
        calls = []

        def on_ready() -> None:
            calls.append("ready")

        registry.register_once("ready", on_ready)
        registry.deregister("ready", on_ready)

        assert registry.dispatch("ready") is False
        scheduler.run_pending()
        assert calls == []

    def test_deregister_by_adapter(self, scheduler) -> None:
        """A one-shot registration can be cancelled with its adapter."""
        registry = EventRegistry(scheduler=scheduler)

        registry.register_once("ready", lambda: None)
        (adapter,) = registry.listeners("ready")
        registry.deregister("ready", adapter)

        assert "ready" not in registry

    def test_cancel(self, scheduler) -> None:
        """OnceHandler.cancel() removes the registration without calling the handler."""
        registry = EventRegistry(scheduler=scheduler)
        calls = []

        registry.register_once("ready", calls.append)
        registry.listeners("ready")[0].cancel()

        assert registry.listeners("ready") == []
        assert calls == []

    def test_once_and_persistent_handlers_keep_order(self, scheduler) -> None:
        """One-shot and persistent handlers share the same FIFO order."""
        registry = EventRegistry(scheduler=scheduler)
        calls = []

        registry.register("tick", lambda n: calls.append(("a", n)))
        registry.register_once("tick", lambda n: calls.append(("once", n)))
        registry.register("tick", lambda n: calls.append(("b", n)))

        registry.dispatch("tick", 1)
        registry.dispatch("tick", 2)
        scheduler.run_pending()

        assert calls == [("a", 1), ("once", 1), ("b", 1), ("a", 2), ("b", 2)]
        assert registry.listener_count("tick") == 2

    def test_once_passes_arguments(self, scheduler) -> None:
        """The wrapped handler receives the dispatched args and kwargs."""
        registry = EventRegistry(scheduler=scheduler)
        calls = []

        def handler(*args, **kwargs) -> None:
            calls.append((args, kwargs))

        registry.register_once("data", handler)
        registry.dispatch("data", 1, key="value")
        scheduler.run_pending()

        assert calls == [((1,), {"key": "value"})]

    def test_once_rejects_non_callable(self, scheduler) -> None:
        """register_once() validates the handler."""
        registry = EventRegistry(scheduler=scheduler)

        with pytest.raises(InvalidArgumentError):
            registry.register_once("ready", "nope")  # type: ignore[arg-type]

        assert "ready" not in registry

    def test_once_counts_toward_leak_threshold(self, scheduler, caplog) -> None:
        """One-shot registrations go through the same leak check."""
        registry = EventRegistry(scheduler=scheduler, max_listeners=1)

        registry.register_once("x", lambda: None).register_once("x", lambda: None)

        records = [r for r in caplog.records if "memory leak" in r.getMessage()]
        assert len(records) == 1
        assert records[0].levelno == logging.WARNING


class TestOnceHandler:
    """Tests for the adapter used directly."""

    def test_direct_call_deregisters_and_returns_result(self, scheduler) -> None:
        """Calling the adapter removes it and returns the handler's result."""
        registry = EventRegistry(scheduler=scheduler)
        adapter = OnceHandler(registry, "data", lambda x: x * 2)
        registry.register("data", adapter)

        assert adapter(21) == 42
        assert adapter.fired is True
        assert registry.listeners("data") == []

    def test_second_call_is_noop(self, scheduler) -> None:
        """The wrapped handler never runs twice."""
        registry = EventRegistry(scheduler=scheduler)
        calls = []
        adapter = OnceHandler(registry, "data", calls.append)

        adapter(1)
        adapter(2)

        assert calls == [1]

    def test_repr(self, scheduler) -> None:
        """repr() names the event type and wrapped handler."""
        registry = EventRegistry(scheduler=scheduler)

        adapter = OnceHandler(registry, "data", print)

        assert repr(adapter) == "OnceHandler('data', <built-in function print>)"
