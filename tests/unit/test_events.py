"""
Tests for Global Events.

This test suite covers:
1. Listener discovery through listens() maps
2. Synchronous dispatch and cancellation
3. Listener failures
4. Promise dispatch
"""

import asyncio
import inspect

import pytest

from plugboard.core.registry import Plugboard
from plugboard.plugin.base import PluginBase, Singleton

received = []


def static_listener(*args):
    received.append(("static", args))


class Logger(PluginBase):
    @classmethod
    def listens(cls):
        return {"saved": "on_saved", "closed": static_listener}

    def construct(self, label="logger"):
        self.label = label

    def on_saved(self, *args):
        received.append((self.label, args))


class Veto(Singleton):
    @classmethod
    def listens(cls):
        return {"saved": "on_saved"}

    def on_saved(self, *args):
        received.append(("veto", args))
        return False


class Broken(Singleton):
    @classmethod
    def listens(cls):
        return {"saved": "on_saved"}

    def on_saved(self, *args):
        raise RuntimeError("boom")


class Deaf(Singleton):
    @classmethod
    def listens(cls):
        return {"saved": "missing_method"}


@pytest.fixture(autouse=True)
def clear_received():
    received.clear()
    yield
    received.clear()


class TestListenerDiscovery:
    """Test listener lookup."""

    def test_listens_to_event(self):
        board = Plugboard()
        board.register_plugin("logger", Logger)
        board.register_plugin("veto", Veto)

        assert board.listens_to_event("saved") == ["logger", "veto"]
        assert board.listens_to_event("closed") == ["logger"]
        assert board.listens_to_event("unknown") == []

    def test_method_called_on_every_instance(self):
        """A method-name listener should run on each live instance."""
        board = Plugboard()
        board.register_plugin("logger", Logger)
        loader = board.get_plugin("logger")
        loader.get_instance("first")
        loader.get_instance("second")

        assert board.global_event("saved", 1) is True
        assert received == [("first", (1,)), ("second", (1,))]

    def test_no_instances_no_calls(self):
        board = Plugboard()
        board.register_plugin("logger", Logger)

        assert board.global_event("saved") is True
        assert received == []

    def test_detached_instance_not_called(self):
        board = Plugboard()
        board.register_plugin("logger", Logger)
        loader = board.get_plugin("logger")
        loader.get_instance("gone").destructor()
        loader.get_instance("kept")

        board.global_event("saved")

        assert received == [("kept", ())]

    def test_callable_called_without_instances(self):
        """A callable listener should run once, however many instances exist."""
        board = Plugboard()
        board.register_plugin("logger", Logger)
        board.get_plugin("logger").get_instance()
        board.get_plugin("logger").get_instance()

        board.global_event("closed", "x")

        assert received == [("static", ("x",))]

    def test_missing_method_warns(self):
        board = Plugboard()
        board.register_plugin("deaf", Deaf)
        board.get_plugin("deaf").get_instance()

        with pytest.warns(RuntimeWarning, match='no method "missing_method"'):
            assert board.global_event("saved") is True


class TestDispatch:
    """Test synchronous dispatch."""

    def test_cancel_stops_remaining_listeners(self):
        board = Plugboard()
        board.register_plugin("veto", Veto)
        board.register_plugin("logger", Logger)
        board.get_plugin("veto").get_instance()
        board.get_plugin("logger").get_instance()

        assert board.global_event("saved") is False
        assert received == [("veto", ())]

    def test_handler_error_warns_and_continues(self):
        board = Plugboard()
        board.register_plugin("broken", Broken)
        board.register_plugin("logger", Logger)
        board.get_plugin("broken").get_instance()
        board.get_plugin("logger").get_instance()

        with pytest.warns(RuntimeWarning, match="Global event handler failed for 'saved': boom"):
            result = board.global_event("saved")

        assert result is True
        assert received == [("logger", ())]

    def test_listener_registered_after_startup(self):
        """Plugins registered later should receive events without extra wiring."""
        board = Plugboard()
        board.initialise()
        board.register_plugin("logger", Logger)
        board.get_plugin("logger").get_instance("late")

        board.global_event("saved")

        assert received == [("late", ())]


class TestPromiseDispatch:
    """Test promise-style dispatch."""

    @pytest.mark.asyncio
    async def test_waits_for_all_listeners(self):
        order = []

        class Slow(Singleton):
            @classmethod
            def listens(cls):
                return {"sync": "on_sync"}

            async def on_sync(self, value):
                await asyncio.sleep(0.01)
                order.append(("slow", value))
                return "slow"

        class Fast(Singleton):
            @classmethod
            def listens(cls):
                return {"sync": "on_sync"}

            async def on_sync(self, value):
                order.append(("fast", value))
                return "fast"

        board = Plugboard()
        board.register_plugin("slow", Slow)
        board.register_plugin("fast", Fast)
        board.initialise()

        results = await board.global_promise_event("sync", 7)

        assert results == ["slow", "fast"]
        assert sorted(order) == [("fast", 7), ("slow", 7)]

    @pytest.mark.asyncio
    async def test_plain_results_ignored(self):
        """Listeners returning plain values should not be awaited."""
        board = Plugboard()
        board.register_plugin("logger", Logger)
        board.get_plugin("logger").get_instance()

        results = await board.global_promise_event("saved", "a")

        assert results == []
        assert received == [("logger", ("a",))]

    @pytest.mark.asyncio
    async def test_failure_propagates(self):
        class Failing(Singleton):
            @classmethod
            def listens(cls):
                return {"sync": "on_sync"}

            async def on_sync(self):
                raise ValueError("rejected")

        board = Plugboard()
        board.register_plugin("failing", Failing)
        board.get_plugin("failing").get_instance()

        with pytest.raises(ValueError, match="rejected"):
            await board.global_promise_event("sync")

    @pytest.mark.asyncio
    async def test_synchronous_failure_closes_pending(self):
        """A listener raising when called should close coroutines already started."""
        created = []

        async def work():
            return "never runs"

        class Starter(Singleton):
            @classmethod
            def listens(cls):
                return {"sync": "on_sync"}

            def on_sync(self):
                coroutine = work()
                created.append(coroutine)
                return coroutine

        class Thrower(Singleton):
            @classmethod
            def listens(cls):
                return {"sync": "on_sync"}

            def on_sync(self):
                raise ValueError("thrown")

        board = Plugboard()
        board.register_plugin("starter", Starter)
        board.register_plugin("thrower", Thrower)
        board.initialise()

        with pytest.raises(ValueError, match="thrown"):
            await board.global_promise_event("sync")

        assert inspect.getcoroutinestate(created[0]) == inspect.CORO_CLOSED
