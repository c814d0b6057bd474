"""
Global Events - Process-wide notifications routed to plugins.

Plugins subscribe through their listens() map:
- event name -> method name: called on every live instance of the plugin
- event name -> callable: called once, without an instance

Two dispatch styles:
1. dispatch(): synchronous; a listener returning False cancels the rest
2. dispatch_promise(): calls every listener, then awaits all awaitable results
"""

import asyncio
import inspect
import warnings
from collections.abc import Callable
from typing import Any


async def gather_listeners(listeners: list[Callable], *args: Any) -> list[Any]:
    """
    Call every listener, then await the awaitables they returned together.

    If a listener raises before returning, the coroutines already created by
    earlier listeners are closed and the exception propagates.

    Args:
        listeners: Callables to invoke, in order
        *args: Arguments passed to every listener

    Returns:
        Results of the awaited listeners
    """
    pending = []

    try:
        for listener in listeners:
            result = listener(*args)
            if inspect.isawaitable(result):
                pending.append(result)
    except Exception:
        for awaitable in pending:
            if inspect.iscoroutine(awaitable):
                awaitable.close()
        raise

    return list(await asyncio.gather(*pending))


class GlobalEvents:
    """
    Global event dispatcher bound to one Plugboard registry.

    Listeners are looked up on every dispatch, so plugins registered or
    instances built after startup receive events without extra wiring.
    """

    def __init__(self, plugboard: Any):
        """
        Initialize GlobalEvents.

        Args:
            plugboard: The Plugboard registry
        """
        self._plugboard = plugboard

    def listeners(self, event_name: str) -> list[Callable]:
        """
        Find the callables subscribed to an event, in plugin registration order.

        Args:
            event_name: The event name

        Returns:
            List of listener callables
        """
        found: list[Callable] = []

        for plugin_name in self._plugboard.listens_to_event(event_name):
            loader = self._plugboard.get_plugin(plugin_name)
            target = loader.call_method("listens")[event_name]

            if callable(target):
                found.append(target)
                continue

            for instance in loader.get_instances():
                method = getattr(instance, target, None)
                if callable(method):
                    found.append(method)
                else:
                    self._plugboard.warning(
                        f'Plugin "{plugin_name}" listens to "{event_name}" but has no '
                        f'method "{target}"'
                    )

        return found

    def dispatch(self, event_name: str, *args: Any) -> bool:
        """
        Fire a synchronous global event.

        Listener errors are reported as RuntimeWarning and do not stop the
        dispatch.

        Args:
            event_name: The event name
            *args: Arguments passed to every listener

        Returns:
            False if a listener cancelled the event by returning False
        """
        self._plugboard.debug(f'Global event "{event_name}" fired')

        for listener in self.listeners(event_name):
            try:
                result = listener(*args)
            except Exception as e:
                warnings.warn(
                    f"Global event handler failed for '{event_name}': {e}",
                    RuntimeWarning,
                    stacklevel=2,
                )
                continue

            if result is False:
                self._plugboard.debug(f'Global event "{event_name}" cancelled')
                return False

        return True

    async def dispatch_promise(self, event_name: str, *args: Any) -> list[Any]:
        """
        Fire a global event and wait for every listener to settle.

        All listeners are called first; the awaitables they return are then
        awaited together. A failing listener propagates its exception to the
        caller.

        Args:
            event_name: The event name
            *args: Arguments passed to every listener

        Returns:
            Results of the awaited listeners
        """
        self._plugboard.debug(f'Global promise event "{event_name}" fired')

        return await gather_listeners(self.listeners(event_name), *args)
