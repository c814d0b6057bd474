"""
Event Firing Trait.

Gives a plugin its own event listeners (on/off/once) and a way to fire them.
Local listeners run first; unless the plugin is limited to local events, a
global event named "<event_prefix>.<event>" follows.

A local listener returning False cancels the remaining local listeners and
the global event.
"""

import warnings
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from plugboard.core.events import gather_listeners
from plugboard.plugin.errors import ConfigurationError
from plugboard.plugin.trait import Trait


@dataclass
class LocalListener:
    """A listener registered on one plugin instance."""

    event: str
    callback: Callable
    original: Callable | None = None


class FiresEvents(Trait):
    """Instance-level event handling."""

    def __init__(self, plugboard: Any):
        super().__init__(plugboard)
        self.event_listeners: list[LocalListener] = []
        self.local_events_only = False
        self.event_prefix = ""

    def construct(self, config: Any = None) -> None:
        if not self.local_events_only and not self.event_prefix:
            raise ConfigurationError("Event prefix is required if global events are enabled.")

    def on(self, event: str, callback: Callable) -> None:
        """Register a listener for one of this instance's events."""
        self.event_listeners.append(LocalListener(event, callback))

    def off(self, event: str, callback: Callable) -> None:
        """Remove a listener registered with on() or once()."""

        def matches(listener: LocalListener) -> bool:
            registered = listener.original or listener.callback
            return listener.event == event and registered is callback

        self.event_listeners = [
            listener for listener in self.event_listeners if not matches(listener)
        ]

    def once(self, event: str, callback: Callable) -> None:
        """Register a listener that is removed after its first call."""

        def wrapper(*args: Any) -> Any:
            self.event_listeners = [
                listener for listener in self.event_listeners if listener.callback is not wrapper
            ]
            return callback(*args)

        self.event_listeners.append(LocalListener(event, wrapper, callback))

    def trigger_event(self, event_name: str, *args: Any) -> bool:
        """
        Fire an event: local listeners first, then the global event.

        Returns:
            False if a listener cancelled the event
        """
        listeners = [listener for listener in self.event_listeners if listener.event == event_name]

        for listener in listeners:
            if listener.callback(*args) is False:
                return False

        if not self.local_events_only:
            return self.plugboard.global_event(f"{self.event_prefix}.{event_name}", *args)

        return True

    async def trigger_promise_event(self, event_name: str, *args: Any) -> bool:
        """
        Fire an event and wait for every local listener before the global event.

        A failing local listener, whether it raises when called or its
        awaitable fails, is reported as a RuntimeWarning and stops the global
        promise event from firing.

        Returns:
            False if a local listener failed
        """
        callbacks = [
            listener.callback for listener in self.event_listeners if listener.event == event_name
        ]

        try:
            await gather_listeners(callbacks, *args)
        except Exception as e:
            warnings.warn(
                f"Local promise listener failed for '{event_name}': {e}",
                RuntimeWarning,
                stacklevel=2,
            )
            return False

        if not self.local_events_only:
            await self.plugboard.global_promise_event(f"{self.event_prefix}.{event_name}", *args)

        return True
