"""
Plugboard Registry.

The registry is the single source of truth for which plugins and traits
exist. It maps case-insensitive names to plugin loaders and trait classes,
and owns the host bootstrap sequence.

Key features:
- Plugin and trait registration (re-registration replaces the loader)
- Name existence checks that never raise
- Base abstractions and built-in utilities attached on construction
- Global event dispatch driven by plugin listens() maps
"""

import inspect
import sys
import types
import warnings
from collections.abc import Callable
from typing import Any

from plugboard import config
from plugboard.config.settings import Settings
from plugboard.core.events import GlobalEvents
from plugboard.plugin.base import PluginBase, Singleton
from plugboard.plugin.errors import (
    PluginNotFoundError,
    RegistrationError,
    TraitNotFoundError,
)
from plugboard.plugin.loader import PluginLoader
from plugboard.plugin.trait import Trait
from plugboard.traits.configurable import Configurable
from plugboard.traits.fires_events import FiresEvents
from plugboard.utilities.json_parser import JsonParser

INBUILT_PLUGINS: dict[str, Callable] = {
    "jsonparser": JsonParser,
}

INBUILT_TRAITS: dict[str, type] = {
    "configurable": Configurable,
    "firesevents": FiresEvents,
}

# Contract methods the loader calls on the factory itself
CLASS_CONTRACT = ("is_singleton", "dependencies", "listens")


class Plugboard:
    """
    Plugin and trait registry.

    Host code normally talks to it through a RegistryMediator (see
    plugboard.create()); plugins see it through an InnerMediator.
    """

    def __init__(self, settings: Settings | None = None):
        """
        Initialize Plugboard.

        Attaches the base abstractions and registers the built-ins listed in
        the settings.

        Args:
            settings: Host settings (defaults if None)
        """
        self._settings = settings if settings is not None else config.defaults()
        self._plugins: dict[str, PluginLoader] = {}
        self._traits: dict[str, type] = {}
        self._abstracts: dict[str, type] = {}
        self._events = GlobalEvents(self)
        self._initialised = False

        self.attach_abstracts()
        self.load_inbuilt()

    @property
    def settings(self) -> Settings:
        return self._settings

    # Host bootstrap

    def attach_abstracts(self) -> None:
        """Expose the base classes plugins and traits are built on."""
        self._abstracts = {
            "PluginBase": PluginBase,
            "Singleton": Singleton,
            "Trait": Trait,
        }

    def load_inbuilt(self) -> None:
        """Register the built-in plugins and traits named in the settings."""
        for name in self._settings.inbuilt:
            key = name.lower()
            if key in INBUILT_PLUGINS:
                self.register_plugin(key, INBUILT_PLUGINS[key])
            elif key in INBUILT_TRAITS:
                self.register_trait(key, INBUILT_TRAITS[key])
            else:
                self.warning(f'Unknown built-in "{name}" cannot be loaded')

    def initialise(self) -> None:
        """
        Host start-up hook.

        Builds singletons (if auto_singletons is enabled) and fires the
        "ready" global event. Runs once; later calls do nothing.
        """
        if self._initialised:
            self.debug("Already initialised")
            return

        self._initialised = True

        if self._settings.auto_singletons:
            self.initialise_singletons()

        self.global_event("ready")

    def initialise_singletons(self) -> None:
        """Build every unbuilt singleton whose dependencies are registered."""
        for loader in list(self._plugins.values()):
            if not loader.is_singleton() or loader.get_instances():
                continue
            if not loader.dependencies_fulfilled():
                self.debug(f'Singleton "{loader.name}" skipped: dependencies not registered')
                continue

            loader.initialise_singleton()

    # Registration

    def register_plugin(self, name: str, factory: Callable) -> None:
        """
        Register a plugin, replacing any plugin of the same name.

        Args:
            name: Plugin name (case-insensitive)
            factory: PluginBase subclass or plain callable

        Raises:
            RegistrationError: If the factory is not callable, the name
                shadows a registry member, or a contract method that is
                queried without an instance is a plain instance method
        """
        if not isinstance(name, str) or not name:
            raise RegistrationError("Plugin name must be a non-empty string")
        if not callable(factory):
            raise RegistrationError(f'Plugin "{name}" must be a class or callable')

        key = name.lower()
        if hasattr(type(self), key):
            raise RegistrationError(f'Plugin name "{name}" conflicts with a registry member')

        if inspect.isclass(factory):
            for method_name in CLASS_CONTRACT:
                if isinstance(inspect.getattr_static(factory, method_name, None), types.FunctionType):
                    raise RegistrationError(
                        f'"{method_name}" on plugin "{name}" must be a classmethod or staticmethod'
                    )

        if key in self._plugins:
            self.debug(f'Plugin "{key}" replaced')

        self._plugins[key] = PluginLoader(key, self, factory)
        self.debug(f'Plugin "{key}" registered')

    def register_trait(self, name: str, factory: type) -> None:
        """
        Register a trait, replacing any trait of the same name.

        Raises:
            RegistrationError: If the trait is not a class
        """
        if not isinstance(name, str) or not name:
            raise RegistrationError("Trait name must be a non-empty string")
        if not isinstance(factory, type):
            raise RegistrationError(f'Trait "{name}" must be a class')

        self._traits[name.lower()] = factory
        self.debug(f'Trait "{name.lower()}" registered')

    def has_plugin(self, name: str) -> bool:
        return isinstance(name, str) and name.lower() in self._plugins

    def has_trait(self, name: str) -> bool:
        return isinstance(name, str) and name.lower() in self._traits

    def has_abstract(self, name: str) -> bool:
        return name in self._abstracts

    def get_abstract(self, name: str) -> type:
        return self._abstracts[name]

    def get_plugin(self, name: str) -> PluginLoader:
        """
        Get the loader of a plugin.

        Raises:
            PluginNotFoundError: If no plugin has this name
        """
        if not self.has_plugin(name):
            raise PluginNotFoundError(f'No plugin called "{name}" is registered')
        return self._plugins[name.lower()]

    def get_trait(self, name: str) -> type:
        """
        Get a trait class.

        Raises:
            TraitNotFoundError: If no trait has this name
        """
        if not self.has_trait(name):
            raise TraitNotFoundError(f'No trait called "{name}" is registered')
        return self._traits[name.lower()]

    def get_plugin_names(self) -> list[str]:
        return list(self._plugins)

    def remove_plugin(self, name: str) -> None:
        """
        Unregister a plugin.

        Live instances already handed out are left untouched.
        """
        if self._plugins.pop(name.lower(), None) is not None:
            self.debug(f'Plugin "{name.lower()}" removed')

    # Events

    def listens_to_event(self, event_name: str) -> list[str]:
        """Names of the plugins whose listens() map contains the event."""
        return [
            name
            for name, loader in self._plugins.items()
            if loader.has_method("listens") and event_name in loader.call_method("listens")
        ]

    def global_event(self, event_name: str, *args: Any) -> bool:
        """
        Fire a global event synchronously.

        Returns:
            False if a listener cancelled the event
        """
        return self._events.dispatch(event_name, *args)

    async def global_promise_event(self, event_name: str, *args: Any) -> list[Any]:
        """Fire a global event and wait for every listener to settle."""
        return await self._events.dispatch_promise(event_name, *args)

    # Diagnostics

    def warning(self, message: str) -> None:
        """Report a non-fatal problem as a RuntimeWarning."""
        warnings.warn(message, RuntimeWarning, stacklevel=2)

    def debug(self, *parts: Any) -> None:
        """Print debug output to stderr when the debug setting is on."""
        if self._settings.debug:
            print("[plugboard]", *parts, file=sys.stderr)

    def __repr__(self) -> str:
        return f"Plugboard(plugins={list(self._plugins)}, traits={list(self._traits)})"
