"""
Plugin Loader.

One loader exists per registered plugin name. It is the factory and lifecycle
manager for that plugin.

Key features:
- Dependency checking by registered name
- Singleton lifecycle (at most one live instance)
- Trait composition on every new instance
- Method mocking for tests, kept in a per-loader table
- Static-style method calls against the plugin factory
"""

import functools
import inspect
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from plugboard.plugin.composer import TraitComposer
from plugboard.plugin.errors import MissingDependencyError, UnknownMethodError
from plugboard.plugin.mediator import InnerMediator


@dataclass
class SingletonStatus:
    """
    Singleton build state.

    Attributes:
        initialised: True once the singleton has been built; never reset
    """

    initialised: bool = False


@dataclass
class MockTable:
    """
    Test overrides for one plugin.

    Overrides are written onto instances only. The factory keeps the original
    implementation, so removing an instance-level override restores it.

    Attributes:
        mocks: method name -> override callable (receives the instance first)
    """

    mocks: dict[str, Callable] = field(default_factory=dict)

    def restore(self, instance: Any) -> None:
        """Drop every override from the instance."""
        for method_name in self.mocks:
            vars(instance).pop(method_name, None)

    def apply(self, instance: Any) -> None:
        """Restore originals, then layer every override onto the instance."""
        self.restore(instance)
        for method_name, callback in self.mocks.items():
            setattr(instance, method_name, functools.partial(callback, instance))


class PluginLoader:
    """
    Factory and lifecycle manager for a single plugin.

    Example:
        loader = PluginLoader('modal', plugboard, Modal)
        modal = loader.get_instance(element)
    """

    def __init__(self, name: str, plugboard: Any, factory: Callable):
        """
        Initialize PluginLoader.

        Args:
            name: Plugin name (lower-case)
            plugboard: The Plugboard registry
            factory: PluginBase subclass or plain callable
        """
        self._name = name
        self._plugboard = InnerMediator(plugboard)
        self._factory = factory
        self._instances: dict[int, Any] = {}
        self._singleton = SingletonStatus()
        self._mock_table = MockTable()
        self._composer = TraitComposer(self._plugboard, name)

    @property
    def name(self) -> str:
        return self._name

    @property
    def factory(self) -> Callable:
        return self._factory

    def _is_class_based(self) -> bool:
        return inspect.isclass(self._factory)

    def has_method(self, method_name: str) -> bool:
        """
        Check whether the plugin factory defines a method.

        Always False for plain callable plugins.
        """
        if not self._is_class_based():
            return False
        return callable(getattr(self._factory, method_name, None))

    def call_method(self, method_name: str, *args: Any) -> Any:
        """Call a method directly on the plugin factory, without an instance."""
        return getattr(self._factory, method_name)(*args)

    def get_instance(self, *args: Any) -> Any:
        """
        Get an instance of the plugin.

        Singletons return their single instance, building it on first use.
        Other plugins return a new instance on every call.

        Raises:
            MissingDependencyError: If any dependency is not registered
        """
        if not self.dependencies_fulfilled():
            registered = self._plugboard.get_plugin_names()
            unmet = [name for name in self.get_dependencies() if name not in registered]
            raise MissingDependencyError(self._name, unmet)

        if not self._is_class_based():
            return self._factory(self._plugboard, *args)

        if self.is_singleton():
            if not self._instances:
                self.initialise_singleton(*args)

            instance = next(iter(self._instances.values()))
            if self._mock_table.mocks:
                self._mock_table.apply(instance)
            return instance

        instance = self._build(*args)
        if self._mock_table.mocks:
            self._mock_table.apply(instance)
        return instance

    def _build(self, *args: Any) -> Any:
        """Construct, compose and initialise a new instance, and track it."""
        instance = self._factory(self._plugboard, *args)
        key = id(instance)

        def detach() -> None:
            if self._instances.get(key) is instance:
                del self._instances[key]

        instance.detach = detach
        instance.construct(*args)
        self._composer.apply(instance)
        instance.init()
        self._instances[key] = instance
        return instance

    def get_instances(self) -> list[Any]:
        """Get all live instances of the plugin, oldest first."""
        return list(self._instances.values())

    def is_singleton(self) -> bool:
        if not self._is_class_based():
            return False
        return self._factory.is_singleton() is True

    def is_initialised(self) -> bool:
        """
        Check whether a singleton has been built.

        Non-singleton plugins always report True.
        """
        if not self.is_singleton():
            return True
        return self._singleton.initialised

    def initialise_singleton(self, *args: Any) -> None:
        """
        Build the singleton instance.

        Does nothing for non-singletons, or while a singleton instance is live.
        """
        if not self.is_singleton() or self._instances:
            return

        self._build(*args)
        self._singleton.initialised = True

    def get_dependencies(self) -> list[str]:
        """Get the lower-cased names of the plugins this plugin requires."""
        if not self._is_class_based():
            return []
        return [name.lower() for name in self._factory.dependencies()]

    def dependencies_fulfilled(self) -> bool:
        """Check that every dependency is registered (not necessarily built)."""
        return all(self._plugboard.has_plugin(name) for name in self.get_dependencies())

    def mock(self, method_name: str, callback: Callable) -> None:
        """
        Replace a plugin method for testing.

        The override receives the instance as its first argument. Singletons
        are built immediately if needed so the override has a target; other
        plugins get the override on instances returned from now on.

        Args:
            method_name: Name of the method to replace
            callback: Replacement, called as callback(instance, *args)

        Raises:
            UnknownMethodError: If the plugin has no such method
        """
        if not self.has_method(method_name):
            raise UnknownMethodError(
                f'Method "{method_name}" does not exist and cannot be mocked'
            )

        self._mock_table.mocks[method_name] = callback

        if self.is_singleton() and not self._instances:
            self.initialise_singleton()
            instance = next(iter(self._instances.values()))
            self._mock_table.apply(instance)

    def unmock(self, method_name: str) -> None:
        """Remove a mock. Does nothing if the method is not mocked."""
        if method_name not in self._mock_table.mocks:
            return

        if self.is_singleton():
            for instance in self._instances.values():
                vars(instance).pop(method_name, None)

        del self._mock_table.mocks[method_name]

    def __repr__(self) -> str:
        return f"PluginLoader({self._name!r}, instances={len(self._instances)})"
