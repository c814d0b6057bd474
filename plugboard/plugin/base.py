"""
Plugin Base Classes.

Every class-based plugin extends PluginBase. The contract methods
(is_singleton, dependencies, traits, listens) are classmethods so the loader
can query them without building an instance.
"""

from collections.abc import Callable
from typing import Any


class PluginBase:
    """
    Base functionality for all plugins.

    The constructor receives the registry handle and should not be overridden.
    Put setup code in construct() (runs before traits are applied) or init()
    (runs after).
    """

    def __init__(self, plugboard: Any, *args: Any):
        self.plugboard = plugboard
        self.destructed = False

    def get_plugboard(self) -> Any:
        """Get the registry handle this plugin is attached to."""
        return self.plugboard

    @classmethod
    def is_singleton(cls) -> bool:
        return False

    @classmethod
    def dependencies(cls) -> list[str]:
        """Names of the plugins this plugin requires."""
        return []

    @classmethod
    def traits(cls) -> list[str] | dict[str, Any]:
        """
        Traits declared by this class.

        Return a list of trait names, or a mapping of trait name to the config
        passed to the trait's construct() hook. Only the declaration made on
        each class itself is read; parent declarations are collected
        separately.
        """
        return []

    @classmethod
    def listens(cls) -> dict[str, str | Callable]:
        """Global event name -> method name (or callable)."""
        return {}

    def construct(self, *args: Any) -> None:
        pass

    def init(self) -> None:
        pass

    def destruct(self) -> None:
        pass

    def detach(self) -> None:
        """Stub, replaced per instance by the loader."""
        pass

    def destructor(self) -> None:
        """
        Tear down this instance.

        Calls destruct(), removes the instance from its loader and marks it as
        destructed. Safe to call more than once.
        """
        self.destruct()
        self.detach()
        self.destructed = True


class Singleton(PluginBase):
    """Plugin base for plugins that keep exactly one live instance."""

    @classmethod
    def is_singleton(cls) -> bool:
        return True
