"""
Trait Base Class.

A trait is a reusable bundle of default properties and methods grafted onto
plugin instances. Attributes set in __init__ become default properties; class
functions become methods. Methods run with `self` bound to the plugin
instance, so trait code must not rely on super().
"""

from collections.abc import Callable
from typing import Any


class Trait:
    """Base functionality for all traits."""

    def __init__(self, plugboard: Any):
        self.plugboard = plugboard

    def construct(self, config: Any = None) -> None:
        """Called with the plugin instance as `self` once the trait is applied."""
        pass

    def get_plugboard(self) -> Any:
        return self.plugboard

    @classmethod
    def dependencies(cls) -> list[str]:
        return []

    @classmethod
    def listens(cls) -> dict[str, str | Callable]:
        return {}
