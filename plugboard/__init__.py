"""
Plugboard - Plugin runtime with traits, singletons and mediated access.

This is the main package that exports the public API.
"""

__version__ = "0.1.0"

from pathlib import Path

from plugboard import config
from plugboard.core.registry import Plugboard
from plugboard.plugin.base import PluginBase, Singleton
from plugboard.plugin.mediator import InnerMediator, RegistryMediator
from plugboard.plugin.trait import Trait


def create(config_file: Path | str | None = None) -> RegistryMediator:
    """
    Build a registry and return the host's view of it.

    Example:
        board = plugboard.create('config/plugboard.toml')
        board.register_plugin('alert', Alert)
        board.initialise()
        alert = board.alert()
    """
    return RegistryMediator(Plugboard(config.load(config_file)))


__all__ = [
    "__version__",
    "create",
    "Plugboard",
    "PluginBase",
    "Singleton",
    "Trait",
    "RegistryMediator",
    "InnerMediator",
]
