"""
Registry Access Mediators.

Mediators stand between callers and the Plugboard registry. A name is
resolved through an explicit lookup: a real registry member first, then a
plugin name (which resolves to a callable returning an instance). Attribute
access, `in` and `del` are sugar over resolve(), has() and delete().

Two variants:
- RegistryMediator: handed to host code; can unregister plugins via deletion
- InnerMediator: handed to plugins and traits; forbids the host bootstrap
  methods
"""

from collections.abc import Callable
from typing import Any

from plugboard.plugin.errors import ForbiddenOperationError

# Host bootstrap steps that only run once, from the host
FORBIDDEN_OPERATIONS = frozenset(
    {
        "attach_abstracts",
        "load_inbuilt",
        "initialise",
        "initialise_singletons",
    }
)

_MISSING = object()


def _instance_getter(plugboard: Any, name: str) -> Callable[..., Any]:
    """Build the callable a plugin name resolves to."""

    def get_instance(*args: Any) -> Any:
        return plugboard.get_plugin(name).get_instance(*args)

    get_instance.__name__ = name
    return get_instance


def _member(plugboard: Any, name: str) -> Any:
    if name.startswith("_"):
        return _MISSING
    return getattr(plugboard, name, _MISSING)


class _Mediator:
    """Shared resolution surface of both mediators."""

    __slots__ = ("_plugboard",)

    def __init__(self, plugboard: Any):
        object.__setattr__(self, "_plugboard", plugboard)

    def _lookup(self, name: str) -> Any:
        raise NotImplementedError

    def resolve(self, name: str) -> Any:
        """
        Resolve a name to a registry member or plugin instance getter.

        Returns:
            The resolved value, or None if the name is unknown
        """
        value = self._lookup(name)
        return None if value is _MISSING else value

    def has(self, name: str) -> bool:
        """Check whether a name resolves, following the same rules as resolve()."""
        return self._lookup(name) is not _MISSING

    def __getattr__(self, name: str) -> Any:
        if name.startswith("__"):
            raise AttributeError(name)

        value = self._lookup(name)
        if value is _MISSING:
            raise AttributeError(f'"{name}" is not a plugin or registry member')
        return value

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.has(name)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f'Cannot assign "{name}" through the registry mediator')

    # A mediator is a view of one registry; copies share it
    def __copy__(self) -> "_Mediator":
        return self

    def __deepcopy__(self, memo: dict[int, Any]) -> "_Mediator":
        return self

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._plugboard!r})"


class RegistryMediator(_Mediator):
    """
    External view of the registry.

    Example:
        board = plugboard.create()
        parser = board.jsonparser()        # instance of the "jsonparser" plugin
        'jsonparser' in board              # True
        del board.jsonparser               # unregisters the plugin
    """

    __slots__ = ()

    def _lookup(self, name: str) -> Any:
        plugboard = self._plugboard

        value = _member(plugboard, name)
        if value is not _MISSING:
            return value

        if plugboard.has_abstract(name):
            return plugboard.get_abstract(name)

        if plugboard.has_plugin(name):
            return _instance_getter(plugboard, name)

        return _MISSING

    def delete(self, name: str) -> bool:
        """
        Unregister a plugin by name.

        Returns:
            True if a plugin was removed, False if the deletion was rejected
        """
        if self._plugboard.has_plugin(name):
            self._plugboard.remove_plugin(name)
            return True
        return False

    def __delattr__(self, name: str) -> None:
        if not self.delete(name):
            raise AttributeError(f'Cannot delete "{name}": it is not a registered plugin')


class InnerMediator(_Mediator):
    """
    Registry view injected into plugin and trait instances.

    Raises ForbiddenOperationError when plugin code reaches for one of the
    host bootstrap methods.
    """

    __slots__ = ()

    def _lookup(self, name: str) -> Any:
        if name in FORBIDDEN_OPERATIONS:
            raise ForbiddenOperationError(
                f'You cannot use the "{name}" registry method within a plugin.'
            )

        plugboard = self._plugboard
        plugin_name = name.lower()

        if plugboard.has_plugin(plugin_name):
            return _instance_getter(plugboard, plugin_name)

        return _member(plugboard, name)

    def has(self, name: str) -> bool:
        if name in FORBIDDEN_OPERATIONS:
            return False
        return super().has(name)

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f'Cannot delete "{name}" from within a plugin')
