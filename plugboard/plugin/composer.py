"""
Trait Composer.

Grafts trait members onto freshly constructed plugin instances.

Key features:
- Trait names collected along the plugin's MRO (concrete class first)
- Per-trait configuration when traits() returns a mapping
- First writer wins: instance and class members beat trait members, and an
  earlier trait beats a later one
- Lifecycle hooks are never carried over from traits
- Missing traits degrade to a RuntimeWarning
"""

import types
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from plugboard.plugin.trait import Trait

# Members a trait may define for itself but never hands to the plugin
RESERVED_NAMES = frozenset(
    {
        "construct",
        "init",
        "get_plugboard",
        "destruct",
        "destructor",
        "detach",
    }
)


@dataclass
class TraitRequest:
    """
    A trait requested by a plugin class.

    Attributes:
        name: Trait name as declared
        config: Config passed to the trait's construct() hook (None if the
            trait was declared in a plain list)
    """

    name: str
    config: Any = None


def _declared_traits(klass: type, instance: Any) -> list[TraitRequest]:
    """Read the traits() declaration made on `klass` itself."""
    declared = vars(klass).get("traits")
    if declared is None:
        return []

    if hasattr(declared, "__get__"):
        declared = declared.__get__(instance, klass)
    if callable(declared):
        declared = declared()

    if isinstance(declared, Mapping):
        return [TraitRequest(name, config) for name, config in declared.items()]
    return [TraitRequest(name) for name in declared or ()]


def collect_traits(instance: Any) -> list[TraitRequest]:
    """
    Collect the traits requested along an instance's class hierarchy.

    Walks from the concrete class up to (excluding) object. Names are
    deduplicated case-insensitively; the first occurrence keeps its position
    and config.

    Args:
        instance: Plugin instance

    Returns:
        Ordered list of trait requests
    """
    requests: list[TraitRequest] = []
    seen: set[str] = set()

    for klass in type(instance).__mro__:
        if klass is object:
            break

        for request in _declared_traits(klass, instance):
            key = request.name.lower()
            if key in seen:
                continue
            seen.add(key)
            requests.append(request)

    return requests


def _bind(member: Any, owner: type, instance: Any) -> Any:
    """Turn a trait class member into the value stored on the plugin instance."""
    if isinstance(member, staticmethod):
        return member.__func__
    if isinstance(member, classmethod):
        return member.__get__(None, owner)
    if isinstance(member, types.FunctionType):
        return types.MethodType(member, instance)
    return member


class TraitComposer:
    """
    Applies traits to the instances built by one plugin loader.

    Example:
        composer = TraitComposer(inner_plugboard, 'widget')
        composer.apply(widget_instance)
    """

    def __init__(self, plugboard: Any, plugin_name: str):
        """
        Initialize TraitComposer.

        Args:
            plugboard: Registry handle used to look up traits and warn
            plugin_name: Owning plugin name (used in warnings)
        """
        self._plugboard = plugboard
        self._plugin_name = plugin_name

    def apply(self, instance: Any) -> list[str]:
        """
        Apply every requested trait to the instance.

        Args:
            instance: Constructed, not yet initialised plugin instance

        Returns:
            Names of the traits that were applied
        """
        applied = []

        for request in collect_traits(instance):
            if not self._plugboard.has_trait(request.name):
                self._plugboard.warning(
                    f'Trait "{request.name}" does not exist and cannot be applied '
                    f'to "{self._plugin_name}"'
                )
                continue

            self._apply_trait(instance, request)
            applied.append(request.name)

        return applied

    def _apply_trait(self, instance: Any, request: TraitRequest) -> None:
        trait_factory = self._plugboard.get_trait(request.name)
        trait_instance = trait_factory(self._plugboard)

        members = self._trait_members(trait_instance, instance)

        # Anything the instance already resolves (own attribute, class chain or
        # an earlier trait) keeps its current value
        for name, value in members.items():
            if hasattr(instance, name):
                continue
            setattr(instance, name, value)

        construct = getattr(type(trait_instance), "construct", None)
        if callable(construct):
            if request.config is None:
                construct(instance)
            else:
                construct(instance, request.config)

    def _trait_members(self, trait_instance: Any, instance: Any) -> dict[str, Any]:
        """
        Gather a trait's default properties, then its methods bound to `instance`.

        Returns:
            name -> value to store on the plugin instance
        """
        members: dict[str, Any] = dict(vars(trait_instance))

        for klass in type(trait_instance).__mro__:
            if klass is Trait or klass is object:
                break

            for name, member in vars(klass).items():
                if name.startswith("__") or name in RESERVED_NAMES:
                    continue
                # properties cannot live on an instance
                if isinstance(member, property) or name in members:
                    continue
                members[name] = _bind(member, klass, instance)

        return members
