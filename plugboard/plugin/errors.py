"""
Plugin System Errors.

All failures raised by the registry, loaders and mediators derive from
PluginError so host code can catch them in one place.
"""


class PluginError(Exception):
    """Base exception for plugin-related errors."""

    pass


class RegistrationError(PluginError):
    """Raised when a plugin or trait cannot be registered."""

    pass


class PluginNotFoundError(PluginError):
    """Raised when a plugin name has no registered loader."""

    pass


class TraitNotFoundError(PluginError):
    """Raised when a trait name has no registered descriptor."""

    pass


class MissingDependencyError(PluginError):
    """
    Raised when a plugin is requested while its dependencies are unregistered.

    Attributes:
        plugin: Name of the plugin that was requested
        unmet: Dependency names that are not registered
    """

    def __init__(self, plugin: str, unmet: list[str]):
        self.plugin = plugin
        self.unmet = unmet
        super().__init__(
            f'The "{plugin}" plugin requires the following plugins: {", ".join(unmet)}'
        )


class UnknownMethodError(PluginError):
    """Raised when mocking a method the plugin does not define."""

    pass


class ForbiddenOperationError(PluginError):
    """Raised when plugin code reaches for a host-only registry method."""

    pass


class ConfigurationError(PluginError):
    """Raised when configuration data cannot be extracted or parsed."""

    pass
