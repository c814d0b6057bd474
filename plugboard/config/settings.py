"""
Read-only Settings Access.

Settings are validated once, when they are loaded, and cannot be changed
afterwards.
"""

from typing import Any

from plugboard.config.schema import ConfigField


class SettingsError(Exception):
    """Raised on invalid settings access."""

    pass


class Settings:
    """
    Attribute-based, read-only view of validated settings.

    Example:
        settings = Settings({'debug': True, ...}, schema)
        settings.debug        # True
        settings.debug = 1    # SettingsError
    """

    def __init__(self, values: dict[str, Any], schema: dict[str, ConfigField]):
        # Use object.__setattr__ to avoid triggering our custom __setattr__
        object.__setattr__(self, "_values", dict(values))
        object.__setattr__(self, "_schema", schema)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)

        if name not in self._schema:
            raise AttributeError(f"Setting '{name}' not found in schema")

        return self._values[name]

    def __setattr__(self, name: str, value: Any) -> None:
        raise SettingsError(f"Settings are read-only (tried to set '{name}')")

    def as_dict(self) -> dict[str, Any]:
        """Copy of every setting value."""
        return dict(self._values)

    def __repr__(self) -> str:
        return f"Settings({self._values})"
