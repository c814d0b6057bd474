"""
Plugboard Configuration - TOML-based host settings.

This module provides:
- The host settings schema
- Loading and validation of the [plugboard] table
- Generation of a commented default settings file

Example usage:
    import plugboard.config

    settings = plugboard.config.load('config/plugboard.toml')
    if settings.debug:
        ...
"""

from pathlib import Path
from typing import Any

from plugboard.config.schema import (
    ConfigField,
    ValidationError,
    generate_default_config,
    validate_config,
)
from plugboard.config.settings import Settings
from plugboard.config.toml_handler import generate_toml_from_schema, read_toml, write_toml

SECTION = "plugboard"

INBUILT = ["jsonparser", "configurable", "firesevents"]


class ConfigError(Exception):
    """Base exception for config API errors."""

    pass


def field(
    type_: type,
    default: Any,
    description: str = "",
    choices: list[Any] | None = None,
    item_type: type | None = None,
) -> ConfigField:
    """
    Helper function to create a ConfigField.

    Example:
        field(bool, False, "Print debug output")
    """
    return ConfigField(
        type_=type_,
        default=default,
        description=description,
        choices=choices,
        item_type=item_type,
    )


SETTINGS_SCHEMA: dict[str, ConfigField] = {
    "debug": field(bool, False, "Print debug output to stderr"),
    "auto_singletons": field(
        bool, True, "Build singletons with fulfilled dependencies on initialise()"
    ),
    "inbuilt": field(
        list, list(INBUILT), "Built-in plugins and traits to register", item_type=str
    ),
}


def defaults() -> Settings:
    """Settings with every field at its default value."""
    return Settings(generate_default_config(SETTINGS_SCHEMA), SETTINGS_SCHEMA)


def load(config_file: Path | str | None = None) -> Settings:
    """
    Load host settings from the [plugboard] table of a TOML file.

    Missing files and missing keys fall back to defaults.

    Args:
        config_file: Path to the TOML file (None for defaults only)

    Returns:
        Validated, read-only Settings

    Raises:
        ConfigError: If the file cannot be parsed or a value is invalid
    """
    values = generate_default_config(SETTINGS_SCHEMA)

    if config_file is not None:
        path = Path(config_file)
        if path.exists():
            try:
                data = read_toml(path)
            except Exception as e:
                raise ConfigError(f"Failed to load settings: {e}") from e

            section = data.get(SECTION, {})
            if not isinstance(section, dict):
                raise ConfigError(f"[{SECTION}] must be a table")
            values.update(section)

    try:
        validate_config(values, SETTINGS_SCHEMA)
    except ValidationError as e:
        raise ConfigError(f"Invalid settings: {e}") from e

    return Settings(values, SETTINGS_SCHEMA)


def generate(config_file: Path | str) -> None:
    """
    Write a settings file with default values and field descriptions.

    Args:
        config_file: Destination path
    """
    content = generate_toml_from_schema(
        SECTION, SETTINGS_SCHEMA, generate_default_config(SETTINGS_SCHEMA)
    )
    write_toml(Path(config_file), content)


__all__ = ["field", "defaults", "load", "generate", "ConfigError", "Settings", "SETTINGS_SCHEMA"]
