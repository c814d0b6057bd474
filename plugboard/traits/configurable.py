"""
Data Configuration Trait.

Lets a plugin read its configuration from the data attributes of the element
it is attached to. The plugin must set `self.element` (any object with a
mutable `dataset` mapping) in construct(), before traits are applied.

Accepted keys come from the plugin's defaults(), or every data attribute if
the plugin sets `accept_all_data_configs = True`.
"""

import base64
import binascii
import re
from collections.abc import MutableMapping
from typing import Any

from plugboard.plugin.errors import ConfigurationError
from plugboard.plugin.trait import Trait

_NUMERIC = re.compile(r"^[-+]?[0-9]+(\.[0-9]+)?$")


class Configurable(Trait):
    """Data configuration provider."""

    def __init__(self, plugboard: Any):
        super().__init__(plugboard)
        self.instance_config: dict[str, Any] = {}
        self.accepted_configs: bool | list[str] = False
        self.accept_all_data_configs = False
        self.element = None

    def construct(self, config: Any = None) -> None:
        dataset = getattr(self.element, "dataset", None)
        if not isinstance(dataset, MutableMapping):
            raise ConfigurationError(
                "Data configuration can only be extracted from elements with a dataset"
            )

        self.refresh_config()

    def defaults(self) -> dict[str, Any]:
        """Empty defaults, for plugins that do not define their own."""
        return {}

    def get_config(self, config: str | None = None) -> Any:
        """
        Get the config for this instance.

        Returns the whole configuration if `config` is None, or None for an
        unknown key.
        """
        if config is None:
            return self.instance_config

        return self.instance_config.get(config)

    def set_config(self, config: str, value: Any, persist: bool = False) -> None:
        """
        Override a configuration value at runtime.

        With persist=True the value is also written back to the element.
        """
        if self.element is None:
            return

        self.instance_config[config] = value

        if persist:
            self.element.dataset[config] = str(value)

    def refresh_config(self) -> None:
        """Re-read the configuration from the element's data attributes."""
        self.accepted_configs = self.get_accepted_configs()
        self.instance_config = self.process_config()

    def get_accepted_configs(self) -> bool | list[str]:
        """
        Determine which data attributes may set configuration.

        Returns:
            True if every attribute is accepted, otherwise the default keys
            (False if defaults() does not return a mapping)
        """
        if self.accept_all_data_configs is True:
            return True

        defaults = self.defaults()
        if isinstance(defaults, dict):
            return list(defaults)

        return False

    def get_default_config(self) -> dict[str, Any]:
        defaults = self.defaults()
        if isinstance(defaults, dict):
            return dict(defaults)

        return {}

    def process_config(self) -> dict[str, Any]:
        """
        Build the configuration: defaults, overridden by accepted data attributes.
        """
        config = self.get_default_config()

        if self.accepted_configs is False or self.element is None:
            return config

        for key, value in self.element.dataset.items():
            if self.accepted_configs is True or key in self.accepted_configs:
                config[key] = self.coerce_config_value(value, config.get(key))

        return config

    def coerce_config_value(self, value: Any, default_value: Any = None) -> Any:
        """
        Coerce a data attribute string into a Python value.

        Args:
            value: Raw attribute value
            default_value: Default for the key, used to read 0/1 as booleans

        Returns:
            The coerced value
        """
        string_value = str(value)

        if string_value in ("null", "undefined"):
            return None

        if string_value.startswith("base64:"):
            try:
                decoded = base64.b64decode(string_value[len("base64:"):], validate=True)
            except (binascii.Error, ValueError) as e:
                raise ConfigurationError(f"Invalid base64 config value: {string_value}") from e
            return self.coerce_config_value(decoded.decode("utf-8"))

        if string_value.lower() in ("true", "yes"):
            return True
        if string_value.lower() in ("false", "no"):
            return False

        if _NUMERIC.match(string_value):
            if isinstance(default_value, bool) and string_value in ("0", "1"):
                return string_value == "1"
            if "." in string_value:
                return float(string_value)
            return int(string_value)

        try:
            return self.plugboard.jsonparser().parse(string_value)
        except ConfigurationError:
            return True if string_value == "" else string_value
