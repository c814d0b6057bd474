"""
Settings Schema.

Field definitions and validation for the host settings table.
"""

from dataclasses import dataclass
from typing import Any


class SchemaError(Exception):
    """Base exception for schema-related errors."""

    pass


class ValidationError(SchemaError):
    """Raised when value validation fails."""

    pass


@dataclass
class ConfigField:
    """
    Represents a settings field with type and constraints.

    Attributes:
        type_: The expected type of the field value
        default: Default value for the field
        description: Human-readable description
        choices: List of allowed values (optional)
        item_type: Expected type of list items (list fields only)
    """

    type_: type
    default: Any
    description: str = ""
    choices: list[Any] | None = None
    item_type: type | None = None

    def __post_init__(self):
        """Validate field definition."""
        if not isinstance(self.default, self.type_):
            raise SchemaError(
                f"Default value {self.default!r} does not match type {self.type_.__name__}"
            )

        if self.item_type is not None and self.type_ is not list:
            raise SchemaError("item_type is only supported for list fields")

        if self.choices is not None and self.default not in self.choices:
            raise SchemaError(
                f"Default value {self.default!r} not in choices {self.choices}"
            )

    def validate(self, value: Any) -> None:
        """
        Validate a value against this field's constraints.

        Args:
            value: The value to validate

        Raises:
            ValidationError: If validation fails
        """
        # bool is an int subclass; keep them apart
        if not isinstance(value, self.type_) or (
            self.type_ is int and isinstance(value, bool)
        ):
            raise ValidationError(
                f"Expected type {self.type_.__name__}, got {type(value).__name__}"
            )

        if self.choices is not None and value not in self.choices:
            raise ValidationError(
                f"Value {value!r} not in allowed choices {self.choices}"
            )

        if self.item_type is not None:
            for item in value:
                if not isinstance(item, self.item_type):
                    raise ValidationError(
                        f"Expected list of {self.item_type.__name__}, "
                        f"got item {item!r}"
                    )


def validate_config(config: dict[str, Any], schema: dict[str, ConfigField]) -> None:
    """
    Validate a settings dictionary against a schema.

    Args:
        config: The settings dictionary to validate
        schema: The schema dictionary (field_name -> ConfigField)

    Raises:
        ValidationError: If validation fails
    """
    for key in config:
        if key not in schema:
            raise ValidationError(f"Unknown configuration field: {key}")

    for field_name, field in schema.items():
        if field_name not in config:
            raise ValidationError(f"Missing required field: {field_name}")

        try:
            field.validate(config[field_name])
        except ValidationError as e:
            raise ValidationError(f"Field '{field_name}': {e}") from e


def generate_default_config(schema: dict[str, ConfigField]) -> dict[str, Any]:
    """
    Generate a default configuration from a schema.

    List defaults are copied so callers cannot mutate the schema.
    """
    return {
        field_name: list(field.default) if isinstance(field.default, list) else field.default
        for field_name, field in schema.items()
    }
