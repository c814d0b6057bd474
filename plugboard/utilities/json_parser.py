"""
Lenient JSON Parser.

Parses JSON-like strings that do not strictly meet the JSON grammar, which
keeps hand-written configuration values short. The string is first parsed as
JSON5 (unquoted keys, single quotes, comments, hex and leading-dot numbers,
trailing commas). If that fails it is tokenised with these rules (in order):

- `{...}` and `[...]` are an object and an array
- an unbracketed string with a top-level colon is an object:
  `foo: bar, baz: 1` -> {"foo": "bar", "baz": 1}
- an unbracketed string with a top-level comma is an array:
  `foo, bar` -> ["foo", "bar"]
- anything else is a string: `foo` -> "foo"

Inside objects and arrays, keys and values are strings unless they parse as
JSON5 values or are nested brackets.
"""

from typing import Any

import json5

from plugboard.plugin.base import Singleton
from plugboard.plugin.errors import ConfigurationError

_OPENERS = {"{": "}", "[": "]"}
_CLOSERS = {"}", "]"}


def _split_top_level(text: str, separator: str, maxsplit: int = -1) -> list[str]:
    """
    Split on a separator that is not inside quotes or brackets.

    Raises:
        ConfigurationError: If quotes or brackets are unbalanced
    """
    parts = []
    stack: list[str] = []
    quote: str | None = None
    escaped = False
    start = 0

    for index, char in enumerate(text):
        if quote is not None:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == quote:
                quote = None
            continue

        if char in ("'", '"'):
            quote = char
        elif char in _OPENERS:
            stack.append(_OPENERS[char])
        elif char in _CLOSERS:
            if not stack or stack.pop() != char:
                raise ConfigurationError(f"Unbalanced '{char}' in {text!r}")
        elif char == separator and not stack and maxsplit != 0:
            parts.append(text[start:index])
            start = index + 1
            maxsplit -= 1

    if quote is not None:
        raise ConfigurationError(f"Unterminated string in {text!r}")
    if stack:
        raise ConfigurationError(f"Unclosed bracket in {text!r}")

    parts.append(text[start:])
    return parts


class JsonParser(Singleton):
    """
    Lenient JSON parser, registered as the "jsonparser" singleton plugin.

    Example:
        parser = board.jsonparser()
        parser.parse("size: 3, tags: [a, b]")   # {"size": 3, "tags": ["a", "b"]}
    """

    def parse(self, text: str) -> Any:
        """
        Parse a JSON or JSON-like string.

        Args:
            text: String to parse

        Returns:
            Parsed value ("undefined" parses to None)

        Raises:
            ConfigurationError: If the string is blank or malformed
        """
        if not isinstance(text, str):
            raise ConfigurationError(f"Expected a string, got {type(text).__name__}")

        if text == "undefined":
            return None

        try:
            return json5.loads(text)
        except ValueError:
            pass

        stripped = text.strip()
        if not stripped:
            raise ConfigurationError("Cannot parse an empty string")

        return self._parse_loose(stripped)

    def _parse_loose(self, text: str) -> Any:
        if text[0] in _OPENERS:
            if text[-1] != _OPENERS[text[0]]:
                raise ConfigurationError(f"Unclosed bracket in {text!r}")
            # validates balance of the whole token
            _split_top_level(text, ",")
            try:
                return json5.loads(text)
            except ValueError:
                pass
            if text[0] == "{":
                return self._parse_object(text[1:-1])
            return self._parse_array(text[1:-1])

        if len(_split_top_level(text, ":", maxsplit=1)) > 1:
            return self._parse_object(text)
        if len(_split_top_level(text, ",")) > 1:
            return self._parse_array(text)

        return self._parse_value(text)

    def _parse_object(self, body: str) -> dict[str, Any]:
        result = {}

        for pair in _split_top_level(body, ","):
            if not pair.strip():
                continue

            parts = _split_top_level(pair, ":", maxsplit=1)
            if len(parts) != 2:
                raise ConfigurationError(f"Expected 'key: value', got {pair.strip()!r}")

            key = self._unquote(parts[0].strip())
            result[key] = self._parse_value(parts[1].strip())

        return result

    def _parse_array(self, body: str) -> list[Any]:
        return [
            self._parse_value(item.strip())
            for item in _split_top_level(body, ",")
            if item.strip()
        ]

    def _parse_value(self, token: str) -> Any:
        if not token:
            return ""
        if token[0] in _OPENERS:
            return self._parse_loose(token)

        try:
            return json5.loads(token)
        except ValueError:
            return token

    def _unquote(self, token: str) -> str:
        if len(token) >= 2 and token[0] == token[-1] and token[0] in ("'", '"'):
            return token[1:-1]
        return token
