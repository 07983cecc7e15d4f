"""A JSON object map with typed lookups and a stable content hash."""

from __future__ import annotations

import hashlib
import json
from typing import Any

_ESCAPES = (
    ("<", "\\u003c"),
    (">", "\\u003e"),
    ("&", "\\u0026"),
    ("\u2028", "\\u2028"),
    ("\u2029", "\\u2029"),
)


def _normalise(value: Any) -> Any:
    if isinstance(value, float) and value.is_integer() and abs(value) < 1e21:
        return int(value)
    if isinstance(value, dict):
        return {k: _normalise(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_normalise(v) for v in value]
    return value


def _encode(value: Any) -> str:
    text = json.dumps(
        _normalise(value),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    )
    for char, escaped in _ESCAPES:
        text = text.replace(char, escaped)
    return text


class Map(dict):
    """A decoded JSON object."""

    def get_map(self, k: str) -> "Map | None":
        """The object stored under ``k``, or None if it is missing or not an object."""
        value = self.get(k)
        if isinstance(value, Map):
            return value
        if isinstance(value, dict):
            nested = Map(value)
            self[k] = nested
            return nested
        return None

    def get_string(self, k: str) -> str:
        """The string stored under ``k``, or ``""`` if it is missing or not a string."""
        value = self.get(k)
        return value if isinstance(value, str) else ""

    def hash(self) -> str:
        """Hex SHA-256 of the canonical JSON encoding, with a trailing newline."""
        return hashlib.sha256((_encode(self) + "\n").encode("utf-8")).hexdigest()

    def marshal(self) -> bytes:
        """The canonical JSON encoding."""
        return _encode(self).encode("utf-8")


def parse(data: bytes | str) -> Map | None:
    """Decode a JSON object; empty input or ``null`` gives None."""
    if not data:
        return None
    obj = json.loads(data)
    if obj is None:
        return None
    if not isinstance(obj, dict):
        raise ValueError("JSON value is not an object")
    return Map(obj)