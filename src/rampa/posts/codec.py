"""JSON encoding of persisted collections."""

from __future__ import annotations

import json
from typing import Any

from rampa.core.errors import DecodeError


def encode(value: Any) -> str:
    """Serialize *value* for the key-value store."""
    return json.dumps(value, ensure_ascii=False)


def decode_list(key: str, raw: str) -> list[Any]:
    """Parse a stored JSON array.

    Raises DecodeError when *raw* is not valid JSON or not an array.
    """
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise DecodeError(key, f"invalid JSON: {e}") from e
    if not isinstance(data, list):
        raise DecodeError(key, f"expected a list, got {type(data).__name__}")
    return data
