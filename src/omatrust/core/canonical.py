"""Canonical JSON encoding.

Keys sorted lexicographically, no insignificant whitespace, UTF-8 output.
Identical logical objects always encode to identical bytes, which is what
the amount seed and any other hashed JSON rely on.
"""

from __future__ import annotations

import json
from typing import Any

from .exceptions import InvalidInputError


def canonical_json(obj: Any) -> bytes:
    """Convert object to canonical JSON bytes.

    Raises:
        InvalidInputError: If the object holds values JSON cannot represent
            (NaN, infinities, non-string keys, arbitrary objects)
    """
    try:
        return json.dumps(
            obj,
            sort_keys=True,
            separators=(",", ":"),
            ensure_ascii=False,
            allow_nan=False,
        ).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"Object cannot be canonicalized: {e}") from e


def canonical_json_str(obj: Any) -> str:
    """Canonical JSON as text."""
    return canonical_json(obj).decode("utf-8")
