"""Tests for omatrust.core.canonical."""

from __future__ import annotations

import pytest

from omatrust.core.canonical import canonical_json, canonical_json_str
from omatrust.core.exceptions import InvalidInputError


class TestCanonicalJson:
    """Canonical encoding must be byte-stable."""

    def test_sorted_keys_and_no_whitespace(self):
        assert canonical_json({"b": 1, "a": [1, 2]}) == b'{"a":[1,2],"b":1}'

    def test_key_order_does_not_matter(self):
        assert canonical_json({"x": 1, "y": 2}) == canonical_json({"y": 2, "x": 1})

    def test_nested_objects_sorted(self):
        assert canonical_json_str({"o": {"z": 0, "a": 0}}) == '{"o":{"a":0,"z":0}}'

    def test_utf8_not_escaped(self):
        assert canonical_json({"name": "café"}) == '{"name":"café"}'.encode("utf-8")

    def test_nan_rejected(self):
        with pytest.raises(InvalidInputError):
            canonical_json({"v": float("nan")})

    def test_unserializable_rejected(self):
        with pytest.raises(InvalidInputError):
            canonical_json({"v": object()})
