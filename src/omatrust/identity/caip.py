"""CAIP-2 chain ids and CAIP-10 account ids.

Formats:
- CAIP-2:  <namespace>:<reference>            e.g. eip155:1
- CAIP-10: <namespace>:<reference>:<address>  e.g. eip155:1:0xab16...
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from ..core.exceptions import InvalidDidError

CAIP10_PATTERN = re.compile(r"^(?P<namespace>[a-z0-9-]+):(?P<reference>[a-zA-Z0-9-]+):(?P<address>.+)$")
CAIP2_PATTERN = re.compile(r"^(?P<namespace>[a-z0-9-]+):(?P<reference>[a-zA-Z0-9-]+)$")


@dataclass(frozen=True)
class Caip10:
    """Parsed CAIP-10 account identifier."""

    namespace: str
    reference: str
    address: str

    def __str__(self) -> str:
        return f"{self.namespace}:{self.reference}:{self.address}"


@dataclass(frozen=True)
class Caip2:
    """Parsed CAIP-2 chain identifier."""

    namespace: str
    reference: str

    def __str__(self) -> str:
        return f"{self.namespace}:{self.reference}"


def _require(value: object, name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidDidError(f"{name} must be a non-empty string", field=name, value=value)
    return value.strip()


def parse_caip10(value: str) -> Caip10:
    """Parse a CAIP-10 account id.

    Raises:
        InvalidDidError: If the string is not namespace:reference:address
    """
    match = CAIP10_PATTERN.match(_require(value, "caip10"))
    if not match:
        raise InvalidDidError("Invalid CAIP-10 format", value=value)
    return Caip10(match["namespace"], match["reference"], match["address"])


def build_caip10(namespace: str, reference: str | int, address: str) -> str:
    return f"{_require(namespace, 'namespace')}:{_require(str(reference), 'reference')}:{_require(address, 'address')}"


def normalize_caip10(value: str) -> str:
    """Lowercase the namespace, and the address for EVM accounts."""
    parsed = parse_caip10(value)
    namespace = parsed.namespace.lower()
    address = parsed.address.lower() if namespace == "eip155" else parsed.address
    return build_caip10(namespace, parsed.reference, address)


def parse_caip2(value: str) -> Caip2:
    """Parse a CAIP-2 chain id such as ``eip155:8453``."""
    match = CAIP2_PATTERN.match(_require(value, "caip2"))
    if not match:
        raise InvalidDidError("Invalid CAIP-2 format", value=value)
    return Caip2(match["namespace"], match["reference"])


def build_caip2(namespace: str, reference: str | int) -> str:
    return f"{_require(namespace, 'namespace')}:{_require(str(reference), 'reference')}"
