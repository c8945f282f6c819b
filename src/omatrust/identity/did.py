"""Decentralized identifiers used by OMATrust.

Supported methods:
- did:web:<domain>[/<path>]                      host lowercased, trailing dot dropped
- did:pkh:<namespace>:<chainId>:<address>        namespace and address lowercased
- did:handle:<platform>:<username>               platform lowercased
- did:key:<multibase>                            kept verbatim

Bare domains normalize to did:web. The identity digest of a DID is the
keccak-256 of its normalized form; its "DID address" is the low 160 bits
of that digest.
"""

from __future__ import annotations

import re
from typing import Protocol, runtime_checkable

from eth_utils import is_address, keccak, to_checksum_address

from ..core.exceptions import InvalidDidError
from .caip import parse_caip10

DID_PATTERN = re.compile(r"^did:([a-z0-9]+):(.+)$", re.IGNORECASE)
HEX32_PATTERN = re.compile(r"^0x[0-9a-fA-F]{64}$")
EVM_CAIP10_PATTERN = re.compile(r"^[a-z0-9-]+:[a-zA-Z0-9-]+:0x[a-fA-F0-9]{40}$")


def _require(value: object, name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidDidError(f"{name} must be a non-empty string", field=name, value=value)
    return value.strip()


def is_valid_did(did: str) -> bool:
    return bool(DID_PATTERN.match(did))


def extract_did_method(did: str) -> str | None:
    match = DID_PATTERN.match(did)
    return match.group(1) if match else None


def extract_did_identifier(did: str) -> str | None:
    match = DID_PATTERN.match(did)
    return match.group(2) if match else None


# =============================================================================
# NORMALIZATION
# =============================================================================


def normalize_domain(domain: str) -> str:
    return _require(domain, "domain").lower().rstrip(".")


def normalize_did_web(value: str) -> str:
    """Normalize a did:web DID, or a bare domain, to did:web form."""
    trimmed = _require(value, "did")
    if trimmed.startswith("did:") and not trimmed.startswith("did:web:"):
        raise InvalidDidError("Expected did:web DID", value=value)

    identifier = trimmed[len("did:web:"):] if trimmed.startswith("did:web:") else trimmed
    host, _, path = identifier.partition("/")
    if not host:
        raise InvalidDidError("Invalid did:web identifier", value=value)

    suffix = f"/{path}" if path else ""
    return f"did:web:{normalize_domain(host)}{suffix}"


def normalize_did_pkh(value: str) -> str:
    trimmed = _require(value, "did")
    if not trimmed.startswith("did:pkh:"):
        raise InvalidDidError("Expected did:pkh DID", value=value)

    parts = trimmed.split(":")
    if len(parts) != 5 or not all(parts[2:]):
        raise InvalidDidError("Invalid did:pkh format", value=value)

    _, _, namespace, chain_id, address = parts
    return f"did:pkh:{namespace.lower()}:{chain_id}:{address.lower()}"


def normalize_did_handle(value: str) -> str:
    trimmed = _require(value, "did")
    if not trimmed.startswith("did:handle:"):
        raise InvalidDidError("Expected did:handle DID", value=value)

    parts = trimmed.split(":")
    if len(parts) != 4 or not all(parts[2:]):
        raise InvalidDidError("Invalid did:handle format", value=value)

    _, _, platform, username = parts
    return f"did:handle:{platform.lower()}:{username}"


def normalize_did(value: str) -> str:
    """Normalize a DID so equal identities compare and hash identically.

    Raises:
        InvalidDidError: If the value is empty or not a well-formed DID
    """
    trimmed = _require(value, "did")

    if not trimmed.startswith("did:"):
        return normalize_did_web(trimmed)

    if not is_valid_did(trimmed):
        raise InvalidDidError("Invalid DID format", value=value)

    method = extract_did_method(trimmed)
    if method == "web":
        return normalize_did_web(trimmed)
    if method == "pkh":
        return normalize_did_pkh(trimmed)
    if method == "handle":
        return normalize_did_handle(trimmed)
    return trimmed


# =============================================================================
# HASHING
# =============================================================================


def compute_did_hash(did: str) -> str:
    """Identity digest: 0x-prefixed keccak-256 of the normalized DID."""
    return "0x" + keccak(text=normalize_did(did)).hex()


def compute_did_address(did_hash: str) -> str:
    """Low-order 160 bits of a DID hash, as lowercase 0x-hex."""
    _require(did_hash, "did_hash")
    if not HEX32_PATTERN.match(did_hash):
        raise InvalidDidError("didHash must be 32-byte hex", value=did_hash)
    return "0x" + did_hash[-40:].lower()


def did_to_address(did: str) -> str:
    return compute_did_address(compute_did_hash(did))


def validate_did_address(did: str, address: str) -> bool:
    try:
        return did_to_address(did) == str(address).lower()
    except InvalidDidError:
        return False


# =============================================================================
# CONSTRUCTION AND INSPECTION
# =============================================================================


def build_did_web(domain: str) -> str:
    return f"did:web:{normalize_domain(domain)}"


def build_did_pkh(namespace: str, chain_id: str | int, address: str) -> str:
    _require(namespace, "namespace")
    _require(address, "address")
    if chain_id is None or str(chain_id) == "":
        raise InvalidDidError("chainId is required", field="chain_id")
    return f"did:pkh:{namespace.lower()}:{chain_id}:{address.lower()}"


def build_evm_did_pkh(chain_id: str | int, address: str) -> str:
    return build_did_pkh("eip155", chain_id, address)


def build_did_pkh_from_caip10(caip10: str) -> str:
    parsed = parse_caip10(caip10)
    return build_did_pkh(parsed.namespace, parsed.reference, parsed.address)


def _split_did_pkh(did: str) -> tuple[str, str, str] | None:
    if not did.startswith("did:pkh:"):
        return None
    parts = did.split(":")
    if len(parts) != 5 or not all(parts[2:]):
        return None
    return parts[2], parts[3], parts[4]


def get_chain_id_from_did_pkh(did: str) -> str | None:
    parts = _split_did_pkh(did)
    return parts[1] if parts else None


def get_address_from_did_pkh(did: str) -> str | None:
    parts = _split_did_pkh(did)
    return parts[2] if parts else None


def is_evm_did_pkh(did: str) -> bool:
    parts = _split_did_pkh(did)
    return bool(parts) and parts[0] == "eip155"


def get_domain_from_did_web(did: str) -> str | None:
    if not did.startswith("did:web:"):
        return None
    domain = did[len("did:web:"):].split("/", 1)[0]
    return domain or None


def extract_address_from_did(identifier: str) -> str:
    """Extract the account address an identifier points at.

    Accepts did:pkh, did:ethr (with or without a network segment),
    CAIP-10 account ids and bare EVM addresses.

    Raises:
        InvalidDidError: If no address can be extracted
    """
    identifier = _require(identifier, "identifier")

    if identifier.startswith("did:pkh:"):
        parts = _split_did_pkh(normalize_did_pkh(identifier))
        if not parts:
            raise InvalidDidError("Invalid did:pkh identifier", value=identifier)
        return parts[2]

    if identifier.startswith("did:ethr:"):
        parts = identifier[len("did:ethr:"):].split(":")
        address = parts[0] if len(parts) == 1 else parts[1]
        if not address or not is_address(address):
            raise InvalidDidError("Invalid did:ethr identifier", value=identifier)
        return to_checksum_address(address)

    if EVM_CAIP10_PATTERN.match(identifier):
        return parse_caip10(identifier).address

    if is_address(identifier):
        return to_checksum_address(identifier)

    raise InvalidDidError("Unsupported identifier format", value=identifier)


# =============================================================================
# RESOLVER CAPABILITY
# =============================================================================


@runtime_checkable
class IdentityResolver(Protocol):
    """Turns DIDs into the normalized form, an account address and a digest."""

    def normalize(self, did: str) -> str:
        ...

    def to_address(self, did: str) -> str:
        ...

    def to_digest(self, did: str) -> str:
        ...


class DefaultIdentityResolver:
    """Identity resolver backed by the helpers in this module."""

    def normalize(self, did: str) -> str:
        return normalize_did(did)

    def to_address(self, did: str) -> str:
        return extract_address_from_did(did)

    def to_digest(self, did: str) -> str:
        return compute_did_hash(did)


default_resolver = DefaultIdentityResolver()
