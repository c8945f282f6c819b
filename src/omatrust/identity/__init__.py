"""OMATrust identity helpers - DID normalization, hashing and address extraction."""

from .caip import (
    Caip2,
    Caip10,
    build_caip2,
    build_caip10,
    normalize_caip10,
    parse_caip2,
    parse_caip10,
)
from .did import (
    DefaultIdentityResolver,
    IdentityResolver,
    build_did_pkh,
    build_did_web,
    build_evm_did_pkh,
    compute_did_address,
    compute_did_hash,
    default_resolver,
    did_to_address,
    extract_address_from_did,
    get_domain_from_did_web,
    is_valid_did,
    normalize_did,
)

__all__ = [
    "Caip2",
    "Caip10",
    "build_caip2",
    "build_caip10",
    "normalize_caip10",
    "parse_caip2",
    "parse_caip10",
    "DefaultIdentityResolver",
    "IdentityResolver",
    "build_did_pkh",
    "build_did_web",
    "build_evm_did_pkh",
    "compute_did_address",
    "compute_did_hash",
    "default_resolver",
    "did_to_address",
    "extract_address_from_did",
    "get_domain_from_did_web",
    "is_valid_did",
    "normalize_did",
]
