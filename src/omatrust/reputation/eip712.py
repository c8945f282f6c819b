"""EIP-712 typed data for OMATrust proof-of-possession signatures.

Signing is never done here: callers hand typed data to their own wallet.
This module only fixes the type schema, encodes typed data for
``eth-account`` and recovers the signer address from a signature.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping
from typing import Any

from eth_account import Account
from eth_account.messages import SignableMessage, encode_typed_data
from eth_utils import to_bytes

from ..core.exceptions import InvalidInputError

logger = logging.getLogger(__name__)

OMATRUST_PROOF_PRIMARY_TYPE = "OmaTrustProof"

OMATRUST_PROOF_FIELDS: tuple[tuple[str, str], ...] = (
    ("signer", "address"),
    ("authorizedEntity", "string"),
    ("signingPurpose", "string"),
    ("creationTimestamp", "uint256"),
    ("expirationTimestamp", "uint256"),
    ("randomValue", "bytes32"),
    ("statement", "string"),
)

OMATRUST_PROOF_DOMAIN_NAME = "OMATrust Proof"
OMATRUST_PROOF_DOMAIN_VERSION = "1"


def get_omatrust_proof_eip712_types() -> tuple[str, dict[str, list[dict[str, str]]]]:
    """Primary type name and type schema for OMATrust proofs.

    A fresh copy is returned each call so callers cannot alter the schema.
    """
    return OMATRUST_PROOF_PRIMARY_TYPE, {
        OMATRUST_PROOF_PRIMARY_TYPE: [{"name": name, "type": type_} for name, type_ in OMATRUST_PROOF_FIELDS],
    }


def build_eip712_domain(
    name: str,
    version: str,
    chain_id: int,
    verifying_contract: str | None = None,
) -> dict[str, Any]:
    domain: dict[str, Any] = {"name": name, "version": version, "chainId": chain_id}
    if verifying_contract:
        domain["verifyingContract"] = verifying_contract
    return domain


def _bytes_fields(types: Mapping[str, Any], primary_type: str) -> set[str]:
    return {
        item["name"]
        for item in types.get(primary_type, [])
        if str(item.get("type", "")).startswith("bytes")
    }


def encode_typed_data_message(typed_data: Mapping[str, Any]) -> SignableMessage:
    """Encode ``{domain, types, message[, primaryType]}`` for signing or recovery.

    Hex strings in ``bytes``/``bytesN`` fields are converted to raw bytes,
    since that is how they travel in JSON.

    Raises:
        InvalidInputError: If the typed data is incomplete or cannot be encoded
    """
    domain = typed_data.get("domain")
    types = typed_data.get("types")
    message = typed_data.get("message")
    if not isinstance(domain, Mapping) or not isinstance(types, Mapping) or not isinstance(message, Mapping):
        raise InvalidInputError("typed data requires domain, types and message objects")

    message_types = {name: list(fields) for name, fields in types.items() if name != "EIP712Domain"}
    primary_type = typed_data.get("primaryType") or next(iter(message_types), None)
    if primary_type is None:
        raise InvalidInputError("typed data declares no types")

    message_data = copy.deepcopy(dict(message))
    for name in _bytes_fields(message_types, primary_type):
        value = message_data.get(name)
        if isinstance(value, str):
            try:
                message_data[name] = to_bytes(hexstr=value)
            except ValueError as e:
                raise InvalidInputError(f"{name} is not hex", field=name, value=value) from e

    try:
        return encode_typed_data(
            domain_data=dict(domain),
            message_types=message_types,
            message_data=message_data,
        )
    except Exception as e:  # Intentionally broad: eth-account raises many error types for bad input
        raise InvalidInputError(f"Typed data cannot be encoded: {e}") from e


def recover_typed_data_signer(typed_data: Mapping[str, Any], signature: str | bytes) -> str:
    """Recover the checksummed address that produced ``signature``.

    Raises:
        InvalidInputError: If the data cannot be encoded or the signature
            cannot be recovered
    """
    signable = encode_typed_data_message(typed_data)
    try:
        return Account.recover_message(signable, signature=signature)
    except Exception as e:  # Intentionally broad: malformed signatures raise from several layers
        raise InvalidInputError(f"Failed to verify EIP-712 signature: {e}") from e


def verify_eip712_signature(typed_data: Mapping[str, Any], signature: str | bytes) -> tuple[bool, str | None]:
    """Returns (valid, recovered signer). Never raises for bad signatures."""
    try:
        signer = recover_typed_data_signer(typed_data, signature)
    except InvalidInputError as e:
        logger.debug(f"EIP-712 recovery failed: {e.message}")
        return False, None
    return True, signer
