# SPDX-License-Identifier: MIT
# Copyright (c) 2026 OMATrust Contributors

"""Proof creation.

Every creator validates its input first and only then builds the proof
envelope. The two proof-of-possession creators hand the prepared payload
to a caller-supplied async signing callback; key material never passes
through this module, and malformed input never reaches the callback.

Example:
    >>> proof = create_tx_encoded_value_proof(8453, tx_hash, ProofPurpose.SHARED_CONTROL)
    >>> attestation_data["proofs"] = [proof.to_json()]
"""

from __future__ import annotations

import logging
import secrets
import time
import uuid
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any

from ..core.config import get_config
from ..core.exceptions import InvalidInputError
from ..identity.caip import build_caip2
from .eip712 import (
    OMATRUST_PROOF_DOMAIN_NAME,
    OMATRUST_PROOF_DOMAIN_VERSION,
    build_eip712_domain,
    get_omatrust_proof_eip712_types,
)
from .models import (
    PROOF_VERSION,
    ProofEnvelope,
    ProofPurpose,
    ProofType,
    parse_proof_purpose,
    validate_tx_hash,
)

logger = logging.getLogger(__name__)

DEFAULT_EIP712_STATEMENT = "This is not a transaction or asset approval."

JWS_HEADER = {"typ": "JWT", "alg": "ES256K"}

# Signing capabilities supplied by the caller
Eip712SignFn = Callable[[dict[str, Any]], Awaitable[str]]
JwsSignFn = Callable[[dict[str, Any], dict[str, Any]], Awaitable[str]]


def _now() -> int:
    return int(time.time())


def _require_str(value: Any, name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidInputError(f"{name} must be a non-empty string", field=name, value=value)
    return value


def _require_int(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInputError(f"{name} must be an integer", field=name, value=value)
    return value


# =============================================================================
# TRANSACTION PROOFS
# =============================================================================


def create_tx_encoded_value_proof(
    chain_id: int,
    tx_hash: str,
    purpose: ProofPurpose | str,
) -> ProofEnvelope:
    """Proof that a transfer of the derived amount happened on ``chain_id``."""
    validate_tx_hash(tx_hash)
    _require_int(chain_id, "chainId")
    return ProofEnvelope(
        proof_type=ProofType.TX_ENCODED_VALUE,
        proof_purpose=parse_proof_purpose(purpose),
        proof_object={"chainId": build_caip2("eip155", chain_id), "txHash": tx_hash},
        version=PROOF_VERSION,
        issued_at=_now(),
    )


def create_tx_interaction_proof(chain_id: int, tx_hash: str) -> ProofEnvelope:
    """Proof that the subject interacted with a contract or account on-chain."""
    validate_tx_hash(tx_hash)
    _require_int(chain_id, "chainId")
    return ProofEnvelope(
        proof_type=ProofType.TX_INTERACTION,
        proof_purpose=ProofPurpose.COMMERCIAL_TX,
        proof_object={"chainId": build_caip2("eip155", chain_id), "txHash": tx_hash},
        version=PROOF_VERSION,
        issued_at=_now(),
    )


# =============================================================================
# PROOF OF POSSESSION
# =============================================================================


@dataclass
class Eip712ProofParams:
    """Inputs for a pop-eip712 proof."""

    signer: str
    authorized_entity: str
    signing_purpose: ProofPurpose | str
    chain_id: int
    creation_timestamp: int | None = None
    expiration_timestamp: int | None = None
    random_value: str | None = None
    statement: str | None = None


async def create_pop_eip712_proof(params: Eip712ProofParams, sign_fn: Eip712SignFn) -> ProofEnvelope:
    """Build OMATrust typed data, have the caller sign it, and wrap the result.

    Args:
        params: Message inputs; timestamps and random value default sensibly
        sign_fn: Async callback receiving the typed data and returning the
            signature as hex

    Raises:
        InvalidInputError: If a required field is missing (before signing)
    """
    _require_str(params.signer, "signer")
    _require_str(params.authorized_entity, "authorizedEntity")
    _require_int(params.chain_id, "chainId")
    purpose = parse_proof_purpose(params.signing_purpose)

    creation_timestamp = params.creation_timestamp if params.creation_timestamp is not None else _now()
    expiration_timestamp = (
        params.expiration_timestamp
        if params.expiration_timestamp is not None
        else creation_timestamp + get_config().proof_validity_seconds
    )
    random_value = params.random_value or "0x" + secrets.token_bytes(32).hex()

    message = {
        "signer": params.signer,
        "authorizedEntity": params.authorized_entity,
        "signingPurpose": purpose.value,
        "creationTimestamp": creation_timestamp,
        "expirationTimestamp": expiration_timestamp,
        "randomValue": random_value,
        "statement": params.statement if params.statement is not None else DEFAULT_EIP712_STATEMENT,
    }

    primary_type, types = get_omatrust_proof_eip712_types()
    domain = build_eip712_domain(OMATRUST_PROOF_DOMAIN_NAME, OMATRUST_PROOF_DOMAIN_VERSION, params.chain_id)
    typed_data = {
        "domain": domain,
        "types": types,
        "primaryType": primary_type,
        "message": message,
    }

    signature = await sign_fn(typed_data)
    _require_str(signature, "signature")
    logger.debug(f"Created pop-eip712 proof for signer {params.signer}")

    return ProofEnvelope(
        proof_type=ProofType.POP_EIP712,
        proof_object={"domain": domain, "message": message, "signature": signature},
        version=PROOF_VERSION,
        issued_at=creation_timestamp,
        expires_at=expiration_timestamp,
    )


@dataclass
class JwsProofParams:
    """Inputs for a pop-jws proof."""

    issuer: str
    audience: str
    purpose: ProofPurpose | str
    issued_at: int | None = None
    expires_at: int | None = None
    nonce: str | None = None


async def create_pop_jws_proof(params: JwsProofParams, sign_fn: JwsSignFn) -> ProofEnvelope:
    """Build a JWT payload, have the caller sign it as compact JWS, and wrap it.

    Args:
        params: Issuer and audience DIDs plus optional timing and nonce
        sign_fn: Async callback receiving (payload, header) and returning
            the compact token

    Raises:
        InvalidInputError: If issuer or audience is missing (before signing)
    """
    _require_str(params.issuer, "issuer")
    _require_str(params.audience, "audience")
    purpose = parse_proof_purpose(params.purpose)

    issued_at = params.issued_at if params.issued_at is not None else _now()
    expires_at = params.expires_at if params.expires_at is not None else issued_at + get_config().proof_validity_seconds

    payload = {
        "iss": params.issuer,
        "aud": params.audience,
        "purpose": purpose.value,
        "iat": issued_at,
        "exp": expires_at,
        "nonce": params.nonce or str(uuid.uuid4()),
    }

    token = await sign_fn(payload, dict(JWS_HEADER))
    _require_str(token, "jws")

    return ProofEnvelope(
        proof_type=ProofType.POP_JWS,
        proof_object=token,
        proof_purpose=purpose,
        version=PROOF_VERSION,
        issued_at=issued_at,
        expires_at=expires_at,
    )


# =============================================================================
# OFF-CHAIN EVIDENCE
# =============================================================================


def create_evidence_pointer_proof(url: str) -> ProofEnvelope:
    """Proof pointing at a document (did.json, TXT-style record) that names the controller."""
    _require_str(url, "url")
    return ProofEnvelope(
        proof_type=ProofType.EVIDENCE_POINTER,
        proof_purpose=ProofPurpose.SHARED_CONTROL,
        proof_object={"url": url},
        version=PROOF_VERSION,
        issued_at=_now(),
    )


def _x402_proof(proof_type: ProofType, obj: Any, name: str) -> ProofEnvelope:
    if not isinstance(obj, Mapping) or not obj:
        raise InvalidInputError(f"{name} must be a non-empty object", field=name)
    return ProofEnvelope(
        proof_type=proof_type,
        proof_purpose=ProofPurpose.COMMERCIAL_TX,
        proof_object=dict(obj),
        version=PROOF_VERSION,
        issued_at=_now(),
    )


def create_x402_receipt_proof(receipt: Mapping[str, Any]) -> ProofEnvelope:
    return _x402_proof(ProofType.X402_RECEIPT, receipt, "receipt")


def create_x402_offer_proof(offer: Mapping[str, Any]) -> ProofEnvelope:
    return _x402_proof(ProofType.X402_OFFER, offer, "offer")
