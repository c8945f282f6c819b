# SPDX-License-Identifier: MIT
# Copyright (c) 2026 OMATrust Contributors

"""Proof verification.

``verify_proof`` dispatches on the envelope's proof type. A proof that
fails a check comes back as an invalid result carrying a human-readable
reason; only unexpected faults (network errors, malformed objects,
unsupported chains) are raised, as ProofVerificationError.

Known gap: pop-jws proofs are checked for shape and expiry only. The JWS
signature itself is not verified.

Example:
    >>> context = VerificationContext(
    ...     provider=JsonRpcChainProvider("https://mainnet.base.org"),
    ...     expected_subject="did:pkh:eip155:8453:0xaaa...",
    ...     expected_controller="did:pkh:eip155:8453:0xbbb...",
    ... )
    >>> result = await verify_proof(proof, context)
    >>> if not result.valid:
    ...     print(result.reason)
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlparse

import aiohttp
from jwt.utils import base64url_decode
from eth_utils import to_checksum_address

from ..core.config import get_config
from ..core.exceptions import InvalidDidError, InvalidInputError, ProofVerificationError
from ..core.logging import verification_scope
from ..identity.did import IdentityResolver, default_resolver, normalize_did
from .amount import calculate_transfer_amount
from .did_document import WELL_KNOWN_DID_PATH, DidDocumentChecker, check_did_document_controller
from .dns_txt import parse_dns_txt_record
from .eip712 import get_omatrust_proof_eip712_types, verify_eip712_signature
from .models import (
    ProofEnvelope,
    ProofPurpose,
    ProofType,
    Transaction,
    VerificationContext,
    VerifyProofResult,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Verifier:
    """Collaborators shared by the per-type checks of one call."""

    context: VerificationContext
    resolver: IdentityResolver
    did_document_checker: DidDocumentChecker


def _result(proof: ProofEnvelope, valid: bool = True, reason: str | None = None) -> VerifyProofResult:
    return VerifyProofResult(valid=valid, proof_type=proof.type_name, reason=reason)


def _fail(proof: ProofEnvelope, reason: str) -> VerifyProofResult:
    return _result(proof, False, reason)


def parse_chain_id(value: Any) -> int:
    """Chain id from an int, a decimal string or a CAIP-2 ``namespace:id`` string."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str):
        reference = value.split(":")[1] if ":" in value else value
        try:
            return int(reference)
        except ValueError as e:
            raise InvalidInputError("Invalid chainId", field="chainId", value=value) from e
    raise InvalidInputError("Invalid chainId", field="chainId", value=value)


def get_proof_purpose(proof: ProofEnvelope) -> ProofPurpose:
    """Purpose used to derive the expected amount; anything but commercial-tx is shared-control."""
    if proof.proof_purpose == ProofPurpose.COMMERCIAL_TX:
        return ProofPurpose.COMMERCIAL_TX
    return ProofPurpose.SHARED_CONTROL


def _proof_fields(proof: ProofEnvelope) -> Mapping[str, Any]:
    if not isinstance(proof.proof_object, Mapping):
        raise InvalidInputError(f"{proof.type_name} proofObject must be an object", field="proofObject")
    return proof.proof_object


async def _fetch_transaction(verifier: _Verifier, tx_hash: Any) -> Transaction | None:
    tx = await verifier.context.provider.get_transaction(tx_hash)
    if tx is None or isinstance(tx, Transaction):
        return tx
    return Transaction.from_dict(tx)


# =============================================================================
# TRANSACTION PROOFS
# =============================================================================


async def _verify_tx_encoded_value(proof: ProofEnvelope, verifier: _Verifier) -> VerifyProofResult:
    context = verifier.context
    if context.provider is None:
        return _fail(proof, "Provider is required")
    if not context.expected_subject or not context.expected_controller:
        return _fail(proof, "expectedSubject and expectedController are required")

    fields = _proof_fields(proof)
    chain_id = parse_chain_id(fields.get("chainId"))
    tx = await _fetch_transaction(verifier, fields.get("txHash"))
    if tx is None:
        return _fail(proof, "Transaction not found")

    expected_amount = calculate_transfer_amount(
        context.expected_subject,
        context.expected_controller,
        chain_id,
        get_proof_purpose(proof),
        resolver=verifier.resolver,
    )
    subject_address = to_checksum_address(verifier.resolver.to_address(context.expected_subject))
    controller_address = to_checksum_address(verifier.resolver.to_address(context.expected_controller))

    # Providers may omit either side; only present fields are compared
    if tx.from_address and to_checksum_address(tx.from_address) != subject_address:
        return _fail(proof, "Transaction sender mismatch")
    if tx.to_address and to_checksum_address(tx.to_address) != controller_address:
        return _fail(proof, "Transaction recipient mismatch")
    if tx.value != expected_amount:
        return _fail(proof, "Transaction amount mismatch")

    return _result(proof)


async def _verify_tx_interaction(proof: ProofEnvelope, verifier: _Verifier) -> VerifyProofResult:
    if verifier.context.provider is None:
        return _fail(proof, "Provider is required")

    fields = _proof_fields(proof)
    tx = await _fetch_transaction(verifier, fields.get("txHash"))
    if tx is None:
        return _fail(proof, "Transaction not found")
    if not tx.to_address:
        return _fail(proof, "Transaction target missing")

    return _result(proof)


# =============================================================================
# PROOF OF POSSESSION
# =============================================================================


async def _verify_pop_eip712(proof: ProofEnvelope, verifier: _Verifier) -> VerifyProofResult:
    fields = _proof_fields(proof)
    message = fields.get("message")
    primary_type, types = get_omatrust_proof_eip712_types()
    typed_data = {
        "domain": fields.get("domain"),
        "types": types,
        "primaryType": primary_type,
        "message": message,
    }

    valid, signer = verify_eip712_signature(typed_data, fields.get("signature"))
    if not valid or not signer:
        return _fail(proof, "Invalid EIP-712 signature")

    claimed_signer = message.get("signer")
    if isinstance(claimed_signer, str) and to_checksum_address(signer) != to_checksum_address(claimed_signer):
        return _fail(proof, "Recovered signer mismatch")

    return _result(proof)


def decode_jws_payload(compact_jws: str) -> dict[str, Any]:
    """Decode the payload segment of a compact JWS without checking the signature.

    Raises:
        InvalidInputError: If the token is not three segments or the payload
            is not a base64url JSON object
    """
    parts = compact_jws.split(".")
    if len(parts) != 3:
        raise InvalidInputError("Invalid compact JWS format")
    # Header and signature are not inspected
    try:
        payload = json.loads(base64url_decode(parts[1]))
    except ValueError as e:
        raise InvalidInputError("Invalid compact JWS format") from e
    if not isinstance(payload, dict):
        raise InvalidInputError("Invalid compact JWS format")
    return payload


async def _verify_pop_jws(proof: ProofEnvelope, verifier: _Verifier) -> VerifyProofResult:
    if not isinstance(proof.proof_object, str):
        return _fail(proof, "Invalid JWS proof payload")

    try:
        payload = decode_jws_payload(proof.proof_object)
    except InvalidInputError as e:
        return _fail(proof, e.message)

    exp = payload.get("exp")
    if isinstance(exp, (int, float)) and not isinstance(exp, bool) and exp < int(time.time()):
        return _fail(proof, "JWS proof expired")

    return _result(proof)


# =============================================================================
# PAYMENT AND EVIDENCE
# =============================================================================


async def _verify_x402(proof: ProofEnvelope, verifier: _Verifier) -> VerifyProofResult:
    if not isinstance(proof.proof_object, Mapping):
        return _fail(proof, "Invalid x402 proof object")
    return _result(proof)


def _controller_named_in_record(body: str, expected_controller: str) -> bool:
    controller = parse_dns_txt_record(body).controller
    if not controller:
        return False
    try:
        return normalize_did(controller) == normalize_did(expected_controller)
    except InvalidDidError:
        return False


async def _verify_evidence_pointer(proof: ProofEnvelope, verifier: _Verifier) -> VerifyProofResult:
    url = proof.proof_object.get("url") if isinstance(proof.proof_object, Mapping) else None
    if not url:
        return _fail(proof, "Missing evidence URL")

    expected_controller = verifier.context.expected_controller
    timeout = aiohttp.ClientTimeout(total=get_config().http_timeout_seconds)

    async with aiohttp.ClientSession() as session:
        async with session.get(url, timeout=timeout) as response:
            if not 200 <= response.status < 300:
                logger.debug(f"Evidence fetch for {url} returned {response.status}")
                return _fail(proof, f"Evidence fetch failed ({response.status})")
            body = await response.text()

    if urlparse(url).path.endswith(WELL_KNOWN_DID_PATH) and expected_controller:
        check = verifier.did_document_checker(json.loads(body), expected_controller)
        return _result(proof, check.valid, check.reason)

    if expected_controller and not _controller_named_in_record(body, expected_controller):
        return _fail(proof, "Evidence does not include expected controller DID")

    return _result(proof)


# =============================================================================
# DISPATCH
# =============================================================================


ProofHandler = Callable[[ProofEnvelope, _Verifier], Awaitable[VerifyProofResult]]

_HANDLERS: dict[ProofType, ProofHandler] = {
    ProofType.TX_ENCODED_VALUE: _verify_tx_encoded_value,
    ProofType.TX_INTERACTION: _verify_tx_interaction,
    ProofType.POP_EIP712: _verify_pop_eip712,
    ProofType.POP_JWS: _verify_pop_jws,
    ProofType.X402_RECEIPT: _verify_x402,
    ProofType.X402_OFFER: _verify_x402,
    ProofType.EVIDENCE_POINTER: _verify_evidence_pointer,
}

_missing_handlers = set(ProofType) - set(_HANDLERS)
if _missing_handlers:
    raise RuntimeError(f"No verifier registered for proof types: {sorted(t.value for t in _missing_handlers)}")


async def verify_proof(
    proof: ProofEnvelope | Mapping[str, Any],
    context: VerificationContext | None = None,
    *,
    resolver: IdentityResolver | None = None,
    did_document_checker: DidDocumentChecker | None = None,
) -> VerifyProofResult:
    """Verify one proof against the evidence it points at.

    Args:
        proof: Envelope, or its wire-form mapping
        context: Chain provider and the identities the proof should bind
        resolver: Identity resolver for digests and addresses
        did_document_checker: Controller check applied to fetched did.json
            documents

    Returns:
        VerifyProofResult; ``reason`` is set whenever ``valid`` is False

    Raises:
        InvalidInputError: If a mapping has no proofType
        ProofVerificationError: If verification fails unexpectedly
    """
    if not isinstance(proof, ProofEnvelope):
        proof = ProofEnvelope.from_dict(proof)

    handler = _HANDLERS.get(proof.proof_type) if isinstance(proof.proof_type, ProofType) else None
    if handler is None:
        return _fail(proof, "Unsupported proof type")

    verifier = _Verifier(
        context=context or VerificationContext(),
        resolver=resolver or default_resolver,
        did_document_checker=did_document_checker or check_did_document_controller,
    )

    with verification_scope(proof_type=proof.type_name):
        try:
            result = await handler(proof, verifier)
        except ProofVerificationError:
            raise
        except Exception as e:  # Intentionally broad: any fault while checking is reported uniformly
            logger.warning(f"Verification of {proof.type_name} proof raised {type(e).__name__}: {e}")
            raise ProofVerificationError("Proof verification failed", proof_type=proof.type_name, cause=e) from e

        logger.debug(f"{proof.type_name} proof verified: valid={result.valid} reason={result.reason}")
        return result
