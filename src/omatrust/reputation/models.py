# SPDX-License-Identifier: MIT
# Copyright (c) 2026 OMATrust Contributors

"""Data models for OMATrust reputation proofs.

A proof is carried in an envelope whose ``proofType`` selects one of seven
variants, each with its own ``proofObject`` shape:

    tx-encoded-value   {chainId, txHash}            purpose chosen by the caller
    tx-interaction     {chainId, txHash}            commercial-tx
    pop-eip712         {domain, message, signature}
    pop-jws            compact JWS string
    x402-receipt       payment receipt mapping      commercial-tx
    x402-offer         payment offer mapping        commercial-tx
    evidence-pointer   {url}                        shared-control

Envelopes round-trip through the camelCase wire form that is embedded in
attestation payloads.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol, runtime_checkable

from ..core.exceptions import InvalidInputError

PROOF_VERSION = 1

TX_HASH_PATTERN = re.compile(r"^0x[0-9a-fA-F]{64}$")

ZERO_UID = "0x" + "0" * 64


# =============================================================================
# ENUMS
# =============================================================================


class ProofType(str, Enum):
    """Kinds of evidence a proof envelope can carry."""

    TX_ENCODED_VALUE = "tx-encoded-value"
    TX_INTERACTION = "tx-interaction"
    POP_EIP712 = "pop-eip712"
    POP_JWS = "pop-jws"
    X402_RECEIPT = "x402-receipt"
    X402_OFFER = "x402-offer"
    EVIDENCE_POINTER = "evidence-pointer"


class ProofPurpose(str, Enum):
    """Claim category a proof supports."""

    SHARED_CONTROL = "shared-control"
    COMMERCIAL_TX = "commercial-tx"


def is_supported_proof_type(value: Any) -> bool:
    return isinstance(value, str) and value in ProofType._value2member_map_


def coerce_proof_type(value: str) -> ProofType | str:
    """Known types become ProofType members; unknown strings are kept as-is."""
    if is_supported_proof_type(value):
        return ProofType(value)
    return value


def coerce_proof_purpose(value: Any) -> ProofPurpose | str | None:
    if value is None:
        return None
    if isinstance(value, str) and value in ProofPurpose._value2member_map_:
        return ProofPurpose(value)
    return value


def parse_proof_purpose(value: Any) -> ProofPurpose:
    """Strict conversion used where a purpose is required.

    Raises:
        InvalidInputError: If the value names no known purpose
    """
    try:
        return ProofPurpose(value)
    except ValueError as e:
        raise InvalidInputError("Unknown proof purpose", field="proofPurpose", value=value) from e


def validate_tx_hash(tx_hash: Any) -> str:
    """Ensure a transaction hash is 0x-prefixed 32-byte hex.

    Raises:
        InvalidInputError: If the hash has any other shape
    """
    if not isinstance(tx_hash, str) or not TX_HASH_PATTERN.match(tx_hash):
        raise InvalidInputError("txHash must be a 32-byte hex string", field="txHash", value=tx_hash)
    return tx_hash


def _wire_value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


# =============================================================================
# PROOF ENVELOPE
# =============================================================================


@dataclass(frozen=True)
class ProofEnvelope:
    """Immutable wrapper around one piece of evidence."""

    proof_type: ProofType | str
    proof_object: Any
    proof_purpose: ProofPurpose | str | None = None
    version: int = PROOF_VERSION
    issued_at: int | None = None
    expires_at: int | None = None

    @property
    def type_name(self) -> str:
        """The proof type as it appears on the wire."""
        return _wire_value(self.proof_type)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the camelCase wire form."""
        data: dict[str, Any] = {
            "proofType": self.type_name,
            "proofObject": self.proof_object,
            "version": self.version,
        }
        if self.proof_purpose is not None:
            data["proofPurpose"] = _wire_value(self.proof_purpose)
        if self.issued_at is not None:
            data["issuedAt"] = self.issued_at
        if self.expires_at is not None:
            data["expiresAt"] = self.expires_at
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), separators=(",", ":"))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ProofEnvelope:
        """Create from the wire form.

        Raises:
            InvalidInputError: If data is not an object, or proofType is missing
                or not a string
        """
        if not isinstance(data, Mapping):
            raise InvalidInputError("proof must be an object", field="proof")
        proof_type = data.get("proofType")
        if not isinstance(proof_type, str) or not proof_type:
            raise InvalidInputError("proofType is required", field="proofType", value=proof_type)

        return cls(
            proof_type=coerce_proof_type(proof_type),
            proof_object=data.get("proofObject"),
            proof_purpose=coerce_proof_purpose(data.get("proofPurpose")),
            version=data.get("version", PROOF_VERSION),
            issued_at=data.get("issuedAt"),
            expires_at=data.get("expiresAt"),
        )


# =============================================================================
# CHAIN PROVIDER
# =============================================================================


def _parse_quantity(value: Any) -> int:
    if isinstance(value, bool):
        raise InvalidInputError("Transaction value must be an integer", field="value", value=value)
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text, 16) if text.lower().startswith("0x") else int(text)
        except ValueError as e:
            raise InvalidInputError("Transaction value must be an integer", field="value", value=value) from e
    raise InvalidInputError("Transaction value must be an integer", field="value", value=value)


@dataclass(frozen=True)
class Transaction:
    """The parts of an on-chain transaction that proofs are checked against."""

    from_address: str | None
    to_address: str | None
    value: int = 0
    hash: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Transaction:
        """Create from an RPC-style mapping with ``from``/``to``/``value`` keys."""
        return cls(
            from_address=data.get("from") or data.get("from_address"),
            to_address=data.get("to") or data.get("to_address"),
            value=_parse_quantity(data.get("value", 0)),
            hash=data.get("hash"),
        )


@runtime_checkable
class ChainProvider(Protocol):
    """Read access to a chain's transactions."""

    async def get_transaction(self, tx_hash: str) -> Transaction | Mapping[str, Any] | None:
        ...


# =============================================================================
# VERIFICATION
# =============================================================================


@dataclass(frozen=True)
class VerificationContext:
    """Per-call inputs for proof verification."""

    provider: ChainProvider | None = None
    expected_subject: str | None = None
    expected_controller: str | None = None


@dataclass
class VerifyProofResult:
    """Outcome of checking one proof."""

    valid: bool
    proof_type: str
    reason: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"valid": self.valid, "proofType": self.proof_type}
        if self.reason is not None:
            data["reason"] = self.reason
        return data


@dataclass
class VerifyAttestationResult:
    """Folded outcome of every check run against an attestation."""

    valid: bool
    checks: dict[str, bool] = field(default_factory=dict)
    reasons: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"valid": self.valid, "checks": dict(self.checks), "reasons": list(self.reasons)}


# =============================================================================
# ATTESTATIONS
# =============================================================================


def _pick(data: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return default


def _as_int(value: Any, name: str) -> int:
    if value is None:
        return 0
    try:
        return _parse_quantity(value)
    except InvalidInputError as e:
        raise InvalidInputError(f"{name} must be an integer", field=name, value=value) from e


@dataclass
class Attestation:
    """An attestation as read back from the ledger.

    Only ``data["proofs"]`` and the revocation/expiration times are
    interpreted here; the rest is carried for the caller.
    """

    uid: str
    schema: str = ZERO_UID
    attester: str | None = None
    recipient: str | None = None
    revocable: bool = True
    revocation_time: int = 0
    expiration_time: int = 0
    time: int = 0
    ref_uid: str = ZERO_UID
    data: dict[str, Any] = field(default_factory=dict)
    tx_hash: str | None = None

    @property
    def is_revoked(self) -> bool:
        return self.revocation_time > 0

    def is_expired(self, now: int) -> bool:
        # Zero means the attestation never expires
        return self.expiration_time != 0 and self.expiration_time < now

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Attestation:
        """Create from a ledger record (camelCase or snake_case keys)."""
        if not isinstance(data, Mapping):
            raise InvalidInputError("attestation must be an object", field="attestation")
        uid = data.get("uid")
        if not isinstance(uid, str) or not uid:
            raise InvalidInputError("uid is required", field="uid", value=uid)

        payload = data.get("data") or {}
        if not isinstance(payload, Mapping):
            raise InvalidInputError("data must be an object", field="data")

        return cls(
            uid=uid,
            schema=data.get("schema", ZERO_UID),
            attester=data.get("attester"),
            recipient=data.get("recipient"),
            revocable=bool(data.get("revocable", True)),
            revocation_time=_as_int(_pick(data, "revocationTime", "revocation_time"), "revocationTime"),
            expiration_time=_as_int(_pick(data, "expirationTime", "expiration_time"), "expirationTime"),
            time=_as_int(data.get("time"), "time"),
            ref_uid=_pick(data, "refUID", "refUid", "ref_uid", default=ZERO_UID),
            data=dict(payload),
            tx_hash=_pick(data, "txHash", "tx_hash"),
        )


@runtime_checkable
class AttestationReader(Protocol):
    """Read side of the attestation ledger."""

    async def get_attestation(self, uid: str) -> Attestation | None:
        ...
