# SPDX-License-Identifier: MIT
# Copyright (c) 2026 OMATrust Contributors

"""Exception hierarchy for OMATrust.

Every error carries a stable machine-readable ``code`` plus a structured
``details`` dict, so callers can branch on the failure programmatically
instead of matching message strings.
"""

from __future__ import annotations

from typing import Any


class OmaTrustError(Exception):
    """Base exception for all OMATrust errors.

    All OMATrust-specific exceptions should inherit from this class.
    """

    code: str = "OMATRUST_ERROR"

    def __init__(self, message: str, details: dict | None = None, code: str | None = None):
        self.message = message
        self.details = details or {}
        if code:
            self.code = code
        super().__init__(message)

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "error": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class InvalidInputError(OmaTrustError):
    """Exception for malformed input.

    Raised when:
    - A transaction hash is not 32-byte hex
    - A required field is missing or empty
    - A signature or JSON document cannot be parsed
    """

    code = "INVALID_INPUT"

    def __init__(self, message: str, field: str | None = None, value: Any = None, **details: Any):
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = value if isinstance(value, (int, float, bool)) else str(value)
        super().__init__(message, details)
        self.field = field
        self.value = value


class InvalidDidError(InvalidInputError):
    """Exception for DID and CAIP identifiers that cannot be parsed or normalized."""

    code = "INVALID_DID"


class NetworkError(OmaTrustError):
    """Exception for failed network calls.

    Raised when:
    - An HTTP fetch fails or times out
    - A relay or gateway answers with a non-2xx status
    - DNS resolution fails for reasons other than a missing record
    - A chain RPC call fails
    """

    code = "NETWORK_ERROR"


class UnsupportedChainError(OmaTrustError):
    """Exception for chain ids that have no registered configuration."""

    code = "UNSUPPORTED_CHAIN"

    def __init__(self, chain_id: int, supported: list[int] | None = None):
        details: dict[str, Any] = {"chainId": chain_id}
        if supported is not None:
            details["supported"] = supported
        super().__init__("Chain is not supported", details)
        self.chain_id = chain_id


class ProofVerificationError(OmaTrustError):
    """Exception for unexpected faults while verifying a proof.

    Planned verification failures are reported as results, not raised.
    """

    code = "PROOF_VERIFICATION_FAILED"

    def __init__(self, message: str, proof_type: str | None = None, cause: BaseException | None = None):
        details: dict[str, Any] = {}
        if proof_type:
            details["proofType"] = proof_type
        if cause is not None:
            details["cause"] = f"{type(cause).__name__}: {cause}"
        super().__init__(message, details)
        self.proof_type = proof_type
        self.cause = cause


class NotFoundError(OmaTrustError):
    """Exception for resource not found errors."""

    def __init__(self, resource_type: str, resource_id: str):
        message = f"{resource_type} not found: {resource_id}"
        details = {
            "resource_type": resource_type,
            "resource_id": resource_id,
        }
        super().__init__(message, details)
        self.resource_type = resource_type
        self.resource_id = resource_id


class SchemaNotFoundError(NotFoundError):
    """Exception for attestation schemas missing from the registry."""

    code = "SCHEMA_NOT_FOUND"

    def __init__(self, schema_uid: str):
        super().__init__("Schema", schema_uid)


class AttestationNotFoundError(NotFoundError):
    """Exception for attestation uids the ledger does not know."""

    code = "ATTESTATION_NOT_FOUND"

    def __init__(self, uid: str):
        super().__init__("Attestation", uid)
