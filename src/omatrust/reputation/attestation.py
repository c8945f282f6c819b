# SPDX-License-Identifier: MIT
# Copyright (c) 2026 OMATrust Contributors

"""Attestation-level verification.

An attestation carries its proofs in ``data["proofs"]``, each either a
wire-form mapping or a JSON string of one. ``verify_attestation`` folds
the attestation's own status and every selected proof into a single
verdict:

    revocation  -> "attestation revoked"
    expiration  -> "attestation expired"  (expirationTime 0 never expires)
    proofs      -> "no proofs provided"
    <type>      -> the proof's reason, or "<type> verification failed"

The verdict is valid exactly when no reason was collected.
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Iterable, Mapping
from typing import Any

from ..core.exceptions import AttestationNotFoundError
from ..core.logging import verification_scope
from ..identity.did import IdentityResolver
from .models import (
    Attestation,
    AttestationReader,
    ProofEnvelope,
    ProofType,
    VerificationContext,
    VerifyAttestationResult,
)
from .verification import verify_proof

logger = logging.getLogger(__name__)


def parse_proofs(attestation: Attestation | Mapping[str, Any]) -> list[ProofEnvelope]:
    """Proofs embedded in an attestation, in source order.

    Entries that are not valid JSON, not objects, or lack a proofType are
    dropped.
    """
    if not isinstance(attestation, Attestation):
        attestation = Attestation.from_dict(attestation)

    raw_proofs = attestation.data.get("proofs")
    if not isinstance(raw_proofs, list):
        return []

    proofs: list[ProofEnvelope] = []
    for entry in raw_proofs:
        if isinstance(entry, str):
            try:
                entry = json.loads(entry)
            except json.JSONDecodeError:
                logger.debug("Skipping proof entry that is not valid JSON")
                continue
        if not isinstance(entry, Mapping) or not isinstance(entry.get("proofType"), str) or not entry["proofType"]:
            continue
        proofs.append(ProofEnvelope.from_dict(entry))
    return proofs


def _selected(checks: Iterable[ProofType | str] | None, proofs: list[ProofEnvelope]) -> set[str]:
    if checks is None:
        return {proof.type_name for proof in proofs}
    return {check.value if isinstance(check, ProofType) else check for check in checks}


async def verify_attestation(
    attestation: Attestation | Mapping[str, Any],
    context: VerificationContext | None = None,
    checks: Iterable[ProofType | str] | None = None,
    *,
    resolver: IdentityResolver | None = None,
) -> VerifyAttestationResult:
    """Verify an attestation and the proofs it carries.

    Args:
        attestation: Ledger record, or its mapping form
        context: Provider and expected identities passed to every proof check
        checks: Proof types to verify; defaults to every type present
        resolver: Identity resolver passed to every proof check

    Returns:
        VerifyAttestationResult with one entry in ``checks`` per check run

    Raises:
        ProofVerificationError: If a proof check fails unexpectedly
    """
    if not isinstance(attestation, Attestation):
        attestation = Attestation.from_dict(attestation)

    with verification_scope(attestation_uid=attestation.uid):
        proofs = parse_proofs(attestation)
        result = VerifyAttestationResult(valid=False)
        now = int(time.time())

        result.checks["revocation"] = not attestation.is_revoked
        if attestation.is_revoked:
            result.reasons.append("attestation revoked")

        result.checks["expiration"] = not attestation.is_expired(now)
        if attestation.is_expired(now):
            result.reasons.append("attestation expired")

        if not proofs:
            result.checks["proofs"] = False
            result.reasons.append("no proofs provided")

        selected = _selected(checks, proofs)
        for proof in proofs:
            if proof.type_name not in selected:
                continue
            outcome = await verify_proof(proof, context, resolver=resolver)
            result.checks[proof.type_name] = outcome.valid
            if not outcome.valid:
                result.reasons.append(outcome.reason or f"{proof.type_name} verification failed")

        result.valid = not result.reasons
        if result.valid:
            logger.info(f"Attestation {attestation.uid} verified ({len(proofs)} proofs)")
        else:
            logger.info(f"Attestation {attestation.uid} failed verification: {'; '.join(result.reasons)}")
        return result


async def verify_attestation_by_uid(
    uid: str,
    reader: AttestationReader,
    context: VerificationContext | None = None,
    checks: Iterable[ProofType | str] | None = None,
    *,
    resolver: IdentityResolver | None = None,
) -> VerifyAttestationResult:
    """Read an attestation through ``reader`` and verify it.

    Raises:
        AttestationNotFoundError: If the reader has no attestation for ``uid``
    """
    attestation = await reader.get_attestation(uid)
    if attestation is None:
        raise AttestationNotFoundError(uid)
    return await verify_attestation(attestation, context, checks, resolver=resolver)
