"""Tests for omatrust.reputation.attestation - the attestation aggregator."""

from __future__ import annotations

import json
import time

import pytest

from omatrust.core.exceptions import AttestationNotFoundError
from omatrust.core.logging import get_verification_scope
from omatrust.reputation.amount import calculate_transfer_amount
from omatrust.reputation.attestation import parse_proofs, verify_attestation, verify_attestation_by_uid
from omatrust.reputation.creation import create_tx_encoded_value_proof, create_x402_receipt_proof
from omatrust.reputation.models import Attestation, ProofType, Transaction, VerificationContext


def _attestation(proofs, **fields) -> Attestation:
    return Attestation(uid="0x" + "01" * 32, data={"proofs": proofs}, **fields)


# ============================================================================
# parse_proofs
# ============================================================================


class TestParseProofs:
    def test_strings_and_objects(self, tx_hash):
        receipt = create_x402_receipt_proof({"id": "r1"})
        tx_proof = create_tx_encoded_value_proof(1, tx_hash, "shared-control")

        proofs = parse_proofs(_attestation([receipt.to_json(), tx_proof.to_dict()]))

        assert [p.proof_type for p in proofs] == [ProofType.X402_RECEIPT, ProofType.TX_ENCODED_VALUE]

    def test_drops_invalid_entries(self):
        proofs = parse_proofs(
            _attestation(["not json", json.dumps({"proofObject": {}}), 42, {"proofType": "pop-jws", "proofObject": "a"}])
        )
        assert [p.type_name for p in proofs] == ["pop-jws"]

    def test_missing_proofs(self):
        assert parse_proofs(Attestation(uid="0x01")) == []
        assert parse_proofs(Attestation(uid="0x01", data={"proofs": "nope"})) == []

    def test_mapping_accepted(self):
        assert len(parse_proofs({"uid": "0x01", "data": {"proofs": [{"proofType": "x402-offer"}]}})) == 1


# ============================================================================
# verify_attestation
# ============================================================================


class TestVerifyAttestation:
    """The verdict is valid exactly when no reason was collected."""

    async def test_valid(self):
        result = await verify_attestation(_attestation([create_x402_receipt_proof({"id": "r1"}).to_json()]))
        assert result.valid
        assert result.checks == {"revocation": True, "expiration": True, "x402-receipt": True}
        assert result.reasons == []

    async def test_revoked_with_no_proofs(self):
        result = await verify_attestation(_attestation([], revocation_time=1))
        assert not result.valid
        assert result.reasons == ["attestation revoked", "no proofs provided"]
        assert result.checks["revocation"] is False
        assert result.checks["proofs"] is False

    async def test_revoked_with_passing_proof(self):
        result = await verify_attestation(
            _attestation([create_x402_receipt_proof({"id": "r1"}).to_json()], revocation_time=int(time.time()))
        )
        assert not result.valid
        assert result.checks["x402-receipt"] is True
        assert result.reasons == ["attestation revoked"]

    async def test_malformed_proof_does_not_stop_fold(self):
        malformed = {
            "proofType": "pop-eip712",
            "proofObject": {
                "domain": {"name": "OMATrust Proof", "version": "1", "chainId": 1},
                "message": {"signer": "0x" + "aa" * 20, "randomValue": "not-hex"},
                "signature": "0x" + "11" * 65,
            },
        }
        result = await verify_attestation(_attestation([malformed, create_x402_receipt_proof({"id": "r1"}).to_dict()]))
        assert result.checks["pop-eip712"] is False
        assert result.checks["x402-receipt"] is True
        assert result.reasons == ["Invalid EIP-712 signature"]

    async def test_expired(self):
        result = await verify_attestation(
            _attestation([create_x402_receipt_proof({"id": "r"}).to_dict()], expiration_time=int(time.time()) - 10)
        )
        assert result.reasons == ["attestation expired"]
        assert result.checks["expiration"] is False

    async def test_zero_expiration_never_expires(self):
        result = await verify_attestation(
            _attestation([create_x402_receipt_proof({"id": "r"}).to_dict()], expiration_time=0)
        )
        assert result.checks["expiration"] is True

    async def test_failed_proof_reason_collected(self):
        result = await verify_attestation(_attestation([{"proofType": "x402-offer", "proofObject": "bad"}]))
        assert not result.valid
        assert result.checks["x402-offer"] is False
        assert result.reasons == ["Invalid x402 proof object"]

    async def test_fallback_reason(self):
        result = await verify_attestation(_attestation([{"proofType": "carrier-pigeon", "proofObject": {}}]))
        assert result.reasons == ["Unsupported proof type"]

    async def test_checks_filter(self):
        attestation = _attestation(
            [
                {"proofType": "x402-offer", "proofObject": "bad"},
                create_x402_receipt_proof({"id": "r"}).to_dict(),
            ]
        )
        result = await verify_attestation(attestation, checks=[ProofType.X402_RECEIPT])
        assert result.valid
        assert "x402-offer" not in result.checks

    async def test_reasons_in_source_order(self):
        attestation = _attestation(
            [
                {"proofType": "pop-jws", "proofObject": 5},
                {"proofType": "x402-offer", "proofObject": "bad"},
            ],
            revocation_time=3,
        )
        result = await verify_attestation(attestation)
        assert result.reasons == ["attestation revoked", "Invalid JWS proof payload", "Invalid x402 proof object"]

    async def test_context_forwarded(self, subject_did, controller_did, tx_hash, stub_provider):
        amount = calculate_transfer_amount(subject_did, controller_did, 1, "shared-control")
        stub_provider.transactions[tx_hash] = Transaction("0x" + "aa" * 20, "0x" + "bb" * 20, amount)
        proof = create_tx_encoded_value_proof(1, tx_hash, "shared-control")

        result = await verify_attestation(
            _attestation([proof.to_json()]),
            VerificationContext(stub_provider, subject_did, controller_did),
        )

        assert result.valid
        assert stub_provider.requested == [tx_hash]

    async def test_mapping_input(self):
        result = await verify_attestation({"uid": "0x01", "revocationTime": "0", "data": {"proofs": []}})
        assert result.reasons == ["no proofs provided"]

    async def test_log_scope(self):
        seen = []

        class Provider:
            async def get_transaction(self, tx_hash):
                seen.append(get_verification_scope())
                return Transaction("0x" + "aa" * 20, "0x" + "bb" * 20, 0)

        attestation = Attestation(
            uid="0xfeed",
            data={"proofs": [{"proofType": "tx-interaction", "proofObject": {"txHash": "0x" + "12" * 32}}]},
        )
        await verify_attestation(attestation, VerificationContext(Provider()))

        assert seen == [{"attestation_uid": "0xfeed", "proof_type": "tx-interaction"}]
        assert get_verification_scope() == {}


class TestVerifyAttestationByUid:
    async def test_reads_through_reader(self):
        class Reader:
            async def get_attestation(self, uid):
                return _attestation([create_x402_receipt_proof({"id": "r"}).to_dict()])

        assert (await verify_attestation_by_uid("0x01", Reader())).valid

    async def test_not_found(self):
        class Reader:
            async def get_attestation(self, uid):
                return None

        with pytest.raises(AttestationNotFoundError) as exc_info:
            await verify_attestation_by_uid("0xmissing", Reader())
        assert exc_info.value.code == "ATTESTATION_NOT_FOUND"
