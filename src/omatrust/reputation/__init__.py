"""OMATrust reputation proofs - amounts, proof creation and verification."""

from .amount import (
    calculate_transfer_amount,
    calculate_transfer_amount_from_addresses,
    calculate_transfer_amount_from_digests,
    construct_seed,
    format_transfer_amount,
    get_explorer_address_url,
    get_explorer_tx_url,
    hash_seed,
)
from .attestation import parse_proofs, verify_attestation, verify_attestation_by_uid
from .chains import (
    CHAIN_CONFIGS,
    ChainConfig,
    ChainConstants,
    get_chain_config,
    get_chain_constants,
    get_supported_chain_ids,
    is_chain_supported,
)
from .creation import (
    Eip712ProofParams,
    JwsProofParams,
    create_evidence_pointer_proof,
    create_pop_eip712_proof,
    create_pop_jws_proof,
    create_tx_encoded_value_proof,
    create_tx_interaction_proof,
    create_x402_offer_proof,
    create_x402_receipt_proof,
)
from .delegated import (
    DelegatedSubmission,
    build_delegated_typed_data,
    prepare_delegated_attestation_from_encoded,
    split_signature,
    submit_delegated_attestation,
)
from .did_document import (
    ControllerCheckResult,
    check_did_document_controller,
    extract_addresses_from_did_document,
    fetch_did_document,
)
from .dns_txt import build_dns_txt_record, parse_dns_txt_record, verify_dns_txt_controller_did
from .models import (
    Attestation,
    AttestationReader,
    ChainProvider,
    ProofEnvelope,
    ProofPurpose,
    ProofType,
    Transaction,
    VerificationContext,
    VerifyAttestationResult,
    VerifyProofResult,
    is_supported_proof_type,
    validate_tx_hash,
)
from .provider import JsonRpcChainProvider
from .verification import verify_proof
from .witness import WitnessResult, call_controller_witness

__all__ = [
    # Amounts
    "calculate_transfer_amount",
    "calculate_transfer_amount_from_addresses",
    "calculate_transfer_amount_from_digests",
    "construct_seed",
    "format_transfer_amount",
    "get_explorer_address_url",
    "get_explorer_tx_url",
    "hash_seed",
    "CHAIN_CONFIGS",
    "ChainConfig",
    "ChainConstants",
    "get_chain_config",
    "get_chain_constants",
    "get_supported_chain_ids",
    "is_chain_supported",
    # Models
    "Attestation",
    "AttestationReader",
    "ChainProvider",
    "ProofEnvelope",
    "ProofPurpose",
    "ProofType",
    "Transaction",
    "VerificationContext",
    "VerifyAttestationResult",
    "VerifyProofResult",
    "is_supported_proof_type",
    "validate_tx_hash",
    # Creation
    "Eip712ProofParams",
    "JwsProofParams",
    "create_evidence_pointer_proof",
    "create_pop_eip712_proof",
    "create_pop_jws_proof",
    "create_tx_encoded_value_proof",
    "create_tx_interaction_proof",
    "create_x402_offer_proof",
    "create_x402_receipt_proof",
    # Verification
    "parse_proofs",
    "verify_attestation",
    "verify_attestation_by_uid",
    "verify_proof",
    "JsonRpcChainProvider",
    # Controller evidence
    "ControllerCheckResult",
    "check_did_document_controller",
    "extract_addresses_from_did_document",
    "fetch_did_document",
    "build_dns_txt_record",
    "parse_dns_txt_record",
    "verify_dns_txt_controller_did",
    "WitnessResult",
    "call_controller_witness",
    # Delegated attestations
    "DelegatedSubmission",
    "build_delegated_typed_data",
    "prepare_delegated_attestation_from_encoded",
    "split_signature",
    "submit_delegated_attestation",
]
