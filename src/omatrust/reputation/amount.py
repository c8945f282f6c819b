# SPDX-License-Identifier: MIT
# Copyright (c) 2026 OMATrust Contributors

"""Deterministic transfer amounts for tx-encoded-value proofs.

The amount a subject must send to a counterparty is derived from the two
identity digests, so anyone holding the same two DIDs can recompute it:

    seed   = canonical_json({domain, subjectDidHash, counterpartyIdHash, proofPurpose})
    digest = sha256(seed)     if chain_id == 0 (non-EVM placeholder)
             keccak256(seed)  otherwise
    amount = base + int(digest) % range

The hash choice is keyed on the chain id and must not change: amounts
computed today have to verify forever.

Example:
    >>> amount = calculate_transfer_amount(subject_did, controller_did, 8453, "shared-control")
    >>> print(f"Send {format_transfer_amount(amount, 8453)}")
"""

from __future__ import annotations

import hashlib
import logging

from eth_utils import keccak

from ..core.canonical import canonical_json
from ..core.exceptions import InvalidInputError, UnsupportedChainError
from ..identity.did import IdentityResolver, build_evm_did_pkh, default_resolver
from .chains import get_chain_config, get_chain_constants, get_supported_chain_ids, is_chain_supported
from .models import ProofPurpose, parse_proof_purpose

logger = logging.getLogger(__name__)

AMOUNT_DOMAIN = "OMATrust:Amount:v1"

# Chain id 0 stands in for non-EVM chains and selects SHA-256.
NON_EVM_CHAIN_ID = 0


def construct_seed(
    subject_did_hash: str,
    counterparty_did_hash: str,
    purpose: ProofPurpose | str,
) -> bytes:
    """Canonical seed bytes for the amount hash."""
    for name, value in (("subjectDidHash", subject_did_hash), ("counterpartyIdHash", counterparty_did_hash)):
        if not isinstance(value, str) or not value:
            raise InvalidInputError(f"{name} must be a non-empty string", field=name, value=value)

    seed = {
        "domain": AMOUNT_DOMAIN,
        "subjectDidHash": subject_did_hash,
        "counterpartyIdHash": counterparty_did_hash,
        "proofPurpose": parse_proof_purpose(purpose).value,
    }
    return canonical_json(seed)


def hash_seed(seed: bytes, chain_id: int) -> bytes:
    """Hash seed bytes with the hash family the chain requires.

    Raises:
        UnsupportedChainError: If the chain is neither registered nor the
            non-EVM placeholder
    """
    if chain_id == NON_EVM_CHAIN_ID:
        return hashlib.sha256(seed).digest()
    if not is_chain_supported(chain_id):
        raise UnsupportedChainError(chain_id, get_supported_chain_ids())
    return keccak(seed)


def calculate_transfer_amount_from_digests(
    subject_did_hash: str,
    counterparty_did_hash: str,
    chain_id: int,
    purpose: ProofPurpose | str,
) -> int:
    """Amount for two identity digests that have already been computed."""
    constants = get_chain_constants(chain_id, purpose)
    seed = construct_seed(subject_did_hash, counterparty_did_hash, purpose)
    offset = int.from_bytes(hash_seed(seed, chain_id), "big") % constants.range
    return constants.base + offset


def calculate_transfer_amount(
    subject: str,
    counterparty: str,
    chain_id: int,
    purpose: ProofPurpose | str,
    *,
    resolver: IdentityResolver | None = None,
) -> int:
    """Amount the subject must transfer to the counterparty on ``chain_id``.

    Args:
        subject: DID of the party making the transfer
        counterparty: DID of the receiving party (the controller)
        chain_id: Chain the transfer happens on
        purpose: Claim the transfer supports
        resolver: Identity resolver used to digest the DIDs

    Returns:
        An integer in [base, base + range) in the chain's smallest unit

    Raises:
        UnsupportedChainError: If the chain is not registered
        InvalidDidError: If either DID cannot be normalized
    """
    resolver = resolver or default_resolver
    # Fail on the chain before touching the identities
    get_chain_config(chain_id)

    amount = calculate_transfer_amount_from_digests(
        resolver.to_digest(subject),
        resolver.to_digest(counterparty),
        chain_id,
        purpose,
    )
    logger.debug(f"Transfer amount for chain {chain_id} ({purpose}): {amount}")
    return amount


def calculate_transfer_amount_from_addresses(
    subject_address: str,
    counterparty_address: str,
    chain_id: int,
    purpose: ProofPurpose | str,
) -> int:
    """Same as calculate_transfer_amount, for raw EVM addresses."""
    return calculate_transfer_amount(
        build_evm_did_pkh(chain_id, subject_address),
        build_evm_did_pkh(chain_id, counterparty_address),
        chain_id,
        purpose,
    )


# =============================================================================
# PRESENTATION
# =============================================================================


def format_units(amount: int, decimals: int) -> str:
    """Fixed-point rendering with at least one fractional digit."""
    sign = "-" if amount < 0 else ""
    whole, fraction = divmod(abs(amount), 10**decimals)
    fraction_str = str(fraction).rjust(decimals, "0").rstrip("0") or "0"
    return f"{sign}{whole}.{fraction_str}"


def format_transfer_amount(amount: int | float, chain_id: int) -> str:
    """Human-readable amount, e.g. ``"0.0001 ETH"``. Purely presentational."""
    config = get_chain_config(chain_id)
    value = amount if isinstance(amount, int) else int(amount // 1)
    return f"{format_units(value, config.decimals)} {config.native_symbol}"


def get_explorer_tx_url(chain_id: int, tx_hash: str) -> str:
    return f"{get_chain_config(chain_id).explorer}/tx/{tx_hash}"


def get_explorer_address_url(chain_id: int, address: str) -> str:
    return f"{get_chain_config(chain_id).explorer}/address/{address}"
