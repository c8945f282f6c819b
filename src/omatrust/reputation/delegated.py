"""Delegated attestations.

The attester signs EAS ``Attest`` typed data off-chain and a relay submits
it on their behalf. This module builds the typed data for payloads that
are already ABI-encoded, splits signatures into ``{v, r, s}`` and posts the
signed request to the relay.

Example:
    >>> prepared = prepare_delegated_attestation_from_encoded(
    ...     chain_id=66238, eas_contract_address=eas, schema_uid=schema,
    ...     encoded_data=data, recipient=recipient, attester=attester, nonce=0,
    ... )
    >>> signature = await wallet.sign_typed_data(prepared["typedData"])
    >>> submission = await submit_delegated_attestation(relay_url, prepared, signature)
"""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import aiohttp
from eth_utils import to_bytes

from ..core.config import get_config
from ..core.exceptions import InvalidInputError, NetworkError
from .models import ZERO_UID

logger = logging.getLogger(__name__)

EAS_DOMAIN_NAME = "EAS"
EAS_DOMAIN_VERSION = "1.4.0"

ATTEST_PRIMARY_TYPE = "Attest"

ATTEST_FIELDS: tuple[tuple[str, str], ...] = (
    ("attester", "address"),
    ("schema", "bytes32"),
    ("recipient", "address"),
    ("expirationTime", "uint64"),
    ("revocable", "bool"),
    ("refUID", "bytes32"),
    ("data", "bytes"),
    ("value", "uint256"),
    ("nonce", "uint256"),
    ("deadline", "uint64"),
)

# Fields sent to the relay as decimal strings
BIG_INT_FIELDS = frozenset({"expirationTime", "value", "nonce", "deadline"})

DELEGATION_DEADLINE_SECONDS = 600


def _to_int(value: Any, name: str, default: int) -> int:
    if value is None:
        return default
    if isinstance(value, bool):
        raise InvalidInputError(f"{name} must be an integer", field=name, value=value)
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"{name} must be an integer", field=name, value=value) from e


def build_delegated_typed_data(
    *,
    chain_id: int,
    eas_contract_address: str,
    schema_uid: str,
    encoded_data: str,
    recipient: str,
    attester: str,
    nonce: int,
    revocable: bool = True,
    expiration_time: int | None = None,
    ref_uid: str | None = None,
    value: int | None = None,
    deadline: int | None = None,
) -> dict[str, Any]:
    """EAS ``Attest`` typed data for an already-encoded attestation payload."""
    for name, field_value in (
        ("easContractAddress", eas_contract_address),
        ("schemaUid", schema_uid),
        ("attester", attester),
    ):
        if not isinstance(field_value, str) or not field_value:
            raise InvalidInputError(f"{name} is required", field=name, value=field_value)

    return {
        "domain": {
            "name": EAS_DOMAIN_NAME,
            "version": EAS_DOMAIN_VERSION,
            "chainId": chain_id,
            "verifyingContract": eas_contract_address,
        },
        "types": {
            ATTEST_PRIMARY_TYPE: [{"name": name, "type": type_} for name, type_ in ATTEST_FIELDS],
        },
        "primaryType": ATTEST_PRIMARY_TYPE,
        "message": {
            "attester": attester,
            "schema": schema_uid,
            "recipient": recipient,
            "expirationTime": _to_int(expiration_time, "expirationTime", 0),
            "revocable": revocable,
            "refUID": ref_uid or ZERO_UID,
            "data": encoded_data,
            "value": _to_int(value, "value", 0),
            "nonce": _to_int(nonce, "nonce", 0),
            "deadline": _to_int(deadline, "deadline", int(time.time()) + DELEGATION_DEADLINE_SECONDS),
        },
    }


def prepare_delegated_attestation_from_encoded(**params: Any) -> dict[str, Any]:
    """Typed data plus the flat request the relay expects.

    Accepts the keyword arguments of build_delegated_typed_data.
    """
    typed_data = build_delegated_typed_data(**params)
    return {
        "delegatedRequest": {
            "schema": params["schema_uid"],
            "attester": params["attester"],
            "easContractAddress": params["eas_contract_address"],
            "chainId": params["chain_id"],
            **typed_data["message"],
        },
        "typedData": typed_data,
    }


def split_signature(signature: str | bytes) -> dict[str, Any]:
    """Split a 65-byte (or 64-byte compact) signature into ``{v, r, s}``.

    Raises:
        InvalidInputError: If the signature is not hex of either length
    """
    try:
        raw = to_bytes(hexstr=signature) if isinstance(signature, str) else bytes(signature)
    except (TypeError, ValueError) as e:
        raise InvalidInputError("Invalid signature") from e

    if len(raw) == 65:
        r, s, v = raw[:32], raw[32:64], raw[64]
        if v < 27:
            v += 27
    elif len(raw) == 64:
        # EIP-2098: the top bit of s carries the y parity
        r, vs = raw[:32], bytearray(raw[32:])
        v = 27 + (vs[0] >> 7)
        vs[0] &= 0x7F
        s = bytes(vs)
    else:
        raise InvalidInputError("Invalid signature", field="signature", length=len(raw))

    if v not in (27, 28):
        raise InvalidInputError("Invalid signature", field="signature", v=v)
    return {"v": v, "r": "0x" + r.hex(), "s": "0x" + s.hex()}


@dataclass
class DelegatedSubmission:
    """Relay answer to a delegated attestation."""

    uid: str
    tx_hash: str | None = None
    status: str = "submitted"

    def to_dict(self) -> dict[str, Any]:
        return {"uid": self.uid, "txHash": self.tx_hash, "status": self.status}


def _relay_json(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {
            key: str(item) if key in BIG_INT_FIELDS and isinstance(item, int) and not isinstance(item, bool)
            else _relay_json(item)
            for key, item in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [_relay_json(item) for item in value]
    return value


async def submit_delegated_attestation(
    relay_url: str,
    prepared: Mapping[str, Any],
    signature: str | Mapping[str, Any],
    attester: str | None = None,
    timeout: float | None = None,
) -> DelegatedSubmission:
    """Post a signed delegated attestation to the relay.

    Raises:
        InvalidInputError: If the relay URL is missing
        NetworkError: If the request fails or the relay answers non-2xx;
            details carry the status and the relay's payload
    """
    if not isinstance(relay_url, str) or not relay_url:
        raise InvalidInputError("relayUrl is required", field="relayUrl")

    body = _relay_json({"prepared": prepared, "signature": signature, "attester": attester})
    timeout = timeout if timeout is not None else get_config().http_timeout_seconds

    try:
        async with aiohttp.ClientSession() as session:
            async with session.post(
                relay_url,
                json=body,
                timeout=aiohttp.ClientTimeout(total=timeout),
            ) as response:
                status = response.status
                try:
                    payload = await response.json(content_type=None)
                except ValueError:
                    payload = {}
    except (aiohttp.ClientError, TimeoutError) as e:
        logger.warning(f"Delegated attestation submission to {relay_url} failed: {e}")
        raise NetworkError("Failed to submit delegated attestation", {"url": relay_url, "cause": str(e)}) from e

    if not isinstance(payload, dict):
        payload = {}

    if not 200 <= status < 300:
        raise NetworkError("Relay submission failed", {"status": status, "payload": payload})

    submission = DelegatedSubmission(
        uid=payload.get("uid") or ZERO_UID,
        tx_hash=payload.get("txHash"),
        status=payload.get("status") or "submitted",
    )
    logger.info(f"Delegated attestation {submission.status}: {submission.uid}")
    return submission
