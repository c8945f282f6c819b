"""did.json controller checks.

A did:web domain can name its controller by listing the controller's
account in ``verificationMethod[].blockchainAccountId`` (or, for older
documents, as ``publicKeyHex``) of its ``/.well-known/did.json``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

import aiohttp
from eth_utils import is_address

from ..core.config import get_config
from ..core.exceptions import InvalidDidError, NetworkError
from ..identity.did import extract_address_from_did, normalize_domain

logger = logging.getLogger(__name__)

WELL_KNOWN_DID_PATH = "/.well-known/did.json"


@dataclass
class ControllerCheckResult:
    valid: bool
    reason: str | None = None


DidDocumentChecker = Callable[[Mapping[str, Any], str], ControllerCheckResult]


def extract_addresses_from_did_document(document: Mapping[str, Any]) -> list[str]:
    """Every EVM address the document's verification methods reference, in order."""
    addresses: list[str] = []
    methods = document.get("verificationMethod") or []
    if not isinstance(methods, list):
        return addresses

    for method in methods:
        if not isinstance(method, Mapping):
            continue

        account_id = method.get("blockchainAccountId")
        if isinstance(account_id, str) and account_id:
            try:
                addresses.append(extract_address_from_did(account_id))
            except InvalidDidError:
                logger.debug(f"Skipping unparseable blockchainAccountId: {account_id}")

        public_key = method.get("publicKeyHex")
        if isinstance(public_key, str) and public_key:
            candidate = public_key if public_key.startswith("0x") else f"0x{public_key}"
            if is_address(candidate):
                addresses.append(candidate)

    return addresses


def check_did_document_controller(
    document: Mapping[str, Any],
    expected_controller_did: str,
) -> ControllerCheckResult:
    """Check that the document lists the expected controller's address."""
    try:
        expected = extract_address_from_did(expected_controller_did)
    except InvalidDidError:
        return ControllerCheckResult(False, "Expected controller DID does not resolve to an EVM address")

    expected_lower = expected.lower()
    for address in extract_addresses_from_did_document(document):
        if address.lower() == expected_lower:
            return ControllerCheckResult(True)

    return ControllerCheckResult(False, f"No matching address found in DID document (expected {expected})")


async def fetch_did_document(domain: str, timeout: float | None = None) -> dict[str, Any]:
    """Fetch ``https://<domain>/.well-known/did.json``.

    Raises:
        NetworkError: On transport failure, non-200 status or a body that
            is not a JSON object
    """
    url = f"https://{normalize_domain(domain)}{WELL_KNOWN_DID_PATH}"
    timeout = timeout if timeout is not None else get_config().http_timeout_seconds

    try:
        async with aiohttp.ClientSession() as session:
            async with session.get(url, timeout=aiohttp.ClientTimeout(total=timeout)) as response:
                if response.status != 200:
                    raise NetworkError(
                        f"Failed to fetch DID document ({response.status})",
                        {"url": url, "status": response.status},
                    )
                document = await response.json(content_type=None)
    except NetworkError:
        raise
    except Exception as e:  # Intentionally broad: aiohttp and JSON decoding raise many error types
        logger.warning(f"DID document fetch failed for {url}: {e}")
        raise NetworkError(f"Failed to fetch DID document: {e}", {"url": url}) from e

    if not isinstance(document, dict):
        raise NetworkError("DID document is not a JSON object", {"url": url})
    return document
