"""DNS TXT controller records.

A domain names its controller by publishing a TXT record at
``_omatrust.<domain>``:

    v=1;controller=did:pkh:eip155:1:0xabc...

Entries are separated by ``;`` or whitespace and split on their first
``=``. A record verifies when ``v`` is ``1`` and the normalized controller
equals the normalized expected DID.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

import dns.asyncresolver
import dns.exception
import dns.resolver

from ..core.config import get_config
from ..core.exceptions import InvalidDidError, NetworkError
from ..identity.did import normalize_did, normalize_domain

logger = logging.getLogger(__name__)

DNS_TXT_PREFIX = "_omatrust"
DNS_TXT_VERSION = "1"

_ENTRY_SEPARATOR = re.compile(r"[;\s]+")


@dataclass
class DnsTxtRecord:
    """Parsed controller record."""

    version: str | None = None
    controller: str | None = None
    raw: str = ""


@dataclass
class DnsTxtVerification:
    """Outcome of looking up a domain's controller record."""

    valid: bool
    record: str | None = None
    reason: str | None = None


def build_dns_txt_record(controller_did: str) -> str:
    """Record value publishing ``controller_did`` as the domain controller."""
    return f"v={DNS_TXT_VERSION};controller={normalize_did(controller_did)}"


def parse_dns_txt_record(record: str) -> DnsTxtRecord:
    """Parse a record value; unknown entries and empty values are ignored."""
    entries: dict[str, str] = {}
    for token in _ENTRY_SEPARATOR.split(record.strip()):
        key, sep, value = token.partition("=")
        if not sep or not value:
            continue
        entries[key.strip().lower()] = value.strip()
    return DnsTxtRecord(version=entries.get("v"), controller=entries.get("controller"), raw=record)


def record_matches_controller(record: DnsTxtRecord, expected_controller_did: str) -> bool:
    if record.version != DNS_TXT_VERSION or not record.controller:
        return False
    try:
        return normalize_did(record.controller) == normalize_did(expected_controller_did)
    except InvalidDidError:
        return False


async def verify_dns_txt_controller_did(
    domain: str,
    expected_controller_did: str,
    timeout: float | None = None,
) -> DnsTxtVerification:
    """Check that ``_omatrust.<domain>`` names ``expected_controller_did``.

    A missing record is a failed verification, not an error.

    Raises:
        NetworkError: If the lookup fails for any other reason
    """
    host = f"{DNS_TXT_PREFIX}.{normalize_domain(domain)}"
    timeout = timeout if timeout is not None else get_config().dns_timeout_seconds

    resolver = dns.asyncresolver.Resolver()
    resolver.timeout = timeout
    resolver.lifetime = timeout

    try:
        answers = await resolver.resolve(host, "TXT")
    except (dns.resolver.NXDOMAIN, dns.resolver.NoAnswer):
        logger.debug(f"No TXT records for {host}")
        return DnsTxtVerification(valid=False, reason=f"No TXT record at {host}")
    except dns.exception.DNSException as e:
        logger.warning(f"DNS lookup failed for {host}: {e}")
        raise NetworkError(f"DNS lookup failed for {host}", {"host": host, "cause": str(e)}) from e

    for rdata in answers:
        value = b"".join(rdata.strings).decode("utf-8", errors="replace")
        if record_matches_controller(parse_dns_txt_record(value), expected_controller_did):
            logger.debug(f"DNS controller record verified for {host}")
            return DnsTxtVerification(valid=True, record=value)

    return DnsTxtVerification(valid=False, reason="No matching controller record found")
