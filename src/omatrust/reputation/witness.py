"""Controller witness gateway client.

A witness gateway independently checks that a subject's domain names the
controller, and records that observation. The gateway is asked to use
DNS TXT first; if that attempt fails for any reason it is asked again
using did.json.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import aiohttp

from ..core.config import get_config
from ..core.exceptions import NetworkError

logger = logging.getLogger(__name__)

WITNESS_METHODS = ("dns-txt", "did-json")


@dataclass
class WitnessResult:
    """Outcome of a witness call; ``method`` is the last method attempted."""

    ok: bool
    method: str
    details: Any = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"ok": self.ok, "method": self.method}
        if self.details is not None:
            data["details"] = self.details
        return data


async def _call_method(
    gateway_url: str,
    body: dict[str, Any],
    timeout_ms: int,
) -> WitnessResult | None:
    """One gateway attempt. Returns None on a non-2xx answer.

    Raises:
        NetworkError: If the request cannot be sent or times out
    """
    try:
        async with aiohttp.ClientSession() as session:
            async with session.post(
                gateway_url,
                json=body,
                timeout=aiohttp.ClientTimeout(total=timeout_ms / 1000),
            ) as response:
                try:
                    details = await response.json(content_type=None)
                except ValueError:
                    details = None
                if not 200 <= response.status < 300:
                    logger.debug(f"Witness {body['method']} answered {response.status}")
                    return None
    except aiohttp.ClientError as e:
        raise NetworkError("Controller witness request failed", {"method": body["method"], "cause": str(e)}) from e
    except TimeoutError as e:
        raise NetworkError("Controller witness request timed out", {"method": body["method"]}) from e

    return WitnessResult(ok=True, method=body["method"], details=details)


async def call_controller_witness(
    gateway_url: str,
    *,
    attestation_uid: str,
    chain_id: int,
    eas_contract: str,
    schema_uid: str,
    subject: str,
    controller: str,
    timeout_ms: int | None = None,
) -> WitnessResult:
    """Ask the witness gateway to observe the subject/controller binding.

    Never raises for gateway or transport failures; a failed pair of
    attempts yields ``WitnessResult(ok=False, method="did-json")``.
    """
    timeout_ms = timeout_ms if timeout_ms is not None else get_config().witness_timeout_ms

    for method in WITNESS_METHODS:
        body = {
            "attestationUid": attestation_uid,
            "chainId": chain_id,
            "easContract": eas_contract,
            "schemaUid": schema_uid,
            "subject": subject,
            "controller": controller,
            "method": method,
        }
        try:
            result = await _call_method(gateway_url, body, timeout_ms)
        except NetworkError as e:
            logger.warning(f"Witness {method} call to {gateway_url} failed: {e.message}")
            continue
        if result is not None:
            logger.info(f"Controller witnessed for {attestation_uid} via {method}")
            return result

    return WitnessResult(ok=False, method=WITNESS_METHODS[-1])
