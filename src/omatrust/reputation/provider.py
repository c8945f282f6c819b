"""JSON-RPC chain provider."""

from __future__ import annotations

import itertools
import logging
from typing import Any

import aiohttp

from ..core.config import get_config
from ..core.exceptions import NetworkError
from .models import Transaction

logger = logging.getLogger(__name__)


class JsonRpcChainProvider:
    """Reads transactions from an Ethereum JSON-RPC endpoint.

    Each call opens its own session, so one provider can be shared across
    event loops.
    """

    def __init__(self, rpc_url: str, timeout: float | None = None):
        if not rpc_url:
            raise ValueError("rpc_url is required")
        self.rpc_url = rpc_url
        self.timeout = timeout if timeout is not None else get_config().http_timeout_seconds
        self._ids = itertools.count(1)

    async def _call(self, method: str, params: list[Any]) -> Any:
        request = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}
        try:
            async with aiohttp.ClientSession() as session:
                async with session.post(
                    self.rpc_url,
                    json=request,
                    timeout=aiohttp.ClientTimeout(total=self.timeout),
                ) as response:
                    if response.status != 200:
                        raise NetworkError(
                            f"RPC request failed ({response.status})",
                            {"url": self.rpc_url, "method": method, "status": response.status},
                        )
                    payload = await response.json(content_type=None)
        except NetworkError:
            raise
        except Exception as e:  # Intentionally broad: transport and decoding errors vary
            logger.warning(f"RPC {method} to {self.rpc_url} failed: {e}")
            raise NetworkError(f"RPC request failed: {e}", {"url": self.rpc_url, "method": method}) from e

        if not isinstance(payload, dict):
            raise NetworkError("Malformed RPC response", {"url": self.rpc_url, "method": method})
        if payload.get("error"):
            raise NetworkError(
                "RPC returned an error",
                {"url": self.rpc_url, "method": method, "error": payload["error"]},
            )
        return payload.get("result")

    async def get_transaction(self, tx_hash: str) -> Transaction | None:
        result = await self._call("eth_getTransactionByHash", [tx_hash])
        if result is None:
            return None
        return Transaction.from_dict(result)
