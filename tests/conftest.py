"""Global test fixtures for the OMATrust test suite."""

from __future__ import annotations

import os
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from eth_account import Account

from omatrust.core.config import clear_config_cache
from omatrust.reputation.models import Transaction

# ============================================================================
# Environment Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def reset_config():
    """Every test starts from a freshly loaded configuration."""
    clear_config_cache()
    yield
    clear_config_cache()


@pytest.fixture
def clean_env(monkeypatch):
    """Remove all OMATRUST_ environment variables."""
    for key in list(os.environ.keys()):
        if key.startswith("OMATRUST_"):
            monkeypatch.delenv(key, raising=False)


# ============================================================================
# Identity Fixtures
# ============================================================================

SUBJECT_ADDRESS = "0x" + "aa" * 20
CONTROLLER_ADDRESS = "0x" + "bb" * 20
TX_HASH = "0x" + "12" * 32


@pytest.fixture
def subject_did() -> str:
    return f"did:pkh:eip155:1:{SUBJECT_ADDRESS}"


@pytest.fixture
def controller_did() -> str:
    return f"did:pkh:eip155:1:{CONTROLLER_ADDRESS}"


@pytest.fixture
def tx_hash() -> str:
    return TX_HASH


@pytest.fixture
def signer_account():
    """A throwaway secp256k1 account for signing typed data."""
    return Account.create()


# ============================================================================
# Chain Provider Fixtures
# ============================================================================


class StubChainProvider:
    """In-memory chain provider keyed by transaction hash."""

    def __init__(self, transactions: dict[str, Any] | None = None):
        self.transactions = dict(transactions or {})
        self.requested: list[str] = []

    async def get_transaction(self, tx_hash: str) -> Transaction | dict | None:
        self.requested.append(tx_hash)
        return self.transactions.get(tx_hash)


@pytest.fixture
def stub_provider() -> StubChainProvider:
    return StubChainProvider()


# ============================================================================
# aiohttp Fixtures
# ============================================================================


def _make_response(status: int = 200, json_data: Any = None, text: str = "") -> MagicMock:
    response = MagicMock()
    response.status = status
    response.json = AsyncMock(return_value=json_data)
    response.text = AsyncMock(return_value=text)
    return response


@pytest.fixture
def make_response():
    """Factory for mock aiohttp responses."""
    return _make_response


@pytest.fixture
def mock_http():
    """Patch ``aiohttp.ClientSession`` and serve canned responses.

    Call the fixture with responses (or exceptions to raise) in request
    order; the last one keeps being served. Returns the mock session so
    tests can inspect ``session.get`` / ``session.post`` calls.
    """
    with patch("aiohttp.ClientSession") as mock_client:
        session = MagicMock()
        queue: list[Any] = []

        def _request(*args, **kwargs):
            current = queue.pop(0) if len(queue) > 1 else queue[0]
            if isinstance(current, BaseException):
                return MagicMock(__aenter__=AsyncMock(side_effect=current), __aexit__=AsyncMock(return_value=False))
            return MagicMock(__aenter__=AsyncMock(return_value=current), __aexit__=AsyncMock(return_value=False))

        session.get = MagicMock(side_effect=_request)
        session.post = MagicMock(side_effect=_request)
        mock_client.return_value.__aenter__ = AsyncMock(return_value=session)
        mock_client.return_value.__aexit__ = AsyncMock(return_value=False)

        def serve(*responses: Any) -> MagicMock:
            queue.extend(responses)
            return session

        yield serve
