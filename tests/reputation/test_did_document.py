"""Tests for omatrust.reputation.did_document."""

from __future__ import annotations

import aiohttp
import pytest

from omatrust.core.exceptions import NetworkError
from omatrust.reputation.did_document import (
    check_did_document_controller,
    extract_addresses_from_did_document,
    fetch_did_document,
)

ADDRESS = "0x" + "bb" * 20


class TestExtractAddresses:
    def test_blockchain_account_ids_and_public_keys(self):
        document = {
            "verificationMethod": [
                {"blockchainAccountId": f"eip155:1:{ADDRESS}"},
                {"blockchainAccountId": f"did:pkh:eip155:10:0x{'CC' * 20}"},
                {"publicKeyHex": "dd" * 20},
                {"publicKeyHex": "not-an-address"},
                {"blockchainAccountId": "garbage"},
                "not-a-method",
            ]
        }
        assert extract_addresses_from_did_document(document) == [ADDRESS, "0x" + "cc" * 20, "0x" + "dd" * 20]

    def test_no_methods(self):
        assert extract_addresses_from_did_document({}) == []
        assert extract_addresses_from_did_document({"verificationMethod": "x"}) == []


class TestCheckController:
    def test_match_case_insensitive(self):
        document = {"verificationMethod": [{"blockchainAccountId": f"eip155:1:{ADDRESS.upper().replace('0X', '0x')}"}]}
        assert check_did_document_controller(document, f"did:pkh:eip155:1:{ADDRESS}").valid

    def test_no_match(self):
        result = check_did_document_controller({"verificationMethod": []}, f"did:pkh:eip155:1:{ADDRESS}")
        assert not result.valid
        assert result.reason == f"No matching address found in DID document (expected {ADDRESS})"

    def test_controller_without_address(self):
        result = check_did_document_controller({}, "did:web:example.com")
        assert result.reason == "Expected controller DID does not resolve to an EVM address"


class TestFetchDidDocument:
    async def test_fetch(self, mock_http, make_response):
        session = mock_http(make_response(json_data={"id": "did:web:example.com"}))
        document = await fetch_did_document("Example.com")

        assert document == {"id": "did:web:example.com"}
        assert session.get.call_args.args[0] == "https://example.com/.well-known/did.json"

    async def test_non_200(self, mock_http, make_response):
        mock_http(make_response(status=500))
        with pytest.raises(NetworkError) as exc_info:
            await fetch_did_document("example.com")
        assert exc_info.value.details["status"] == 500

    async def test_transport_error(self, mock_http):
        mock_http(aiohttp.ClientConnectionError("refused"))
        with pytest.raises(NetworkError):
            await fetch_did_document("example.com")

    async def test_not_an_object(self, mock_http, make_response):
        mock_http(make_response(json_data=["x"]))
        with pytest.raises(NetworkError):
            await fetch_did_document("example.com")
