"""Tests for omatrust.reputation.dns_txt."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import dns.exception
import dns.resolver
import pytest

from omatrust.core.exceptions import InvalidDidError, NetworkError
from omatrust.reputation.dns_txt import (
    build_dns_txt_record,
    parse_dns_txt_record,
    record_matches_controller,
    verify_dns_txt_controller_did,
)

CONTROLLER = "did:pkh:eip155:1:0x" + "bb" * 20


def _rdata(value: str) -> MagicMock:
    rdata = MagicMock()
    rdata.strings = (value.encode(),)
    return rdata


class TestRecordFormat:
    def test_build(self):
        assert build_dns_txt_record("did:pkh:EIP155:1:0x" + "BB" * 20) == f"v=1;controller={CONTROLLER}"

    def test_build_invalid(self):
        with pytest.raises(InvalidDidError):
            build_dns_txt_record("")

    def test_parse(self):
        record = parse_dns_txt_record(f"v=1;controller={CONTROLLER}")
        assert record.version == "1"
        assert record.controller == CONTROLLER

    def test_parse_whitespace_separated(self):
        record = parse_dns_txt_record(f"  v=1  controller={CONTROLLER} ")
        assert record.controller == CONTROLLER

    def test_parse_splits_on_first_equals(self):
        assert parse_dns_txt_record("controller=a=b").controller == "a=b"

    def test_parse_skips_empty_and_unknown(self):
        record = parse_dns_txt_record("v=;junk;other=x")
        assert record.version is None
        assert record.controller is None

    def test_matches(self):
        assert record_matches_controller(parse_dns_txt_record(f"v=1;controller=did:pkh:EIP155:1:0x{'BB' * 20}"), CONTROLLER)
        assert not record_matches_controller(parse_dns_txt_record(f"v=2;controller={CONTROLLER}"), CONTROLLER)


class TestVerifyDnsTxt:
    async def test_match(self):
        with patch("dns.asyncresolver.Resolver") as mock_resolver:
            mock_resolver.return_value.resolve = AsyncMock(
                return_value=[_rdata("unrelated"), _rdata(f"v=1;controller={CONTROLLER}")]
            )
            result = await verify_dns_txt_controller_did("Example.com.", CONTROLLER)

        assert result.valid
        assert result.record == f"v=1;controller={CONTROLLER}"
        mock_resolver.return_value.resolve.assert_awaited_once_with("_omatrust.example.com", "TXT")

    async def test_no_match(self):
        with patch("dns.asyncresolver.Resolver") as mock_resolver:
            mock_resolver.return_value.resolve = AsyncMock(return_value=[_rdata("v=1;controller=did:web:x.com")])
            result = await verify_dns_txt_controller_did("example.com", CONTROLLER)
        assert not result.valid

    async def test_nxdomain_is_invalid(self):
        with patch("dns.asyncresolver.Resolver") as mock_resolver:
            mock_resolver.return_value.resolve = AsyncMock(side_effect=dns.resolver.NXDOMAIN())
            result = await verify_dns_txt_controller_did("example.com", CONTROLLER)
        assert not result.valid
        assert "_omatrust.example.com" in result.reason

    async def test_timeout_raises_network_error(self):
        with patch("dns.asyncresolver.Resolver") as mock_resolver:
            mock_resolver.return_value.resolve = AsyncMock(side_effect=dns.exception.Timeout())
            with pytest.raises(NetworkError) as exc_info:
                await verify_dns_txt_controller_did("example.com", CONTROLLER)
        assert exc_info.value.details["host"] == "_omatrust.example.com"
