"""Tests for the omatrust CLI.

Tests cover:
1. Argument parsing
2. Chain and amount commands
3. DNS record command
4. Proof and attestation verification exit codes
"""

from __future__ import annotations

import argparse
import json
from unittest.mock import patch

import pytest

from omatrust import __version__
from omatrust.cli.commands.verify import _build_context
from omatrust.cli.main import app, main
from omatrust.cli.output import EXIT_ERROR, EXIT_INVALID, EXIT_VALID
from omatrust.reputation.amount import calculate_transfer_amount
from omatrust.reputation.provider import JsonRpcChainProvider

SUBJECT = "did:web:app.example"
COUNTERPARTY = "did:pkh:eip155:8453:0x" + "bb" * 20


@pytest.fixture(autouse=True)
def no_logging_setup():
    with patch("omatrust.cli.main.configure_logging") as mock_configure:
        yield mock_configure


def _run(capsys, *argv: str) -> tuple[int, str, str]:
    code = main(list(argv))
    captured = capsys.readouterr()
    return code, captured.out, captured.err


# ============================================================================
# Argument Parsing
# ============================================================================


class TestArgumentParsing:
    def test_command_required(self):
        with pytest.raises(SystemExit):
            app().parse_args([])

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            app().parse_args(["--version"])
        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out

    def test_amount_requires_chain_id(self):
        with pytest.raises(SystemExit):
            app().parse_args(["amount", SUBJECT, COUNTERPARTY])

    def test_amount_rejects_unknown_purpose(self):
        with pytest.raises(SystemExit):
            app().parse_args(["amount", SUBJECT, COUNTERPARTY, "--chain-id", "1", "--purpose", "gift"])

    def test_repeated_checks(self):
        args = app().parse_args(["verify-attestation", "a.json", "--check", "pop-jws", "--check", "x402-offer"])
        assert args.checks == ["pop-jws", "x402-offer"]

    def test_log_level_passed_through(self, capsys, no_logging_setup):
        main(["--log-level", "DEBUG", "chains"])
        no_logging_setup.assert_called_once_with(level="DEBUG")

    def test_log_level_unset_defers_to_config(self, capsys, no_logging_setup):
        main(["chains"])
        no_logging_setup.assert_called_once_with(level=None)


# ============================================================================
# Chain and Amount Commands
# ============================================================================


class TestChains:
    def test_lists_chains(self, capsys):
        code, out, _ = _run(capsys, "chains")
        assert code == EXIT_VALID
        chains = {entry["chainId"]: entry for entry in json.loads(out)}
        assert chains[8453]["nativeSymbol"] == "ETH"
        assert chains[66238]["base"]["commercial-tx"] == 100_000_000_000_000


class TestAmount:
    def test_amount(self, capsys):
        code, out, _ = _run(capsys, "amount", SUBJECT, COUNTERPARTY, "--chain-id", "8453")

        assert code == EXIT_VALID
        result = json.loads(out)
        assert result["amount"] == str(calculate_transfer_amount(SUBJECT, COUNTERPARTY, 8453, "shared-control"))
        assert result["purpose"] == "shared-control"
        assert result["formatted"].endswith("ETH")

    def test_commercial_purpose(self, capsys):
        code, out, _ = _run(capsys, "amount", SUBJECT, COUNTERPARTY, "--chain-id", "1", "--purpose", "commercial-tx")
        assert code == EXIT_VALID
        assert json.loads(out)["amount"] == str(calculate_transfer_amount(SUBJECT, COUNTERPARTY, 1, "commercial-tx"))

    def test_unsupported_chain(self, capsys):
        code, out, err = _run(capsys, "amount", SUBJECT, COUNTERPARTY, "--chain-id", "999999")
        assert code == EXIT_ERROR
        assert out == ""
        assert err.startswith("Error: ")


class TestDnsRecord:
    def test_record(self, capsys):
        code, out, _ = _run(capsys, "dns-record", COUNTERPARTY)
        assert code == EXIT_VALID
        result = json.loads(out)
        assert result["record"] == f"v=1;controller={COUNTERPARTY}"
        assert "host" not in result

    def test_record_with_domain(self, capsys):
        code, out, _ = _run(capsys, "dns-record", COUNTERPARTY, "--domain", "App.Example.")
        assert code == EXIT_VALID
        assert json.loads(out)["host"] == "_omatrust.app.example"


# ============================================================================
# Verification Commands
# ============================================================================


class TestVerifyProof:
    def test_valid_proof(self, capsys, tmp_path):
        path = tmp_path / "proof.json"
        path.write_text(json.dumps({"proofType": "x402-receipt", "proofObject": {"id": "r1"}}))

        code, out, _ = _run(capsys, "verify-proof", str(path))

        assert code == EXIT_VALID
        assert json.loads(out) == {"valid": True, "proofType": "x402-receipt"}

    def test_invalid_proof(self, capsys, tmp_path):
        path = tmp_path / "proof.json"
        path.write_text(json.dumps({"proofType": "x402-offer", "proofObject": "not an object"}))

        code, out, _ = _run(capsys, "verify-proof", str(path))

        assert code == EXIT_INVALID
        assert json.loads(out)["valid"] is False

    def test_missing_file(self, capsys, tmp_path):
        code, _, err = _run(capsys, "verify-proof", str(tmp_path / "missing.json"))
        assert code == EXIT_ERROR
        assert "Cannot read" in err

    def test_not_json(self, capsys, tmp_path):
        path = tmp_path / "proof.json"
        path.write_text("{")
        code, _, _ = _run(capsys, "verify-proof", str(path))
        assert code == EXIT_ERROR

    def test_not_an_object(self, capsys, tmp_path):
        path = tmp_path / "proof.json"
        path.write_text(json.dumps([{"proofType": "x402-receipt"}]))
        code, out, err = _run(capsys, "verify-proof", str(path))
        assert code == EXIT_ERROR
        assert out == ""
        assert "proof must be an object" in err


class TestVerifyAttestation:
    @pytest.fixture
    def attestation_file(self, tmp_path):
        path = tmp_path / "attestation.json"
        path.write_text(
            json.dumps(
                {
                    "uid": "0x" + "01" * 32,
                    "data": {
                        "proofs": [
                            json.dumps({"proofType": "x402-receipt", "proofObject": {"id": "r1"}}),
                            {"proofType": "x402-offer", "proofObject": "not an object"},
                        ]
                    },
                }
            )
        )
        return path

    def test_all_checks(self, capsys, attestation_file):
        code, out, _ = _run(capsys, "verify-attestation", str(attestation_file))
        assert code == EXIT_INVALID
        result = json.loads(out)
        assert result["checks"]["x402-receipt"] is True
        assert result["checks"]["x402-offer"] is False

    def test_selected_check(self, capsys, attestation_file):
        code, out, _ = _run(capsys, "verify-attestation", str(attestation_file), "--check", "x402-receipt")
        assert code == EXIT_VALID
        assert "x402-offer" not in json.loads(out)["checks"]

    def test_missing_uid(self, capsys, tmp_path):
        path = tmp_path / "attestation.json"
        path.write_text(json.dumps({"data": {}}))
        code, _, err = _run(capsys, "verify-attestation", str(path))
        assert code == EXIT_ERROR
        assert "uid" in err

    def test_not_an_object(self, capsys, tmp_path):
        path = tmp_path / "attestation.json"
        path.write_text(json.dumps(["0x01"]))
        code, _, err = _run(capsys, "verify-attestation", str(path))
        assert code == EXIT_ERROR
        assert "attestation must be an object" in err


class TestBuildContext:
    def _args(self, **overrides) -> argparse.Namespace:
        values = {"rpc_url": None, "subject": None, "controller": None}
        values.update(overrides)
        return argparse.Namespace(**values)

    def test_without_rpc(self, clean_env):
        context = _build_context(self._args(subject=SUBJECT))
        assert context.provider is None
        assert context.expected_subject == SUBJECT

    def test_rpc_from_argument(self, clean_env):
        context = _build_context(self._args(rpc_url="https://rpc.example", controller=COUNTERPARTY))
        assert isinstance(context.provider, JsonRpcChainProvider)
        assert context.provider.rpc_url == "https://rpc.example"
        assert context.expected_controller == COUNTERPARTY

    def test_rpc_from_environment(self, monkeypatch):
        monkeypatch.setenv("OMATRUST_RPC_URL", "https://env-rpc.example")
        assert _build_context(self._args()).provider.rpc_url == "https://env-rpc.example"
