"""Verification commands.

Commands:
    omatrust verify-proof FILE          Verify one proof envelope (JSON file)
    omatrust verify-attestation FILE    Verify an attestation record (JSON file)

Exit code is 0 when valid, 1 when invalid and 2 on error.
"""

from __future__ import annotations

import argparse
import asyncio
import json
from pathlib import Path
from typing import Any

from ...core.config import get_config
from ...core.exceptions import OmaTrustError
from ...reputation.attestation import verify_attestation
from ...reputation.models import VerificationContext
from ...reputation.provider import JsonRpcChainProvider
from ...reputation.verification import verify_proof
from ..output import EXIT_ERROR, EXIT_INVALID, EXIT_VALID, output_error, output_result


def _add_context_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("file", help="JSON file to verify")
    parser.add_argument("--rpc-url", help="JSON-RPC endpoint for transaction proofs (default: OMATRUST_RPC_URL)")
    parser.add_argument("--subject", help="Expected subject DID")
    parser.add_argument("--controller", help="Expected controller DID")


def register(subparsers: argparse._SubParsersAction) -> None:
    """Register the verify-proof and verify-attestation commands."""
    proof_p = subparsers.add_parser("verify-proof", help="Verify a proof envelope")
    _add_context_args(proof_p)
    proof_p.set_defaults(func=cmd_verify_proof)

    att_p = subparsers.add_parser("verify-attestation", help="Verify an attestation and its proofs")
    _add_context_args(att_p)
    att_p.add_argument(
        "--check",
        action="append",
        dest="checks",
        metavar="TYPE",
        help="Proof type to verify (repeatable; default: every type present)",
    )
    att_p.set_defaults(func=cmd_verify_attestation)


def _load_json(path: str) -> Any:
    return json.loads(Path(path).read_text(encoding="utf-8"))


def _build_context(args: argparse.Namespace) -> VerificationContext:
    rpc_url = args.rpc_url or get_config().rpc_url
    return VerificationContext(
        provider=JsonRpcChainProvider(rpc_url) if rpc_url else None,
        expected_subject=args.subject,
        expected_controller=args.controller,
    )


def cmd_verify_proof(args: argparse.Namespace) -> int:
    """Verify one proof envelope."""
    try:
        proof = _load_json(args.file)
        result = asyncio.run(verify_proof(proof, _build_context(args)))
    except (OSError, json.JSONDecodeError) as e:
        output_error(f"Cannot read {args.file}: {e}")
        return EXIT_ERROR
    except OmaTrustError as e:
        output_error(str(e))
        return EXIT_ERROR

    output_result(result.to_dict())
    return EXIT_VALID if result.valid else EXIT_INVALID


def cmd_verify_attestation(args: argparse.Namespace) -> int:
    """Verify an attestation record and its embedded proofs."""
    try:
        attestation = _load_json(args.file)
        result = asyncio.run(verify_attestation(attestation, _build_context(args), args.checks))
    except (OSError, json.JSONDecodeError) as e:
        output_error(f"Cannot read {args.file}: {e}")
        return EXIT_ERROR
    except OmaTrustError as e:
        output_error(str(e))
        return EXIT_ERROR

    output_result(result.to_dict())
    return EXIT_VALID if result.valid else EXIT_INVALID
