#!/usr/bin/env python3
"""
OMATrust CLI - reputation proof tooling.

Commands:
  omatrust chains                  Supported chains and amount bases
  omatrust amount S C --chain-id N Transfer amount for a tx-encoded-value proof
  omatrust dns-record DID          DNS TXT record naming a controller
  omatrust verify-proof FILE       Verify a proof envelope
  omatrust verify-attestation FILE Verify an attestation and its proofs
"""

from __future__ import annotations

import argparse
import sys

from .. import __version__
from ..core.logging import configure_logging
from .commands import COMMAND_MODULES


def app() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="omatrust",
        description="Create and verify OMATrust reputation proofs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  omatrust chains
  omatrust amount did:web:app.example did:pkh:eip155:8453:0xabc... --chain-id 8453
  omatrust dns-record did:pkh:eip155:1:0xabc... --domain app.example
  omatrust verify-proof proof.json --rpc-url https://mainnet.base.org \\
      --subject did:pkh:eip155:8453:0xaaa... --controller did:pkh:eip155:8453:0xbbb...
  omatrust verify-attestation attestation.json --check pop-eip712
        """,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--log-level", help="Log level (default: OMATRUST_LOG_LEVEL or INFO)")

    subparsers = parser.add_subparsers(dest="command", required=True)
    for module in COMMAND_MODULES:
        module.register(subparsers)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = app()
    args = parser.parse_args(argv)

    configure_logging(level=args.log_level)

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
