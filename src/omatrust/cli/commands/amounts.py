"""Chain, amount and DNS record commands.

Commands:
    omatrust chains                                   List supported chains
    omatrust amount SUBJECT COUNTERPARTY --chain-id N Transfer amount for a proof
    omatrust dns-record CONTROLLER_DID                TXT record value to publish
"""

from __future__ import annotations

import argparse

from ...core.exceptions import OmaTrustError
from ...reputation.amount import calculate_transfer_amount, format_transfer_amount
from ...reputation.chains import CHAIN_CONFIGS, get_chain_config
from ...reputation.dns_txt import DNS_TXT_PREFIX, build_dns_txt_record
from ...reputation.models import ProofPurpose
from ..output import EXIT_ERROR, EXIT_VALID, output_error, output_result


def register(subparsers: argparse._SubParsersAction) -> None:
    """Register the chains, amount and dns-record commands."""
    chains_p = subparsers.add_parser("chains", help="List chains supported for transfer-amount proofs")
    chains_p.set_defaults(func=cmd_chains)

    amount_p = subparsers.add_parser("amount", help="Compute the transfer amount for a tx-encoded-value proof")
    amount_p.add_argument("subject", help="DID of the party sending the transfer")
    amount_p.add_argument("counterparty", help="DID of the party receiving the transfer")
    amount_p.add_argument("--chain-id", type=int, required=True, help="Chain the transfer happens on")
    amount_p.add_argument(
        "--purpose",
        choices=[p.value for p in ProofPurpose],
        default=ProofPurpose.SHARED_CONTROL.value,
        help="Claim the transfer supports (default: shared-control)",
    )
    amount_p.set_defaults(func=cmd_amount)

    dns_p = subparsers.add_parser("dns-record", help="Print the DNS TXT record naming a controller")
    dns_p.add_argument("controller", help="Controller DID")
    dns_p.add_argument("--domain", help="Domain the record is published for")
    dns_p.set_defaults(func=cmd_dns_record)


def cmd_chains(args: argparse.Namespace) -> int:
    """List supported chains and their amount bases."""
    output_result([
        {
            "chainId": chain_id,
            "nativeSymbol": config.native_symbol,
            "decimals": config.decimals,
            "explorer": config.explorer,
            "base": {purpose.value: base for purpose, base in config.base.items()},
        }
        for chain_id, config in CHAIN_CONFIGS.items()
    ])
    return EXIT_VALID


def cmd_amount(args: argparse.Namespace) -> int:
    """Compute the amount the subject must send to the counterparty."""
    try:
        amount = calculate_transfer_amount(args.subject, args.counterparty, args.chain_id, args.purpose)
        config = get_chain_config(args.chain_id)
    except OmaTrustError as e:
        output_error(str(e))
        return EXIT_ERROR

    output_result({
        "chainId": args.chain_id,
        "purpose": args.purpose,
        "amount": str(amount),
        "formatted": format_transfer_amount(amount, args.chain_id),
        "explorer": config.explorer,
    })
    return EXIT_VALID


def cmd_dns_record(args: argparse.Namespace) -> int:
    """Print the TXT record value for a controller DID."""
    try:
        record = build_dns_txt_record(args.controller)
    except OmaTrustError as e:
        output_error(str(e))
        return EXIT_ERROR

    result = {"record": record}
    if args.domain:
        result["host"] = f"{DNS_TXT_PREFIX}.{args.domain.lower().rstrip('.')}"
    output_result(result)
    return EXIT_VALID
