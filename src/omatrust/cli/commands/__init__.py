"""CLI command modules for OMATrust.

Each module exposes a ``register(subparsers)`` function that wires up
its argparse sub-commands and sets ``parser.set_defaults(func=handler)``.
"""

from . import amounts, verify
from .amounts import cmd_amount, cmd_chains, cmd_dns_record
from .verify import cmd_verify_attestation, cmd_verify_proof

# All command modules with register() functions, in registration order.
COMMAND_MODULES = [
    amounts,
    verify,
]

__all__ = [
    "COMMAND_MODULES",
    "cmd_amount",
    "cmd_chains",
    "cmd_dns_record",
    "cmd_verify_attestation",
    "cmd_verify_proof",
]
