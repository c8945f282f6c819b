# SPDX-License-Identifier: MIT
# Copyright (c) 2026 OMATrust Contributors

"""OMATrust - reputation proofs for decentralized identities.

A subject proves a relationship with a counterparty (shared control of an
identity, or a commercial transaction) by pointing at evidence a verifier
can check independently:

  Transfer amount   deterministic per (subject, counterparty, chain, purpose)
    -> Proof          one of seven evidence kinds, wrapped in an envelope
    -> Attestation    proofs embedded in a ledger record
    -> Verdict        every check folded into valid + reasons

CLI entry point: ``omatrust``
"""

__version__ = "0.1.0"

from . import (
    core as core,
)
from . import (
    identity as identity,
)
from . import (
    reputation as reputation,
)
