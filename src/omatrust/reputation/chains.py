"""Per-chain constants for transfer-amount proofs.

The table is built once at import time and exposed read-only. A chain id
that is not listed is always an error, never a fallback to some default.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from ..core.exceptions import UnsupportedChainError
from .models import ProofPurpose, parse_proof_purpose


@dataclass(frozen=True)
class ChainConfig:
    """Static description of a supported chain."""

    decimals: int
    native_symbol: str
    explorer: str
    base: Mapping[ProofPurpose, int]

    def range_for(self, purpose: ProofPurpose) -> int:
        return self.base[purpose] // 10


@dataclass(frozen=True)
class ChainConstants:
    """Amount window for one chain and purpose."""

    base: int
    range: int
    decimals: int
    native_symbol: str


def _evm_chain(symbol: str, explorer: str, shared_control: int, commercial_tx: int) -> ChainConfig:
    return ChainConfig(
        decimals=18,
        native_symbol=symbol,
        explorer=explorer,
        base=MappingProxyType({
            ProofPurpose.SHARED_CONTROL: shared_control,
            ProofPurpose.COMMERCIAL_TX: commercial_tx,
        }),
    )


CHAIN_CONFIGS: Mapping[int, ChainConfig] = MappingProxyType({
    1: _evm_chain("ETH", "https://etherscan.io", 100_000_000_000_000, 1_000_000_000_000),
    10: _evm_chain("ETH", "https://optimistic.etherscan.io", 100_000_000_000_000, 1_000_000_000_000),
    137: _evm_chain("POL", "https://polygonscan.com", 100_000_000_000_000, 1_000_000_000_000),
    8453: _evm_chain("ETH", "https://basescan.org", 100_000_000_000_000, 1_000_000_000_000),
    42161: _evm_chain("ETH", "https://arbiscan.io", 100_000_000_000_000, 1_000_000_000_000),
    11155111: _evm_chain("ETH", "https://sepolia.etherscan.io", 100_000_000_000_000, 1_000_000_000_000),
    6623: _evm_chain("OMA", "https://explorer.chain.oma3.org", 10_000_000_000_000_000, 100_000_000_000_000),
    66238: _evm_chain("OMA", "https://explorer.testnet.chain.oma3.org", 10_000_000_000_000_000, 100_000_000_000_000),
})


def get_supported_chain_ids() -> list[int]:
    return list(CHAIN_CONFIGS)


def is_chain_supported(chain_id: int) -> bool:
    return chain_id in CHAIN_CONFIGS


def get_chain_config(chain_id: int) -> ChainConfig:
    """Look up a chain.

    Raises:
        UnsupportedChainError: If the chain id is not registered
    """
    config = CHAIN_CONFIGS.get(chain_id)
    if config is None:
        raise UnsupportedChainError(chain_id, get_supported_chain_ids())
    return config


def get_chain_constants(chain_id: int, purpose: ProofPurpose | str) -> ChainConstants:
    config = get_chain_config(chain_id)
    purpose = parse_proof_purpose(purpose)
    return ChainConstants(
        base=config.base[purpose],
        range=config.range_for(purpose),
        decimals=config.decimals,
        native_symbol=config.native_symbol,
    )
