"""OMATrust Core - errors, configuration, logging and canonical encoding."""

from .canonical import canonical_json, canonical_json_str
from .config import CoreSettings, clear_config_cache, get_config
from .exceptions import (
    AttestationNotFoundError,
    InvalidDidError,
    InvalidInputError,
    NetworkError,
    NotFoundError,
    OmaTrustError,
    ProofVerificationError,
    SchemaNotFoundError,
    UnsupportedChainError,
)
from .logging import (
    configure_logging,
    get_verification_scope,
    get_logger,
)

__all__ = [
    "canonical_json",
    "canonical_json_str",
    "CoreSettings",
    "clear_config_cache",
    "get_config",
    "AttestationNotFoundError",
    "InvalidDidError",
    "InvalidInputError",
    "NetworkError",
    "NotFoundError",
    "OmaTrustError",
    "ProofVerificationError",
    "SchemaNotFoundError",
    "UnsupportedChainError",
    "configure_logging",
    "get_verification_scope",
    "get_logger",
]
