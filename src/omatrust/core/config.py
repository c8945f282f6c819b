"""Core configuration - centralized config for the omatrust package.

All environment-based configuration should flow through this module.
This provides a single source of truth and consistent defaults.

Usage:
    from omatrust.core.config import get_config
    config = get_config()

    timeout = config.http_timeout_seconds
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class CoreSettings(BaseSettings):
    """Core configuration settings for OMATrust.

    Settings can be configured via environment variables with the
    OMATRUST_ prefix, or through a local .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ==========================================================================
    # LOGGING SETTINGS
    # ==========================================================================

    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR)",
        validation_alias="OMATRUST_LOG_LEVEL",
    )
    log_format: str = Field(
        default="",
        description="Log format: 'json', 'text', or '' (auto-detect)",
        validation_alias="OMATRUST_LOG_FORMAT",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (optional)",
        validation_alias="OMATRUST_LOG_FILE",
    )

    # ==========================================================================
    # NETWORK SETTINGS
    # ==========================================================================

    http_timeout_seconds: float = Field(
        default=15.0,
        description="Total timeout for evidence, DID document, relay and RPC requests",
        validation_alias="OMATRUST_HTTP_TIMEOUT",
    )
    witness_timeout_ms: int = Field(
        default=15000,
        description="Per-attempt timeout for controller witness gateway calls",
        validation_alias="OMATRUST_WITNESS_TIMEOUT_MS",
    )
    dns_timeout_seconds: float = Field(
        default=10.0,
        description="DNS TXT lookup timeout",
        validation_alias="OMATRUST_DNS_TIMEOUT",
    )
    rpc_url: str | None = Field(
        default=None,
        description="JSON-RPC endpoint used by the CLI to fetch transactions",
        validation_alias="OMATRUST_RPC_URL",
    )

    # ==========================================================================
    # PROOF SETTINGS
    # ==========================================================================

    proof_validity_seconds: int = Field(
        default=600,
        description="Default lifetime of pop-eip712 and pop-jws proofs",
        validation_alias="OMATRUST_PROOF_VALIDITY_SECONDS",
    )


# ==========================================================================
# GLOBAL CONFIG INSTANCE (lazy loaded)
# ==========================================================================

_config: CoreSettings | None = None


def get_config() -> CoreSettings:
    """Get the global configuration instance.

    Returns:
        The singleton CoreSettings instance.
    """
    global _config
    if _config is None:
        _config = CoreSettings()
    return _config


def clear_config_cache() -> None:
    """Clear the config cache. Useful for testing."""
    global _config
    _config = None
