# SPDX-License-Identifier: MIT
# Copyright (c) 2026 OMATrust Contributors

"""Structured logging configuration for OMATrust.

Provides:
- A verification scope that tags every record emitted while an
  attestation or proof is being checked
- JSON formatter for production (machine-parseable)
- Standard formatter for development (human-readable)

Scope fields are ``attestation_uid`` and ``proof_type``. Scopes nest, so a
proof checked inside an attestation carries both:

    with verification_scope(attestation_uid=attestation.uid):
        with verification_scope(proof_type="pop-jws"):
            logger.info("checking")   # {"attestation_uid": ..., "proof_type": "pop-jws"}
"""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Generator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, datetime
from types import MappingProxyType
from typing import Any

SCOPE_FIELDS = ("attestation_uid", "proof_type")

_EMPTY_SCOPE: MappingProxyType[str, str] = MappingProxyType({})

# Current verification scope (thread/async-safe)
_scope: ContextVar[MappingProxyType[str, str]] = ContextVar("omatrust_verification_scope", default=_EMPTY_SCOPE)


def get_verification_scope() -> dict[str, str]:
    """Scope fields of the record being checked, outermost first."""
    return dict(_scope.get())


@contextmanager
def verification_scope(
    *,
    attestation_uid: str | None = None,
    proof_type: str | None = None,
) -> Generator[dict[str, str], None, None]:
    """Tag log records emitted inside the block with the given fields.

    Fields left as None keep the value of the enclosing scope.

    Args:
        attestation_uid: UID of the attestation being verified
        proof_type: Wire name of the proof being verified

    Yields:
        The merged scope in effect inside the block.
    """
    merged = dict(_scope.get())
    for name, value in (("attestation_uid", attestation_uid), ("proof_type", proof_type)):
        if value:
            merged[name] = value
    token = _scope.set(MappingProxyType(merged))
    try:
        yield dict(merged)
    finally:
        _scope.reset(token)


class JSONFormatter(logging.Formatter):
    """JSON log formatter for production environments.

    Scope fields appear as top-level keys, so log pipelines can filter on a
    single attestation or proof type without parsing messages.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        log_data.update(_scope.get())

        if record.levelno >= logging.WARNING:
            log_data["source"] = {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if hasattr(record, "extra_data"):
            log_data["extra"] = record.extra_data

        return json.dumps(log_data, default=str)


def _short_uid(uid: str) -> str:
    return uid if len(uid) <= 12 else f"{uid[:10]}.."


class StandardFormatter(logging.Formatter):
    """Standard log formatter for development.

    Messages emitted inside a verification scope are prefixed with
    ``[<short uid> <proof type>]``.
    """

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"
    SCOPE_COLOR = "\033[90m"  # Gray

    def __init__(self, use_colors: bool = True):
        super().__init__(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        self.use_colors = use_colors and sys.stderr.isatty()

    def _scope_prefix(self) -> str:
        scope = _scope.get()
        parts = []
        if "attestation_uid" in scope:
            parts.append(_short_uid(scope["attestation_uid"]))
        if "proof_type" in scope:
            parts.append(scope["proof_type"])
        if not parts:
            return ""
        tag = f"[{' '.join(parts)}]"
        return f"{self.SCOPE_COLOR}{tag}{self.RESET} " if self.use_colors else f"{tag} "

    def format(self, record: logging.LogRecord) -> str:
        # Copy so other handlers see the original record
        record = logging.makeLogRecord(record.__dict__)
        record.msg = self._scope_prefix() + str(record.msg)

        if self.use_colors:
            color = self.COLORS.get(record.levelname, "")
            record.levelname = f"{color}{record.levelname}{self.RESET}"

        return super().format(record)


def configure_logging(
    level: str | int | None = None,
    json_format: bool | None = None,
    log_file: str | None = None,
) -> None:
    """Configure logging for OMATrust tools.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL); None uses
            the configured level
        json_format: Use JSON format (auto-detect if None)
        log_file: Optional file to write logs to; None uses the configured file

    Environment variables:
        OMATRUST_LOG_LEVEL: Log level used when ``level`` is None
        OMATRUST_LOG_FORMAT: Log format ("json" or "text", auto-detect if unset)
        OMATRUST_LOG_FILE: Log file path
    """
    from .config import get_config

    config = get_config()

    if level is None:
        level = config.log_level
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    if json_format is None:
        format_env = config.log_format.lower()
        if format_env == "json":
            json_format = True
        elif format_env == "text":
            json_format = False
        else:
            # Auto-detect: use JSON if not in a terminal
            json_format = not sys.stderr.isatty()

    log_file = config.log_file if log_file is None else log_file

    formatter: logging.Formatter = JSONFormatter() if json_format else StandardFormatter()

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        # Always use JSON for file output
        file_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(file_handler)

    # Network libraries log every request at DEBUG
    for name in ("aiohttp", "asyncio", "dns"):
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the given name."""
    return logging.getLogger(name)
