"""Output formatting for CLI commands.

Results are always printed as JSON on stdout; errors go to stderr.
"""

from __future__ import annotations

import json
import sys
from typing import Any

EXIT_VALID = 0
EXIT_INVALID = 1
EXIT_ERROR = 2


def output_result(data: dict[str, Any] | list[Any]) -> None:
    """Pretty-print a command result as JSON."""
    print(json.dumps(data, indent=2, default=str))


def output_error(message: str) -> None:
    """Print error message to stderr."""
    print(f"Error: {message}", file=sys.stderr)
