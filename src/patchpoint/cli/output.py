"""Output formatting helpers for CLI commands."""

from __future__ import annotations

import json
from enum import Enum
from typing import Any

__all__ = [
    "OutputFormat",
    "format_error",
    "format_json",
]


class OutputFormat(str, Enum):
    """Supported output formats for CLI commands."""

    TEXT = "text"
    JSON = "json"


def format_error(
    message: str, details: list[str] | None = None, suggestion: str | None = None
) -> str:
    """Format an error message with optional detail lines and a suggestion.

    Example:
        >>> print(format_error("Bad config", details=["Field: retry"]))
        Error: Bad config
          Field: retry
    """
    lines = [f"Error: {message}"]
    lines.extend(f"  {detail}" for detail in details or [])
    if suggestion:
        lines.append(f"Suggestion: {suggestion}")
    return "\n".join(lines)


def format_json(data: Any) -> str:
    return json.dumps(data, indent=2, default=str)
