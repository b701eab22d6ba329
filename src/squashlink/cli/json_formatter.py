"""
JSON Output Formatter for the SquashLink CLI

Every command produces the same envelope when --json is given, so scripts
can rely on ``success``, ``command``, ``data`` and ``errors``.
"""

from __future__ import annotations

import sys
from datetime import datetime, timezone
from typing import Any

import orjson

_OPTIONS = orjson.OPT_SORT_KEYS | orjson.OPT_INDENT_2


def _envelope(
    command: str,
    data: Any,
    errors: list[str],
    warnings: list[str],
) -> dict[str, Any]:
    return {
        "success": not errors,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "command": command,
        "data": data,
        "errors": errors,
        "warnings": warnings,
    }


def format_json_output(
    success: bool,
    command: str,
    data: Any | None = None,
    errors: list[str] | None = None,
    warnings: list[str] | None = None,
) -> bytes:
    """
    Render the command result envelope.

    ``success`` is forced to False whenever errors are present. Data that
    orjson cannot encode is replaced by an error envelope.

    Args:
        success: Outcome reported by the command
        command: The command name (e.g., "status", "tree")
        data: The command's output data
        errors: Error messages
        warnings: Warning messages

    Returns:
        JSON-encoded bytes ready for output
    """
    envelope = _envelope(command, data, list(errors or []), list(warnings or []))
    envelope["success"] = success and envelope["success"]

    try:
        return orjson.dumps(envelope, option=_OPTIONS)
    except TypeError as e:
        fallback = _envelope(command, None, [f"JSON serialization failed: {e!s}"], [])
        return orjson.dumps(fallback, option=_OPTIONS)


def write_json_output(
    command: str,
    data: Any | None = None,
    *,
    success: bool = True,
    errors: list[str] | None = None,
    warnings: list[str] | None = None,
) -> None:
    """Write the JSON envelope to stdout followed by a newline."""
    output = format_json_output(success, command, data, errors, warnings)
    sys.stdout.write(output.decode("utf-8"))
    sys.stdout.write("\n")
    sys.stdout.flush()


__all__ = ["format_json_output", "write_json_output"]
