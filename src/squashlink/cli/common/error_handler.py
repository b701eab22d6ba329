"""
CLI Error Handling Utilities

Maps exceptions raised by commands to CliError instances with an exit
code, logs them and prints them either as text or as the JSON envelope.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

from squashlink.cli.json_formatter import write_json_output
from squashlink.shared.errors import (
    CliError,
    InfrastructureError,
    SecurityError,
    SquashLinkError,
    create_cli_error,
)

logger = logging.getLogger(__name__)

# Exit codes per error family
EXIT_APPLICATION_ERROR = 1
EXIT_INFRASTRUCTURE_ERROR = 2
EXIT_SECURITY_ERROR = 3
EXIT_INTERRUPTED = 130


def handle_cli_error(
    error: Exception,
    command: str,
    *,
    json_output: bool = False,
) -> int:
    """Handle CLI errors with consistent formatting and logging.

    Args:
        error: The exception that occurred
        command: The CLI command being executed
        json_output: Whether to output JSON format

    Returns:
        Exit code for the CLI command
    """
    error_context: dict[str, Any] = {
        "command": command,
        "error_type": type(error).__name__,
        "json_output": json_output,
    }
    cli_error = _map_error_to_cli_error(error, command, error_context)
    _log_error(error, command, cli_error, error_context)
    _output_error(cli_error, error, command, error_context, json_output=json_output)

    return cli_error.exit_code


def _map_error_to_cli_error(
    error: Exception,
    command: str,
    error_context: dict[str, Any],
) -> CliError:
    if isinstance(error, CliError):
        error_context["error_code"] = error.code.value
        return error

    if isinstance(error, SquashLinkError):
        error_context["error_code"] = error.code.value
        if isinstance(error, SecurityError):
            exit_code = EXIT_SECURITY_ERROR
        elif isinstance(error, InfrastructureError):
            exit_code = EXIT_INFRASTRUCTURE_ERROR
        else:
            exit_code = EXIT_APPLICATION_ERROR
        cli_error = create_cli_error(
            message=error.message,
            command=command,
            original_error=error,
            exit_code=exit_code,
        )
        # Keep the domain code visible to scripts
        cli_error.code = error.code
        return cli_error

    if isinstance(error, KeyboardInterrupt):
        error_context["interrupt_type"] = "user_interrupt"
        return create_cli_error(
            message="Command interrupted by user",
            command=command,
            original_error=error,
            exit_code=EXIT_INTERRUPTED,
        )

    if isinstance(error, (FileNotFoundError, PermissionError)):
        error_context["error_category"] = "file_system"
        return create_cli_error(
            message=f"File system error: {error}",
            command=command,
            original_error=error,
        )

    if isinstance(error, ValueError):
        error_context["error_category"] = "invalid_input"
        return create_cli_error(
            message=f"Invalid input: {error}",
            command=command,
            original_error=error,
        )

    error_context["error_category"] = "unexpected"
    return create_cli_error(
        message=f"Unexpected error: {error}",
        command=command,
        original_error=error,
    )


def _log_error(
    error: Exception,
    command: str,
    cli_error: CliError,
    error_context: dict[str, Any],
) -> None:
    if isinstance(error, KeyboardInterrupt):
        logger.warning(
            "Command interrupted: %s",
            cli_error.message,
            extra={"context": error_context},
        )
    elif isinstance(error, SquashLinkError):
        # Expected failures: no traceback
        logger.error(
            "CLI error in %s: %s",
            command,
            cli_error.message,
            extra={"context": error_context},
        )
    else:
        logger.exception(
            "CLI error in %s: %s",
            command,
            cli_error.message,
            extra={"context": error_context},
        )


def _output_error(
    cli_error: CliError,
    error: Exception,
    command: str,
    error_context: dict[str, Any],
    *,
    json_output: bool,
) -> None:
    if json_output:
        write_json_output(
            command,
            {
                "error_code": cli_error.code.value,
                "error_type": type(error).__name__,
                "exit_code": cli_error.exit_code,
                "context": error_context,
            },
            success=False,
            errors=[cli_error.message],
        )
    else:
        sys.stderr.write(f"Error: {cli_error.message}\n")


__all__ = [
    "EXIT_APPLICATION_ERROR",
    "EXIT_INFRASTRUCTURE_ERROR",
    "EXIT_INTERRUPTED",
    "EXIT_SECURITY_ERROR",
    "handle_cli_error",
]
