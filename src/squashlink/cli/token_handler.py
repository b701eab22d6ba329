"""Token command handler for SquashLink CLI.

Decodes the configured bearer token locally; no request is sent.
"""

from __future__ import annotations

from rich.console import Console
from rich.table import Table

from squashlink.cli.common.context import get_cli_context
from squashlink.cli.common.runtime import create_container
from squashlink.cli.json_formatter import write_json_output
from squashlink.services.token_lifecycle import TokenInfo
from squashlink.shared.constants import CLICommands, CLIDefaults
from squashlink.shared.errors import ErrorCode, ErrorContext, SecurityError


def print_token(console: Console, info: TokenInfo) -> None:
    table = Table(title="SquashTM API token")
    table.add_column("Claim", style="cyan")
    table.add_column("Value", style="white")
    table.add_row("Subject", info.subject or "-")
    table.add_row("Permissions", str(info.permissions) if info.permissions is not None else "-")
    table.add_row("Issued at", info.issued_at.isoformat() if info.issued_at else "-")
    table.add_row("Expires at", info.expires_at.isoformat() if info.expires_at else "-")
    table.add_row("Expired", "[red]yes[/red]" if info.is_expired else "[green]no[/green]")
    console.print(table)


def handle_token_command() -> int:
    context = get_cli_context()
    container = create_container(context)
    info = container.token_context().describe()

    if info is None:
        raise SecurityError(
            ErrorCode.TOKEN_MISSING,
            "No decodable SquashTM token configured (set SQUASH_API_TOKEN)",
            ErrorContext(operation=CLICommands.TOKEN),
        )

    if context.json_output:
        write_json_output(CLICommands.TOKEN, info.to_dict())
    else:
        print_token(Console(), info)

    return CLIDefaults.EXIT_ERROR if info.is_expired else CLIDefaults.EXIT_SUCCESS


__all__ = ["handle_token_command", "print_token"]
