"""Status command handler for SquashLink CLI.

Reports connectivity, the circuit breaker, the active token and whether
calls are currently served from the fallback dataset.
"""

from __future__ import annotations

import logging
from typing import Any

from rich.console import Console
from rich.table import Table

from squashlink.cli.common.context import get_cli_context
from squashlink.cli.common.runtime import run_with_gateway
from squashlink.cli.json_formatter import write_json_output
from squashlink.core.gateway import ConnectionStatus, SquashGateway
from squashlink.shared.constants import CLICommands, CLIDefaults

logger = logging.getLogger(__name__)

_STATUS_STYLES = {
    ConnectionStatus.CONNECTED: "green",
    ConnectionStatus.DISCONNECTED: "red",
    ConnectionStatus.TOKEN_EXPIRED: "yellow",
}


async def collect_status(gateway: SquashGateway) -> dict[str, Any]:
    """Gather the status report as plain data."""
    connection = await gateway.check_connection()
    token = gateway.token_status()
    return {
        "connection": connection.value,
        "circuit": gateway.circuit_status().to_dict(),
        "token": token.to_dict() if token else None,
        "using_fallback": gateway.using_fallback,
    }


def print_status(console: Console, status: dict[str, Any]) -> None:
    connection = ConnectionStatus(status["connection"])
    console.print(
        f"SquashTM: [{_STATUS_STYLES[connection]}]{connection.value}[/{_STATUS_STYLES[connection]}]",
    )

    table = Table(title="Circuit breaker")
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="white")
    circuit = status["circuit"]
    table.add_row("Open", "yes" if circuit["is_open"] else "no")
    table.add_row("Failures", f"{circuit['failures']} / {circuit['threshold']}")
    table.add_row("Cooldown remaining", f"{circuit['cooldown_remaining_ms']} ms")
    table.add_row("Last failure", circuit["last_failure_time"] or "-")
    console.print(table)

    token = status["token"]
    if token is None:
        console.print("[yellow]Token: missing or undecodable[/yellow]")
    else:
        state = "[red]expired[/red]" if token["is_expired"] else "[green]valid[/green]"
        console.print(f"Token: {state} (expires {token['expires_at'] or 'never'})")

    if status["using_fallback"]:
        console.print("[yellow]Serving sample data (fallback mode)[/yellow]")


def handle_status_command() -> int:
    context = get_cli_context()
    status = run_with_gateway(context, collect_status)
    logger.debug("Status collected: %s", status["connection"])

    if context.json_output:
        write_json_output(CLICommands.STATUS, status)
    else:
        print_status(Console(), status)
    return CLIDefaults.EXIT_SUCCESS


__all__ = ["collect_status", "handle_status_command", "print_status"]
