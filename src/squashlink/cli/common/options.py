"""
Reusable Typer Options Module

Options shared by the main callback and the commands, defined once so
every command spells and documents them the same way.
"""

from __future__ import annotations

import typer

from squashlink.shared.constants import CLIHelp

# Verbose option - count-based for multiple -v flags
verbose_option = typer.Option(
    "--verbose",
    "-v",
    count=True,
    help="Enable verbose output (equivalent to --log-level DEBUG).",
)

# Log level option - enum-based with case-insensitive choices
log_level_option = typer.Option(
    "--log-level",
    case_sensitive=False,
    help="Set the logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL). Default: WARNING.",
)

# JSON output option - flag-based
json_output_option = typer.Option(
    "--json",
    help="Enable machine-readable JSON output instead of human-readable format.",
)

# Version option - for main app only
version_option = typer.Option(
    "--version",
    "-V",
    help="Show version information and exit.",
    is_eager=True,
)

config_option = typer.Option(
    "--config",
    "-c",
    help="Path of a TOML configuration file.",
    exists=True,
    dir_okay=False,
    readable=True,
)

page_option = typer.Option("--page", "-p", min=0, help=CLIHelp.PAGE_HELP)

size_option = typer.Option("--size", "-s", min=1, help=CLIHelp.SIZE_HELP)

depth_option = typer.Option("--depth", "-d", min=0, help=CLIHelp.TREE_DEPTH_HELP)

__all__ = [
    "config_option",
    "depth_option",
    "json_output_option",
    "log_level_option",
    "page_option",
    "size_option",
    "verbose_option",
    "version_option",
]
