"""
SquashLink Typer CLI Application

Command-line front end over the SquashTM access layer: connection status,
the lazily loaded project tree, paged test cases and token inspection.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Callable

import typer

from squashlink.cli.common.context import (
    CliContext,
    LogLevel,
    get_cli_context,
    set_cli_context,
)
from squashlink.cli.common.error_handler import handle_cli_error
from squashlink.cli.common.options import (
    config_option,
    depth_option,
    json_output_option,
    log_level_option,
    page_option,
    size_option,
    verbose_option,
    version_option,
)
from squashlink.cli.status_handler import handle_status_command
from squashlink.cli.testcases_handler import handle_test_case_command, handle_test_cases_command
from squashlink.cli.token_handler import handle_token_command
from squashlink.cli.tree_handler import handle_tree_command
from squashlink.shared.constants import CLICommands, CLIDefaults, CLIHelp
from squashlink.shared.logging import setup_structured_logger

# Version information
__version__ = CLIDefaults.VERSION


def version_callback(value: bool) -> None:
    """Print version information and exit."""
    if value:
        typer.echo(CLIHelp.VERSION_TEXT.format(version=__version__))
        raise typer.Exit


def main_callback(
    verbose: int,
    log_level: LogLevel,
    json_output: bool,
    version: bool,
    config_path: Path | None = None,
) -> None:
    """
    Process the common options before any command runs.

    Sets up the global CLI context and the ``squashlink`` logger.

    Args:
        verbose: Verbosity level (count-based)
        log_level: Logging level (enum-based)
        json_output: Whether to output in JSON format
        version: Whether to show version information
        config_path: Optional TOML configuration file
    """
    if version:
        version_callback(value=True)

    context = CliContext(
        verbose=verbose,
        log_level=log_level,
        json_output=json_output,
        config_path=config_path,
    )
    set_cli_context(context)
    setup_structured_logger(level=context.get_effective_log_level())


def _run_command(command: str, handler: Callable[[], int]) -> None:
    """Run a handler, turning its exit code or error into typer.Exit."""
    json_output = get_cli_context().json_output
    try:
        exit_code = handler()
    except Exception as e:  # noqa: BLE001
        exit_code = handle_cli_error(e, command, json_output=json_output)
        raise typer.Exit(exit_code) from e
    if exit_code != CLIDefaults.EXIT_SUCCESS:
        raise typer.Exit(exit_code)


app = typer.Typer(
    name=CLIHelp.APP_NAME,
    help=CLIHelp.APP_DESCRIPTION,
    add_completion=True,
    rich_markup_mode=CLIHelp.APP_STYLE,
    no_args_is_help=True,
    invoke_without_command=True,
)


@app.callback()
def main(
    verbose: Annotated[int, verbose_option] = 0,
    log_level: Annotated[LogLevel, log_level_option] = LogLevel.WARNING,
    json_output: Annotated[bool, json_output_option] = False,
    version: Annotated[bool, version_option] = False,
    config_path: Annotated[Path | None, config_option] = None,
) -> None:
    """Main CLI callback with error handling."""
    try:
        main_callback(verbose, log_level, json_output, version, config_path)
    except typer.Exit:
        raise
    except Exception as e:
        exit_code = handle_cli_error(e, "main-callback", json_output=json_output)
        raise typer.Exit(exit_code) from e


@app.command(CLICommands.STATUS, help=CLIHelp.STATUS_HELP)
def status_command_typer() -> None:
    """Show connection, circuit breaker and token status.

    Examples:
        squashlink status
        squashlink --json status
    """
    _run_command(CLICommands.STATUS, handle_status_command)


@app.command(CLICommands.TREE, help=CLIHelp.TREE_HELP)
def tree_command_typer(
    depth: Annotated[int, depth_option] = CLIDefaults.DEFAULT_TREE_DEPTH,
) -> None:
    """Print the project tree, expanding ``depth`` levels below the projects."""
    _run_command(CLICommands.TREE, lambda: handle_tree_command(depth))


@app.command(CLICommands.TEST_CASES, help=CLIHelp.TEST_CASES_HELP)
def test_cases_command_typer(
    page: Annotated[int, page_option] = CLIDefaults.DEFAULT_PAGE,
    size: Annotated[int, size_option] = CLIDefaults.DEFAULT_PAGE_SIZE,
) -> None:
    _run_command(CLICommands.TEST_CASES, lambda: handle_test_cases_command(page, size))


@app.command(CLICommands.TEST_CASE, help=CLIHelp.TEST_CASE_HELP)
def test_case_command_typer(
    test_case_id: Annotated[int, typer.Argument(help="SquashTM test case id.", min=1)],
) -> None:
    _run_command(CLICommands.TEST_CASE, lambda: handle_test_case_command(test_case_id))


@app.command(CLICommands.TOKEN, help=CLIHelp.TOKEN_HELP)
def token_command_typer() -> None:
    _run_command(CLICommands.TOKEN, handle_token_command)


__all__ = ["app", "main_callback", "version_callback"]
