"""Test case command handlers for SquashLink CLI.

``testcases`` lists one page of the flat collection; ``testcase`` shows a
single test case with its ordered steps.
"""

from __future__ import annotations

import logging
from typing import Any

from rich.console import Console
from rich.table import Table

from squashlink.cli.common.context import get_cli_context
from squashlink.cli.common.runtime import run_with_gateway
from squashlink.cli.json_formatter import write_json_output
from squashlink.core.gateway import SquashGateway
from squashlink.core.paging import TestCasePage
from squashlink.shared.constants import CLICommands, CLIDefaults
from squashlink.shared.models import TestCase

logger = logging.getLogger(__name__)


def _enum_text(value: Any) -> str:
    if value is None:
        return "-"
    return str(getattr(value, "value", value))


def page_to_dict(page: TestCasePage) -> dict[str, Any]:
    return {
        "items": [item.model_dump(mode="json", exclude_none=True) for item in page.items],
        "page": {
            "number": page.number,
            "size": page.size,
            "total_elements": page.total_elements,
            "total_pages": page.total_pages,
        },
    }


def print_test_case_page(console: Console, page: TestCasePage) -> None:
    table = Table(
        title=f"Test cases - page {page.number + 1} of {max(page.total_pages, 1)}"
        f" ({page.total_elements} total)",
    )
    table.add_column("ID", style="cyan", justify="right")
    table.add_column("Reference", style="magenta")
    table.add_column("Name", style="white")
    table.add_column("Importance")
    table.add_column("Status")
    table.add_column("Folder", style="dim")

    for test_case in page.items:
        table.add_row(
            str(test_case.id),
            test_case.reference or "-",
            test_case.name,
            _enum_text(test_case.importance),
            _enum_text(test_case.status),
            test_case.folder_name,
        )
    console.print(table)


def print_test_case(console: Console, test_case: TestCase) -> None:
    console.print(f"[bold cyan]#{test_case.id}[/bold cyan] [bold]{test_case.name}[/bold]")
    details = Table(show_header=False, box=None)
    details.add_column("Field", style="dim")
    details.add_column("Value")
    details.add_row("Reference", test_case.reference or "-")
    details.add_row("Project", (test_case.project.name if test_case.project else None) or "-")
    details.add_row("Folder", test_case.folder_name)
    details.add_row("Importance", _enum_text(test_case.importance))
    details.add_row("Status", _enum_text(test_case.status))
    details.add_row("Nature", test_case.nature.label or test_case.nature.code if test_case.nature else "-")
    details.add_row("Type", test_case.type.label or test_case.type.code if test_case.type else "-")
    if test_case.description:
        details.add_row("Description", test_case.description)
    if test_case.prerequisite:
        details.add_row("Prerequisite", test_case.prerequisite)
    console.print(details)

    if not test_case.steps:
        console.print("[dim]No steps[/dim]")
        return

    steps = Table(title="Steps")
    steps.add_column("#", justify="right", style="cyan")
    steps.add_column("Action")
    steps.add_column("Expected result")
    for step in test_case.steps:
        steps.add_row(str(step.index + 1), step.action, step.expected_result)
    console.print(steps)


def handle_test_cases_command(page: int, size: int) -> int:
    context = get_cli_context()

    async def _collect(gateway: SquashGateway) -> TestCasePage:
        return await gateway.list_test_cases(page, size)

    result = run_with_gateway(context, _collect)
    logger.debug("Fetched %d test cases (page %d)", len(result.items), result.number)

    if context.json_output:
        write_json_output(CLICommands.TEST_CASES, page_to_dict(result))
    else:
        print_test_case_page(Console(), result)
    return CLIDefaults.EXIT_SUCCESS


def handle_test_case_command(test_case_id: int) -> int:
    context = get_cli_context()

    async def _collect(gateway: SquashGateway) -> TestCase:
        return await gateway.get_test_case(test_case_id)

    test_case = run_with_gateway(context, _collect)

    if context.json_output:
        write_json_output(CLICommands.TEST_CASE, test_case.model_dump(mode="json", exclude_none=True))
    else:
        print_test_case(Console(), test_case)
    return CLIDefaults.EXIT_SUCCESS


__all__ = [
    "handle_test_case_command",
    "handle_test_cases_command",
    "page_to_dict",
    "print_test_case",
    "print_test_case_page",
]
