"""
CLI Constants

Command names, help texts and defaults for the SquashLink command line.
"""

from __future__ import annotations

from typing import Literal


class CLICommands:
    """CLI command names."""

    STATUS = "status"
    TREE = "tree"
    TEST_CASES = "testcases"
    TEST_CASE = "testcase"
    TOKEN = "token"


class CLIDefaults:
    """CLI default values."""

    VERSION = "0.1.0"

    EXIT_SUCCESS = 0
    EXIT_ERROR = 1

    DEFAULT_TREE_DEPTH = 1
    DEFAULT_PAGE = 0
    DEFAULT_PAGE_SIZE = 20


class CLIHelp:
    """CLI help text and descriptions."""

    VERSION_TEXT = "SquashLink CLI v{version}"

    APP_NAME = "squashlink"
    APP_DESCRIPTION = "SquashLink - resilient SquashTM test-case browser"
    APP_STYLE: Literal["rich"] = "rich"

    STATUS_HELP = "Show connection, circuit breaker and token status."
    TREE_HELP = "Print the project / folder / test-case tree."
    TREE_DEPTH_HELP = "How many levels below the projects to expand."
    TEST_CASES_HELP = "List one page of the flat test-case collection."
    TEST_CASE_HELP = "Show a single test case with its steps."
    TOKEN_HELP = "Inspect the configured bearer token."
    PAGE_HELP = "Zero-based page index."
    SIZE_HELP = "Page size."


__all__ = [
    "CLICommands",
    "CLIDefaults",
    "CLIHelp",
]
