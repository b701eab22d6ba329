"""
SquashTM API Constants

Endpoint templates, HAL collection names, projection fields, paging defaults
and the message strings used when the SquashTM API misbehaves.
"""

from __future__ import annotations

from enum import Enum


class SquashAPIConfig:
    """SquashTM REST API configuration constants."""

    DEFAULT_BASE_URL = "https://demo.squashtest.org/squash/api/rest/latest"

    # Page sizes used by the listing operations
    PROJECTS_PAGE_SIZE = 20
    FOLDERS_PAGE_SIZE = 50
    TEST_CASES_PAGE_SIZE = 100
    HEALTH_CHECK_PAGE_SIZE = 1

    # Projection used when listing test cases under a folder
    TEST_CASE_LIST_FIELDS = "name,reference,description,importance,nature,type,status"
    # Grid listing additionally needs the owning project
    TEST_CASE_GRID_FIELDS = f"{TEST_CASE_LIST_FIELDS},project"


class FallbackPolicy(str, Enum):
    """When the substitute dataset replaces live SquashTM responses.

    STICKY: the first transport failure switches the session to fallback data.
    PER_CALL: every call tries live first and falls back for that call only.
    DISABLED: transport failures propagate to the caller.
    """

    STICKY = "sticky"
    PER_CALL = "per_call"
    DISABLED = "disabled"


class SquashEndpoints:
    """Endpoint templates for the SquashTM REST API."""

    PROJECTS = "/projects"
    PROJECT_FOLDERS = "/projects/{project_id}/test-case-folders"
    FOLDER_SUBFOLDERS = "/test-case-folders/{folder_id}/folders"
    FOLDER_TEST_CASES = "/test-case-folders/{folder_id}/test-cases"
    TEST_CASES = "/test-cases"
    TEST_CASE = "/test-cases/{test_case_id}"


class HalKeys:
    """HAL response keys."""

    EMBEDDED = "_embedded"
    LINKS = "_links"
    PAGE = "page"

    PROJECTS = "projects"
    FOLDERS = "folders"
    TEST_CASES = "testCases"


class QueryParams:
    """Query parameter names."""

    PAGE = "page"
    SIZE = "size"
    FIELDS = "fields"


class SquashErrorMessages:
    """SquashTM API error message constants."""

    CIRCUIT_OPEN = "Circuit breaker is open. Service temporarily unavailable."
    TOKEN_EXPIRED = "Authentication token has expired. Please refresh your token."
    TOKEN_MALFORMED = "Authentication token could not be decoded"
    AUTH_REJECTED = "Authentication failed: {status_code}"
    RATE_LIMITED = "SquashTM API rate limit exceeded"
    SERVER_UNAVAILABLE = "SquashTM API unavailable: {status_code}"
    REQUEST_FAILED = "SquashTM API error: {status_code}"
    TIMEOUT = "SquashTM API request timed out after {timeout_ms}ms"
    NETWORK_ERROR = "SquashTM API network error: {error}"
    MALFORMED_RESPONSE = "SquashTM API returned an unexpected payload: {detail}"


class SquashOperationNames:
    """Operation name constants for structured logging."""

    HTTP_GET = "squash_http_get"
    HEALTH_CHECK = "squash_health_check"
    GET_PROJECTS = "get_projects"
    GET_PROJECT_FOLDERS = "get_project_folders"
    GET_FOLDER_CHILDREN = "get_folder_children"
    GET_TEST_CASES = "get_test_cases"
    GET_TEST_CASE = "get_test_case"
    EXPAND_NODE = "expand_node"
    REPLACE_TOKEN = "replace_token"


__all__ = [
    "FallbackPolicy",
    "HalKeys",
    "QueryParams",
    "SquashAPIConfig",
    "SquashEndpoints",
    "SquashErrorMessages",
    "SquashOperationNames",
]
