"""Substitute dataset served when SquashTM cannot be reached.

The sample data is shaped exactly like live HAL responses so everything
above the service layer works unchanged in degraded mode.
"""

from __future__ import annotations

import copy
import logging
import re
import threading
from typing import Any

from squashlink.shared.constants import FallbackPolicy, HalKeys, SquashEndpoints
from squashlink.shared.errors import CircuitOpenError, SquashLinkError, SquashNetworkError

logger = logging.getLogger(__name__)

# Errors that mean "the service is unreachable", as opposed to "fix your credentials"
TRIPPING_ERRORS: tuple[type[SquashLinkError], ...] = (SquashNetworkError, CircuitOpenError)

_AUDIT = {
    "created": {"by": "admin", "on": "2024-01-01T00:00:00Z"},
    "lastModified": {"by": "admin", "on": "2024-01-15T00:00:00Z"},
}

SAMPLE_PROJECTS: tuple[dict[str, Any], ...] = (
    {
        "id": 1,
        "name": "Sample Project 1",
        "description": "Demo project for testing",
        "label": "PROJ1",
        "active": True,
        "template": False,
        "testCaseNatures": ["FUNCTIONAL"],
        "testCaseTypes": ["MANUAL"],
        "_links": {"self": {"href": "/projects/1"}},
    },
    {
        "id": 2,
        "name": "Sample Project 2",
        "description": "Another demo project",
        "label": "PROJ2",
        "active": True,
        "template": False,
        "testCaseNatures": ["FUNCTIONAL", "NON_FUNCTIONAL"],
        "testCaseTypes": ["MANUAL", "AUTOMATED"],
        "_links": {"self": {"href": "/projects/2"}},
    },
)

SAMPLE_FOLDERS: tuple[dict[str, Any], ...] = (
    {
        "id": 101,
        "name": "Authentication Tests",
        "description": "Tests related to user authentication",
        "project": {"id": 1, "name": "Sample Project 1"},
        "path": "/Sample Project 1/Authentication Tests",
        **_AUDIT,
        "_links": {"self": {"href": "/test-case-folders/101"}},
    },
    {
        "id": 102,
        "name": "API Tests",
        "description": "Tests for API functionality",
        "project": {"id": 1, "name": "Sample Project 1"},
        "path": "/Sample Project 1/API Tests",
        **_AUDIT,
        "_links": {"self": {"href": "/test-case-folders/102"}},
    },
)

SAMPLE_TEST_CASES: tuple[dict[str, Any], ...] = (
    {
        "id": 1001,
        "name": "Login with valid credentials",
        "reference": "TC-001",
        "description": "Test successful login with valid username and password",
        "prerequisite": "User account exists",
        "importance": "HIGH",
        "nature": {"code": "FUNCTIONAL", "label": "Functional"},
        "type": {"code": "MANUAL", "label": "Manual"},
        "status": "APPROVED",
        "project": {"id": 1, "name": "Sample Project 1"},
        "folder": {"id": 101, "name": "Authentication Tests"},
        **_AUDIT,
        "steps": [
            {
                "id": 10001,
                "action": "Navigate to login page",
                "expectedResult": "Login page is displayed",
                "index": 1,
            },
            {
                "id": 10002,
                "action": "Enter valid username and password",
                "expectedResult": "Credentials are accepted",
                "index": 2,
            },
        ],
        "_links": {"self": {"href": "/test-cases/1001"}},
    },
)

_PROJECT_FOLDERS = re.compile(r"^/projects/(\d+)/test-case-folders$")
_FOLDER_SUBFOLDERS = re.compile(r"^/test-case-folders/(\d+)/folders$")
_FOLDER_TEST_CASES = re.compile(r"^/test-case-folders/(\d+)/test-cases$")
_SINGLE_TEST_CASE = re.compile(r"^/test-cases/(\d+)$")


def _ref_id(item: dict[str, Any], key: str) -> int | None:
    ref = item.get(key)
    return ref.get("id") if isinstance(ref, dict) else None


def _collection(key: str, items: list[dict[str, Any]], endpoint: str) -> dict[str, Any]:
    return {
        HalKeys.EMBEDDED: {key: copy.deepcopy(items)},
        HalKeys.LINKS: {"self": {"href": endpoint}},
        HalKeys.PAGE: {
            "size": len(items),
            "totalElements": len(items),
            "totalPages": 1,
            "number": 0,
        },
    }


class FallbackDataSource:
    """Static sample dataset answering SquashTM endpoints."""

    def __init__(
        self,
        projects: tuple[dict[str, Any], ...] = SAMPLE_PROJECTS,
        folders: tuple[dict[str, Any], ...] = SAMPLE_FOLDERS,
        test_cases: tuple[dict[str, Any], ...] = SAMPLE_TEST_CASES,
    ) -> None:
        self.projects = projects
        self.folders = folders
        self.test_cases = test_cases

    def response_for(self, endpoint: str) -> dict[str, Any]:
        """Return a HAL-shaped response for endpoint; unknown endpoints give {}."""
        logger.debug("Serving fallback data for %s", endpoint)

        if endpoint == SquashEndpoints.PROJECTS:
            return _collection(HalKeys.PROJECTS, list(self.projects), endpoint)

        if match := _PROJECT_FOLDERS.match(endpoint):
            project_id = int(match.group(1))
            folders = [
                f for f in self.folders
                if _ref_id(f, "project") == project_id and _ref_id(f, "parent") is None
            ]
            return _collection(HalKeys.FOLDERS, folders, endpoint)

        if match := _FOLDER_SUBFOLDERS.match(endpoint):
            folder_id = int(match.group(1))
            folders = [f for f in self.folders if _ref_id(f, "parent") == folder_id]
            return _collection(HalKeys.FOLDERS, folders, endpoint)

        if match := _FOLDER_TEST_CASES.match(endpoint):
            folder_id = int(match.group(1))
            test_cases = [tc for tc in self.test_cases if _ref_id(tc, "folder") == folder_id]
            return _collection(HalKeys.TEST_CASES, test_cases, endpoint)

        if match := _SINGLE_TEST_CASE.match(endpoint):
            test_case_id = int(match.group(1))
            for test_case in self.test_cases:
                if test_case["id"] == test_case_id:
                    return copy.deepcopy(test_case)
            return {}

        if "/test-case-folders" in endpoint:
            return _collection(HalKeys.FOLDERS, list(self.folders), endpoint)

        if "/test-cases" in endpoint:
            return _collection(HalKeys.TEST_CASES, list(self.test_cases), endpoint)

        return {}


class FallbackSwitch:
    """Decides, per call, whether the live endpoint or the sample data is used.

    STICKY trips on the first transport failure and stays tripped until
    reset(). PER_CALL never stays tripped. DISABLED never serves fallback.
    """

    def __init__(self, policy: FallbackPolicy = FallbackPolicy.STICKY) -> None:
        self.policy = policy
        self._tripped = False
        self._lock = threading.Lock()

    @property
    def tripped(self) -> bool:
        with self._lock:
            return self._tripped

    def use_fallback(self) -> bool:
        """True when the live endpoint must not be attempted."""
        return self.policy is FallbackPolicy.STICKY and self.tripped

    def absorbs(self, error: Exception) -> bool:
        """True when error should be answered with fallback data."""
        if self.policy is FallbackPolicy.DISABLED:
            return False
        return isinstance(error, TRIPPING_ERRORS)

    def trip(self, error: SquashLinkError) -> None:
        if self.policy is not FallbackPolicy.STICKY:
            logger.warning("SquashTM call failed (%s); serving fallback data for this call", error.code.value)
            return

        with self._lock:
            already_tripped = self._tripped
            self._tripped = True
        if not already_tripped:
            logger.warning(
                "SquashTM unreachable (%s); switching to fallback data for this session",
                error.code.value,
                extra={"error_code": error.code.name},
            )

    def reset(self) -> None:
        with self._lock:
            self._tripped = False
        logger.info("Live SquashTM access re-armed")


__all__ = [
    "SAMPLE_FOLDERS",
    "SAMPLE_PROJECTS",
    "SAMPLE_TEST_CASES",
    "TRIPPING_ERRORS",
    "FallbackDataSource",
    "FallbackSwitch",
]
