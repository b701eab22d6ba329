"""Typed SquashTM operations on top of the resilient client.

This is the only place that decides between live data and the fallback
dataset. Transport failures that survive the client's retries are
answered from FallbackDataSource according to the configured policy;
authentication and token errors always reach the caller.
"""

from __future__ import annotations

import logging
import time
from typing import Any, TypeVar

from squashlink.services.fallback import FallbackDataSource, FallbackSwitch
from squashlink.services.http_client import ResilientHttpClient
from squashlink.shared.constants import (
    HalKeys,
    SquashAPIConfig,
    SquashEndpoints,
    SquashOperationNames,
)
from squashlink.shared.errors import (
    DomainError,
    ErrorCode,
    ErrorContext,
    MalformedResponseError,
    SquashLinkError,
)
from squashlink.shared.logging import log_operation_start, log_operation_success
from squashlink.shared.models import Folder, HalCollection, Project, TestCase
from squashlink.shared.models.squash import SquashModel

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=SquashModel)


class SquashApiService:
    """SquashTM resource access with fallback handling.

    Args:
        client: HTTP client used for live requests
        fallback_source: Sample dataset used in degraded mode
        fallback_switch: Fallback policy and its tripped state
        projects_page_size: Page size of the project listing
        folders_page_size: Page size of folder listings
        test_cases_page_size: Page size of folder test-case listings
    """

    def __init__(
        self,
        client: ResilientHttpClient,
        fallback_source: FallbackDataSource | None = None,
        fallback_switch: FallbackSwitch | None = None,
        *,
        projects_page_size: int = SquashAPIConfig.PROJECTS_PAGE_SIZE,
        folders_page_size: int = SquashAPIConfig.FOLDERS_PAGE_SIZE,
        test_cases_page_size: int = SquashAPIConfig.TEST_CASES_PAGE_SIZE,
    ) -> None:
        self.client = client
        self.fallback_source = fallback_source or FallbackDataSource()
        self.fallback_switch = fallback_switch or FallbackSwitch()
        self.projects_page_size = projects_page_size
        self.folders_page_size = folders_page_size
        self.test_cases_page_size = test_cases_page_size

    @property
    def using_fallback(self) -> bool:
        """True once the session has switched to the sample dataset."""
        return self.fallback_switch.use_fallback()

    def reset_fallback(self) -> None:
        """Re-arm live access after a sticky fallback switch."""
        self.fallback_switch.reset()

    async def fetch(
        self,
        endpoint: str,
        *,
        page: int | None = None,
        size: int | None = None,
        fields: str | None = None,
        timeout_ms: int | None = None,
    ) -> dict[str, Any]:
        """GET endpoint live, or from the fallback dataset when the policy says so."""
        if self.fallback_switch.use_fallback():
            return self.fallback_source.response_for(endpoint)

        try:
            return await self.client.get(
                endpoint,
                page=page,
                size=size,
                fields=fields,
                timeout_ms=timeout_ms,
            )
        except SquashLinkError as e:
            if not self.fallback_switch.absorbs(e):
                raise
            self.fallback_switch.trip(e)
            return self.fallback_source.response_for(endpoint)

    async def _fetch_collection(
        self,
        operation: str,
        endpoint: str,
        key: str,
        item_model: type[ModelT],
        **options: Any,
    ) -> HalCollection[ModelT]:
        log_operation_start(logger, operation, {"endpoint": endpoint})
        started = time.perf_counter()

        payload = await self.fetch(endpoint, **options)
        try:
            collection = HalCollection.from_payload(payload, key, item_model)
        except ValueError as e:
            raise MalformedResponseError(
                str(e),
                ErrorContext(operation=operation, endpoint=endpoint),
                original_error=e,
            ) from e

        log_operation_success(
            logger,
            operation,
            (time.perf_counter() - started) * 1000,
            result_info={"count": len(collection.items)},
        )
        return collection

    async def get_projects(self) -> list[Project]:
        collection = await self._fetch_collection(
            SquashOperationNames.GET_PROJECTS,
            SquashEndpoints.PROJECTS,
            HalKeys.PROJECTS,
            Project,
            page=0,
            size=self.projects_page_size,
        )
        return collection.items

    async def get_project_folders(self, project_id: int) -> list[Folder]:
        """Root folders of a project's test-case library."""
        collection = await self._fetch_collection(
            SquashOperationNames.GET_PROJECT_FOLDERS,
            SquashEndpoints.PROJECT_FOLDERS.format(project_id=project_id),
            HalKeys.FOLDERS,
            Folder,
            page=0,
            size=self.folders_page_size,
        )
        return collection.items

    async def get_folder_subfolders(self, folder_id: int) -> list[Folder]:
        collection = await self._fetch_collection(
            SquashOperationNames.GET_FOLDER_CHILDREN,
            SquashEndpoints.FOLDER_SUBFOLDERS.format(folder_id=folder_id),
            HalKeys.FOLDERS,
            Folder,
            page=0,
            size=self.folders_page_size,
        )
        return collection.items

    async def get_folder_test_cases(self, folder_id: int) -> list[TestCase]:
        """Test cases directly inside a folder, with the listing projection only."""
        collection = await self._fetch_collection(
            SquashOperationNames.GET_FOLDER_CHILDREN,
            SquashEndpoints.FOLDER_TEST_CASES.format(folder_id=folder_id),
            HalKeys.TEST_CASES,
            TestCase,
            page=0,
            size=self.test_cases_page_size,
            fields=SquashAPIConfig.TEST_CASE_LIST_FIELDS,
        )
        return collection.items

    async def get_test_cases(self, page: int, size: int) -> HalCollection[TestCase]:
        """One page of the flat test-case collection, including the page block."""
        return await self._fetch_collection(
            SquashOperationNames.GET_TEST_CASES,
            SquashEndpoints.TEST_CASES,
            HalKeys.TEST_CASES,
            TestCase,
            page=page,
            size=size,
            fields=SquashAPIConfig.TEST_CASE_GRID_FIELDS,
        )

    async def get_test_case(self, test_case_id: int) -> TestCase:
        endpoint = SquashEndpoints.TEST_CASE.format(test_case_id=test_case_id)
        context = ErrorContext(operation=SquashOperationNames.GET_TEST_CASE, endpoint=endpoint)

        payload = await self.fetch(endpoint)
        if not payload:
            raise DomainError(
                ErrorCode.RESOURCE_NOT_FOUND,
                f"Test case {test_case_id} not found",
                context,
            )

        try:
            return TestCase.model_validate(payload)
        except ValueError as e:
            raise MalformedResponseError(str(e), context, original_error=e) from e


__all__ = ["SquashApiService"]
