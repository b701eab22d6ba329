"""Page-driven listing of the flat test-case collection.

The tree loads by hierarchy; grids and exports instead walk the whole
``/test-cases`` collection one page at a time.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from dataclasses import dataclass

from squashlink.services.squash_service import SquashApiService
from squashlink.shared.constants import SquashAPIConfig
from squashlink.shared.models import PageInfo, TestCase

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TestCasePage:
    """One page of test cases with the totals reported by the server."""

    __test__ = False

    items: tuple[TestCase, ...]
    number: int
    size: int
    total_elements: int
    total_pages: int

    @property
    def is_last(self) -> bool:
        return self.number >= self.total_pages - 1

    @classmethod
    def build(cls, items: list[TestCase], page: PageInfo | None, number: int, size: int) -> TestCasePage:
        # Servers (and the fallback dataset) may omit the page block
        if page is None:
            return cls(tuple(items), number, size, len(items), 1 if items else 0)
        return cls(tuple(items), page.number, page.size, page.total_elements, page.total_pages)


@dataclass(frozen=True)
class RowBlock:
    """Rows requested by a virtualized grid plus the total row count."""

    rows: tuple[TestCase, ...]
    row_count: int


class TestCasePager:
    """Zero-based paging over SquashTM test cases.

    Args:
        service: SquashTM service used for the requests
        block_size: Row block size of the grid; start rows are multiples of it
    """

    __test__ = False

    def __init__(
        self,
        service: SquashApiService,
        block_size: int = SquashAPIConfig.TEST_CASES_PAGE_SIZE,
    ) -> None:
        if block_size < 1:
            msg = "block_size must be at least 1"
            raise ValueError(msg)
        self.service = service
        self.block_size = block_size

    async def fetch_page(self, page: int, size: int) -> TestCasePage:
        if page < 0 or size < 1:
            msg = f"Invalid page request: page={page}, size={size}"
            raise ValueError(msg)
        collection = await self.service.get_test_cases(page=page, size=size)
        return TestCasePage.build(collection.items, collection.page, page, size)

    async def fetch_rows(self, start_row: int, end_row: int) -> RowBlock:
        """Fetch rows [start_row, end_row) for a grid block.

        The page index is derived from the block size, the page size from
        the requested row span.
        """
        if start_row < 0 or end_row <= start_row:
            msg = f"Invalid row range: {start_row}..{end_row}"
            raise ValueError(msg)

        page = await self.fetch_page(start_row // self.block_size, end_row - start_row)
        logger.debug(
            "Fetched rows %d..%d (%d of %d)",
            start_row,
            end_row,
            len(page.items),
            page.total_elements,
        )
        return RowBlock(rows=page.items, row_count=page.total_elements)

    async def iter_all(self, size: int | None = None) -> AsyncIterator[TestCase]:
        """Yield every test case, requesting one page at a time."""
        size = size or self.block_size
        number = 0
        while True:
            page = await self.fetch_page(number, size)
            for item in page.items:
                yield item
            if page.is_last or not page.items:
                return
            number += 1


__all__ = [
    "RowBlock",
    "TestCasePage",
    "TestCasePager",
]
