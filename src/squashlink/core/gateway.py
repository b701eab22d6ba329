"""Single entry point for collaborators of the SquashTM access layer.

Views, flow builders and the CLI talk to SquashGateway only; it forwards
to the tree loader, the pager, the service and the HTTP client.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from enum import Enum
from typing import Any

from squashlink.core.paging import RowBlock, TestCasePage, TestCasePager
from squashlink.core.tree.loader import HierarchicalTreeLoader
from squashlink.core.tree.models import TreeNode
from squashlink.services.circuit_breaker import CircuitStatus
from squashlink.services.http_client import ResilientHttpClient
from squashlink.services.squash_service import SquashApiService
from squashlink.services.token_lifecycle import TokenContext, TokenInfo
from squashlink.shared.models import TestCase

logger = logging.getLogger(__name__)

CONNECTION_CHECK_INTERVAL_S = 5 * 60


class ConnectionStatus(str, Enum):
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    TOKEN_EXPIRED = "token-expired"  # noqa: S105  # nosec B105 - status value


class SquashGateway:
    """Facade over the resilient SquashTM access layer."""

    def __init__(
        self,
        client: ResilientHttpClient,
        service: SquashApiService,
        tree_loader: HierarchicalTreeLoader,
        pager: TestCasePager,
        token_context: TokenContext,
    ) -> None:
        self.client = client
        self.service = service
        self.tree_loader = tree_loader
        self.pager = pager
        self.token_context = token_context

    async def __aenter__(self) -> SquashGateway:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def close(self) -> None:
        await self.client.close()

    # Tree

    async def load_roots(self) -> list[TreeNode]:
        return await self.tree_loader.load_roots()

    async def expand(self, node: TreeNode) -> TreeNode:
        return await self.tree_loader.expand(node)

    # Raw and typed access

    async def get(self, endpoint: str, **options: Any) -> dict[str, Any]:
        """GET an arbitrary endpoint through the resilient pipeline and fallback policy."""
        return await self.service.fetch(endpoint, **options)

    async def list_test_cases(self, page: int, size: int) -> TestCasePage:
        return await self.pager.fetch_page(page, size)

    async def fetch_rows(self, start_row: int, end_row: int) -> RowBlock:
        return await self.pager.fetch_rows(start_row, end_row)

    async def get_test_case(self, test_case_id: int) -> TestCase:
        return await self.service.get_test_case(test_case_id)

    # Diagnostics

    async def health_check(self) -> bool:
        return await self.client.health_check()

    def circuit_status(self) -> CircuitStatus:
        return self.client.circuit_status()

    def token_status(self) -> TokenInfo | None:
        return self.token_context.describe()

    def replace_token(self, new_token: str) -> None:
        self.token_context.replace(new_token)

    @property
    def using_fallback(self) -> bool:
        return self.service.using_fallback

    def reset_fallback(self) -> None:
        self.service.reset_fallback()

    async def check_connection(self) -> ConnectionStatus:
        """Classify connectivity: expired token first, then a health check."""
        if self.token_context.is_expired():
            return ConnectionStatus.TOKEN_EXPIRED
        if await self.client.health_check():
            return ConnectionStatus.CONNECTED
        return ConnectionStatus.DISCONNECTED

    async def watch_connection(
        self,
        interval_s: float = CONNECTION_CHECK_INTERVAL_S,
    ) -> AsyncIterator[ConnectionStatus]:
        """Yield the connection status now and then every interval_s seconds."""
        while True:
            status = await self.check_connection()
            logger.debug("SquashTM connection status: %s", status.value)
            yield status
            await asyncio.sleep(interval_s)


__all__ = [
    "ConnectionStatus",
    "SquashGateway",
]
