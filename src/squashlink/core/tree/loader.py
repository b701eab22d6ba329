"""Lazy loader for the project / folder / test-case hierarchy.

The loader owns a single forest of immutable TreeNode values. Expanding a
node replaces it, and every ancestor on its path, with new values; sibling
subtrees are shared untouched. Observers receive the new forest after each
replacement, including the intermediate ``loading`` state.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from typing import Callable

from squashlink.core.tree.models import (
    NodeKey,
    NodeType,
    TreeNode,
    node_for_folder,
    node_for_project,
    node_for_test_case,
)
from squashlink.services.squash_service import SquashApiService
from squashlink.shared.constants import SquashOperationNames
from squashlink.shared.errors import DomainError, ErrorCode, ErrorContext, SquashLinkError

logger = logging.getLogger(__name__)

Forest = tuple[TreeNode, ...]
TreeListener = Callable[[Forest], None]


def _replace_node(nodes: Forest, target: TreeNode) -> Forest | None:
    """Return nodes with target swapped in by key, or None if absent."""
    for index, node in enumerate(nodes):
        if node.key == target.key:
            return (*nodes[:index], target, *nodes[index + 1 :])
        if node.children:
            children = _replace_node(node.children, target)
            if children is not None:
                return (*nodes[:index], replace(node, children=children), *nodes[index + 1 :])
    return None


class HierarchicalTreeLoader:
    """Project / folder / test-case tree, loaded one level at a time.

    Concurrent expansion of different nodes needs no coordination.
    Expanding the same node twice before the first call completes issues
    the requests twice; the last result wins.
    """

    def __init__(self, service: SquashApiService) -> None:
        self.service = service
        self._roots: Forest = ()
        self._listeners: list[TreeListener] = []

    @property
    def roots(self) -> Forest:
        return self._roots

    def subscribe(self, listener: TreeListener) -> Callable[[], None]:
        """Register listener for forest updates; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self) -> None:
        for listener in list(self._listeners):
            listener(self._roots)

    def _store(self, node: TreeNode) -> None:
        forest = _replace_node(self._roots, node)
        if forest is None:
            raise DomainError(
                ErrorCode.NODE_NOT_FOUND,
                f"Node {node.node_id} is not part of the loaded tree",
                ErrorContext(operation=SquashOperationNames.EXPAND_NODE),
            )
        self._roots = forest
        self._publish()

    def find(self, key: NodeKey | str) -> TreeNode | None:
        """Look up a loaded node by key or by its string form."""
        if isinstance(key, str):
            key = NodeKey.parse(key)
        for root in self._roots:
            for node in root.walk():
                if node.key == key:
                    return node
        return None

    async def load_roots(self) -> list[TreeNode]:
        """Fetch the projects and make them the (unexpanded) forest."""
        projects = await self.service.get_projects()
        self._roots = tuple(node_for_project(project) for project in projects)
        logger.info("Loaded %d root projects", len(self._roots))
        self._publish()
        return list(self._roots)

    async def refresh(self) -> list[TreeNode]:
        """Drop everything loaded so far and fetch the projects again."""
        return await self.load_roots()

    async def expand(self, node: TreeNode) -> TreeNode:
        """Load the children of node and return its expanded value.

        A node whose children are already loaded, and any test case node,
        is returned as stored. When loading fails the node comes back with
        loading cleared and children still absent, so expansion can be
        retried.

        Raises:
            DomainError: If node is not part of the loaded forest
        """
        current = self.find(node.key)
        if current is None:
            raise DomainError(
                ErrorCode.NODE_NOT_FOUND,
                f"Node {node.node_id} is not part of the loaded tree",
                ErrorContext(operation=SquashOperationNames.EXPAND_NODE),
            )
        if current.children is not None or current.is_leaf:
            return current

        self._store(replace(current, loading=True))

        try:
            children = await self._load_children(current)
        except BaseException:
            self._store(replace(current, loading=False))
            raise
        if children is None:
            restored = replace(current, loading=False)
            self._store(restored)
            return restored

        expanded = replace(
            current,
            children=children,
            expanded=True,
            loading=False,
            has_children=len(children) > 0,
        )
        self._store(expanded)
        return expanded

    def collapse(self, node: TreeNode) -> TreeNode:
        """Hide node's children without discarding them."""
        current = self.find(node.key)
        if current is None or not current.expanded:
            return current or node
        collapsed = replace(current, expanded=False)
        self._store(collapsed)
        return collapsed

    async def toggle(self, node: TreeNode) -> TreeNode:
        """Expand a node whose children are not loaded, else flip its expanded flag."""
        current = self.find(node.key) or node
        if current.children is None:
            return await self.expand(current)
        if current.expanded:
            return self.collapse(current)
        reopened = replace(current, expanded=True)
        self._store(reopened)
        return reopened

    async def _load_children(self, node: TreeNode) -> tuple[TreeNode, ...] | None:
        if node.node_type is NodeType.PROJECT:
            return await self._load_project_children(node)
        return await self._load_folder_children(node)

    async def _load_project_children(self, node: TreeNode) -> tuple[TreeNode, ...] | None:
        try:
            folders = await self.service.get_project_folders(node.remote_id)
        except SquashLinkError as e:
            logger.error(
                "Failed to load folders of %s: %s",
                node.node_id,
                e,
                extra={"error_code": e.code.name, "operation": SquashOperationNames.EXPAND_NODE},
            )
            return None
        return tuple(node_for_folder(folder, node) for folder in folders)

    async def _load_folder_children(self, node: TreeNode) -> tuple[TreeNode, ...] | None:
        subfolders, test_cases = await asyncio.gather(
            self.service.get_folder_subfolders(node.remote_id),
            self.service.get_folder_test_cases(node.remote_id),
            return_exceptions=True,
        )

        failures = 0
        for result in (subfolders, test_cases):
            if isinstance(result, BaseException):
                if not isinstance(result, SquashLinkError):
                    raise result
                failures += 1
                logger.warning(
                    "Partial failure expanding %s: %s",
                    node.node_id,
                    result,
                    extra={"error_code": result.code.name, "operation": SquashOperationNames.EXPAND_NODE},
                )

        if failures == 2:
            return None

        folder_nodes = [] if isinstance(subfolders, BaseException) else [
            node_for_folder(folder, node) for folder in subfolders
        ]
        test_case_nodes = [] if isinstance(test_cases, BaseException) else [
            node_for_test_case(test_case, node) for test_case in test_cases
        ]
        return (*folder_nodes, *test_case_nodes)


__all__ = ["HierarchicalTreeLoader"]
