"""Immutable tree node values for the SquashTM hierarchy."""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from squashlink.shared.models import Folder, Project, TestCase

_KEY_PATTERN = re.compile(r"^(project|folder|testcase)-(\d+)$")


class NodeType(str, Enum):
    PROJECT = "project"
    FOLDER = "folder"
    TEST_CASE = "testcase"


@dataclass(frozen=True)
class NodeKey:
    """Stable identity of a node: its type plus the remote numeric id."""

    type: NodeType
    remote_id: int

    def __str__(self) -> str:
        return f"{self.type.value}-{self.remote_id}"

    @classmethod
    def parse(cls, value: str) -> NodeKey:
        """Parse the string form, e.g. ``folder-101``.

        Raises:
            ValueError: If value is not a valid node key
        """
        match = _KEY_PATTERN.match(value)
        if match is None:
            msg = f"Invalid node key: {value!r}"
            raise ValueError(msg)
        return cls(NodeType(match.group(1)), int(match.group(2)))


@dataclass(frozen=True)
class TreeNode:
    """One project, folder or test case of the hierarchy.

    children is None while not loaded and an empty tuple once loaded
    without children. Nodes are never mutated; the loader replaces them.
    """

    key: NodeKey
    name: str
    path: str
    parent_key: NodeKey | None = None
    children: tuple[TreeNode, ...] | None = None
    loading: bool = False
    expanded: bool = False
    has_children: bool = True
    test_case: TestCase | None = field(default=None, compare=False)

    @property
    def node_id(self) -> str:
        return str(self.key)

    @property
    def node_type(self) -> NodeType:
        return self.key.type

    @property
    def remote_id(self) -> int:
        return self.key.remote_id

    @property
    def is_leaf(self) -> bool:
        return self.key.type is NodeType.TEST_CASE

    @property
    def children_loaded(self) -> bool:
        return self.children is not None

    def walk(self) -> Iterator[TreeNode]:
        """Yield this node and its loaded descendants, depth first."""
        yield self
        for child in self.children or ():
            yield from child.walk()

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.node_id,
            "type": self.node_type.value,
            "squash_id": self.remote_id,
            "name": self.name,
            "path": self.path,
            "parent": str(self.parent_key) if self.parent_key else None,
            "expanded": self.expanded,
            "loading": self.loading,
            "has_children": self.has_children,
            "children": (
                [child.to_dict() for child in self.children] if self.children is not None else None
            ),
        }
        if self.test_case is not None:
            data["test_case"] = self.test_case.model_dump(mode="json", exclude_none=True)
        return data


def node_for_project(project: Project) -> TreeNode:
    return TreeNode(
        key=NodeKey(NodeType.PROJECT, project.id),
        name=project.name,
        path=project.name,
    )


def node_for_folder(folder: Folder, parent: TreeNode) -> TreeNode:
    return TreeNode(
        key=NodeKey(NodeType.FOLDER, folder.id),
        name=folder.name,
        path=folder.path or folder.name,
        parent_key=parent.key,
    )


def node_for_test_case(test_case: TestCase, parent: TreeNode) -> TreeNode:
    # Listing projections omit the folder reference; the parent is known here
    folder_name = test_case.folder.name if test_case.folder and test_case.folder.name else None
    return TreeNode(
        key=NodeKey(NodeType.TEST_CASE, test_case.id),
        name=test_case.name,
        path=f"{folder_name or parent.name or 'Unknown'}/{test_case.name}",
        parent_key=parent.key,
        has_children=False,
        test_case=test_case,
    )


__all__ = [
    "NodeKey",
    "NodeType",
    "TreeNode",
    "node_for_folder",
    "node_for_project",
    "node_for_test_case",
]
