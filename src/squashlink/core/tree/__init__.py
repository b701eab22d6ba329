"""Hierarchical tree of SquashTM projects, folders and test cases."""

from .loader import HierarchicalTreeLoader
from .models import (
    NodeKey,
    NodeType,
    TreeNode,
    node_for_folder,
    node_for_project,
    node_for_test_case,
)

__all__ = [
    "HierarchicalTreeLoader",
    "NodeKey",
    "NodeType",
    "TreeNode",
    "node_for_folder",
    "node_for_project",
    "node_for_test_case",
]
