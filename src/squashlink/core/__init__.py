"""SquashLink core: hierarchy loading, paging and the gateway facade."""

from .gateway import ConnectionStatus, SquashGateway
from .paging import RowBlock, TestCasePage, TestCasePager
from .tree import HierarchicalTreeLoader, NodeKey, NodeType, TreeNode

__all__ = [
    "ConnectionStatus",
    "HierarchicalTreeLoader",
    "NodeKey",
    "NodeType",
    "RowBlock",
    "SquashGateway",
    "TestCasePage",
    "TestCasePager",
    "TreeNode",
]
