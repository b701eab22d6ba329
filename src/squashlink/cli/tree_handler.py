"""Tree command handler for SquashLink CLI."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.tree import Tree

from squashlink.cli.common.context import get_cli_context
from squashlink.cli.common.runtime import run_with_gateway
from squashlink.cli.json_formatter import write_json_output
from squashlink.core.gateway import SquashGateway
from squashlink.core.tree.models import NodeType, TreeNode
from squashlink.shared.constants import CLICommands, CLIDefaults

logger = logging.getLogger(__name__)

_ICONS = {
    NodeType.PROJECT: "[bold blue]P[/bold blue]",
    NodeType.FOLDER: "[yellow]F[/yellow]",
    NodeType.TEST_CASE: "[green]T[/green]",
}


async def load_tree(gateway: SquashGateway, depth: int) -> list[TreeNode]:
    """Load the projects and expand ``depth`` levels below them, breadth first."""
    await gateway.load_roots()
    frontier = list(gateway.tree_loader.roots)

    for _ in range(depth):
        next_frontier: list[TreeNode] = []
        for node in frontier:
            if node.is_leaf:
                continue
            expanded = await gateway.expand(node)
            next_frontier.extend(expanded.children or ())
        frontier = next_frontier

    return list(gateway.tree_loader.roots)


def _add_branch(branch: Tree, node: TreeNode) -> None:
    label = f"{_ICONS[node.node_type]} {node.name} [dim]({node.node_id})[/dim]"
    if node.children is None and not node.is_leaf:
        label += " [dim]...[/dim]"
    child_branch = branch.add(label)
    for child in node.children or ():
        _add_branch(child_branch, child)


def print_tree(console: Console, roots: list[TreeNode], *, using_fallback: bool) -> None:
    title = "SquashTM (sample data)" if using_fallback else "SquashTM"
    tree = Tree(f"[bold]{title}[/bold]")
    for root in roots:
        _add_branch(tree, root)
    console.print(tree)


def handle_tree_command(depth: int = CLIDefaults.DEFAULT_TREE_DEPTH) -> int:
    context = get_cli_context()

    async def _collect(gateway: SquashGateway) -> tuple[list[TreeNode], bool]:
        roots = await load_tree(gateway, depth)
        return roots, gateway.using_fallback

    roots, using_fallback = run_with_gateway(context, _collect)
    logger.debug("Loaded %d root nodes", len(roots))

    if context.json_output:
        write_json_output(
            CLICommands.TREE,
            {
                "roots": [root.to_dict() for root in roots],
                "using_fallback": using_fallback,
            },
        )
    else:
        print_tree(Console(), roots, using_fallback=using_fallback)
    return CLIDefaults.EXIT_SUCCESS


__all__ = ["handle_tree_command", "load_tree", "print_tree"]
