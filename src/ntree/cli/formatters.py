"""Formatting helpers for CLI presentation."""

from __future__ import annotations

from typing import Any, Callable, List, Optional

from rich.table import Table

from ntree.core.node import Node
from ntree.core.tree import Tree

LABEL_MODES = ("id", "value", "both")


def label_for(mode: str) -> Optional[Callable[[Node], Any]]:
    """Node label function for a ``--label`` mode (None means the default id label)."""
    if mode not in LABEL_MODES:
        raise ValueError(f"Unknown label mode '{mode}'. Available: {', '.join(LABEL_MODES)}")
    if mode == "value":
        return lambda node: node.value
    if mode == "both":
        return lambda node: f"{node.id} = {node.value!r}"
    return None


def format_path(nodes: List[Node]) -> str:
    return " -> ".join(str(node.id) for node in nodes)


def build_stats_table(tree: Tree) -> Table:
    """Summary table: id, size, height, ordering and node count per level."""
    table = Table(title=f"Tree {tree.id}")
    table.add_column("Property")
    table.add_column("Value", justify="right")
    table.add_row("Nodes", str(tree.size()))
    table.add_row("Height", str(tree.height()))
    table.add_row("Ordering", tree.ordering.kind.value)
    table.add_row("Value cloning", tree.value_cloning.mode.value)
    for level in range(1, tree.height() + 1):
        table.add_row(f"Level {level}", str(len(tree.nodes_in_level(level))))
    return table


def resolve_node_path(tree: Tree, path: str) -> Optional[Node]:
    """Find a node by slash-separated ids from the root, e.g. ``A1/B2/C1``.

    Segments are matched against ``str(node.id)``.
    """
    segments = [segment for segment in path.split("/") if segment]
    node = tree.root
    if node is None or not segments or str(node.id) != segments[0]:
        return None
    for segment in segments[1:]:
        node = next((child for child in node.children_list() if str(child.id) == segment), None)
        if node is None:
            return None
    return node


__all__ = ["LABEL_MODES", "label_for", "format_path", "build_stats_table", "resolve_node_path"]
