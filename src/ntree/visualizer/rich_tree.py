"""Rich console rendering of trees."""

from __future__ import annotations

from typing import Optional

from rich.markup import escape
from rich.tree import Tree as RichTree

from ntree.core.tree import Tree
from ntree.visualizer.text_graph import Label, node_labeler


def build_rich_tree(tree: Tree, label: Optional[Label] = None) -> RichTree:
    """Build a ``rich.tree.Tree`` mirroring ``tree`` in its active ordering."""
    if tree.root is None:
        return RichTree("[dim]Empty Tree[/dim]")
    describe = node_labeler(label)
    top = RichTree(f"[bold]{escape(describe(tree.root))}[/bold]")
    stack = [(tree.root, top)]
    while stack:
        node, branch = stack.pop()
        for child in node.children_list():
            stack.append((child, branch.add(escape(describe(child)))))
    return top


__all__ = ["build_rich_tree"]
