"""Plain-text tree diagrams.

Example (width=3, height=1):

    A1
    ├── B1
    │   ├── C1
    │   └── C2
    └── B2
"""

from __future__ import annotations

from typing import Any, Callable, List, Optional

from ntree.core.node import Node
from ntree.utils.callbacks import safe_function

Label = Callable[[Node], Any]


def node_labeler(label: Optional[Label]) -> Callable[[Node], str]:
    """Label function that falls back to the node id when ``label`` fails or returns None."""
    if label is None:
        return lambda node: str(node.id)
    describe = safe_function(label)

    def _label(node: Node) -> str:
        text = describe(node)
        return str(node.id) if text is None else str(text)

    return _label


def tree_graph(node: Node, width: int = 3, height: int = 1, label: Optional[Label] = None) -> str:
    """
    Render ``node`` and its subtree as text.

    Args:
        node: Top node of the diagram
        width: Horizontal run of each connector (>= 1)
        height: Rows used per child, the extra ones being vertical spacers (>= 1)
        label: Optional per-node label function; defaults to the node id

    Returns:
        The diagram, one line per row, without a trailing newline
    """
    if width < 1 or height < 1:
        raise ValueError(f"width and height must be >= 1 (got {width}, {height})")
    describe = node_labeler(label)
    branch = "├" + "─" * (width - 1) + " "
    last_branch = "└" + "─" * (width - 1) + " "
    pipe = "│" + " " * width
    blank = " " * (width + 1)

    lines: List[str] = [describe(node)]
    children = node.children_list()
    stack = [(child, "", position == len(children) - 1) for position, child in enumerate(children)]
    stack.reverse()
    while stack:
        current, prefix, is_last = stack.pop()
        lines.extend([prefix + "│"] * (height - 1))
        lines.append(prefix + (last_branch if is_last else branch) + describe(current))
        child_prefix = prefix + (blank if is_last else pipe)
        grandchildren = current.children_list()
        stack.extend(
            (child, child_prefix, position == len(grandchildren) - 1)
            for position, child in reversed(list(enumerate(grandchildren)))
        )
    return "\n".join(lines)


__all__ = ["tree_graph", "node_labeler"]
