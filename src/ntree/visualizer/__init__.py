"""
Tree visualizer module.

Renders trees as plain-text diagrams or as rich console trees.
"""

from ntree.visualizer.rich_tree import build_rich_tree
from ntree.visualizer.text_graph import tree_graph

__all__ = ["tree_graph", "build_rich_tree"]
