from .errors import TreeLoadError
from .tree_loader import load_tree

__all__ = ["load_tree", "TreeLoadError"]
