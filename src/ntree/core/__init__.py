"""
Tree core.

Components:
- Node: children access, ancestry, traversal and structural edits
- Tree: root ownership, configuration and named indexes
- NodeIndex: key -> nodes multi-map kept current across edits
- OrderingStrategy: Unordered / NaturalOrdering / CustomOrdering
- NearestCommonAncestor: common ancestor and paths between two nodes
"""

from ntree.core.ancestry import NearestCommonAncestor
from ntree.core.cloning import ValueCloning
from ntree.core.constants import OrderingKind, TraversalOrder, ValueCloningMode
from ntree.core.errors import (
    InvalidArgumentError,
    InvalidLevelError,
    SerializationError,
    TreeError,
)
from ntree.core.index import NodeIndex
from ntree.core.locality import LocalityViolation, check_key_function_locality
from ntree.core.node import Node, reattach
from ntree.core.ordering import CustomOrdering, NaturalOrdering, OrderingStrategy, Unordered
from ntree.core.tree import Tree

__all__ = [
    "Node",
    "Tree",
    "NodeIndex",
    "NearestCommonAncestor",
    "OrderingStrategy",
    "Unordered",
    "NaturalOrdering",
    "CustomOrdering",
    "OrderingKind",
    "TraversalOrder",
    "ValueCloningMode",
    "ValueCloning",
    "TreeError",
    "InvalidArgumentError",
    "InvalidLevelError",
    "SerializationError",
    "LocalityViolation",
    "check_key_function_locality",
    "reattach",
]
