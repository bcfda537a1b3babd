"""
ntree: mutable, generically keyed N-ary trees with self-maintaining indexes.

Example:
    from ntree import NearestCommonAncestor, Tree

    tree = Tree("demo")
    b2 = tree.create_node("B2").add_children(tree.create_node("C1"))
    tree.add_root(tree.create_node("A1").add_children(tree.create_node("B1"), b2))

    query = NearestCommonAncestor(tree.find_first_with_id("B1"), tree.find_first_with_id("C1"))
    [node.id for node in query.path_a_to_b()]  # ['B1', 'A1', 'B2', 'C1']
"""

from ntree.core import (
    CustomOrdering,
    InvalidArgumentError,
    InvalidLevelError,
    LocalityViolation,
    NaturalOrdering,
    NearestCommonAncestor,
    Node,
    NodeIndex,
    OrderingKind,
    OrderingStrategy,
    SerializationError,
    TraversalOrder,
    Tree,
    TreeError,
    Unordered,
    ValueCloning,
    ValueCloningMode,
    check_key_function_locality,
    reattach,
)
from ntree.io.serialization import decode, deep_copy, deep_copy_via_copy_constructor, encode

__version__ = "0.1.0"

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
    "encode",
    "decode",
    "deep_copy",
    "deep_copy_via_copy_constructor",
]
