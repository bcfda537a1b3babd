"""Enumerations shared across the tree core."""

from __future__ import annotations

from enum import Enum


class TraversalOrder(str, Enum):
    """Order in which a traversal visits the nodes of a subtree."""

    PRE_ORDER = "pre_order"
    POST_ORDER = "post_order"
    LEVEL_ORDER = "level_order"
    LEVEL_ORDER_FROM_BOTTOM = "level_order_from_bottom"


class OrderingKind(str, Enum):
    """How siblings are ordered during traversal."""

    UNORDERED = "unordered"
    NATURAL = "natural"  # by id, then by value when values are comparable
    CUSTOM = "custom"  # caller-supplied three-way comparator


class ValueCloningMode(str, Enum):
    """Strategy used to copy node values when nodes are cloned."""

    BY_COPY = "by_copy"
    BY_SERIALIZATION = "by_serialization"


__all__ = ["TraversalOrder", "OrderingKind", "ValueCloningMode"]
