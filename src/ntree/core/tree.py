"""
Tree: root ownership, indexes and tree-level configuration.

Example:
    from ntree import Tree

    tree = Tree("inventory")
    root = tree.create_node("A1", 1).add_children(
        tree.create_node("B1", 2),
        tree.create_node("B2", 3),
    )
    tree.add_root(root)
    tree.add_index("by_value", lambda node: node.value)
    tree.nodes_in_index("by_value", 2)  # [Node(id='B1', value=2)]

Concurrent mutation from several threads is unsupported; a tree has one
writer at a time.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Generic, Iterable, Iterator, List, Optional, TypeVar

from ntree.core.cloning import ValueCloning
from ntree.core.constants import OrderingKind, TraversalOrder, ValueCloningMode
from ntree.core.errors import InvalidLevelError
from ntree.core.index import KeyFunction, NodeIndex
from ntree.core.node import Node, new_identity, reattach
from ntree.core.ordering import (
    Comparator,
    CustomOrdering,
    NaturalOrdering,
    OrderingStrategy,
    Unordered,
)
from ntree.utils.logging import log_calls
from ntree.utils.validation import args_not_none

logger = logging.getLogger(__name__)

K = TypeVar("K")
V = TypeVar("V")
T = TypeVar("T")


class Tree(Generic[K, V]):
    """An N-ary tree with an optional root and named secondary indexes."""

    def __init__(
        self,
        tree_id: K,
        *,
        ordering: Optional[OrderingStrategy] = None,
        value_cloning: Optional[ValueCloning] = None,
    ):
        args_not_none(tree_id)
        self._id = tree_id
        self.identity = new_identity()
        self._revision = 1
        self._root: Optional[Node[K, V]] = None
        self._ordering: OrderingStrategy = ordering if ordering is not None else Unordered()
        self._value_cloning = value_cloning if value_cloning is not None else ValueCloning()
        self._indexes: Dict[str, NodeIndex] = {}

    # =========================================================================
    # Fields and configuration
    # =========================================================================

    @property
    def id(self) -> K:
        return self._id

    def replace_id(self, new_id: K) -> None:
        """Rename the tree. Equality and hashing follow the new id."""
        args_not_none(new_id)
        self._id = new_id

    @property
    def root(self) -> Optional[Node[K, V]]:
        return self._root

    @property
    def revision(self) -> int:
        return self._revision

    def increment_revision(self) -> int:
        self._revision += 1
        return self._revision

    @property
    def ordering(self) -> OrderingStrategy:
        return self._ordering

    @property
    def is_ordered(self) -> bool:
        return self._ordering.is_ordered

    @property
    def is_naturally_ordered(self) -> bool:
        return self._ordering.kind is OrderingKind.NATURAL

    @property
    def is_custom_ordered(self) -> bool:
        return self._ordering.kind is OrderingKind.CUSTOM

    def use_no_ordering(self) -> "Tree[K, V]":
        self._ordering = Unordered()
        return self

    def use_natural_ordering(self) -> "Tree[K, V]":
        self._ordering = NaturalOrdering()
        return self

    def use_custom_ordering(self, comparator: Comparator) -> "Tree[K, V]":
        args_not_none(comparator)
        self._ordering = CustomOrdering(comparator)
        return self

    @property
    def value_cloning(self) -> ValueCloning:
        return self._value_cloning

    def use_copy_cloning(self) -> "Tree[K, V]":
        self._value_cloning = ValueCloning(mode=ValueCloningMode.BY_COPY)
        return self

    def use_serialization_cloning(self, value_type: Any = None) -> "Tree[K, V]":
        self._value_cloning = ValueCloning(mode=ValueCloningMode.BY_SERIALIZATION, value_type=value_type)
        return self

    # =========================================================================
    # Nodes and root
    # =========================================================================

    def create_node(self, node_id: K, value: Optional[V] = None) -> Node[K, V]:
        """New detached node owned by this tree."""
        args_not_none(node_id)
        return Node(self, node_id, value)

    def add_root(self, node: Node[K, V]) -> bool:
        """Install ``node`` as root if the tree is empty and the node is a detached node of this tree."""
        args_not_none(node)
        if self._root is not None or node.tree is not self or node.parent is not None:
            return False
        reattach(node, None, self)
        self._root = node
        self.recreate_indexes()
        return True

    def set_root(self, node: Node[K, V]) -> Optional[Node[K, V]]:
        """Replace the whole tree content with a clone of ``node``'s subtree.

        Returns the previous root (detached), or None if the tree was empty
        or the replacement was refused.
        """
        args_not_none(node)
        if self._root is None:
            self._root = node.clone(self)
            self.recreate_indexes()
            return None
        return self._root.replace_subtree(node)

    def set_root_single(self, node: Node[K, V]) -> Optional[Node[K, V]]:
        """Replace only the root node with a clone of ``node``, keeping the root's children."""
        args_not_none(node)
        if self._root is None:
            self._root = node.clone_single(self)
            self.recreate_indexes()
            return None
        return self._root.replace_single(node)

    def clear(self) -> None:
        for index in self._indexes.values():
            index.clear()
        self._root = None

    def is_empty(self) -> bool:
        return self._root is None

    def size(self) -> int:
        return self._root.size() if self._root is not None else 0

    def height(self) -> int:
        return self._root.height() if self._root is not None else 0

    # =========================================================================
    # Indexes
    # =========================================================================

    def add_index(self, name: str, key_fn: KeyFunction) -> bool:
        """Register and compute a new index. False if the name is taken."""
        args_not_none(name, key_fn)
        if name in self._indexes:
            return False
        index = NodeIndex(name, key_fn, self)
        index.compute()
        self._indexes[name] = index
        logger.info("Added index '%s' to tree %r (%d entries)", name, self._id, len(index))
        return True

    def remove_index(self, name: str) -> bool:
        args_not_none(name)
        removed = self._indexes.pop(name, None)
        if removed is not None:
            logger.info("Removed index '%s' from tree %r", name, self._id)
        return removed is not None

    def remove_all_indexes(self) -> None:
        self._indexes.clear()

    def has_indexes(self) -> bool:
        return bool(self._indexes)

    def index_names(self) -> List[str]:
        return list(self._indexes)

    def index(self, name: str) -> Optional[NodeIndex]:
        return self._indexes.get(name)

    @log_calls()
    def recreate_indexes(self) -> None:
        for index in self._indexes.values():
            index.compute()

    def nodes_in_index(self, name: str, key: Any) -> Optional[List[Node[K, V]]]:
        """Nodes stored under ``key``; None if no index is called ``name``."""
        args_not_none(name)
        index = self._indexes.get(name)
        if index is None:
            return None
        return index.get(key)

    def first_node_in_index(self, name: str, key: Any) -> Optional[Node[K, V]]:
        nodes = self.nodes_in_index(name, key)
        return nodes[0] if nodes else None

    def verify_index_locality(self, name: str, nodes: Optional[Iterable[Node[K, V]]] = None) -> list:
        """Run the locality checker against the key function of index ``name``.

        Raises:
            KeyError: If no index is called ``name``
        """
        from ntree.core.locality import check_key_function_locality

        index = self._indexes.get(name)
        if index is None:
            available = ", ".join(sorted(self._indexes)) or "none"
            raise KeyError(f"Index '{name}' not found. Available: {available}")
        return check_key_function_locality(self, index.key_fn, nodes)

    def _reindex(self, nodes: Iterable[Node[K, V]]) -> None:
        nodes = list(nodes)
        for index in self._indexes.values():
            for node in nodes:
                index.put(node)

    def _unindex(self, nodes: Iterable[Node[K, V]]) -> None:
        nodes = list(nodes)
        for index in self._indexes.values():
            for node in nodes:
                index.remove(node)

    # =========================================================================
    # Queries and traversal
    # =========================================================================

    def to_list(self, order: TraversalOrder = TraversalOrder.PRE_ORDER) -> List[Node[K, V]]:
        return self._root.to_list(order) if self._root is not None else []

    def nodes_in_level(self, level: int) -> List[Node[K, V]]:
        if level < 1:
            raise InvalidLevelError(level)
        return self._root.nodes_in_level(level) if self._root is not None else []

    def map_to_list(
        self,
        fn: Callable[[Node[K, V]], T],
        order: TraversalOrder = TraversalOrder.PRE_ORDER,
    ) -> List[Optional[T]]:
        args_not_none(fn)
        return self._root.map_to_list(fn, order) if self._root is not None else []

    def find_all(
        self,
        predicate: Callable[[Node[K, V]], bool],
        order: TraversalOrder = TraversalOrder.PRE_ORDER,
    ) -> List[Node[K, V]]:
        args_not_none(predicate)
        return self._root.find_all(predicate, order) if self._root is not None else []

    def find_first(self, predicate: Callable[[Node[K, V]], bool]) -> Optional[Node[K, V]]:
        args_not_none(predicate)
        return self._root.find_first(predicate) if self._root is not None else None

    def find_first_with_id(self, node_id: K) -> Optional[Node[K, V]]:
        args_not_none(node_id)
        return self._root.find_first_with_id(node_id) if self._root is not None else None

    def find_first_with_value(self, value: Optional[V]) -> Optional[Node[K, V]]:
        return self._root.find_first_with_value(value) if self._root is not None else None

    def for_each(
        self,
        action: Callable[[Node[K, V]], Any],
        order: TraversalOrder = TraversalOrder.PRE_ORDER,
    ) -> None:
        """Apply ``action`` to every node, then rebuild all indexes."""
        args_not_none(action)
        if self._root is not None:
            self._root.for_each(action, order)

    def for_each_pre_order(self, action: Callable[[Node[K, V]], Any]) -> None:
        self.for_each(action, TraversalOrder.PRE_ORDER)

    def for_each_post_order(self, action: Callable[[Node[K, V]], Any]) -> None:
        self.for_each(action, TraversalOrder.POST_ORDER)

    def for_each_level_order(self, action: Callable[[Node[K, V]], Any]) -> None:
        self.for_each(action, TraversalOrder.LEVEL_ORDER)

    def for_each_level_order_from_bottom(self, action: Callable[[Node[K, V]], Any]) -> None:
        self.for_each(action, TraversalOrder.LEVEL_ORDER_FROM_BOTTOM)

    def for_each_at_level(self, level: int, action: Callable[[Node[K, V]], Any]) -> None:
        args_not_none(action)
        if level < 1:
            raise InvalidLevelError(level)
        if self._root is not None:
            self._root.for_each_at_level(level, action)

    def __iter__(self) -> Iterator[Node[K, V]]:
        return iter(self.to_list())

    # =========================================================================
    # Cloning and equality
    # =========================================================================

    @log_calls()
    def clone(self, new_id: Optional[K] = None) -> "Tree[K, V]":
        """
        Deep copy with a fresh identity.

        Configuration, revision and indexes (recomputed against the copy) are
        carried over. The copy keeps this tree's id unless ``new_id`` is given.
        """
        copy = Tree(
            new_id if new_id is not None else self._id,
            ordering=self._ordering,
            value_cloning=self._value_cloning,
        )
        copy._revision = self._revision
        if self._root is not None:
            copy._root = self._root.clone(copy)
        for name, index in self._indexes.items():
            copy._indexes[name] = index.clone_for(copy)
        logger.info("Cloned tree %r (%d nodes)", self._id, copy.size())
        return copy

    def is_clone_of(self, other: "Tree[K, V]", sample_nodes: Optional[Iterable[Node[K, V]]] = None) -> bool:
        """
        True if ``other`` is a distinct tree equal to this one in structure,
        revision, cloning mode, ordering and indexes.

        Custom comparators cannot be compared directly; they must agree on
        every consecutive pair of ``sample_nodes`` (default: this tree's nodes).
        """
        args_not_none(other)
        if other is self or self != other:
            return False
        if self._revision != other._revision or self._value_cloning != other._value_cloning:
            return False
        if self._ordering.kind is not other._ordering.kind:
            return False
        if isinstance(self._ordering, CustomOrdering):
            sample = list(sample_nodes) if sample_nodes is not None else self.to_list()
            if not self._ordering.behaves_like(other._ordering, sample):
                return False
        return self._indexes == other._indexes

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Tree):
            return NotImplemented
        if self._id != other._id:
            return False
        if self._root is None or other._root is None:
            return self._root is None and other._root is None
        return self._root.equals_subtree(other._root)

    def __hash__(self) -> int:
        return hash(self._id)

    def __repr__(self) -> str:
        return f"Tree(id={self._id!r}, size={self.size()})"

    # =========================================================================
    # Rendering and serialization
    # =========================================================================

    def render(self, width: int = 3, height: int = 1, label: Optional[Callable[[Node[K, V]], Any]] = None) -> str:
        """Text diagram of the tree, or ``"Empty Tree"``."""
        from ntree.visualizer.text_graph import tree_graph

        if self._root is None:
            return "Empty Tree"
        return tree_graph(self._root, width=width, height=height, label=label)

    def to_json(self, indent: Optional[int] = None) -> str:
        from ntree.io.documents import tree_to_json

        return tree_to_json(self, indent=indent)

    def to_yaml(self) -> str:
        from ntree.io.documents import tree_to_yaml

        return tree_to_yaml(self)

    @classmethod
    def from_json(cls, text: str, id_type: Any = Any, value_type: Any = Any) -> "Tree":
        from ntree.io.documents import tree_from_json

        return tree_from_json(text, id_type=id_type, value_type=value_type)

    @classmethod
    def from_yaml(cls, text: str, id_type: Any = Any, value_type: Any = Any) -> "Tree":
        from ntree.io.documents import tree_from_yaml

        return tree_from_yaml(text, id_type=id_type, value_type=value_type)


__all__ = ["Tree"]
