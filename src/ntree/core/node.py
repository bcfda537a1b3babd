"""
Tree node: structural mutation, children access, ancestry and traversal.

A node owns its children (a mapping from child id to child). The links to
its parent and to its owning tree are weak references, so a detached
subtree is kept alive only by whoever holds its top node.

Structural edits keep every index of the owning tree current by pushing the
affected nodes back through the indexes:
- value/id changes refresh the node, its parent and its direct children
- subtree removal or replacement refreshes every node of the affected subtrees

Edits on orphans (nodes whose parent chain does not reach their tree's
root) are refused with ``None``/``False`` rather than raised.
"""

from __future__ import annotations

import logging
import uuid
import weakref
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    Dict,
    Generic,
    Iterable,
    Iterator,
    List,
    Optional,
    TypeVar,
    Union,
)

from ntree.core.cloning import DEFAULT_VALUE_CLONING, ValueCloning
from ntree.core.constants import TraversalOrder
from ntree.core.errors import InvalidArgumentError, InvalidLevelError
from ntree.core.ordering import OrderingStrategy, Unordered, compare_natural
from ntree.utils.callbacks import safe_consumer, safe_function, safe_predicate
from ntree.utils.validation import args_not_none

if TYPE_CHECKING:  # pragma: no cover - import for type hints only
    from ntree.core.tree import Tree

logger = logging.getLogger(__name__)

K = TypeVar("K")
V = TypeVar("V")
T = TypeVar("T")

TieBreak = Union[bool, Callable[["Node", "Node"], bool]]

_UNORDERED = Unordered()


def new_identity() -> str:
    """Opaque, globally unique token used for index bookkeeping."""
    return str(uuid.uuid4())


class Node(Generic[K, V]):
    """
    A node of an N-ary tree.

    Nodes are normally created through ``Tree.create_node``; they start
    detached (no parent) and join the tree via ``Tree.add_root`` or by being
    attached under an in-tree node.

    Equality and hashing use ``(id, value)`` only. ``identity`` is a separate
    per-instance token that survives serialization but changes on clone.
    The hash changes with ``set_value`` and ``replace_id``, so a node kept in
    a set or used as a dict key must not be edited there; key such
    collections by ``identity`` instead.
    """

    def __init__(
        self,
        tree: Optional["Tree[K, V]"],
        node_id: K,
        value: Optional[V] = None,
        *,
        identity: Optional[str] = None,
    ):
        args_not_none(node_id)
        self._id = node_id
        self._value = value
        self._revision = 1
        self._children: Dict[K, Node[K, V]] = {}
        self._parent_ref: Optional[weakref.ref] = None
        self._tree_ref: Optional[weakref.ref] = weakref.ref(tree) if tree is not None else None
        self.identity = identity or new_identity()

    # =========================================================================
    # Fields
    # =========================================================================

    @property
    def id(self) -> K:
        return self._id

    @property
    def value(self) -> Optional[V]:
        return self._value

    @value.setter
    def value(self, value: Optional[V]) -> None:
        self.set_value(value)

    @property
    def revision(self) -> int:
        return self._revision

    def increment_revision(self) -> int:
        self._revision += 1
        return self._revision

    @property
    def parent(self) -> Optional["Node[K, V]"]:
        return self._parent_ref() if self._parent_ref is not None else None

    @property
    def tree(self) -> Optional["Tree[K, V]"]:
        return self._tree_ref() if self._tree_ref is not None else None

    def _set_parent(self, parent: Optional["Node[K, V]"]) -> None:
        self._parent_ref = weakref.ref(parent) if parent is not None else None

    def _set_tree(self, tree: Optional["Tree[K, V]"]) -> None:
        self._tree_ref = weakref.ref(tree) if tree is not None else None

    def _detach(self, keep_children: bool = True) -> None:
        self._set_parent(None)
        self._set_tree(None)
        if not keep_children:
            self._children = {}

    def _ordering(self) -> OrderingStrategy:
        tree = self.tree
        return tree.ordering if tree is not None else _UNORDERED

    def _ordered_children(self) -> List["Node[K, V]"]:
        return self._ordering().sort(self._children.values())

    def _indexing_tree(self) -> Optional["Tree[K, V]"]:
        """The owning tree, if it has indexes and this node is part of it."""
        tree = self.tree
        if tree is None or not tree.has_indexes() or not self.is_in_tree():
            return None
        return tree

    def _refresh_neighborhood(self) -> None:
        tree = self._indexing_tree()
        if tree is not None:
            tree._reindex(self.neighborhood())

    def _replace_child_entry(self, old_id: K, new_child: "Node[K, V]") -> None:
        """Swap the child stored under ``old_id`` for ``new_child``, keeping its position."""
        self._children = {
            (new_child.id if key == old_id else key): (new_child if key == old_id else child)
            for key, child in self._children.items()
        }

    # =========================================================================
    # Mutation
    # =========================================================================

    def set_value(self, value: Optional[V]) -> "Node[K, V]":
        self._value = value
        self._refresh_neighborhood()
        return self

    def replace_id(self, new_id: K) -> bool:
        """Rename this node. Fails if the id is unchanged or a sibling owns ``new_id``."""
        args_not_none(new_id)
        if new_id == self._id:
            return False
        parent = self.parent
        if parent is not None:
            if new_id in parent._children:
                logger.debug("replace_id refused: sibling %r already exists", new_id)
                return False
            renamed = {}
            for key, child in parent._children.items():
                renamed[new_id if child is self else key] = child
            parent._children = renamed
        self._id = new_id
        self._refresh_neighborhood()
        return True

    def replace_single(self, other: "Node[K, V]") -> Optional["Node[K, V]"]:
        """
        Replace this node (not its descendants) with a clone of ``other``.

        The clone adopts this node's children. Returns this node, detached
        and childless, or None when ``other`` is this node, this node is an
        orphan, or a sibling already uses ``other.id``.
        """
        args_not_none(other)
        if other is self or self.is_orphan():
            return None
        tree = self.tree
        parent = self.parent
        if parent is not None and other.id != self._id and other.id in parent._children:
            logger.debug("replace_single refused: sibling %r already exists", other.id)
            return None

        replacement = other.clone_single(tree)
        children = list(self._children.values())
        for child in children:
            child._set_parent(replacement)
        replacement._children = self._children
        self._children = {}

        refreshed: List[Node[K, V]] = [replacement, *children]
        if parent is None:
            tree._root = replacement
        else:
            replacement._set_parent(parent)
            parent._replace_child_entry(self._id, replacement)
            refreshed.append(parent)
        tree._unindex([self])
        tree._reindex(refreshed)
        self._detach(keep_children=False)
        return self

    def replace_subtree(self, other: "Node[K, V]") -> Optional["Node[K, V]"]:
        """
        Replace this node and all its descendants with a deep clone of ``other``.

        Same refusal rules as ``replace_single``. Returns this node detached,
        with its subtree intact.
        """
        args_not_none(other)
        if other is self or self.is_orphan():
            return None
        tree = self.tree
        parent = self.parent
        if parent is None:
            tree._root = other.clone(tree)
            tree.recreate_indexes()
            self._detach()
            return self
        if other.id != self._id and other.id in parent._children:
            logger.debug("replace_subtree refused: sibling %r already exists", other.id)
            return None

        replacement = other.clone(tree)
        replacement._set_parent(parent)
        removed = self.to_list()
        parent._replace_child_entry(self._id, replacement)
        tree._unindex(removed)
        tree._reindex([parent, *replacement.to_list()])
        self._detach()
        return self

    def remove(self) -> Optional["Node[K, V]"]:
        """
        Detach this node and its subtree.

        Removing the root empties the tree. Returns this node (subtree
        intact), or None for orphans.
        """
        if self.is_orphan():
            return None
        tree = self.tree
        if self.is_root():
            tree.clear()
            self._detach()
            return self
        parent = self.parent
        removed = self.to_list()
        del parent._children[self._id]
        tree._unindex(removed)
        tree._reindex([parent])
        self._detach()
        return self

    def remove_and_promote_children(self, tie_break: TieBreak = False) -> Optional[List["Node[K, V]"]]:
        """
        Remove this node and hand its children to its parent.

        When a child's id collides with one of this node's siblings (its
        "uncle"), ``tie_break(child, uncle)`` decides: True keeps the child
        and discards the uncle, False discards the child. A failing tie-break
        counts as False.

        Returns every discarded node, starting with this one, or None when
        this node is the root or an orphan.
        """
        args_not_none(tie_break)
        if self.is_orphan() or self.is_root():
            return None
        if isinstance(tie_break, bool):
            keep_child = tie_break
            decide: Callable[[Node[K, V], Node[K, V]], bool] = lambda child, uncle: keep_child
        else:
            decide = safe_predicate(tie_break)

        tree = self.tree
        parent = self.parent
        del parent._children[self._id]
        removed: List[Node[K, V]] = [self]
        unindexed: List[Node[K, V]] = [self]
        refreshed: List[Node[K, V]] = [parent]

        for child in list(self._children.values()):
            uncle = parent._children.get(child.id)
            if uncle is None:
                child._set_parent(parent)
                parent._children[child.id] = child
                refreshed.append(child)
            elif decide(child, uncle):
                removed.append(uncle)
                unindexed.extend(uncle.to_list())
                uncle._detach()
                child._set_parent(parent)
                parent._children[child.id] = child
                refreshed.append(child)
            else:
                removed.append(child)
                unindexed.extend(child.to_list())
                child._detach()

        tree._unindex(unindexed)
        tree._reindex(refreshed)
        self._detach(keep_children=False)
        return removed

    def add_children(self, *nodes: "Node[K, V]") -> "Node[K, V]":
        """
        Attach detached nodes (and their subtrees) as children.

        Nodes that already have a parent, tree roots, this node and its
        ancestors are skipped. Ids already present win over later ones.
        """
        args_not_none(nodes)
        tree = self.tree
        added: List[Node[K, V]] = []
        for node in nodes:
            if node.parent is not None or node is self or node.is_root() or self.has_ancestor(node):
                continue
            if node.id in self._children:
                continue
            node._set_parent(self)
            if tree is not None and node.tree is not tree:
                for member in node.to_list():
                    member._set_tree(tree)
            self._children[node.id] = node
            added.append(node)

        if added:
            indexing = self._indexing_tree()
            if indexing is not None:
                indexing._reindex([member for node in added for member in node.to_list()] + [self])
        return self

    def set_child(self, node: "Node[K, V]") -> Optional["Node[K, V]"]:
        """
        Attach a clone of ``node`` (with its subtree) as a child.

        An existing child with the same id is replaced and returned detached;
        otherwise None is returned.

        Raises:
            InvalidArgumentError: If ``node`` is already one of this node's children
        """
        args_not_none(node)
        if any(child is node for child in self._children.values()):
            raise InvalidArgumentError("Node.set_child", "cannot set own child")
        replacement = node.clone(self.tree)
        replacement._set_parent(self)
        previous = self._children.get(replacement.id)
        self._children[replacement.id] = replacement

        indexing = self._indexing_tree()
        if indexing is not None:
            if previous is not None:
                indexing._unindex(previous.to_list())
            indexing._reindex([self, *replacement.to_list()])
        if previous is not None:
            previous._detach()
        return previous

    def set_children(self, nodes: Iterable["Node[K, V]"]) -> Dict[K, "Node[K, V]"]:
        """``set_child`` for each distinct node; returns replaced children by id."""
        args_not_none(nodes)
        replaced: Dict[K, Node[K, V]] = {}
        for node in _distinct(nodes):
            previous = self.set_child(node)
            if previous is not None:
                replaced[previous.id] = previous
        return replaced

    def set_child_if_absent(self, node: "Node[K, V]") -> bool:
        args_not_none(node)
        if node.id in self._children:
            return False
        self.set_child(node)
        return True

    def set_children_if_absent(self, nodes: Iterable["Node[K, V]"]) -> bool:
        """True only if every distinct node was added."""
        args_not_none(nodes)
        results = [self.set_child_if_absent(node) for node in _distinct(nodes)]
        return all(results)

    def remove_child(self, child_id: K) -> Optional["Node[K, V]"]:
        args_not_none(child_id)
        child = self._children.get(child_id)
        if child is None:
            return None
        indexing = self._indexing_tree()
        removed = child.to_list()
        del self._children[child_id]
        if indexing is not None:
            indexing._unindex(removed)
            indexing._reindex([self])
        child._detach()
        return child

    def remove_children(self, *child_ids: K) -> Dict[K, "Node[K, V]"]:
        args_not_none(child_ids)
        return self._remove_many(child_id for child_id in dict.fromkeys(child_ids) if child_id in self._children)

    def remove_children_where(self, predicate: Callable[["Node[K, V]"], bool]) -> Dict[K, "Node[K, V]"]:
        args_not_none(predicate)
        matches = safe_predicate(predicate)
        return self._remove_many(child.id for child in self.children_list() if matches(child))

    def remove_all_children(self) -> Dict[K, "Node[K, V]"]:
        return self._remove_many(list(self._children))

    def retain_children(self, *child_ids: K) -> Dict[K, "Node[K, V]"]:
        """Remove every child whose id is not listed; returns the removed ones."""
        args_not_none(child_ids)
        keep = set(child_ids)
        return self._remove_many(child_id for child_id in list(self._children) if child_id not in keep)

    def retain_children_where(self, predicate: Callable[["Node[K, V]"], bool]) -> Dict[K, "Node[K, V]"]:
        args_not_none(predicate)
        matches = safe_predicate(predicate)
        return self._remove_many(child.id for child in self.children_list() if not matches(child))

    def _remove_many(self, child_ids: Iterable[K]) -> Dict[K, "Node[K, V]"]:
        removed: Dict[K, Node[K, V]] = {}
        for child_id in list(child_ids):
            child = self.remove_child(child_id)
            if child is not None:
                removed[child_id] = child
        return removed

    # =========================================================================
    # Children access
    # =========================================================================

    def child(self, child_id: K) -> Optional["Node[K, V]"]:
        return self._children.get(child_id)

    def first_child_with_value(self, value: Optional[V]) -> Optional["Node[K, V]"]:
        for child in self._ordered_children():
            if child.value == value:
                return child
        return None

    def children_list(self) -> List["Node[K, V]"]:
        return self._ordered_children()

    def children_where(self, predicate: Callable[["Node[K, V]"], bool]) -> List["Node[K, V]"]:
        args_not_none(predicate)
        matches = safe_predicate(predicate)
        return [child for child in self._ordered_children() if matches(child)]

    def children_with_ids(self, *child_ids: K) -> List["Node[K, V]"]:
        args_not_none(child_ids)
        wanted = set(child_ids)
        return [child for child in self._ordered_children() if child.id in wanted]

    def children_map(self) -> Dict[K, "Node[K, V]"]:
        return {child.id: child for child in self._ordered_children()}

    def children_map_where(self, predicate: Callable[["Node[K, V]"], bool]) -> Dict[K, "Node[K, V]"]:
        return {child.id: child for child in self.children_where(predicate)}

    def children_map_with_ids(self, *child_ids: K) -> Dict[K, "Node[K, V]"]:
        return {child.id: child for child in self.children_with_ids(*child_ids)}

    def children_size(self) -> int:
        return len(self._children)

    def children_ids(self) -> List[K]:
        return [child.id for child in self._ordered_children()]

    def children_values(self) -> List[Optional[V]]:
        return [child.value for child in self._ordered_children()]

    def map_children_to_list(self, fn: Callable[["Node[K, V]"], T]) -> List[Optional[T]]:
        args_not_none(fn)
        mapper = safe_function(fn)
        return [mapper(child) for child in self._ordered_children()]

    def map_children_to_dict(self, fn: Callable[["Node[K, V]"], T]) -> Dict[K, Optional[T]]:
        args_not_none(fn)
        mapper = safe_function(fn)
        return {child.id: mapper(child) for child in self._ordered_children()}

    def children_ids_values_map(self) -> Dict[K, Optional[V]]:
        return {child.id: child.value for child in self._ordered_children()}

    def siblings_map(self) -> Optional[Dict[K, "Node[K, V]"]]:
        parent = self.parent
        if parent is None:
            return None
        return {sibling.id: sibling for sibling in parent._ordered_children() if sibling is not self}

    def siblings_list(self) -> List["Node[K, V]"]:
        siblings = self.siblings_map()
        return list(siblings.values()) if siblings is not None else []

    # =========================================================================
    # Ancestry
    # =========================================================================

    def is_root(self) -> bool:
        tree = self.tree
        return tree is not None and tree.root is self

    def is_in_tree(self) -> bool:
        """True if the parent chain ends exactly at the owning tree's root."""
        tree = self.tree
        if tree is None or tree.root is None:
            return False
        top = self
        parent = top.parent
        while parent is not None:
            top = parent
            parent = top.parent
        return top is tree.root

    def is_orphan(self) -> bool:
        return not self.is_in_tree()

    def level_from_root(self) -> int:
        """1 for the top of the hierarchy, 2 for its children, and so on."""
        level = 1
        parent = self.parent
        while parent is not None:
            level += 1
            parent = parent.parent
        return level

    def level_relative_to(self, ancestor: "Node[K, V]") -> int:
        """Level of this node counted from ``ancestor`` (itself = 1); -1 if unrelated."""
        args_not_none(ancestor)
        level = 1
        current: Optional[Node[K, V]] = self
        while current is not None:
            if current is ancestor:
                return level
            level += 1
            current = current.parent
        return -1

    def farthest_ancestor(self) -> Optional["Node[K, V]"]:
        parent = self.parent
        if parent is None:
            return None
        while parent.parent is not None:
            parent = parent.parent
        return parent

    def has_ancestor(self, node: "Node[K, V]") -> bool:
        args_not_none(node)
        parent = self.parent
        while parent is not None:
            if parent is node:
                return True
            parent = parent.parent
        return False

    def nodes_up_to_ancestor(self, ancestor: "Node[K, V]") -> Optional[List["Node[K, V]"]]:
        """``[self, parent, ..., ancestor]`` or None if ``ancestor`` is not above this node."""
        args_not_none(ancestor)
        chain: List[Node[K, V]] = [self]
        parent = self.parent
        while parent is not None:
            chain.append(parent)
            if parent is ancestor:
                return chain
            parent = parent.parent
        return None

    def neighborhood(self) -> List["Node[K, V]"]:
        """This node, its parent (if any) and its direct children."""
        nodes: List[Node[K, V]] = [self]
        parent = self.parent
        if parent is not None:
            nodes.append(parent)
        nodes.extend(self._children.values())
        return nodes

    # =========================================================================
    # Traversal
    # =========================================================================

    def _pre_order(self) -> List["Node[K, V]"]:
        ordering = self._ordering()
        result: List[Node[K, V]] = []
        stack: List[Node[K, V]] = [self]
        while stack:
            node = stack.pop()
            result.append(node)
            stack.extend(reversed(ordering.sort(node._children.values())))
        return result

    def _post_order(self) -> List["Node[K, V]"]:
        ordering = self._ordering()
        result: List[Node[K, V]] = []
        stack = [(self, False)]
        while stack:
            node, expanded = stack.pop()
            if expanded:
                result.append(node)
                continue
            stack.append((node, True))
            stack.extend((child, False) for child in reversed(ordering.sort(node._children.values())))
        return result

    def _levels(self, limit: Optional[int] = None) -> List[List["Node[K, V]"]]:
        ordering = self._ordering()
        levels: List[List[Node[K, V]]] = []
        current: List[Node[K, V]] = [self]
        while current and (limit is None or len(levels) < limit):
            levels.append(current)
            current = [child for node in current for child in ordering.sort(node._children.values())]
        return levels

    def to_list(self, order: TraversalOrder = TraversalOrder.PRE_ORDER) -> List["Node[K, V]"]:
        order = TraversalOrder(order)
        if order is TraversalOrder.PRE_ORDER:
            return self._pre_order()
        if order is TraversalOrder.POST_ORDER:
            return self._post_order()
        levels = self._levels()
        if order is TraversalOrder.LEVEL_ORDER_FROM_BOTTOM:
            levels.reverse()
        return [node for level in levels for node in level]

    def nodes_in_level(self, level: int) -> List["Node[K, V]"]:
        """Nodes ``level - 1`` edges below this one; empty past the deepest level."""
        if level < 1:
            raise InvalidLevelError(level)
        levels = self._levels(limit=level)
        return list(levels[level - 1]) if len(levels) == level else []

    def __iter__(self) -> Iterator["Node[K, V]"]:
        return iter(self._pre_order())

    def for_each(
        self,
        action: Callable[["Node[K, V]"], Any],
        order: TraversalOrder = TraversalOrder.PRE_ORDER,
    ) -> None:
        """
        Apply ``action`` to every node of the subtree.

        The node list is taken before the first call, so actions may edit
        the tree; the owning tree's indexes are rebuilt afterwards.
        """
        args_not_none(action)
        self._apply(action, self.to_list(order))

    def for_each_pre_order(self, action: Callable[["Node[K, V]"], Any]) -> None:
        self.for_each(action, TraversalOrder.PRE_ORDER)

    def for_each_post_order(self, action: Callable[["Node[K, V]"], Any]) -> None:
        self.for_each(action, TraversalOrder.POST_ORDER)

    def for_each_level_order(self, action: Callable[["Node[K, V]"], Any]) -> None:
        self.for_each(action, TraversalOrder.LEVEL_ORDER)

    def for_each_level_order_from_bottom(self, action: Callable[["Node[K, V]"], Any]) -> None:
        self.for_each(action, TraversalOrder.LEVEL_ORDER_FROM_BOTTOM)

    def for_each_at_level(self, level: int, action: Callable[["Node[K, V]"], Any]) -> None:
        args_not_none(action)
        self._apply(action, self.nodes_in_level(level))

    def _apply(self, action: Callable[["Node[K, V]"], Any], nodes: List["Node[K, V]"]) -> None:
        tree = self.tree
        consume = safe_consumer(action)
        for node in nodes:
            consume(node)
        if tree is not None:
            tree.recreate_indexes()

    def map_to_list(
        self,
        fn: Callable[["Node[K, V]"], T],
        order: TraversalOrder = TraversalOrder.PRE_ORDER,
    ) -> List[Optional[T]]:
        args_not_none(fn)
        mapper = safe_function(fn)
        return [mapper(node) for node in self.to_list(order)]

    def find_all(
        self,
        predicate: Callable[["Node[K, V]"], bool],
        order: TraversalOrder = TraversalOrder.PRE_ORDER,
    ) -> List["Node[K, V]"]:
        args_not_none(predicate)
        matches = safe_predicate(predicate)
        return [node for node in self.to_list(order) if matches(node)]

    def find_first(self, predicate: Callable[["Node[K, V]"], bool]) -> Optional["Node[K, V]"]:
        """First pre-order match, stopping as soon as one is found."""
        args_not_none(predicate)
        matches = safe_predicate(predicate)
        ordering = self._ordering()
        stack: List[Node[K, V]] = [self]
        while stack:
            node = stack.pop()
            if matches(node):
                return node
            stack.extend(reversed(ordering.sort(node._children.values())))
        return None

    def find_first_with_id(self, node_id: K) -> Optional["Node[K, V]"]:
        args_not_none(node_id)
        return self.find_first(lambda node: node.id == node_id)

    def find_first_with_value(self, value: Optional[V]) -> Optional["Node[K, V]"]:
        return self.find_first(lambda node: node.value == value)

    # =========================================================================
    # Shape
    # =========================================================================

    def height(self) -> int:
        """Number of nodes on the longest downward path; a leaf has height 1."""
        return len(self._levels())

    def size(self) -> int:
        count = 0
        stack: List[Node[K, V]] = [self]
        while stack:
            node = stack.pop()
            count += 1
            stack.extend(node._children.values())
        return count

    def to_map_of_lists(self) -> Dict[K, List["Node[K, V]"]]:
        grouped: Dict[K, List[Node[K, V]]] = {}
        for node in self._pre_order():
            grouped.setdefault(node.id, []).append(node)
        return grouped

    # =========================================================================
    # Cloning
    # =========================================================================

    def _value_cloning(self, target: Optional["Tree[K, V]"]) -> ValueCloning:
        if target is not None:
            return target.value_cloning
        own = self.tree
        return own.value_cloning if own is not None else DEFAULT_VALUE_CLONING

    def clone_single(self, tree: Optional["Tree[K, V]"] = None) -> "Node[K, V]":
        """Copy of this node without children, owned by ``tree`` (default: this node's tree)."""
        target = tree if tree is not None else self.tree
        clone = Node(target, self._id, self._value_cloning(target).clone(self._value))
        clone._revision = self._revision
        return clone

    def clone(self, tree: Optional["Tree[K, V]"] = None) -> "Node[K, V]":
        """Deep copy of this subtree with fresh identities and no parent."""
        target = tree if tree is not None else self.tree
        root = self.clone_single(target)
        stack = [(self, root)]
        while stack:
            source, copy = stack.pop()
            for child in source._children.values():
                child_copy = child.clone_single(target)
                child_copy._set_parent(copy)
                copy._children[child_copy.id] = child_copy
                stack.append((child, child_copy))
        return root

    # =========================================================================
    # Comparison
    # =========================================================================

    def equals_subtree(self, other: Optional["Node[K, V]"]) -> bool:
        """Ids, values and children (recursively) are all equal."""
        if other is None:
            return False
        pairs = [(self, other)]
        while pairs:
            left, right = pairs.pop()
            if left != right or left._children.keys() != right._children.keys():
                return False
            pairs.extend((child, right._children[key]) for key, child in left._children.items())
        return True

    def compare_to(self, other: "Node[K, V]") -> int:
        args_not_none(other)
        return compare_natural(self, other)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Node):
            return NotImplemented
        return self._id == other._id and self._value == other._value

    def __hash__(self) -> int:
        try:
            return hash((self._id, self._value))
        except TypeError:
            return hash(self._id)

    def __repr__(self) -> str:
        return f"Node(id={self._id!r}, value={self._value!r})"


def _distinct(nodes: Iterable[Node]) -> List[Node]:
    """Drop repeated occurrences of the same node object, keeping order."""
    seen = set()
    unique = []
    for node in nodes:
        if id(node) not in seen:
            seen.add(id(node))
            unique.append(node)
    return unique


def reattach(node: Node, parent: Optional[Node], tree: Optional["Tree"]) -> None:
    """Restore parent and tree back-references for ``node`` and its whole subtree.

    Needed after building nodes from a tree-shaped document, where only the
    downward links exist.
    """
    args_not_none(node)
    node._set_parent(parent)
    node._set_tree(tree)
    stack = [node]
    while stack:
        current = stack.pop()
        for child in current._children.values():
            child._set_parent(current)
            child._set_tree(tree)
            stack.append(child)


__all__ = ["Node", "TieBreak", "new_identity", "reattach"]
