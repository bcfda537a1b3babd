"""
Named secondary index over the nodes of a tree.

An index maps the result of a user key function to the set of in-tree nodes
producing it. A reverse map (node identity -> key) makes removal O(1), so the
tree can refresh just the nodes touched by an edit.

Key functions must stay local: they may read the node, its parent and its
direct children, nothing further. Reads beyond that go stale silently; use
``ntree.core.locality.check_key_function_locality`` in tests to catch them.
"""

from __future__ import annotations

import logging
import weakref
from collections import Counter
from typing import TYPE_CHECKING, Callable, Dict, Generic, List, Optional, Tuple, TypeVar

from ntree.utils.callbacks import safe_function
from ntree.utils.validation import args_not_none

if TYPE_CHECKING:  # pragma: no cover - import for type hints only
    from ntree.core.node import Node
    from ntree.core.tree import Tree

logger = logging.getLogger(__name__)

R = TypeVar("R")

KeyFunction = Callable[["Node"], Optional[R]]

_MISSING = object()


class NodeIndex(Generic[R]):
    """Multi-map ``key -> {identity: node}`` with a reverse ``identity -> key`` map."""

    def __init__(self, name: str, key_fn: KeyFunction, tree: "Tree"):
        args_not_none(name, key_fn, tree)
        self.name = name
        self.key_fn = key_fn
        self._key_of = safe_function(key_fn)
        self._tree_ref = weakref.ref(tree)
        self._table: Dict[R, Dict[str, Node]] = {}
        self._keys_by_identity: Dict[str, R] = {}

    @property
    def tree(self) -> Optional["Tree"]:
        return self._tree_ref()

    def compute(self) -> None:
        """Rebuild the whole table from the tree's current nodes."""
        self.clear()
        tree = self.tree
        if tree is None or tree.root is None:
            return
        for node in tree.root.to_list():
            self._insert(node)
        logger.debug("Computed index '%s': %d entries", self.name, len(self))

    def put(self, node: "Node") -> None:
        """(Re)insert ``node`` under its current key; excluded if the key function fails."""
        args_not_none(node)
        self.remove(node)
        self._insert(node)

    def _insert(self, node: "Node") -> None:
        key = self._key_of(node)
        if key is None:
            return
        try:
            bucket = self._table.setdefault(key, {})
        except TypeError:
            logger.debug("Index '%s' skipped %r: unhashable key %r", self.name, node, key)
            return
        bucket[node.identity] = node
        self._keys_by_identity[node.identity] = key

    def remove(self, node: "Node") -> None:
        args_not_none(node)
        key = self._keys_by_identity.pop(node.identity, _MISSING)
        if key is _MISSING:
            return
        bucket = self._table.get(key)
        if bucket is None:
            return
        bucket.pop(node.identity, None)
        if not bucket:
            del self._table[key]

    def clear(self) -> None:
        self._table.clear()
        self._keys_by_identity.clear()

    def get(self, key: R) -> List["Node"]:
        """All nodes currently mapped to ``key`` (empty list if none)."""
        try:
            bucket = self._table.get(key)
        except TypeError:
            return []
        return list(bucket.values()) if bucket else []

    def key_of(self, node: "Node") -> Optional[R]:
        """Key under which ``node`` is currently stored, or None."""
        return self._keys_by_identity.get(node.identity)

    def keys(self) -> List[R]:
        """One key per stored entry, so keys shared by several nodes repeat."""
        return [key for key, bucket in self._table.items() for _ in bucket]

    def entries(self) -> List[Tuple[R, "Node"]]:
        return [(key, node) for key, bucket in self._table.items() for node in bucket.values()]

    def clone_for(self, tree: "Tree") -> "NodeIndex[R]":
        """Same name and key function, computed against ``tree``."""
        index = NodeIndex(self.name, self.key_fn, tree)
        index.compute()
        return index

    def __contains__(self, node: object) -> bool:
        identity = getattr(node, "identity", None)
        return identity in self._keys_by_identity

    def __len__(self) -> int:
        return len(self._keys_by_identity)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NodeIndex):
            return NotImplemented
        return self.name == other.name and Counter(self.entries()) == Counter(other.entries())

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"NodeIndex(name={self.name!r}, entries={len(self)})"


__all__ = ["NodeIndex", "KeyFunction"]
