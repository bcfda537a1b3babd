"""Nearest common ancestor of two nodes, with the paths through it."""

from __future__ import annotations

import logging
from typing import Generic, List, Optional, TypeVar

from ntree.core.node import Node
from ntree.utils.validation import args_not_none

logger = logging.getLogger(__name__)

K = TypeVar("K")
V = TypeVar("V")


class NearestCommonAncestor(Generic[K, V]):
    """
    Read-only query over two nodes of the same hierarchy.

    The pair is valid only when both nodes share an owning tree and the same
    farthest ancestor. A node paired with itself, or a hierarchy top paired
    with anything, is invalid. Every accessor of an invalid query returns None.

    Cases:
    - B below A: the ancestor is A's parent. A's side is ``[A, A.parent]``,
      B's side runs from B up to A's parent, and the A-to-B path runs from A
      straight down to B.
    - A below B: the mirror image.
    - Otherwise both ancestor chains are walked one edge at a time until
      they meet; the meeting node is the ancestor.
    """

    def __init__(self, node_a: Node[K, V], node_b: Node[K, V]):
        args_not_none(node_a, node_b)
        self.node_a = node_a
        self.node_b = node_b
        self._ancestor: Optional[Node[K, V]] = None
        self._a_side: List[Node[K, V]] = []
        self._b_side: List[Node[K, V]] = []
        self._a_to_b: List[Node[K, V]] = []
        self._valid = self._resolve()

    def _resolve(self) -> bool:
        a, b = self.node_a, self.node_b
        if a is b or a.tree is not b.tree:
            return False
        top_a = a.farthest_ancestor()
        top_b = b.farthest_ancestor()
        if top_a is None or top_b is None or top_a is not top_b:
            return False
        if b.has_ancestor(a):
            return self._resolve_lineage(a, b, a_is_upper=True)
        if a.has_ancestor(b):
            return self._resolve_lineage(b, a, a_is_upper=False)
        return self._resolve_divergent(a, b)

    def _resolve_lineage(self, upper: Node[K, V], lower: Node[K, V], *, a_is_upper: bool) -> bool:
        ancestor = upper.parent
        if ancestor is None:
            return False
        upper_side = [upper, ancestor]
        lower_side = lower.nodes_up_to_ancestor(ancestor)
        lower_to_upper = lower.nodes_up_to_ancestor(upper)
        self._ancestor = ancestor
        if a_is_upper:
            self._a_side, self._b_side = upper_side, lower_side
            self._a_to_b = list(reversed(lower_to_upper))
        else:
            self._a_side, self._b_side = lower_side, upper_side
            self._a_to_b = lower_to_upper
        return True

    def _resolve_divergent(self, a: Node[K, V], b: Node[K, V]) -> bool:
        chain_a, chain_b = [a], [b]
        seen_a, seen_b = {a.identity}, {b.identity}
        current_a, current_b = a, b
        while True:
            if chain_a[-1].identity in seen_b:
                ancestor = chain_a[-1]
                break
            if chain_b[-1].identity in seen_a:
                ancestor = chain_b[-1]
                break
            next_a, next_b = current_a.parent, current_b.parent
            if next_a is None and next_b is None:
                logger.debug("No common ancestor for %r and %r", a, b)
                return False
            if next_a is not None:
                current_a = next_a
                chain_a.append(next_a)
                seen_a.add(next_a.identity)
            if next_b is not None:
                current_b = next_b
                chain_b.append(next_b)
                seen_b.add(next_b.identity)

        self._ancestor = ancestor
        self._a_side = _trim_to(chain_a, ancestor)
        self._b_side = _trim_to(chain_b, ancestor)
        self._a_to_b = self._a_side[:-1] + list(reversed(self._b_side))
        return True

    def has_common_ancestor(self) -> bool:
        return self._valid

    def common_ancestor(self) -> Optional[Node[K, V]]:
        return self._ancestor if self._valid else None

    def path_a_to_ancestor(self) -> Optional[List[Node[K, V]]]:
        return list(self._a_side) if self._valid else None

    def path_b_to_ancestor(self) -> Optional[List[Node[K, V]]]:
        return list(self._b_side) if self._valid else None

    def path_ancestor_to_a(self) -> Optional[List[Node[K, V]]]:
        return list(reversed(self._a_side)) if self._valid else None

    def path_ancestor_to_b(self) -> Optional[List[Node[K, V]]]:
        return list(reversed(self._b_side)) if self._valid else None

    def path_a_to_b(self) -> Optional[List[Node[K, V]]]:
        return list(self._a_to_b) if self._valid else None

    def path_b_to_a(self) -> Optional[List[Node[K, V]]]:
        return list(reversed(self._a_to_b)) if self._valid else None

    def __repr__(self) -> str:
        return f"NearestCommonAncestor(a={self.node_a!r}, b={self.node_b!r}, ancestor={self.common_ancestor()!r})"


def _trim_to(chain: List[Node], ancestor: Node) -> List[Node]:
    for position, node in enumerate(chain):
        if node is ancestor:
            return chain[: position + 1]
    return chain


__all__ = ["NearestCommonAncestor"]
