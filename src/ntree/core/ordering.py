"""Sibling ordering strategies consulted by every traversal.

Unordered iteration follows the insertion order of each node's children
mapping. That order is stable for a given in-memory structural state; it is
not guaranteed to survive cloning across processes or serialization by other
tools.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from functools import cmp_to_key
from typing import TYPE_CHECKING, Any, Callable, Iterable, List, Optional

from ntree.core.constants import OrderingKind
from ntree.utils.callbacks import safe_comparator

if TYPE_CHECKING:  # pragma: no cover - import for type hints only
    from ntree.core.node import Node

Comparator = Callable[["Node", "Node"], int]


def _three_way(left: Any, right: Any) -> Optional[int]:
    """Return -1/0/1, or None when the operands do not support ordering."""
    try:
        if left < right:
            return -1
        if right < left:
            return 1
        return 0
    except TypeError:
        return None


def compare_natural(left: "Node", right: "Node") -> int:
    """Compare by id, then by value.

    ``None`` values sort first. Values that cannot be ordered against each
    other tie.
    """
    by_id = _three_way(left.id, right.id)
    if by_id:
        return by_id
    if left.value is None and right.value is None:
        return 0
    if left.value is None:
        return -1
    if right.value is None:
        return 1
    return _three_way(left.value, right.value) or 0


class OrderingStrategy(ABC):
    """Base class for sibling orderings."""

    kind: OrderingKind

    @abstractmethod
    def compare(self, left: "Node", right: "Node") -> int:
        raise NotImplementedError

    def sort(self, nodes: Iterable["Node"]) -> List["Node"]:
        return sorted(nodes, key=cmp_to_key(self.compare))

    @property
    def is_ordered(self) -> bool:
        return self.kind is not OrderingKind.UNORDERED

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, OrderingStrategy):
            return NotImplemented
        return self.kind is other.kind

    def __hash__(self) -> int:
        return hash(self.kind)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class Unordered(OrderingStrategy):
    kind = OrderingKind.UNORDERED

    def compare(self, left: "Node", right: "Node") -> int:
        return 0

    def sort(self, nodes: Iterable["Node"]) -> List["Node"]:
        return list(nodes)


class NaturalOrdering(OrderingStrategy):
    kind = OrderingKind.NATURAL

    def compare(self, left: "Node", right: "Node") -> int:
        return compare_natural(left, right)


class CustomOrdering(OrderingStrategy):
    """Orders siblings with a caller-supplied three-way comparator.

    A comparator that raises for a pair treats that pair as equal, so the
    sort keeps their relative order.
    """

    kind = OrderingKind.CUSTOM

    def __init__(self, comparator: Comparator):
        self.comparator = comparator
        self._safe = safe_comparator(comparator)

    def compare(self, left: "Node", right: "Node") -> int:
        return self._safe(left, right)

    def behaves_like(self, other: "CustomOrdering", sample: List["Node"]) -> bool:
        """Compare two comparators by their results over consecutive sample pairs."""
        for left, right in zip(sample, sample[1:]):
            if self.compare(left, right) != other.compare(left, right):
                return False
        return True

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CustomOrdering):
            return NotImplemented
        return self.comparator is other.comparator

    def __hash__(self) -> int:
        return hash((self.kind, id(self.comparator)))

    def __repr__(self) -> str:
        return f"CustomOrdering({getattr(self.comparator, '__qualname__', self.comparator)!r})"


__all__ = [
    "Comparator",
    "OrderingStrategy",
    "Unordered",
    "NaturalOrdering",
    "CustomOrdering",
    "compare_natural",
]
