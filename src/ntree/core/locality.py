"""Debug aid: detect index key functions that read beyond a node's neighborhood.

Index currency relies on key functions reading only the node itself, its
parent and its direct children. This module runs a key function against a
recording proxy and reports every read of any other node. It is meant for
tests; nothing in the tree calls it implicitly.
"""

from __future__ import annotations

from functools import wraps
from typing import TYPE_CHECKING, Any, Callable, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict

from ntree.core.node import Node
from ntree.utils.callbacks import guarded
from ntree.utils.validation import args_not_none

if TYPE_CHECKING:  # pragma: no cover - import for type hints only
    from ntree.core.tree import Tree


class LocalityViolation(BaseModel):
    """A key function evaluated for ``node`` read ``attribute`` of ``accessed``."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    node: Node
    accessed: Node
    attribute: str

    def describe(self) -> str:
        return f"key({self.node.id!r}) read {self.accessed.id!r}.{self.attribute}"


class _Recorder:
    def __init__(self, subject: Node):
        self.subject = subject
        self.allowed = subject.neighborhood()
        self.violations: List[LocalityViolation] = []

    def record(self, node: Node, attribute: str) -> None:
        if any(node is allowed for allowed in self.allowed):
            return
        violation = LocalityViolation(node=self.subject, accessed=node, attribute=attribute)
        if not any(
            seen.accessed is node and seen.attribute == attribute for seen in self.violations
        ):
            self.violations.append(violation)

    def wrap(self, result: Any) -> Any:
        if isinstance(result, Node):
            return _NodeView(result, self)
        if isinstance(result, list):
            return [self.wrap(item) for item in result]
        if isinstance(result, tuple):
            return tuple(self.wrap(item) for item in result)
        if isinstance(result, dict):
            return {key: self.wrap(item) for key, item in result.items()}
        return result


class _NodeView:
    """Proxy exposing a node's public API while recording which nodes are read."""

    __slots__ = ("_node", "_recorder")

    def __init__(self, node: Node, recorder: _Recorder):
        object.__setattr__(self, "_node", node)
        object.__setattr__(self, "_recorder", recorder)

    def __getattr__(self, name: str) -> Any:
        node = object.__getattribute__(self, "_node")
        recorder = object.__getattribute__(self, "_recorder")
        recorder.record(node, name)
        attribute = getattr(node, name)
        if callable(attribute):

            @wraps(attribute)
            def _call(*args: Any, **kwargs: Any) -> Any:
                return recorder.wrap(attribute(*args, **kwargs))

            return _call
        return recorder.wrap(attribute)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("key functions must not modify nodes")

    def __iter__(self):
        self._recorder.record(self._node, "__iter__")
        return iter(self._recorder.wrap(list(self._node)))

    def __eq__(self, other: object) -> bool:
        self._recorder.record(self._node, "__eq__")
        if isinstance(other, _NodeView):
            other = other._node
        return self._node == other

    def __hash__(self) -> int:
        return hash(self._node)

    def __repr__(self) -> str:
        return repr(self._node)


def check_key_function_locality(
    tree: "Tree",
    key_fn: Callable[[Node], Any],
    nodes: Optional[Iterable[Node]] = None,
) -> List[LocalityViolation]:
    """Evaluate ``key_fn`` on each node (default: every node of ``tree``) and list non-local reads."""
    args_not_none(tree, key_fn)
    sample = list(nodes) if nodes is not None else tree.to_list()
    key = guarded(key_fn, None)
    violations: List[LocalityViolation] = []
    for node in sample:
        recorder = _Recorder(node)
        key(_NodeView(node, recorder))
        violations.extend(recorder.violations)
    return violations


__all__ = ["LocalityViolation", "check_key_function_locality"]
