"""
JSON/YAML documents for nodes and trees.

Document shape (YAML shown):

    id: inventory
    revision: 1
    value_cloning: by_serialization
    ordering: natural
    root:
      id: A1
      value: 1
      identity: 3f0c...
      children:
        - id: B1
          value: 2

Node identities are kept across a round trip. Back-references are not part
of the document; ``reattach`` restores them after the nodes are built.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from ntree.core.constants import OrderingKind, ValueCloningMode
from ntree.core.errors import SerializationError
from ntree.core.node import Node, reattach
from ntree.core.ordering import NaturalOrdering, OrderingStrategy, Unordered
from ntree.core.tree import Tree
from ntree.io.serialization import type_adapter
from ntree.utils.logging import log_calls

logger = logging.getLogger(__name__)


class NodeDocument(BaseModel):
    id: Any
    value: Any = None
    revision: int = 1
    identity: Optional[str] = None
    children: List["NodeDocument"] = Field(default_factory=list)

    @classmethod
    def from_node(cls, node: Node) -> "NodeDocument":
        return cls(
            id=node.id,
            value=node.value,
            revision=node.revision,
            identity=node.identity,
            children=[cls.from_node(child) for child in node.children_list()],
        )

    def build(self, id_type: Any = Any, value_type: Any = Any) -> Node:
        """Build the node hierarchy with downward links only (no parent or tree)."""
        id_adapter = type_adapter(id_type)
        value_adapter = type_adapter(value_type)
        top = self._build_single(id_adapter, value_adapter)
        stack = [(self, top)]
        while stack:
            document, node = stack.pop()
            for child_document in document.children:
                child = child_document._build_single(id_adapter, value_adapter)
                if child.id in node._children:
                    raise SerializationError(f"Duplicate child id {child.id!r} under node {node.id!r}")
                node._children[child.id] = child
                stack.append((child_document, child))
        return top

    def _build_single(self, id_adapter, value_adapter) -> Node:
        try:
            node_id = id_adapter.validate_python(self.id)
            value = value_adapter.validate_python(self.value) if self.value is not None else None
        except ValidationError as exc:
            raise SerializationError(f"Invalid node {self.id!r}", cause=exc) from exc
        node = Node(None, node_id, value, identity=self.identity)
        node._revision = self.revision
        return node


class TreeDocument(BaseModel):
    id: Any
    revision: int = 1
    value_cloning: ValueCloningMode = ValueCloningMode.BY_SERIALIZATION
    ordering: OrderingKind = OrderingKind.UNORDERED
    root: Optional[NodeDocument] = None

    @classmethod
    def from_tree(cls, tree: Tree) -> "TreeDocument":
        return cls(
            id=tree.id,
            revision=tree.revision,
            value_cloning=tree.value_cloning.mode,
            ordering=tree.ordering.kind,
            root=NodeDocument.from_node(tree.root) if tree.root is not None else None,
        )

    def build(self, id_type: Any = Any, value_type: Any = Any) -> Tree:
        try:
            tree_id = type_adapter(id_type).validate_python(self.id)
        except ValidationError as exc:
            raise SerializationError("Invalid tree id", cause=exc) from exc
        tree = Tree(tree_id, ordering=self._ordering_strategy())
        if self.value_cloning is ValueCloningMode.BY_COPY:
            tree.use_copy_cloning()
        else:
            tree.use_serialization_cloning(None if value_type is Any else value_type)
        tree._revision = self.revision
        if self.root is not None:
            root = self.root.build(id_type, value_type)
            reattach(root, None, tree)
            tree._root = root
        tree.recreate_indexes()
        logger.info("Decoded tree %r (%d nodes)", tree.id, tree.size())
        return tree

    def _ordering_strategy(self) -> OrderingStrategy:
        if self.ordering is OrderingKind.NATURAL:
            return NaturalOrdering()
        if self.ordering is OrderingKind.CUSTOM:
            logger.warning("Custom ordering of tree %r cannot be decoded; using unordered", self.id)
        return Unordered()


def _parse(document_type: type, data: Any, what: str) -> Any:
    try:
        return document_type.model_validate(data)
    except ValidationError as exc:
        raise SerializationError(f"Invalid {what} document", cause=exc) from exc


def _parse_json(document_type: type, text: str, what: str) -> Any:
    try:
        return document_type.model_validate_json(text)
    except ValidationError as exc:
        raise SerializationError(f"Invalid {what} document", cause=exc) from exc


def _dump_json(document: BaseModel, indent: Optional[int]) -> str:
    try:
        return document.model_dump_json(indent=indent)
    except ValueError as exc:
        raise SerializationError("Cannot encode document", cause=exc) from exc


def node_to_json(node: Node, indent: Optional[int] = None) -> str:
    return _dump_json(NodeDocument.from_node(node), indent)


def node_from_json(text: str, tree: Tree, id_type: Any = Any, value_type: Any = Any) -> Node:
    """Decode a detached node hierarchy owned by ``tree``."""
    node = _parse_json(NodeDocument, text, "node").build(id_type, value_type)
    reattach(node, None, tree)
    return node


@log_calls()
def tree_to_json(tree: Tree, indent: Optional[int] = None) -> str:
    return _dump_json(TreeDocument.from_tree(tree), indent)


@log_calls()
def tree_from_json(text: str, id_type: Any = Any, value_type: Any = Any) -> Tree:
    return _parse_json(TreeDocument, text, "tree").build(id_type, value_type)


def tree_to_yaml(tree: Tree) -> str:
    data = TreeDocument.from_tree(tree).model_dump(mode="json")
    return yaml.safe_dump(data, sort_keys=False, allow_unicode=True)


def tree_from_yaml(text: str, id_type: Any = Any, value_type: Any = Any) -> Tree:
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise SerializationError("Invalid YAML", cause=exc) from exc
    return tree_from_data(data or {}, id_type=id_type, value_type=value_type)


def tree_from_data(data: Any, id_type: Any = Any, value_type: Any = Any) -> Tree:
    """Build a tree from an already parsed mapping (e.g. ``yaml.safe_load`` output)."""
    return _parse(TreeDocument, data, "tree").build(id_type, value_type)


__all__ = [
    "NodeDocument",
    "TreeDocument",
    "node_to_json",
    "node_from_json",
    "tree_to_json",
    "tree_from_json",
    "tree_to_yaml",
    "tree_from_yaml",
    "tree_from_data",
]
