from __future__ import annotations

import json
import logging
import os
from typing import Any

import yaml

from ntree.core.errors import SerializationError
from ntree.core.tree import Tree
from ntree.io.documents import tree_from_data
from ntree.io.loaders.errors import TreeLoadError

logger = logging.getLogger(__name__)

_YAML_SUFFIXES = (".yaml", ".yml")
_JSON_SUFFIXES = (".json",)


def _read_document(path: str) -> Any:
    suffix = os.path.splitext(path)[1].lower()
    with open(path, "r", encoding="utf-8") as f:
        if suffix in _YAML_SUFFIXES:
            return yaml.safe_load(f) or {}
        return json.load(f)


def load_tree(path: str, id_type: Any = Any, value_type: Any = Any) -> Tree:
    """Load a tree document from a JSON or YAML file.

    Expected format:
    id: inventory
    ordering: natural
    root:
      id: A1
      value: 1
      children:
        - id: B1
          value: 2

    Raises:
        TreeLoadError: If the file is missing, has an unknown suffix or does
            not hold a valid tree document
    """
    if not os.path.exists(path):
        raise TreeLoadError(path, "Tree file not found")
    suffix = os.path.splitext(path)[1].lower()
    if suffix not in _YAML_SUFFIXES + _JSON_SUFFIXES:
        raise TreeLoadError(path, f"Unsupported tree file type '{suffix or '<none>'}'")
    try:
        data = _read_document(path)
    except (yaml.YAMLError, json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise TreeLoadError(path, "Could not parse tree file", cause=exc) from exc
    try:
        tree = tree_from_data(data, id_type=id_type, value_type=value_type)
    except SerializationError as exc:
        raise TreeLoadError(path, "Invalid tree document", cause=exc) from exc
    logger.info("Loaded tree %r from %s", tree.id, path)
    return tree


__all__ = ["load_tree"]
