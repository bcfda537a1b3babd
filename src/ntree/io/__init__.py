"""Serialization collaborator, tree documents and file loaders.

Submodules are imported directly (``ntree.io.serialization``,
``ntree.io.documents``, ``ntree.io.loaders``); the core depends on
``serialization`` while ``documents`` depends on the core.
"""
