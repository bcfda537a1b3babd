from __future__ import annotations

"""Tree loading with CLI-friendly errors."""

from typing import Any

import typer
from rich.console import Console

from ntree.core.tree import Tree
from ntree.io.loaders import TreeLoadError, load_tree


def load_tree_or_exit(
    path: str,
    *,
    console: Console,
    verbose_errors: bool = False,
    id_type: Any = Any,
    value_type: Any = Any,
) -> Tree:
    try:
        return load_tree(path, id_type=id_type, value_type=value_type)
    except TreeLoadError as err:
        if verbose_errors and err.cause:
            console.print(f"[red]Failed to load tree:[/red] {err.message}\n{err.cause}")
        else:
            console.print(f"[red]Failed to load tree:[/red] {err}")
        raise typer.Exit(code=1)


__all__ = ["load_tree_or_exit"]
