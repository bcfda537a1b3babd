"""
ntree CLI: inspect tree documents.

Commands:
- show: render a tree document as a text or rich diagram
- stats: size, height and per-level node counts
- path: nearest common ancestor and the path between two nodes
"""

from __future__ import annotations

import logging

import typer
from rich.console import Console

from ntree.cli.formatters import LABEL_MODES, build_stats_table, format_path, label_for, resolve_node_path
from ntree.cli.load_helpers import load_tree_or_exit
from ntree.core.ancestry import NearestCommonAncestor
from ntree.core.constants import OrderingKind
from ntree.visualizer import build_rich_tree

app = typer.Typer(help="ntree CLI: inspect N-ary tree documents (JSON or YAML).")
console = Console()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


@app.command()
def show(
    file_path: str = typer.Argument(..., help="Tree document (.json, .yaml or .yml)"),
    ordering: str | None = typer.Option(None, "--ordering", help="Override ordering: unordered or natural"),
    width: int = typer.Option(3, "--width", help="Connector width"),
    height: int = typer.Option(1, "--height", help="Rows per child"),
    label: str = typer.Option("id", "--label", help="Node label: id, value or both"),
    rich_output: bool = typer.Option(False, "--rich", help="Render with rich instead of plain text"),
    verbose_load: bool = typer.Option(False, "--verbose-load", help="Display full validation trace on loader errors"),
) -> None:
    """Render a tree document."""
    if label not in LABEL_MODES:
        console.print(f"[red]Unknown label mode '{label}'.[/red] Available: {', '.join(LABEL_MODES)}")
        raise typer.Exit(code=2)
    if ordering not in (None, OrderingKind.UNORDERED.value, OrderingKind.NATURAL.value):
        console.print(f"[red]Unsupported ordering '{ordering}'.[/red] Available: unordered, natural")
        raise typer.Exit(code=2)
    if width < 1 or height < 1:
        console.print("[red]--width and --height must be at least 1[/red]")
        raise typer.Exit(code=2)

    tree = load_tree_or_exit(file_path, console=console, verbose_errors=verbose_load)
    if ordering == OrderingKind.NATURAL.value:
        tree.use_natural_ordering()
    elif ordering == OrderingKind.UNORDERED.value:
        tree.use_no_ordering()

    if rich_output:
        console.print(build_rich_tree(tree, label=label_for(label)))
    else:
        typer.echo(tree.render(width=width, height=height, label=label_for(label)))


@app.command()
def stats(
    file_path: str = typer.Argument(..., help="Tree document (.json, .yaml or .yml)"),
    verbose_load: bool = typer.Option(False, "--verbose-load", help="Display full validation trace on loader errors"),
) -> None:
    """Show size, height and per-level node counts."""
    tree = load_tree_or_exit(file_path, console=console, verbose_errors=verbose_load)
    console.print(build_stats_table(tree))


@app.command()
def path(
    file_path: str = typer.Argument(..., help="Tree document (.json, .yaml or .yml)"),
    source: str = typer.Argument(..., help="First node as slash-separated ids, e.g. A1/B1"),
    target: str = typer.Argument(..., help="Second node as slash-separated ids, e.g. A1/B2/C1"),
    verbose_load: bool = typer.Option(False, "--verbose-load", help="Display full validation trace on loader errors"),
) -> None:
    """Show the nearest common ancestor of two nodes and the path between them."""
    tree = load_tree_or_exit(file_path, console=console, verbose_errors=verbose_load)
    node_a = resolve_node_path(tree, source)
    node_b = resolve_node_path(tree, target)
    for raw, node in ((source, node_a), (target, node_b)):
        if node is None:
            console.print(f"[red]Node not found:[/red] {raw}")
            raise typer.Exit(code=1)

    query = NearestCommonAncestor(node_a, node_b)
    if not query.has_common_ancestor():
        console.print(f"[yellow]No common ancestor for {source} and {target}[/yellow]")
        raise typer.Exit(code=1)
    console.print(f"[bold]Common ancestor:[/bold] {query.common_ancestor().id}")
    console.print(f"[bold]Path:[/bold] {format_path(query.path_a_to_b())}")


if __name__ == "__main__":
    app()
