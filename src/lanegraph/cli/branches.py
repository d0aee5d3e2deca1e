"""Branches CLI command -- list branches with their lanes and lineage."""

import json
from pathlib import Path
from typing import Optional

import click
import typer

from ..config import STRATEGY_NAMES
from ..exceptions import LaneGraphError
from ..formatters import graph_to_dict
from ..graph import BranchGraph
from . import app
from ._common import compute_graph, console, fail, resolve_config


@app.command()
def branches(
    path: Path = typer.Argument(
        Path("."),
        help="Repository to read (default: current directory)",
        file_okay=False,
        dir_okay=True,
    ),
    input_file: Optional[Path] = typer.Option(
        None,
        "--input",
        "-i",
        help="Read commits and refs from a JSON file instead of git",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    strategy: Optional[str] = typer.Option(
        None,
        "--strategy",
        "-s",
        help="Lane assignment strategy",
        click_type=click.Choice(list(STRATEGY_NAMES)),
    ),
    limit: Optional[int] = typer.Option(
        None,
        "--limit",
        "-n",
        help="Maximum number of commits to read from git",
        min=1,
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in machine-readable JSON format",
    ),
    config: Optional[Path] = typer.Option(
        None,
        "-c",
        "--config",
        help="Configuration file (TOML)",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Errors only"),
):
    """
    List branches (real and reconstructed) in layout order.

    [bold cyan]Examples:[/bold cyan]

      lanegraph branches

      lanegraph branches --input history.json --json
    """
    try:
        settings = resolve_config(config, strategy, limit, verbose, quiet)
        graph = compute_graph(path, input_file, settings)
    except LaneGraphError as e:
        fail(e)

    if json_output:
        print(json.dumps(graph_to_dict(graph)["branches"], indent=2))
    else:
        _output_rich(graph)


def _status(graph: BranchGraph, name: str) -> str:
    branch = graph.branches[name]
    if name == graph.default_branch:
        return "[bold]default[/bold]"
    if branch.is_virtual:
        return "[magenta]virtual[/magenta]"
    if branch.is_merged:
        return "[dim]merged[/dim]"
    return "[green]active[/green]"


def _output_rich(graph: BranchGraph) -> None:
    """Human-readable Rich table output."""
    from rich.table import Table
    from rich.text import Text

    table = Table(
        title="Branches",
        show_lines=False,
        pad_edge=True,
    )
    table.add_column("Branch", no_wrap=True)
    table.add_column("Lane", justify="right")
    table.add_column("Status")
    table.add_column("Base", no_wrap=True)
    table.add_column("Head", style="dim", no_wrap=True)
    table.add_column("Exclusive", justify="right")

    for name in graph.branch_order:
        branch = graph.branches[name]
        table.add_row(
            Text(name, style=branch.color or None),
            str(branch.lane),
            _status(graph, name),
            branch.base_branch or "-",
            branch.head[:7],
            str(len(branch.exclusive_commits)),
        )

    console.print(table)
