"""Layout CLI command -- print the laid-out commit graph."""

from pathlib import Path
from typing import Optional

import click
import typer

from ..config import STRATEGY_NAMES
from ..exceptions import LaneGraphError
from ..formatters import JsonFormatter, RichFormatter
from . import app
from ._common import compute_graph, console, fail, resolve_config


@app.command()
def layout(
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
    Lay out the commit graph and print one row per commit.

    [bold cyan]Examples:[/bold cyan]

      lanegraph layout

      lanegraph layout --strategy row-by-row --limit 200

      lanegraph layout --input history.json --json
    """
    try:
        settings = resolve_config(config, strategy, limit, verbose, quiet)
        graph = compute_graph(path, input_file, settings)
    except LaneGraphError as e:
        fail(e)

    if json_output:
        JsonFormatter().render(graph)
    else:
        RichFormatter(console=console).render(graph)
