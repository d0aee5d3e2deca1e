"""Shared CLI helpers."""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from ..config import LayoutConfig, load_config
from ..exceptions import HistorySourceError, LaneGraphError
from ..graph import BranchGraph, build_branch_graph
from ..history import GitHistoryReader, load_history
from ..logging_config import setup_logging

console = Console()


def resolve_config(
    config: Optional[Path] = None,
    strategy: Optional[str] = None,
    limit: Optional[int] = None,
    verbose: bool = False,
    quiet: bool = False,
) -> LayoutConfig:
    """Build layout config from CLI options and set up logging to match."""
    settings = load_config(
        config_file=config,
        strategy=strategy,
        max_commits=limit,
        verbose=verbose,
        quiet=quiet,
    )
    setup_logging(verbose=settings.verbosity == "verbose", quiet=settings.verbosity == "quiet")
    return settings


def compute_graph(path: Path, input_file: Optional[Path], settings: LayoutConfig) -> BranchGraph:
    """Read history from a JSON file or a git repository and lay it out.

    Raises:
        LaneGraphError: On any history, configuration or layout error.
    """
    if input_file is not None:
        commits, refs = load_history(input_file)
    else:
        result = GitHistoryReader(str(path), max_commits=settings.max_commits).read()
        if result is None:
            raise HistorySourceError(
                f"Not a git repository: {path}", details={"path": str(path.resolve())}
            )
        commits, refs = result
    return build_branch_graph(commits, refs, config=settings)


def fail(error: LaneGraphError) -> None:
    """Print the error and exit with status 1."""
    console.print(f"[red]Error:[/red] {escape(str(error))}", highlight=False)
    raise typer.Exit(1)
