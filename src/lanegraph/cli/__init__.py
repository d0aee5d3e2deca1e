"""CLI entry point: registers all subcommands."""

import typer

from .. import __version__
from ._common import console

app = typer.Typer(
    name="lanegraph",
    help="lanegraph - commit graph lane layout",
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"lanegraph {__version__}")
        raise typer.Exit(0)


@app.callback()
def _root(
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit",
        callback=_version_callback,
        is_eager=True,
    ),
):
    """
    Compute lanes, colours and merge connectors for a commit history.
    """


# Import subcommands to register them
from .layout import layout as _layout  # noqa: F401, E402
from .branches import branches as _branches  # noqa: F401, E402


def main() -> None:
    app()
