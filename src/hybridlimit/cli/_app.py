"""App definition and root callback for the hybridlimit CLI."""

from __future__ import annotations

import logging

import typer
from rich.console import Console

from ._theme import HL_THEME

app = typer.Typer(
    help="Toy Monte-Carlo upper limits on a signal-strength parameter.",
    epilog=(
        "[dim]Common workflows:\n"
        "  Validate a model  → hybridlimit check model.toml\n"
        "  Compute a limit   → hybridlimit limit model.toml --toys 1000[/dim]"
    ),
    rich_markup_mode="rich",
    no_args_is_help=True,
)

console = Console(theme=HL_THEME)


def _version_callback(value: bool) -> None:
    if value:
        import platform

        import numpy

        from hybridlimit import __version__

        console.print(
            f"hybridlimit [bold]{__version__}[/bold]  "
            f"(Python {platform.python_version()}, NumPy {numpy.__version__})"
        )
        raise typer.Exit()


def _debug_callback(debug: bool) -> None:
    """Enable debug logging when --debug is passed."""
    if debug:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s %(levelname)s %(message)s")


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging."),
) -> None:
    """hybridlimit command-line interface."""
    _debug_callback(debug)
