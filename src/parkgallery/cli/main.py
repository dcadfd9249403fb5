# Copyright (c) Syntropy Systems
"""Main CLI entry point for parkgallery."""

import logging

import typer
from rich.console import Console
from rich.logging import RichHandler

from parkgallery.cli.groups import groups
from parkgallery.cli.init_cmd import init
from parkgallery.cli.render import render

app = typer.Typer(
    name="parkgallery",
    help=(
        "Group park-scenario results by layout, tag duplicate answers, "
        "and render consensus images."
    ),
    no_args_is_help=True,
    add_completion=False,
)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logs"),
) -> None:
    """Configure logging for every command."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


# Register commands
_ = app.command()(init)
_ = app.command()(groups)
_ = app.command()(render)


if __name__ == "__main__":
    app()
