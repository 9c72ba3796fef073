"""Main CLI application entry point.

Defines the Typer application and global options.
"""

import logging
from typing import Annotated

import typer
from rich.logging import RichHandler

from dirinv import __version__
from dirinv.cli.commands import config, log, mutate, scan
from dirinv.utils.formatting import err_console

# Create main Typer app
app = typer.Typer(
    name="dirinv",
    help="Recursive filesystem inventory: scan, list, rename and chmod.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"dirinv version {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool, quiet: bool) -> None:
    """Send diagnostic logging to stderr through Rich."""
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress non-essential output.",
        ),
    ] = False,
) -> None:
    """dirinv - recursive filesystem inventory.

    Walk a directory tree, list every entry with its size, date and
    permissions, and rename or chmod entries while keeping the listing
    consistent. Inaccessible entries and all changes are recorded in an
    access log.
    """
    # Store options in context for subcommands
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    _configure_logging(verbose, quiet)


# Register commands
app.command(name="scan")(scan.scan)
app.command(name="rename")(mutate.rename)
app.command(name="chmod")(mutate.chmod)
app.add_typer(log.app, name="log")
app.add_typer(config.app, name="config")


if __name__ == "__main__":
    app()
