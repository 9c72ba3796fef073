"""Configuration commands.

Show the effective configuration, write a default config file, or print
where the config file lives.
"""

from typing import Annotated

import tomli_w
import typer
from rich.markup import escape

from dirinv.cli.types import load_config_or_exit
from dirinv.core.config import ConfigError, InventoryConfig, config_to_dict, save_config
from dirinv.core.paths import get_config_path
from dirinv.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    help="Show or initialize configuration.",
    invoke_without_command=True,
    no_args_is_help=True,
)


@app.command()
def show() -> None:
    """Print the effective configuration as TOML."""
    config = load_config_or_exit()
    path = get_config_path()
    source = str(path) if path.exists() else "built-in defaults"
    console.print(f"[dim]# source: {escape(source)}[/dim]")
    console.print(escape(tomli_w.dumps(config_to_dict(config))), end="")


@app.command()
def init(
    force: Annotated[
        bool,
        typer.Option("--force", help="Overwrite an existing config file."),
    ] = False,
) -> None:
    """Write a config file with default settings."""
    path = get_config_path()
    if path.exists() and not force:
        print_info(f"Config already exists at {path} (use --force to overwrite).")
        return

    try:
        saved = save_config(InventoryConfig(), path)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    print_success(f"Config written to {saved}")


@app.command()
def path() -> None:
    """Print the config file location."""
    typer.echo(str(get_config_path()))
