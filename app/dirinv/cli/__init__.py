"""CLI package for dirinv.

This package contains the Typer application and all subcommands.
"""

from dirinv.cli.main import app

__all__ = ["app"]
