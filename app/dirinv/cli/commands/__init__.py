"""CLI commands for dirinv.

This package contains all subcommand implementations.
"""

from dirinv.cli.commands import config, log, mutate, scan

__all__ = ["config", "log", "mutate", "scan"]
