"""Shared types and utilities for CLI commands.

This module provides common enums and helper functions used across
multiple CLI command modules to avoid code duplication.
"""

from enum import Enum
from typing import Any

import typer
from pydantic import ValidationError

from dirinv.core.config import ConfigError, InventoryConfig, load_config
from dirinv.utils.formatting import print_error


class OutputFormat(str, Enum):
    """Output format options."""

    TABLE = "table"
    JSON = "json"


def load_config_or_exit(**overrides: Any) -> InventoryConfig:
    """Load the configuration file and apply command-line overrides.

    Overrides whose value is None are ignored.

    Args:
        **overrides: InventoryConfig field values taken from CLI options.

    Returns:
        Validated configuration.

    Raises:
        typer.Exit: With code 1 if the file or an override is invalid.
    """
    try:
        config = load_config()
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    updates = {key: value for key, value in overrides.items() if value is not None}
    if not updates:
        return config

    try:
        return InventoryConfig.model_validate({**config.model_dump(), **updates})
    except ValidationError as e:
        print_error(f"Invalid option: {e}")
        raise typer.Exit(code=1) from e


def is_quiet(ctx: typer.Context) -> bool:
    """Whether the global ``--quiet`` flag was given."""
    obj = ctx.obj if isinstance(ctx.obj, dict) else {}
    return bool(obj.get("quiet", False))
