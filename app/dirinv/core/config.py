"""Inventory configuration and settings.

This module provides the configuration model and I/O functions for the
scan engine: block size, paging, progress cadence, date-column year
cache and the access log location.

Configuration is stored in ~/.config/dirinv/config.toml
"""

import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from dirinv.core.paths import DEFAULT_ACCESS_LOG_PATH, get_config_path


class InventoryConfig(BaseModel):
    """Configuration for scans and mutations.

    Attributes:
        block_size: Allocation unit used to compute allocated sizes.
        page_size: Entries per page in listings.
        progress_interval: Directories processed between progress callbacks.
        reference_year_ttl: Seconds the cached current year stays valid.
        access_log_path: Access log file; relative paths resolve against
            the working directory.
    """

    model_config = ConfigDict(extra="forbid")

    block_size: Annotated[
        int,
        Field(ge=1, le=1 << 24, description="Allocation block size in bytes"),
    ] = 4096
    page_size: Annotated[
        int,
        Field(ge=1, le=10_000, description="Entries per page"),
    ] = 50
    progress_interval: Annotated[
        int,
        Field(ge=1, description="Directories between progress reports"),
    ] = 100
    reference_year_ttl: Annotated[
        int,
        Field(ge=1, le=86_400, description="Seconds before the current year is re-read"),
    ] = 3600
    access_log_path: Annotated[
        Path,
        Field(description="Access log file path"),
    ] = DEFAULT_ACCESS_LOG_PATH

    @field_validator("access_log_path", mode="after")
    @classmethod
    def expand_user(cls, v: Path) -> Path:
        """Expand a leading ``~`` in the access log path."""
        return v.expanduser()


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigParseError(ConfigError):
    """Raised when the config file cannot be parsed."""


def load_config(path: Path | None = None) -> InventoryConfig:
    """Load configuration from a TOML file.

    A missing file is not an error: defaults are returned.

    Args:
        path: Path to the config file. If None, uses the default config path.

    Returns:
        Validated InventoryConfig object.

    Raises:
        ConfigParseError: If the TOML syntax is invalid.
        ConfigError: If the file cannot be read or the content doesn't
            match the schema.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        return InventoryConfig()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config {config_path}: {e}") from e

    try:
        return InventoryConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config content in {config_path}: {e}") from e


def save_config(config: InventoryConfig, path: Path | None = None) -> Path:
    """Save configuration to a TOML file.

    The file is written atomically by first writing to a temporary file
    and then using os.replace() for atomic rename.

    Args:
        config: The InventoryConfig object to save.
        path: Path to save the config. If None, uses the default config path.

    Returns:
        Path where the config was saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    config_path = path or get_config_path()

    data = config_to_dict(config)

    tmp_path: Path | None = None
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(config_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write config: {e}") from e

    return config_path


def config_to_dict(config: InventoryConfig) -> dict[str, object]:
    """Convert InventoryConfig to a dictionary for TOML serialization.

    Args:
        config: The InventoryConfig to convert.

    Returns:
        Dictionary ready for TOML serialization.
    """
    return {
        "block_size": config.block_size,
        "page_size": config.page_size,
        "progress_interval": config.progress_interval,
        "reference_year_ttl": config.reference_year_ttl,
        "access_log_path": str(config.access_log_path),
    }
