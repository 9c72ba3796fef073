"""Theme management for the dirinv CLI.

Colors default to the classic inventory palette: red listing text, cyan
directories, green page and status lines. Any subset can be overridden
in ~/.config/dirinv/theme.toml under a ``[colors]`` table.
"""

import logging
import re
import tomllib
from pathlib import Path

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator
from rich.theme import Theme

from dirinv.core.paths import get_theme_path

logger = logging.getLogger(__name__)

_HEX_DIGITS = re.compile(r"[0-9a-fA-F]+")

# Rich style names that are rendered bold on top of their color
_BOLD_STYLES = frozenset({"error", "directory", "header"})


class ThemeColors(BaseModel):
    """Hex colors (#RGB or #RRGGBB) for each style the CLI uses."""

    model_config = ConfigDict(extra="forbid")

    # Listing
    text: str = "#ff4040"
    header: str = "#ff4040"
    border: str = "#ffffff"
    muted: str = "#b2bec3"

    # Entry kinds
    directory: str = "#00ffff"
    symlink: str = "#d44ebc"
    special: str = "#faf870"

    # Status messages
    info: str = "#00ff00"
    success: str = "#03b971"
    warning: str = "#f5b332"
    error: str = "#f53263"

    @field_validator("*", mode="before")
    @classmethod
    def validate_hex_color(cls, v: object, info: object) -> str:
        """Reject anything that is not a #RGB or #RRGGBB string."""
        name = getattr(info, "field_name", "color")
        if not isinstance(v, str):
            msg = f"{name}: color must be a string"
            raise ValueError(msg)
        color = v.strip()
        if not color.startswith("#"):
            msg = f"{name}: color must start with '#'"
            raise ValueError(msg)
        if len(color) not in (4, 7):
            msg = f"{name}: color must be #RGB or #RRGGBB format"
            raise ValueError(msg)
        if not _HEX_DIGITS.fullmatch(color[1:]):
            msg = f"{name}: invalid hex color '{color}'"
            raise ValueError(msg)
        return color

    def to_styles(self) -> dict[str, str]:
        """Map each color to a Rich style definition."""
        styles = {
            name: f"bold {color}" if name in _BOLD_STYLES else color
            for name, color in self.model_dump().items()
        }
        styles["bold_header"] = f"bold {self.header}"
        styles["dim"] = self.muted
        return styles


def _read_overrides(path: Path) -> dict[str, object]:
    """Read the ``[colors]`` table of a theme file.

    Returns an empty dict if the file is missing or unusable; problems are
    logged, never raised.
    """
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError:
        return {}
    except (tomllib.TOMLDecodeError, OSError) as e:
        logger.warning("Ignoring theme file %s: %s", path, e)
        return {}

    colors = data.get("colors", {})
    if not isinstance(colors, dict):
        logger.warning("Ignoring theme file %s: 'colors' must be a table", path)
        return {}
    return colors


def load_theme(path: Path | None = None) -> ThemeColors:
    """Load theme colors, applying user overrides on top of the defaults.

    Args:
        path: Theme file to read. If None, uses ~/.config/dirinv/theme.toml.

    Returns:
        ThemeColors; the defaults if the overrides fail validation.
    """
    theme_path = path or get_theme_path()
    overrides = _read_overrides(theme_path)
    if not overrides:
        return ThemeColors()

    try:
        colors = ThemeColors.model_validate(overrides)
    except ValidationError as e:
        logger.warning("Invalid colors in %s, using defaults: %s", theme_path, e)
        return ThemeColors()

    logger.debug("Loaded %d color override(s) from %s", len(overrides), theme_path)
    return colors


def get_rich_theme(colors: ThemeColors | None = None) -> Theme:
    """Build a Rich Theme from the given (or the user's) colors."""
    return Theme((colors or load_theme()).to_styles())


_cached_theme: Theme | None = None


def get_theme() -> Theme:
    """Get the Rich theme, loading and caching it on first use."""
    global _cached_theme
    if _cached_theme is None:
        _cached_theme = get_rich_theme()
    return _cached_theme
