"""Rich console formatting utilities.

Provides consistent formatting for CLI output using Rich.
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from dirinv.core.theme import get_theme

if TYPE_CHECKING:
    from dirinv.inventory.models import Entry


def _detect_color_system() -> str | None:
    """Detect the best color system for the current terminal.

    Returns "truecolor" for interactive terminals to enable full hex color support,
    None otherwise to let Rich auto-detect.
    """
    if sys.stdout.isatty():
        return "truecolor"
    return None


# Shared console instances (theme loaded once at import)
console = Console(theme=get_theme(), color_system=_detect_color_system())
err_console = Console(theme=get_theme(), stderr=True, color_system=_detect_color_system())

# Style applied to the name column per entry kind glyph
_KIND_STYLES: dict[str, str] = {
    "d": "directory",
    "l": "symlink",
    "b": "special",
    "c": "special",
    "p": "special",
    "s": "special",
}


def create_entry_table(title: str = "Inventory") -> Table:
    """Create a pre-configured table with the listing columns.

    Args:
        title: Table title.

    Returns:
        Rich Table with Name, Size, Date and Permissions columns.
    """
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Name", overflow="fold")
    table.add_column("Size (bytes)", style="text", justify="right", no_wrap=True)
    table.add_column("Date", style="text", no_wrap=True)
    table.add_column("Permissions", style="text", no_wrap=True)
    return table


def format_entry_row(entry: Entry, root: str | None = None) -> tuple[str, str, str, str]:
    """Format an entry as a table row with proper styling.

    Args:
        entry: The entry to format.
        root: If given, the name column shows the path relative to it.

    Returns:
        Tuple of (name, size, date, permissions) with Rich markup.
    """
    name = entry.path
    if root and entry.path.startswith(root.rstrip("/") + "/"):
        name = entry.path[len(root.rstrip("/")) + 1 :]
    style = _KIND_STYLES.get(entry.permission_string[0], "text")
    if entry.is_directory:
        name += "/"
    return (
        f"[{style}]{escape(name)}[/]",
        entry.size_display,
        entry.date_string,
        entry.permission_string,
    )


def print_info(message: str) -> None:
    """Print an info message. The message is shown literally, not as markup."""
    console.print(f"[info]{escape(message)}[/]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    err_console.print(f"[warning]Warning:[/] {escape(message)}")


def print_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[error]Error:[/] {escape(message)}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]{escape(message)}[/]")
