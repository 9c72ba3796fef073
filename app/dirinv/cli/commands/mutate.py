"""Rename and chmod commands.

Both commands scan a root directory first (the target's parent unless
``--root`` is given), apply the change through the inventory session and
show the refreshed entry. Every attempt is written to the access log.
"""

import os
from collections.abc import Callable
from pathlib import Path
from typing import Annotated

import typer

from dirinv.cli.types import load_config_or_exit
from dirinv.core.session import InventorySession
from dirinv.inventory.errors import RootUnavailableError
from dirinv.inventory.models import MutationResult
from dirinv.utils.formatting import (
    console,
    create_entry_table,
    err_console,
    format_entry_row,
    print_error,
    print_success,
)

RootOption = Annotated[
    Path | None,
    typer.Option(
        "--root",
        "-r",
        help="Directory to scan before the change (default: parent of PATH).",
    ),
]


def rename(
    path: Annotated[
        Path,
        typer.Argument(help="Entry to rename."),
    ],
    new_name: Annotated[
        str,
        typer.Argument(help="New file name (no directory separators)."),
    ],
    root: RootOption = None,
) -> None:
    """Rename a file or directory in place.

    Fails if an entry named NEW_NAME already exists next to PATH.
    """
    _run_mutation(path, root, lambda session, target: session.rename(target, new_name))


def chmod(
    path: Annotated[
        Path,
        typer.Argument(help="Entry whose permissions change."),
    ],
    permissions: Annotated[
        str,
        typer.Argument(help="Listing-style permissions, e.g. -rwxr-xr-x."),
    ],
    root: RootOption = None,
) -> None:
    """Change permissions using a 10-character listing string.

    The first character is the type glyph (- d l b c p s ?); setuid,
    setgid and sticky bits use s/S and t/T as in ``ls -l``. Put ``--``
    before a string that starts with ``-``.

    Examples:
        dirinv chmod notes.txt -- -rw-------
        dirinv chmod --root ~/src ~/src/bin drwxr-x---
    """
    _run_mutation(path, root, lambda session, target: session.chmod(target, permissions))


def _run_mutation(
    path: Path,
    root: Path | None,
    apply: Callable[[InventorySession, str], MutationResult],
) -> None:
    """Scan, apply one mutation and report its result.

    Raises:
        typer.Exit: With code 1 if the scan root is unusable or the
            mutation fails.
    """
    config = load_config_or_exit()
    target = os.path.abspath(path)
    scan_root = os.path.abspath(root) if root is not None else os.path.dirname(target)

    with InventorySession(config, log_fallback=err_console.file) as session:
        try:
            session.scan(scan_root)
        except RootUnavailableError as e:
            print_error(str(e))
            raise typer.Exit(code=1) from e

        result = apply(session, target)

    if not result.success:
        print_error(result.reason or "Unknown error")
        raise typer.Exit(code=1)

    print_success(f"{result.operation}: {result.path} -> {result.new_path}")
    if result.entry is not None:
        table = create_entry_table(title="Updated Entry")
        table.add_row(*format_entry_row(result.entry))
        console.print(table)
