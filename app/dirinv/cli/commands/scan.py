"""Scan command implementation.

Walks a directory tree and shows one page of the resulting inventory.
Ctrl-C during the walk stops it at the next directory boundary and the
partial result is still displayed.
"""

import json
import signal
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path
from types import FrameType
from typing import Annotated

import typer
from rich.markup import escape

from dirinv.cli.types import OutputFormat, is_quiet, load_config_or_exit
from dirinv.core.session import InventorySession
from dirinv.inventory.errors import RootUnavailableError
from dirinv.inventory.models import Entry, ScanSummary
from dirinv.inventory.walker import CancellationToken
from dirinv.utils.formatting import (
    console,
    create_entry_table,
    err_console,
    format_entry_row,
    print_error,
    print_info,
    print_warning,
)


def scan(
    ctx: typer.Context,
    root: Annotated[
        Path,
        typer.Argument(help="Directory to scan."),
    ],
    page: Annotated[
        int,
        typer.Option(
            "--page",
            "-p",
            min=1,
            help="Page to display (1-based).",
        ),
    ] = 1,
    page_size: Annotated[
        int | None,
        typer.Option(
            "--page-size",
            "-n",
            min=1,
            help="Entries per page (default from config).",
        ),
    ] = None,
    block_size: Annotated[
        int | None,
        typer.Option(
            "--block-size",
            "-b",
            min=1,
            help="Allocation block size in bytes (default from config).",
        ),
    ] = None,
    output_format: Annotated[
        OutputFormat,
        typer.Option(
            "--format",
            "-f",
            help="Output format.",
            case_sensitive=False,
        ),
    ] = OutputFormat.TABLE,
) -> None:
    """Scan a directory tree and list its entries.

    Directories are listed first, then files, each group sorted by path.
    Inaccessible entries are skipped and recorded in the access log.

    Examples:
        dirinv scan /tmp/t
        dirinv scan ~/src --page 3 --page-size 100
        dirinv scan . --format json
    """
    config = load_config_or_exit(page_size=page_size, block_size=block_size)
    token = CancellationToken()
    quiet = is_quiet(ctx)

    with InventorySession(config, log_fallback=err_console.file) as session:
        try:
            with _cancel_on_interrupt(token), _progress(quiet) as on_progress:
                summary = session.scan(root, token, on_progress)
        except RootUnavailableError as e:
            print_error(str(e))
            raise typer.Exit(code=1) from e

        entries = session.page(page - 1)
        pages = session.page_count()

    if output_format == OutputFormat.JSON:
        _print_json(summary, entries, page, pages)
        return

    if summary.interrupted:
        print_warning("Scan interrupted; showing partial results.")

    if not entries:
        if summary.found_entry_count == 0:
            print_info(f"No entries found under {summary.root}.")
        else:
            print_info(f"Page {page} is empty ({pages} page(s) available).")
    else:
        _print_table(summary, entries, page, pages)

    _print_summary(summary)


@contextmanager
def _cancel_on_interrupt(token: CancellationToken) -> Iterator[None]:
    """Route SIGINT to the cancellation token while the walk runs."""

    def _handler(_signum: int, _frame: FrameType | None) -> None:
        token.cancel()

    installed = True
    try:
        previous = signal.signal(signal.SIGINT, _handler)
    except ValueError:
        # Not on the main thread; leave the current handler in place
        installed = False

    try:
        yield
    finally:
        if installed:
            # None: the previous handler was not installed from Python
            if previous is None:
                previous = signal.default_int_handler
            signal.signal(signal.SIGINT, previous)


@contextmanager
def _progress(quiet: bool) -> Iterator[Callable[[int, int], None] | None]:
    """Provide a progress callback backed by a Rich status line.

    Yields None when output is quiet or stderr is not a terminal.
    """
    if quiet or not err_console.is_terminal:
        yield None
        return

    with err_console.status("Scanning...") as status:

        def _update(dir_count: int, entry_count: int) -> None:
            status.update(f"Scanning... {dir_count} directories, {entry_count} entries")

        yield _update


def _print_table(summary: ScanSummary, entries: tuple[Entry, ...], page: int, pages: int) -> None:
    """Display one page of entries as a Rich table."""
    table = create_entry_table(title=f"{escape(summary.root)} (page {page}/{pages})")
    for entry in entries:
        table.add_row(*format_entry_row(entry, summary.root))
    console.print(table)


def _print_summary(summary: ScanSummary) -> None:
    """Print the scan totals line."""
    console.print(
        f"\n[dim]Directories: {summary.processed_dir_count} | "
        f"Entries: {summary.found_entry_count} | "
        f"Elapsed: {summary.elapsed_seconds:.2f}s"
        f"{' | interrupted' if summary.interrupted else ''}[/dim]"
    )


def _print_json(summary: ScanSummary, entries: tuple[Entry, ...], page: int, pages: int) -> None:
    """Display the summary and one page of entries as JSON."""
    data = {
        "summary": summary.to_dict(),
        "page": page,
        "pages": pages,
        "entries": [entry.to_dict() for entry in entries],
    }
    console.print_json(json.dumps(data))
