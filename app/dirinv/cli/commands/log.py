"""Log command for viewing the access log.

This module provides the `dirinv log` command for viewing recorded
walk failures and mutation attempts.
"""

import json
from typing import Annotated

import typer
from rich.markup import escape
from rich.table import Table

from dirinv.cli.types import load_config_or_exit
from dirinv.inventory.access_log import read_access_log
from dirinv.inventory.models import AccessLogEntry, AccessLogKind
from dirinv.utils.formatting import console, print_info

app = typer.Typer(
    name="log",
    help="View the access log.",
    invoke_without_command=True,
)

_TAG_STYLES: dict[AccessLogKind, str] = {
    AccessLogKind.MODIFIED: "success",
    AccessLogKind.FAILED: "error",
    AccessLogKind.UNREADABLE: "warning",
    AccessLogKind.UNLISTABLE: "warning",
}


@app.callback(invoke_without_command=True)
def log(
    ctx: typer.Context,
    limit: Annotated[
        int,
        typer.Option(
            "--limit",
            "-n",
            min=1,
            help="Maximum number of entries to show.",
        ),
    ] = 20,
    tag: Annotated[
        AccessLogKind | None,
        typer.Option(
            "--tag",
            "-t",
            help="Only show entries with this tag.",
            case_sensitive=False,
        ),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output as JSON.",
        ),
    ] = False,
) -> None:
    """Show recent access log entries, newest first.

    Examples:
        dirinv log              # Show last 20 entries
        dirinv log -n 50        # Show last 50 entries
        dirinv log --tag FAILED
        dirinv log --json       # JSON output for scripting
    """
    if ctx.invoked_subcommand is not None:
        return

    config = load_config_or_exit()
    entries = read_access_log(config.access_log_path)
    if tag is not None:
        entries = [e for e in entries if e.tag == tag]
    entries = entries[:limit]

    if not entries:
        print_info("No access log entries found.")
        return

    if json_output:
        console.print_json(json.dumps([e.to_dict() for e in entries]))
    else:
        _print_table(entries)


def _print_table(entries: list[AccessLogEntry]) -> None:
    """Print access log entries as a Rich table."""
    table = Table(title="Access Log")
    table.add_column("Timestamp", style="dim", no_wrap=True)
    table.add_column("Tag", no_wrap=True)
    table.add_column("Operation")
    table.add_column("Path", overflow="fold")
    table.add_column("Message", style="dim", overflow="fold")

    for entry in entries:
        style = _TAG_STYLES.get(entry.tag, "text")
        table.add_row(
            entry.timestamp[:19].replace("T", " "),
            f"[{style}]{entry.tag.value}[/]",
            entry.operation,
            escape(entry.path),
            escape(entry.message),
        )

    console.print(table)
