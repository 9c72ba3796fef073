"""Inventory domain models.

This module defines the records produced by a scan (``Entry``), the
transient walk state, the summaries handed to hosts, mutation results,
and the access log line format.
"""

from __future__ import annotations

import json
import os
import stat
from collections import deque
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from dirinv.inventory.errors import EntryUnreadableError, MutationError
from dirinv.inventory.formatter import (
    allocated_size,
    date_string,
    permission_string,
    size_display,
    type_glyph,
)


class EntryKind(str, Enum):
    """Type of a filesystem object, as classified without following symlinks.

    Values are the listing type glyphs.
    """

    FILE = "-"
    DIRECTORY = "d"
    SYMLINK = "l"
    BLOCK_DEVICE = "b"
    CHAR_DEVICE = "c"
    FIFO = "p"
    SOCKET = "s"
    UNKNOWN = "?"


@dataclass(frozen=True, slots=True)
class Entry:
    """Collected and formatted metadata of one filesystem object.

    Attributes:
        path: Absolute path, unique within one inventory snapshot.
        is_directory: True for real directories only; a symlink to a
            directory is classified as a symlink.
        raw_mode: ``st_mode`` including type bits.
        actual_size: ``st_size``; for directories the entry's own size,
            never the size of its contents.
        allocated_size: ``actual_size`` rounded up to the block size.
        modified_at: Modification time as a POSIX timestamp.
        permission_string: 10-character listing permission column.
        date_string: Listing date column.
    """

    path: str
    is_directory: bool
    raw_mode: int
    actual_size: int
    allocated_size: int
    modified_at: float
    permission_string: str
    date_string: str

    def __post_init__(self) -> None:
        """Validate entry data after initialization."""
        if not self.path:
            msg = "Entry path cannot be empty"
            raise ValueError(msg)
        if self.allocated_size < self.actual_size:
            msg = f"Allocated size {self.allocated_size} is below actual size {self.actual_size}"
            raise ValueError(msg)

    @classmethod
    def from_stat(
        cls,
        path: str,
        st: os.stat_result,
        *,
        block_size: int,
        reference_year: int,
    ) -> Entry:
        """Build an entry from an ``lstat`` result.

        Args:
            path: Absolute path of the object.
            st: Result of a stat call that did not follow symlinks.
            block_size: Allocation unit used for ``allocated_size``.
            reference_year: Current year for the date column.

        Returns:
            Fully formatted Entry.
        """
        size = st.st_size
        allocated = allocated_size(size, block_size)
        return cls(
            path=path,
            is_directory=stat.S_ISDIR(st.st_mode),
            raw_mode=st.st_mode,
            actual_size=size,
            allocated_size=allocated,
            modified_at=st.st_mtime,
            permission_string=permission_string(st.st_mode),
            date_string=date_string(st.st_mtime, reference_year),
        )

    @property
    def name(self) -> str:
        """Final path component."""
        return os.path.basename(self.path)

    @property
    def kind(self) -> EntryKind:
        """Entry type derived from the raw mode."""
        return EntryKind(type_glyph(self.raw_mode))

    @property
    def size_display(self) -> str:
        """Size pair formatted as ``actual/allocated``."""
        return size_display(self.actual_size, self.allocated_size)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dictionary."""
        return {
            "path": self.path,
            "kind": self.kind.value,
            "is_directory": self.is_directory,
            "mode": oct(stat.S_IMODE(self.raw_mode)),
            "actual_size": self.actual_size,
            "allocated_size": self.allocated_size,
            "size": self.size_display,
            "modified_at": self.modified_at,
            "permissions": self.permission_string,
            "date": self.date_string,
        }


def read_entry(path: str, *, block_size: int, reference_year: int) -> Entry:
    """Stat a single path without following symlinks and build its entry.

    Raises:
        EntryUnreadableError: If the metadata cannot be read.
    """
    try:
        st = os.lstat(path)
    except OSError as e:
        raise EntryUnreadableError(path, e.strerror or str(e)) from e
    return Entry.from_stat(path, st, block_size=block_size, reference_year=reference_year)


@dataclass(slots=True)
class ScanState:
    """Mutable bookkeeping for one walk; discarded when the scan returns.

    Attributes:
        queue: FIFO of ``(directory path, depth)`` still to be listed.
        cancelled: Set once the cancellation token was observed.
        processed_dir_count: Directories whose children were enumerated.
        found_entry_count: Entries collected so far.
    """

    queue: deque[tuple[str, int]] = field(default_factory=deque)
    cancelled: bool = False
    processed_dir_count: int = 0
    found_entry_count: int = 0


@dataclass(frozen=True, slots=True)
class ScanSummary:
    """Outcome of a scan as reported to the presentation layer.

    Attributes:
        root: Absolute root path that was walked.
        processed_dir_count: Number of directories listed.
        found_entry_count: Number of entries collected.
        elapsed_seconds: Wall-clock duration of the walk.
        interrupted: True if the walk stopped on cancellation.
    """

    root: str
    processed_dir_count: int
    found_entry_count: int
    elapsed_seconds: float
    interrupted: bool

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dictionary."""
        return {
            "root": self.root,
            "processed_dir_count": self.processed_dir_count,
            "found_entry_count": self.found_entry_count,
            "elapsed_seconds": round(self.elapsed_seconds, 3),
            "interrupted": self.interrupted,
        }


@dataclass(frozen=True, slots=True)
class ScanResult:
    """Entries produced by one walk, in discovery order, plus its summary."""

    entries: tuple[Entry, ...]
    summary: ScanSummary

    @property
    def interrupted(self) -> bool:
        """Whether the walk was cancelled before the queue emptied."""
        return self.summary.interrupted


@dataclass(frozen=True, slots=True)
class MutationResult:
    """Result of a single rename or chmod request.

    Attributes:
        operation: ``"rename"`` or ``"chmod"``.
        path: Path the request was made for.
        success: Whether the change was applied and the inventory refreshed.
        new_path: Path of the entry after the operation (renames change it).
        entry: Refreshed entry on success.
        error: Failure kind and reason when ``success`` is False.
    """

    operation: str
    path: str
    success: bool
    new_path: str | None = None
    entry: Entry | None = None
    error: MutationError | EntryUnreadableError | None = None

    @property
    def reason(self) -> str | None:
        """Display string of the failure, None on success."""
        return str(self.error) if self.error is not None else None


class AccessLogKind(str, Enum):
    """Tag written with every access log line.

    Attributes:
        UNREADABLE: Metadata of an entry could not be read during a walk.
        UNLISTABLE: A directory could not be probed or listed during a walk.
        MODIFIED: A mutation was applied.
        FAILED: A mutation was rejected or failed.
    """

    UNREADABLE = "UNREADABLE"
    UNLISTABLE = "UNLISTABLE"
    MODIFIED = "MODIFIED"
    FAILED = "FAILED"


@dataclass(frozen=True, slots=True)
class AccessLogEntry:
    """One line of the access log.

    Attributes:
        timestamp: ISO 8601 time the line was written (UTC).
        tag: Kind of event.
        path: Path the event refers to.
        operation: Operation name (``scan``, ``rename``, ``chmod``).
        message: Free-form detail, usually the error reason.
    """

    timestamp: str
    tag: AccessLogKind
    path: str
    operation: str
    message: str

    @classmethod
    def create(cls, tag: AccessLogKind, path: str, operation: str, message: str) -> AccessLogEntry:
        """Create an entry stamped with the current UTC time."""
        timestamp = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return cls(timestamp=timestamp, tag=tag, path=path, operation=operation, message=message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON storage."""
        return {
            "timestamp": self.timestamp,
            "tag": self.tag.value,
            "path": self.path,
            "operation": self.operation,
            "message": self.message,
        }

    def to_json_line(self) -> str:
        """Serialize to a single JSON line (no trailing newline)."""
        return json.dumps(self.to_dict(), ensure_ascii=False, separators=(",", ":"))

    @classmethod
    def from_json_line(cls, line: str) -> AccessLogEntry:
        """Deserialize from a JSON line.

        Raises:
            json.JSONDecodeError: If the line is not valid JSON.
            KeyError: If required fields are missing.
            ValueError: If the tag is unknown.
        """
        data = json.loads(line)
        return cls(
            timestamp=data["timestamp"],
            tag=AccessLogKind(data["tag"]),
            path=data["path"],
            operation=data["operation"],
            message=data["message"],
        )
