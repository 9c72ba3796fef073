"""Append-only access log for walk failures and mutations.

Every unreadable entry, unlistable directory and rename/chmod attempt is
written as one JSON line. The file is opened once per session; if that
fails, the whole session writes the same lines to standard output.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from types import TracebackType
from typing import TextIO

from dirinv.inventory.errors import InventoryError, LogSinkUnavailableError
from dirinv.inventory.models import AccessLogEntry, AccessLogKind

logger = logging.getLogger(__name__)


class AccessLog:
    """Session-scoped writer for the access log.

    Lines are written in call order and flushed immediately. The sink
    decision (file or fallback stream) is made once in ``__init__``.
    Writers are assumed to be single-threaded.

    Args:
        path: Log file to append to. Parent directories are created.
        fallback: Stream used when the file cannot be opened.
            Defaults to ``sys.stdout``.
    """

    def __init__(self, path: Path, *, fallback: TextIO | None = None) -> None:
        self._path = path
        self._owns_stream = True
        self._degraded = False
        try:
            self._stream: TextIO = self._open_sink(path)
        except LogSinkUnavailableError as e:
            logger.warning("%s; access log uses the fallback stream for this session", e)
            self._stream = fallback if fallback is not None else sys.stdout
            self._owns_stream = False
            self._degraded = True

    @property
    def path(self) -> Path:
        """Configured log file path (even when degraded)."""
        return self._path

    @property
    def degraded(self) -> bool:
        """True if the file could not be opened and the fallback is in use."""
        return self._degraded

    @staticmethod
    def _open_sink(path: Path) -> TextIO:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            return path.open(mode="a", encoding="utf-8")
        except OSError as e:
            raise LogSinkUnavailableError(str(path), e.strerror or str(e)) from e

    def record(self, kind: AccessLogKind, path: str, operation: str, detail: str) -> AccessLogEntry:
        """Append one timestamped line.

        Args:
            kind: Event tag.
            path: Path the event refers to.
            operation: Operation name (``scan``, ``rename``, ``chmod``).
            detail: Message text.

        Returns:
            The entry that was written.
        """
        entry = AccessLogEntry.create(kind, path, operation, detail)
        try:
            self._stream.write(entry.to_json_line() + "\n")
            self._stream.flush()
        except (OSError, ValueError) as e:
            # ValueError: stream already closed
            logger.error("Cannot write access log line for %s: %s", path, e)
        return entry

    def record_error(
        self, kind: AccessLogKind, operation: str, error: InventoryError
    ) -> AccessLogEntry:
        """Append a line describing an inventory error."""
        return self.record(kind, error.path, operation, str(error))

    def close(self) -> None:
        """Close the log file; the fallback stream is left open."""
        if self._owns_stream and not self._stream.closed:
            self._stream.close()

    def __enter__(self) -> AccessLog:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


def read_access_log(path: Path, limit: int | None = None) -> list[AccessLogEntry]:
    """Read access log entries, newest first.

    Corrupt lines are skipped with a warning.

    Args:
        path: Log file to read.
        limit: Maximum number of entries to return. If None, returns all.

    Returns:
        List of entries, newest first. Empty if the file doesn't exist.
    """
    if not path.exists():
        return []

    entries: list[AccessLogEntry] = []
    with path.open(encoding="utf-8") as f:
        for line_num, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                entries.append(AccessLogEntry.from_json_line(line))
            except (json.JSONDecodeError, KeyError, ValueError) as e:
                logger.warning("Skipping corrupt access log line %d: %s", line_num, e)

    entries.reverse()
    if limit is not None:
        return entries[:limit]
    return entries
