"""Breadth-first directory walker.

Walks a tree with an explicit FIFO work list instead of recursion,
collecting one ``Entry`` per object beneath the root. Symlinks are
classified by their own ``lstat`` and never followed. Per-node failures
are written to the access log and skipped; only an unusable root aborts
the walk.
"""

import logging
import os
import stat
import time
from collections.abc import Callable

from dirinv.inventory.access_log import AccessLog
from dirinv.inventory.errors import (
    DirectoryUnlistableError,
    EntryUnreadableError,
    RootUnavailableError,
)
from dirinv.inventory.formatter import ReferenceYear
from dirinv.inventory.models import (
    AccessLogKind,
    Entry,
    ScanResult,
    ScanState,
    ScanSummary,
)

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]

_SCAN_OPERATION = "scan"


class CancellationToken:
    """Cooperative cancellation flag shared between a host and a walk.

    The walker polls it once per directory, so a request takes effect
    after at most one directory's children have been processed. Setting
    it from a signal handler is safe.
    """

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        """Request the walk to stop at its next yield point."""
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        """Whether cancellation was requested."""
        return self._cancelled


class Walker:
    """Collects inventory entries for every object under a root directory.

    Directory entries report their own ``st_size``; the sizes of their
    contents are never aggregated.

    Args:
        access_log: Journal receiving unreadable/unlistable events.
        block_size: Allocation unit used for ``Entry.allocated_size``.
        progress_interval: Call ``on_progress`` every this many
            processed directories.
        reference_year: Year cache for the date column. A fresh
            ``ReferenceYear`` is created if omitted.
    """

    def __init__(
        self,
        access_log: AccessLog,
        *,
        block_size: int = 4096,
        progress_interval: int = 100,
        reference_year: ReferenceYear | None = None,
    ) -> None:
        if block_size <= 0:
            msg = f"Block size must be positive, got {block_size}"
            raise ValueError(msg)
        if progress_interval <= 0:
            msg = f"Progress interval must be positive, got {progress_interval}"
            raise ValueError(msg)
        self._access_log = access_log
        self._block_size = block_size
        self._progress_interval = progress_interval
        self._reference_year = reference_year if reference_year is not None else ReferenceYear()

    def scan(
        self,
        root: str | os.PathLike[str],
        cancellation_token: CancellationToken | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> ScanResult:
        """Walk ``root`` breadth-first and collect an entry per object.

        The root itself is not part of the result. Depth is tracked with
        each queued directory but never limits the walk.

        Args:
            root: Directory to walk.
            cancellation_token: Polled at the top of every directory
                iteration; when set the walk stops and returns what it has.
            on_progress: Called with ``(processed_dir_count,
                found_entry_count)`` every ``progress_interval``
                directories and once when the walk ends. Hosts use it to
                report liveness and to set the cancellation token.

        Returns:
            ScanResult with entries in discovery order. ``interrupted``
            is True if the token stopped the walk.

        Raises:
            RootUnavailableError: If root does not exist, is not a
                directory, or cannot be read and listed.
        """
        root_path = os.path.abspath(os.fspath(root))
        self._check_root(root_path)

        started = time.monotonic()
        reference_year = self._reference_year.current()
        state = ScanState()
        state.queue.append((root_path, 0))
        entries: list[Entry] = []

        while state.queue:
            if cancellation_token is not None and cancellation_token.cancelled:
                state.cancelled = True
                logger.info(
                    "Scan of %s cancelled with %d directories pending",
                    root_path,
                    len(state.queue),
                )
                break

            directory, depth = state.queue.popleft()
            self._process_directory(directory, depth, state, entries, reference_year)
            state.processed_dir_count += 1

            if on_progress is not None and state.processed_dir_count % self._progress_interval == 0:
                on_progress(state.processed_dir_count, state.found_entry_count)

        if on_progress is not None:
            on_progress(state.processed_dir_count, state.found_entry_count)

        summary = ScanSummary(
            root=root_path,
            processed_dir_count=state.processed_dir_count,
            found_entry_count=state.found_entry_count,
            elapsed_seconds=time.monotonic() - started,
            interrupted=state.cancelled,
        )
        logger.debug(
            "Scanned %s: %d directories, %d entries, interrupted=%s",
            root_path,
            summary.processed_dir_count,
            summary.found_entry_count,
            summary.interrupted,
        )
        return ScanResult(entries=tuple(entries), summary=summary)

    def _check_root(self, root: str) -> None:
        """Verify the root can be walked at all.

        Raises:
            RootUnavailableError: On any precondition failure.
        """
        try:
            st = os.stat(root)
        except OSError as e:
            raise RootUnavailableError(root, e.strerror or str(e)) from e

        if not stat.S_ISDIR(st.st_mode):
            raise RootUnavailableError(root, "not a directory")
        if not self._probe_directory(root):
            raise RootUnavailableError(root, "permission denied")

    def _process_directory(
        self,
        directory: str,
        depth: int,
        state: ScanState,
        entries: list[Entry],
        reference_year: int,
    ) -> None:
        """List one directory, collect its children and enqueue subdirectories."""
        try:
            children = self._list_directory(directory)
        except OSError as e:
            self._log_failure(DirectoryUnlistableError(directory, e.strerror or str(e)))
            return

        for child in children:
            try:
                st = child.stat(follow_symlinks=False)
            except OSError as e:
                self._log_failure(EntryUnreadableError(child.path, e.strerror or str(e)))
                continue

            entry = Entry.from_stat(
                child.path,
                st,
                block_size=self._block_size,
                reference_year=reference_year,
            )
            entries.append(entry)
            state.found_entry_count += 1

            if not entry.is_directory:
                continue
            if self._probe_directory(entry.path):
                state.queue.append((entry.path, depth + 1))
            else:
                self._log_failure(DirectoryUnlistableError(entry.path, "permission denied"))

    def _list_directory(self, directory: str) -> list[os.DirEntry[str]]:
        """Enumerate the immediate children of a directory.

        Raises:
            OSError: If the directory cannot be opened or read.
        """
        with os.scandir(directory) as it:
            return list(it)

    def _probe_directory(self, directory: str) -> bool:
        """Check the directory can be both read and traversed."""
        return os.access(directory, os.R_OK | os.X_OK)

    def _log_failure(self, error: DirectoryUnlistableError | EntryUnreadableError) -> None:
        kind = (
            AccessLogKind.UNLISTABLE
            if isinstance(error, DirectoryUnlistableError)
            else AccessLogKind.UNREADABLE
        )
        logger.debug("%s", error)
        self._access_log.record_error(kind, _SCAN_OPERATION, error)
