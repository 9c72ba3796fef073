"""Inventory session wiring.

An ``InventorySession`` owns one access log, one inventory and the
walker/mutation service operating on it. Hosts (the CLI, or any other
presentation layer) drive scans and mutations through it and read pages
of the resulting snapshot.
"""

from __future__ import annotations

import logging
import os
from types import TracebackType
from typing import TextIO

from dirinv.core.config import InventoryConfig
from dirinv.inventory.access_log import AccessLog
from dirinv.inventory.errors import RootUnavailableError
from dirinv.inventory.formatter import ReferenceYear
from dirinv.inventory.models import AccessLogKind, Entry, MutationResult, ScanSummary
from dirinv.inventory.mutation import MutationService
from dirinv.inventory.store import Inventory
from dirinv.inventory.walker import CancellationToken, ProgressCallback, Walker

logger = logging.getLogger(__name__)


class InventorySession:
    """Composition root for scans, paging and mutations.

    Scans and mutations must not overlap; callers run them one at a time.

    Args:
        config: Engine settings. Defaults are used if None.
        access_log: Pre-built access log. If None, one is opened at
            ``config.access_log_path`` and closed with the session.
        log_fallback: Stream the opened log falls back to when its file
            cannot be opened. Defaults to stdout.
    """

    def __init__(
        self,
        config: InventoryConfig | None = None,
        *,
        access_log: AccessLog | None = None,
        log_fallback: TextIO | None = None,
    ) -> None:
        self._config = config if config is not None else InventoryConfig()
        self._owns_log = access_log is None
        self._access_log = (
            access_log
            if access_log is not None
            else AccessLog(self._config.access_log_path, fallback=log_fallback)
        )
        reference_year = ReferenceYear(ttl=self._config.reference_year_ttl)
        self._inventory = Inventory()
        self._walker = Walker(
            self._access_log,
            block_size=self._config.block_size,
            progress_interval=self._config.progress_interval,
            reference_year=reference_year,
        )
        self._mutations = MutationService(
            self._inventory,
            self._access_log,
            block_size=self._config.block_size,
            reference_year=reference_year,
        )
        self._last_summary: ScanSummary | None = None

    @property
    def config(self) -> InventoryConfig:
        """Settings the session was built with."""
        return self._config

    @property
    def inventory(self) -> Inventory:
        """Snapshot of the last scan."""
        return self._inventory

    @property
    def access_log(self) -> AccessLog:
        """Access log shared by the walker and mutation service."""
        return self._access_log

    @property
    def last_summary(self) -> ScanSummary | None:
        """Summary of the last successful scan, None before the first."""
        return self._last_summary

    def scan(
        self,
        root: str | os.PathLike[str],
        cancellation_token: CancellationToken | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> ScanSummary:
        """Walk ``root`` and replace the inventory with the result.

        A cancelled walk still loads the partial result.

        Raises:
            RootUnavailableError: If the root cannot be walked. The
                inventory is emptied before the error propagates.
        """
        try:
            result = self._walker.scan(root, cancellation_token, on_progress)
        except RootUnavailableError as e:
            self._inventory.load((), interrupted=False)
            self._last_summary = None
            self._access_log.record_error(AccessLogKind.UNLISTABLE, "scan", e)
            raise

        self._inventory.load(result.entries, result.interrupted)
        self._last_summary = result.summary
        logger.info(
            "Loaded %d entries from %s (interrupted=%s)",
            len(self._inventory),
            result.summary.root,
            result.interrupted,
        )
        return result.summary

    def page(self, page_index: int, page_size: int | None = None) -> tuple[Entry, ...]:
        """Return one page of the inventory (empty when out of range)."""
        size = page_size if page_size is not None else self._config.page_size
        return self._inventory.slice(page_index, size)

    def page_count(self, page_size: int | None = None) -> int:
        """Number of pages for the given (or configured) page size."""
        size = page_size if page_size is not None else self._config.page_size
        return self._inventory.page_count(size)

    def rename(self, path: str, new_name: str) -> MutationResult:
        """Rename an inventory entry; see ``MutationService.rename``."""
        return self._mutations.rename(path, new_name)

    def chmod(self, path: str, permissions: str) -> MutationResult:
        """Change an entry's permissions; see ``MutationService.chmod``."""
        return self._mutations.chmod(path, permissions)

    def close(self) -> None:
        """Close the access log if this session opened it."""
        if self._owns_log:
            self._access_log.close()

    def __enter__(self) -> InventorySession:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
