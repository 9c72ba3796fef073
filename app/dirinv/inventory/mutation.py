"""Rename and permission changes that keep the inventory in sync.

Each request is validated, applied to the filesystem, and followed by a
fresh ``lstat`` of the affected path whose entry replaces the old one in
the inventory. Every attempt is written to the access log as MODIFIED
or FAILED, and failures are returned to the caller in the result.
"""

import logging
import os
from collections.abc import Callable

from dirinv.inventory.access_log import AccessLog
from dirinv.inventory.errors import (
    ChmodFailedError,
    EntryNotFoundError,
    EntryUnreadableError,
    InvalidPermissionFormatError,
    MutationError,
    RenameFailedError,
    TargetExistsError,
)
from dirinv.inventory.formatter import ReferenceYear, parse_permission_string
from dirinv.inventory.models import AccessLogKind, Entry, MutationResult, read_entry
from dirinv.inventory.store import Inventory

logger = logging.getLogger(__name__)


class MutationService:
    """Applies rename/chmod requests against inventory entries.

    Must not run concurrently with a scan over the same inventory; the
    host serializes the two.

    Args:
        inventory: Inventory whose entries are refreshed after a change.
        access_log: Journal receiving one line per attempt.
        block_size: Allocation unit for refreshed entries.
        reference_year: Year cache for refreshed date strings.
    """

    def __init__(
        self,
        inventory: Inventory,
        access_log: AccessLog,
        *,
        block_size: int = 4096,
        reference_year: ReferenceYear | None = None,
    ) -> None:
        self._inventory = inventory
        self._access_log = access_log
        self._block_size = block_size
        self._reference_year = reference_year if reference_year is not None else ReferenceYear()

    def rename(self, path: str, new_name: str) -> MutationResult:
        """Rename an entry within its parent directory.

        The refreshed entry keeps the old entry's position in the
        inventory until the next full scan.

        Args:
            path: Current absolute path of the entry.
            new_name: New final path component (no separators).

        Returns:
            MutationResult whose ``new_path`` is the renamed path on
            success. Failure kinds: EntryNotFoundError, TargetExistsError,
            RenameFailedError, EntryUnreadableError.
        """
        operation = "rename"
        if self._inventory.find_by_path(path) is None:
            return self._fail(operation, path, EntryNotFoundError(path, "not in inventory"))

        if not _is_plain_name(new_name):
            error = RenameFailedError(path, f"invalid name {new_name!r}")
            return self._fail(operation, path, error)

        new_path = os.path.join(os.path.dirname(path), new_name)
        if os.path.lexists(new_path):
            error = TargetExistsError(path, f"{new_path} already exists")
            return self._fail(operation, path, error)
        # Deleted on disk since the scan but still listed
        if self._inventory.find_by_path(new_path) is not None:
            error = TargetExistsError(path, f"{new_path} is still in the inventory")
            return self._fail(operation, path, error)

        try:
            os.rename(path, new_path)
        except OSError as e:
            return self._fail(operation, path, RenameFailedError(path, e.strerror or str(e)))

        return self._refresh(operation, path, new_path, lambda _entry: f"{path} -> {new_path}")

    def chmod(self, path: str, permissions: str) -> MutationResult:
        """Change the permission bits of an entry.

        The type glyph of ``permissions`` is validated but ignored.
        Symlinks are not special-cased: the OS applies the mode to the
        link target, and the refreshed entry still describes the link.

        Args:
            path: Absolute path of the entry.
            permissions: 10-character listing string, e.g. ``-rwxr-x---``.

        Returns:
            MutationResult. Failure kinds: InvalidPermissionFormatError,
            EntryNotFoundError, ChmodFailedError, EntryUnreadableError.
        """
        operation = "chmod"
        try:
            bits = parse_permission_string(permissions)
        except InvalidPermissionFormatError as e:
            return self._fail(
                operation,
                path,
                InvalidPermissionFormatError(path, f"{permissions!r}: {e.reason}"),
            )

        entry = self._inventory.find_by_path(path)
        if entry is None:
            return self._fail(operation, path, EntryNotFoundError(path, "not in inventory"))

        try:
            os.chmod(path, bits)
        except OSError as e:
            return self._fail(operation, path, ChmodFailedError(path, e.strerror or str(e)))

        old_permissions = entry.permission_string
        return self._refresh(
            operation,
            path,
            path,
            lambda refreshed: f"{old_permissions} -> {refreshed.permission_string}",
        )

    def _refresh(
        self,
        operation: str,
        path: str,
        new_path: str,
        describe: Callable[[Entry], str],
    ) -> MutationResult:
        """Re-read ``new_path`` and swap it into the inventory slot of ``path``.

        The OS change has already been applied here. If the entry cannot be
        re-read or swapped in, the change is still logged as MODIFIED and the
        result reports the stale inventory slot.
        """
        try:
            entry: Entry = read_entry(
                new_path,
                block_size=self._block_size,
                reference_year=self._reference_year.current(),
            )
            self._inventory.refresh(path, entry)
        except (EntryUnreadableError, MutationError) as e:
            return self._applied_not_refreshed(operation, path, new_path, e)

        self._access_log.record(
            AccessLogKind.MODIFIED,
            path,
            operation,
            describe(entry),
        )
        logger.info("%s %s succeeded", operation, path)
        return MutationResult(
            operation=operation,
            path=path,
            success=True,
            new_path=new_path,
            entry=entry,
        )

    def _applied_not_refreshed(
        self,
        operation: str,
        path: str,
        new_path: str,
        cause: MutationError | EntryUnreadableError,
    ) -> MutationResult:
        self._access_log.record(
            AccessLogKind.MODIFIED,
            path,
            operation,
            f"applied to {new_path}; entry not refreshed ({cause.reason})",
        )
        logger.warning("%s %s applied but not refreshed: %s", operation, path, cause)
        error = EntryUnreadableError(
            new_path,
            f"{operation} applied but entry could not be re-read: {cause.reason}; rescan to update",
        )
        return MutationResult(
            operation=operation,
            path=path,
            success=False,
            new_path=new_path,
            error=error,
        )

    def _fail(
        self,
        operation: str,
        path: str,
        error: MutationError | EntryUnreadableError,
    ) -> MutationResult:
        self._access_log.record(AccessLogKind.FAILED, path, operation, str(error))
        logger.info("%s %s failed: %s", operation, path, error)
        return MutationResult(operation=operation, path=path, success=False, error=error)


def _is_plain_name(name: str) -> bool:
    """Check that a rename target is a single, ordinary path component."""
    if not name or name in (".", "..") or "\0" in name:
        return False
    if os.sep in name:
        return False
    return not (os.altsep and os.altsep in name)
