"""Unit tests for MutationService.

Tests rename and chmod against real files in a temporary tree,
including validation failures, OS failures and the access log lines
written for every attempt.
"""

import os
import stat
from pathlib import Path
from unittest.mock import patch

import pytest
from dirinv.inventory.access_log import AccessLog, read_access_log
from dirinv.inventory.errors import (
    ChmodFailedError,
    EntryNotFoundError,
    EntryUnreadableError,
    InvalidPermissionFormatError,
    RenameFailedError,
    TargetExistsError,
)
from dirinv.inventory.models import AccessLogKind
from dirinv.inventory.mutation import MutationService
from dirinv.inventory.store import Inventory
from dirinv.inventory.walker import Walker


@pytest.fixture
def inventory(access_log: AccessLog, sample_tree: Path) -> Inventory:
    """Inventory loaded from a scan of the sample tree."""
    result = Walker(access_log).scan(sample_tree)
    inventory = Inventory()
    inventory.load(result.entries)
    return inventory


@pytest.fixture
def service(inventory: Inventory, access_log: AccessLog) -> MutationService:
    return MutationService(inventory, access_log)


class TestRename:
    """Tests for MutationService.rename."""

    def test_rename_file(
        self,
        service: MutationService,
        inventory: Inventory,
        sample_tree: Path,
        access_log_path: Path,
    ) -> None:
        """A rename moves the file and refreshes its inventory slot."""
        old = str(sample_tree / "a.txt")
        new = str(sample_tree / "renamed.txt")
        position = [e.path for e in inventory.entries].index(old)

        result = service.rename(old, "renamed.txt")

        assert result.success is True
        assert result.new_path == new
        assert result.entry is not None and result.entry.path == new
        assert not os.path.exists(old)
        assert os.path.exists(new)
        assert inventory.entries[position].path == new
        assert inventory.find_by_path(old) is None

        logged = read_access_log(access_log_path)
        assert len(logged) == 1
        assert logged[0].tag == AccessLogKind.MODIFIED
        assert logged[0].operation == "rename"
        assert logged[0].message == f"{old} -> {new}"

    def test_rename_onto_existing_name(
        self,
        service: MutationService,
        inventory: Inventory,
        sample_tree: Path,
        access_log_path: Path,
    ) -> None:
        """Renaming onto an existing sibling fails with TargetExists."""
        (sample_tree / "taken.txt").write_text("occupied")
        old = str(sample_tree / "a.txt")
        before = inventory.entries

        result = service.rename(old, "taken.txt")

        assert result.success is False
        assert isinstance(result.error, TargetExistsError)
        assert (sample_tree / "a.txt").read_bytes() == b"x" * 4096
        assert (sample_tree / "taken.txt").read_text() == "occupied"
        assert inventory.entries == before

        logged = read_access_log(access_log_path)
        assert len(logged) == 1
        assert logged[0].tag == AccessLogKind.FAILED
        assert logged[0].operation == "rename"

    def test_rename_onto_dangling_symlink(
        self, service: MutationService, sample_tree: Path
    ) -> None:
        """A dangling symlink still counts as an existing target."""
        (sample_tree / "link").symlink_to(sample_tree / "missing")

        result = service.rename(str(sample_tree / "a.txt"), "link")

        assert isinstance(result.error, TargetExistsError)

    def test_rename_onto_path_deleted_since_scan(
        self,
        service: MutationService,
        inventory: Inventory,
        access_log: AccessLog,
        sample_tree: Path,
    ) -> None:
        """A target still listed in the inventory is rejected even if gone on disk."""
        (sample_tree / "d.txt").write_text("d")
        inventory.load(Walker(access_log).scan(sample_tree).entries)
        (sample_tree / "d.txt").unlink()

        result = service.rename(str(sample_tree / "a.txt"), "d.txt")

        assert isinstance(result.error, TargetExistsError)
        assert (sample_tree / "a.txt").exists()
        paths = [e.path for e in inventory.entries]
        assert len(paths) == len(set(paths)) == 4

    def test_rename_directory(
        self, service: MutationService, inventory: Inventory, sample_tree: Path
    ) -> None:
        """Directories can be renamed; their children keep stale paths until rescanned."""
        result = service.rename(str(sample_tree / "b"), "bb")

        assert result.success is True
        assert (sample_tree / "bb" / "c.txt").exists()
        assert inventory.find_by_path(str(sample_tree / "bb")) is not None
        assert inventory.find_by_path(str(sample_tree / "b" / "c.txt")) is not None

    @pytest.mark.parametrize("name", ["", ".", "..", "x/y", "bad\0name"])
    def test_rename_invalid_name(
        self, service: MutationService, sample_tree: Path, name: str
    ) -> None:
        """Names that are not a single path component are rejected."""
        result = service.rename(str(sample_tree / "a.txt"), name)

        assert isinstance(result.error, RenameFailedError)
        assert (sample_tree / "a.txt").exists()

    def test_rename_not_in_inventory(
        self, service: MutationService, sample_tree: Path, access_log_path: Path
    ) -> None:
        """Paths outside the inventory fail with EntryNotFound."""
        stray = sample_tree / "new.txt"
        stray.write_text("created after scan")

        result = service.rename(str(stray), "other.txt")

        assert isinstance(result.error, EntryNotFoundError)
        assert stray.exists()
        assert read_access_log(access_log_path)[0].tag == AccessLogKind.FAILED

    def test_rename_os_failure(self, service: MutationService, sample_tree: Path) -> None:
        """An OS error becomes RenameFailed with the OS reason."""
        with patch(
            "dirinv.inventory.mutation.os.rename",
            side_effect=PermissionError(13, "Permission denied"),
        ):
            result = service.rename(str(sample_tree / "a.txt"), "z.txt")

        assert isinstance(result.error, RenameFailedError)
        assert result.reason is not None and "Permission denied" in result.reason

    def test_rename_refresh_failure(
        self, service: MutationService, sample_tree: Path, access_log_path: Path
    ) -> None:
        """An applied rename that cannot be re-read is logged as MODIFIED and says so."""
        old = str(sample_tree / "a.txt")
        new = str(sample_tree / "z.txt")
        with patch(
            "dirinv.inventory.mutation.read_entry",
            side_effect=EntryUnreadableError(new, "gone"),
        ):
            result = service.rename(old, "z.txt")

        assert result.success is False
        assert result.new_path == new
        assert isinstance(result.error, EntryUnreadableError)
        assert result.reason is not None and "rename applied" in result.reason
        assert os.path.exists(new)

        logged = read_access_log(access_log_path)
        assert len(logged) == 1
        assert logged[0].tag == AccessLogKind.MODIFIED
        assert new in logged[0].message
        assert "gone" in logged[0].message


class TestChmod:
    """Tests for MutationService.chmod."""

    def test_chmod_file(
        self,
        access_log: AccessLog,
        sample_tree: Path,
        access_log_path: Path,
    ) -> None:
        """chmod applies the bits and refreshes the permission column."""
        target = sample_tree / "a.txt"
        target.chmod(0o644)
        inventory = Inventory()
        inventory.load(Walker(access_log).scan(sample_tree).entries)
        service = MutationService(inventory, access_log)

        result = service.chmod(str(target), "-rwx------")

        assert result.success is True
        assert stat.S_IMODE(os.lstat(target).st_mode) == 0o700
        refreshed = inventory.find_by_path(str(target))
        assert refreshed is not None
        assert refreshed.permission_string == "-rwx------"

        logged = read_access_log(access_log_path)
        assert logged[0].tag == AccessLogKind.MODIFIED
        assert logged[0].operation == "chmod"
        assert logged[0].message == "-rw-r--r-- -> -rwx------"

    def test_chmod_special_bits(self, service: MutationService, sample_tree: Path) -> None:
        """Sticky bit is applied to a directory."""
        target = sample_tree / "b"

        result = service.chmod(str(target), "drwxrwxrwt")

        assert result.success is True
        assert stat.S_IMODE(os.lstat(target).st_mode) == 0o1777
        assert result.entry is not None
        assert result.entry.permission_string == "drwxrwxrwt"

    def test_chmod_invalid_format(
        self,
        service: MutationService,
        inventory: Inventory,
        sample_tree: Path,
        access_log_path: Path,
    ) -> None:
        """A 9-character string is rejected before touching the file."""
        target = sample_tree / "a.txt"
        mode_before = os.lstat(target).st_mode
        entry_before = inventory.find_by_path(str(target))

        result = service.chmod(str(target), "rwxr-xr-")

        assert result.success is False
        assert isinstance(result.error, InvalidPermissionFormatError)
        assert "'rwxr-xr-'" in (result.reason or "")
        assert os.lstat(target).st_mode == mode_before
        assert inventory.find_by_path(str(target)) is entry_before
        assert read_access_log(access_log_path)[0].tag == AccessLogKind.FAILED

    def test_chmod_not_in_inventory(self, service: MutationService, tmp_path: Path) -> None:
        """Paths outside the inventory fail with EntryNotFound."""
        result = service.chmod(str(tmp_path / "elsewhere"), "-rw-------")

        assert isinstance(result.error, EntryNotFoundError)

    def test_chmod_os_failure(self, service: MutationService, sample_tree: Path) -> None:
        """An OS error becomes ChmodFailed."""
        with patch(
            "dirinv.inventory.mutation.os.chmod",
            side_effect=PermissionError(1, "Operation not permitted"),
        ):
            result = service.chmod(str(sample_tree / "a.txt"), "-rw-------")

        assert isinstance(result.error, ChmodFailedError)
        assert "Operation not permitted" in (result.reason or "")
