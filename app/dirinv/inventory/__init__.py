"""Filesystem inventory engine.

This package provides the breadth-first walker, the sorted in-memory
inventory, rename/chmod mutations that keep it consistent, listing-style
metadata formatting, and the append-only access log.
"""

from dirinv.inventory.access_log import AccessLog, read_access_log
from dirinv.inventory.errors import (
    ChmodFailedError,
    DirectoryUnlistableError,
    EntryNotFoundError,
    EntryUnreadableError,
    InvalidPermissionFormatError,
    InventoryError,
    LogSinkUnavailableError,
    MutationError,
    RenameFailedError,
    RootUnavailableError,
    TargetExistsError,
)
from dirinv.inventory.models import (
    AccessLogEntry,
    AccessLogKind,
    Entry,
    EntryKind,
    MutationResult,
    ScanResult,
    ScanSummary,
)
from dirinv.inventory.mutation import MutationService
from dirinv.inventory.store import Inventory
from dirinv.inventory.walker import CancellationToken, Walker

__all__ = [
    "AccessLog",
    "AccessLogEntry",
    "AccessLogKind",
    "CancellationToken",
    "ChmodFailedError",
    "DirectoryUnlistableError",
    "Entry",
    "EntryKind",
    "EntryNotFoundError",
    "EntryUnreadableError",
    "InvalidPermissionFormatError",
    "Inventory",
    "InventoryError",
    "LogSinkUnavailableError",
    "MutationError",
    "MutationResult",
    "MutationService",
    "RenameFailedError",
    "RootUnavailableError",
    "ScanResult",
    "ScanSummary",
    "TargetExistsError",
    "Walker",
    "read_access_log",
]
