"""Error taxonomy for the inventory engine.

Walk failures beneath the root (unlistable directories, unreadable
entries) are recovered locally and only ever reach the access log.
``RootUnavailableError`` is raised to the caller. Mutation failures are
returned inside a ``MutationResult`` so the host can show their reason.
"""


class InventoryError(Exception):
    """Base exception for inventory errors.

    Attributes:
        path: Filesystem path the failure refers to.
        reason: Human-readable cause, usually the OS error text.
    """

    label = "Inventory error"

    def __init__(self, path: str, reason: str = "") -> None:
        self.path = path
        self.reason = reason
        super().__init__(self._format())

    def _format(self) -> str:
        if self.reason:
            return f"{self.label}: {self.path} ({self.reason})"
        return f"{self.label}: {self.path}"


class RootUnavailableError(InventoryError):
    """Raised when the scan root is missing, not a directory, or not listable."""

    label = "Root unavailable"


class DirectoryUnlistableError(InventoryError):
    """A directory beneath the root failed the access probe or its listing."""

    label = "Directory unlistable"


class EntryUnreadableError(InventoryError):
    """Metadata for a single entry could not be read."""

    label = "Entry unreadable"


class LogSinkUnavailableError(InventoryError):
    """The access log file could not be opened."""

    label = "Log sink unavailable"


class MutationError(InventoryError):
    """Base class for failures of rename/chmod requests."""

    label = "Mutation failed"


class EntryNotFoundError(MutationError):
    """No entry with the given path exists in the inventory."""

    label = "Entry not found"


class TargetExistsError(MutationError):
    """The rename destination already exists."""

    label = "Target exists"


class InvalidPermissionFormatError(MutationError):
    """A permission string does not match the 10-glyph listing grammar."""

    label = "Invalid permission format"


class RenameFailedError(MutationError):
    """The rename syscall failed or the new name was rejected."""

    label = "Rename failed"


class ChmodFailedError(MutationError):
    """The chmod syscall failed."""

    label = "Chmod failed"
