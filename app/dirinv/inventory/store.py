"""In-memory inventory of scanned entries.

Holds the ordered snapshot produced by the last scan. Directories come
first, then everything else; each group is ordered byte-wise by path.
The order is fixed at load time and never recomputed by a refresh.
"""

import logging
import math
import os
from collections.abc import Iterable, Iterator

from dirinv.inventory.errors import EntryNotFoundError, TargetExistsError
from dirinv.inventory.models import Entry

logger = logging.getLogger(__name__)


def sort_key(entry: Entry) -> tuple[bool, bytes]:
    """Directories first, then ascending byte-wise path."""
    return (not entry.is_directory, os.fsencode(entry.path))


class Inventory:
    """Sorted collection of entries with path lookup and paging."""

    def __init__(self) -> None:
        self._entries: list[Entry] = []
        self._index: dict[str, int] = {}
        self._interrupted = False

    def load(self, entries: Iterable[Entry], interrupted: bool = False) -> None:
        """Replace the whole collection with a new scan's entries.

        Args:
            entries: Entries in any order; they are sorted here.
            interrupted: Whether the scan that produced them was cancelled.
        """
        ordered = sorted(entries, key=sort_key)
        self._entries = ordered
        self._index = {entry.path: position for position, entry in enumerate(ordered)}
        self._interrupted = interrupted
        if len(self._index) != len(ordered):
            logger.warning("Inventory loaded with duplicate paths")

    @property
    def interrupted(self) -> bool:
        """Whether the loaded snapshot comes from a cancelled scan."""
        return self._interrupted

    @property
    def entries(self) -> tuple[Entry, ...]:
        """All entries in display order."""
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Entry]:
        return iter(tuple(self._entries))

    def slice(self, page_index: int, page_size: int) -> tuple[Entry, ...]:
        """Return one page of entries.

        Out-of-range or negative page indices and non-positive page sizes
        yield an empty tuple rather than an error.
        """
        if page_index < 0 or page_size <= 0:
            return ()
        start = page_index * page_size
        return tuple(self._entries[start : start + page_size])

    def page_count(self, page_size: int) -> int:
        """Number of pages needed to show every entry."""
        if page_size <= 0:
            return 0
        return math.ceil(len(self._entries) / page_size)

    def find_by_path(self, path: str) -> Entry | None:
        """Look up an entry by its exact path."""
        position = self._index.get(path)
        if position is None:
            return None
        return self._entries[position]

    def refresh(self, path: str, new_entry: Entry) -> None:
        """Replace the entry at ``path`` in place, keeping its position.

        The new entry may carry a different path (after a rename); the
        collection is not re-sorted.

        Raises:
            EntryNotFoundError: If no entry has the given path.
            TargetExistsError: If another slot already holds the new path.
        """
        position = self._index.get(path)
        if position is None:
            raise EntryNotFoundError(path, "not in inventory")
        other = self._index.get(new_entry.path)
        if other is not None and other != position:
            raise TargetExistsError(path, f"{new_entry.path} is already in the inventory")

        self._entries[position] = new_entry
        if new_entry.path != path:
            del self._index[path]
            self._index[new_entry.path] = position
