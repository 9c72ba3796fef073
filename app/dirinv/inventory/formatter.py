"""Listing-style formatting of raw filesystem metadata.

Pure helpers turning ``lstat`` results into the strings a Unix long
listing shows: the 10-character permission column, the ``ls`` date
column and the ``actual/allocated`` size pair. ``parse_permission_string``
is the inverse used by chmod.

None of the display helpers raise; bad input degrades to a fixed value.
"""

import re
import stat
import time
from collections.abc import Callable
from datetime import date, datetime

from dirinv.inventory.errors import InvalidPermissionFormatError

# Shown when a modification time cannot be converted to a local date
SENTINEL_DATE = "Jan  1  1970"

# Fixed English abbreviations, independent of the process locale
_MONTHS: tuple[str, ...] = (
    "Jan",
    "Feb",
    "Mar",
    "Apr",
    "May",
    "Jun",
    "Jul",
    "Aug",
    "Sep",
    "Oct",
    "Nov",
    "Dec",
)

# Regular files are checked first since they dominate most trees
_TYPE_GLYPHS: tuple[tuple[Callable[[int], bool], str], ...] = (
    (stat.S_ISREG, "-"),
    (stat.S_ISDIR, "d"),
    (stat.S_ISLNK, "l"),
    (stat.S_ISBLK, "b"),
    (stat.S_ISCHR, "c"),
    (stat.S_ISFIFO, "p"),
    (stat.S_ISSOCK, "s"),
)

_PERMISSION_PATTERN = re.compile(r"[-dlbcps?][r-][w-][xsS-][r-][w-][xsS-][r-][w-][xtT-]")


def type_glyph(raw_mode: int) -> str:
    """Return the single-character file type glyph for a raw mode."""
    for predicate, glyph in _TYPE_GLYPHS:
        if predicate(raw_mode):
            return glyph
    return "?"


def _triple(raw_mode: int, read: int, write: int, execute: int, special: int, marks: str) -> str:
    """Render one rwx triple, folding a special bit into the execute slot.

    ``marks`` holds the glyphs for special-with-execute and
    special-without-execute (``"sS"`` or ``"tT"``).
    """
    r = "r" if raw_mode & read else "-"
    w = "w" if raw_mode & write else "-"
    has_exec = bool(raw_mode & execute)
    if raw_mode & special:
        x = marks[0] if has_exec else marks[1]
    else:
        x = "x" if has_exec else "-"
    return r + w + x


def permission_string(raw_mode: int) -> str:
    """Render a raw mode as a 10-character listing permission string.

    Position 0 is the type glyph. Setuid and setgid show as ``s``/``S`` in
    the owner and group execute slots, the sticky bit as ``t``/``T`` in
    the other execute slot.

    Args:
        raw_mode: ``st_mode`` value including file type bits.

    Returns:
        String such as ``drwxr-xr-x`` or ``-rw-r--r--``.
    """
    return (
        type_glyph(raw_mode)
        + _triple(raw_mode, stat.S_IRUSR, stat.S_IWUSR, stat.S_IXUSR, stat.S_ISUID, "sS")
        + _triple(raw_mode, stat.S_IRGRP, stat.S_IWGRP, stat.S_IXGRP, stat.S_ISGID, "sS")
        + _triple(raw_mode, stat.S_IROTH, stat.S_IWOTH, stat.S_IXOTH, stat.S_ISVTX, "tT")
    )


def parse_permission_string(text: str) -> int:
    """Translate a 10-character permission string into permission bits.

    The type glyph is validated but carries no bits; a chmod cannot
    change the type of a file.

    Args:
        text: Listing-style permission string, e.g. ``-rwxr-x--T``.

    Returns:
        Integer suitable for ``os.chmod`` (permission and special bits only).

    Raises:
        InvalidPermissionFormatError: If the text is not exactly ten
            glyphs from the accepted grammar.
    """
    if not isinstance(text, str) or not _PERMISSION_PATTERN.fullmatch(text):
        raise InvalidPermissionFormatError(
            str(text), "expected 10 characters like '-rwxr-xr-x'"
        )

    bits = 0
    if text[1] == "r":
        bits |= stat.S_IRUSR
    if text[2] == "w":
        bits |= stat.S_IWUSR
    if text[3] in "xs":
        bits |= stat.S_IXUSR
    if text[3] in "sS":
        bits |= stat.S_ISUID
    if text[4] == "r":
        bits |= stat.S_IRGRP
    if text[5] == "w":
        bits |= stat.S_IWGRP
    if text[6] in "xs":
        bits |= stat.S_IXGRP
    if text[6] in "sS":
        bits |= stat.S_ISGID
    if text[7] == "r":
        bits |= stat.S_IROTH
    if text[8] == "w":
        bits |= stat.S_IWOTH
    if text[9] in "xt":
        bits |= stat.S_IXOTH
    if text[9] in "tT":
        bits |= stat.S_ISVTX
    return bits


def date_string(modified_at: float, reference_year: int) -> str:
    """Render a modification time the way ``ls -l`` does.

    Entries from the reference year show the time of day, older or
    future-year entries show the year instead. The day is space-padded so
    the column has a fixed width.

    Args:
        modified_at: POSIX timestamp (seconds).
        reference_year: Year considered "current".

    Returns:
        ``"Mon DD HH:MM"`` or ``"Mon DD  YYYY"``, or ``SENTINEL_DATE`` if
        the timestamp cannot be represented.
    """
    try:
        moment = datetime.fromtimestamp(modified_at)
    except (OverflowError, OSError, ValueError, TypeError):
        return SENTINEL_DATE

    month = _MONTHS[moment.month - 1]
    if moment.year == reference_year:
        return f"{month} {moment.day:>2} {moment.hour:02d}:{moment.minute:02d}"
    return f"{month} {moment.day:>2}  {moment.year}"


def allocated_size(actual_size: int, block_size: int) -> int:
    """Round a byte count up to a whole number of blocks (0 stays 0)."""
    if actual_size <= 0:
        return 0
    return -(-actual_size // block_size) * block_size


def size_display(actual_size: int, allocated: int) -> str:
    """Format the ``actual/allocated`` size pair."""
    return f"{actual_size}/{allocated}"


class ReferenceYear:
    """Cached "current year" used to pick the date column layout.

    The year is re-read from the calendar at most once per ``ttl``
    seconds, so a listing produced just after New Year may briefly still
    use the previous year.

    Args:
        ttl: Seconds before the cached year is refreshed.
        clock: Monotonic clock, injectable for tests.
        today: Calendar source, injectable for tests.
    """

    def __init__(
        self,
        ttl: float = 3600.0,
        *,
        clock: Callable[[], float] = time.monotonic,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._ttl = ttl
        self._clock = clock
        self._today = today
        self._year: int | None = None
        self._loaded_at = 0.0

    def current(self) -> int:
        """Return the cached year, refreshing it once the TTL has elapsed."""
        now = self._clock()
        if self._year is None or now - self._loaded_at >= self._ttl:
            self._year = self._today().year
            self._loaded_at = now
        return self._year
