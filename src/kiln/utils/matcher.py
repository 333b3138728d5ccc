"""Position-tracked regex matching.

A `Cursor` remembers how far into a string scanning has progressed, so that
anchored patterns can be applied back to back without re-scanning consumed
text. ``Pattern.match(string, pos)`` is already anchored at ``pos``, which is
exactly the primitive the template parser needs.

Example:
    >>> import re
    >>> cursor = Cursor("test1 test2")
    >>> pattern = re.compile(r"\\s*(test\\d)")
    >>> sticky_match(cursor, pattern)[1]
    'test1'
    >>> sticky_match(cursor, pattern)[1]
    'test2'
    >>> cursor.exhausted
    True

"""

from __future__ import annotations

import re
from dataclasses import dataclass


@dataclass(slots=True)
class Cursor:
    """Mutable scan position over an immutable string."""

    value: str
    offset: int = 0

    @property
    def exhausted(self) -> bool:
        """True once the offset has reached the end of the string."""
        return self.offset >= len(self.value)

    def rest(self) -> str:
        """Consume and return everything after the current offset."""
        remainder = self.value[self.offset :]
        self.offset = len(self.value)
        return remainder


def sticky_match(cursor: Cursor, pattern: re.Pattern[str]) -> re.Match[str] | None:
    """Match ``pattern`` exactly at the cursor position.

    On success the cursor advances to the end of the match. On failure the
    cursor is left where it was and None is returned.
    """
    match = pattern.match(cursor.value, cursor.offset)
    if match is not None:
        cursor.offset = match.end()
    return match
