"""
Source Cursor
=============

An immutable view over the remaining input bytes plus a position.

Every lexical acceptor and parser method takes a Cursor and returns a
new one on success, or the same one on failure. Because a Cursor can
never change, several grammar alternatives may be tried from the same
starting Cursor without one attempt disturbing another.

Example
-------
>>> from glua.cursor import Cursor
>>> c = Cursor(b"local x")
>>> c.startswith(b"local")
True
>>> c.advance(5).offset
5
>>> c.offset
0
"""

import re
from dataclasses import dataclass

from glua.errors import SourceLocation


# Same line breaks the lexer skips: '\n', '\r', '\r\n' or '\n\r'
_LINE_BREAK = re.compile(rb"\r\n|\n\r|\r|\n")
_LINE_END = re.compile(rb"[\r\n]")


@dataclass(frozen=True)
class Cursor:
    """
    Read-only position in a source buffer.

    Attributes:
        source: The complete source bytes (shared, never copied)
        offset: Index of the next unread byte, 0 <= offset <= len(source)
        filename: Name used when reporting error locations
    """
    source: bytes
    offset: int = 0
    filename: str = "<input>"

    def __post_init__(self):
        if not 0 <= self.offset <= len(self.source):
            raise ValueError(
                f"cursor offset {self.offset} outside 0..{len(self.source)}"
            )

    def __repr__(self) -> str:
        return f"Cursor({self.filename}@{self.offset}/{len(self.source)})"

    # =========================================================================
    # Inspection
    # =========================================================================

    def at_end(self) -> bool:
        """Return True if no input remains."""
        return self.offset >= len(self.source)

    def peek(self, ahead: int = 0) -> int:
        """
        Return the byte at offset + ahead, or -1 past the end of input.

        Using -1 keeps comparisons against byte values simple for callers.
        """
        pos = self.offset + ahead
        if pos >= len(self.source):
            return -1
        return self.source[pos]

    def startswith(self, prefix: bytes) -> bool:
        """Return True if the remaining input begins with prefix."""
        return self.source.startswith(prefix, self.offset)

    def remaining(self) -> bytes:
        """Return the unread part of the source."""
        return self.source[self.offset:]

    # =========================================================================
    # Movement
    # =========================================================================

    def advance(self, count: int = 1) -> "Cursor":
        """Return a cursor count bytes further on, clamped at end of input."""
        return self.seek(min(self.offset + count, len(self.source)))

    def seek(self, offset: int) -> "Cursor":
        """Return a cursor over the same source at an absolute offset."""
        if offset == self.offset:
            return self
        return Cursor(self.source, offset, self.filename)

    # =========================================================================
    # Diagnostics
    # =========================================================================

    def location(self) -> SourceLocation:
        """Line and column (both 1-based) of the current offset."""
        line, line_start = self._line_start()
        column = self.offset - line_start + 1
        return SourceLocation(self.filename, line, column, self.offset)

    def source_line(self) -> str:
        """Text of the line holding the current offset, for error context."""
        _, line_start = self._line_start()
        match = _LINE_END.search(self.source, line_start)
        line_end = match.start() if match else len(self.source)
        return self.source[line_start:line_end].decode("utf-8", errors="replace")

    def _line_start(self) -> tuple[int, int]:
        """1-based line number and start offset of the line holding offset."""
        line, line_start = 1, 0
        for match in _LINE_BREAK.finditer(self.source, 0, self.offset):
            line += 1
            line_start = match.end()
        return line, line_start

    def near(self, limit: int = 12) -> str:
        """
        Short excerpt of the input at the cursor for error messages.

        Decodes a single UTF-8 scalar at a time, so a multi-byte character
        is never split in the excerpt.
        """
        if self.at_end():
            return "<eof>"
        chunk = self.source[self.offset:self.offset + limit]
        text = chunk.decode("utf-8", errors="ignore")
        if not text:
            return f"\\x{chunk[0]:02X}"
        return re.split(r"[\r\n]", text, maxsplit=1)[0] or "<newline>"
