"""
GLUA Error Hierarchy
====================

This module defines the exception hierarchy for the GLUA parser.
All exceptions inherit from GluaError, allowing callers to catch all
parser-related errors with a single except clause if desired.

Exception Hierarchy
-------------------
GluaError (base)
└── LuaSyntaxError - malformed source, first fatal error only
    ├── ExpectedTokenError - required token missing after a commitment point
    ├── InvalidAssignmentError - assignment target is not a variable
    ├── UnterminatedStringError - missing closing quote
    ├── UnterminatedLongBracketError - missing ]=*] for a long string/comment
    ├── InvalidEscapeError - bad escape sequence in a quoted string
    ├── MalformedNumberError - numeral that cannot be completed
    ├── TrailingInputError - bytes left over after the chunk
    └── TooDeepError - nesting limit exceeded

Error Message Format
--------------------
All syntax errors carry a source location and render as:

    filename:line:column: error: description
        source_line_text
            ^ (pointer to error location)
    hint: suggestion for fixing

Example:
    main.lua:3:1: error: expected 'end' near '<eof>'
        end
        ^
    hint: to close 'function' at line 1
"""

from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class GluaError(Exception):
    """
    Base exception for all GLUA errors.

        try:
            chunk = glua.parse(source)
        except GluaError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in source code for error reporting.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number in bytes (1-indexed)
        offset: Byte offset from the start of the source (0-indexed)
    """
    filename: str
    line: int
    column: int
    offset: int = 0

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"


# =============================================================================
# Syntax Errors
# =============================================================================

class LuaSyntaxError(GluaError):
    """
    Syntax error in Lua source code.

    Raised by the lexical acceptors and the parser once a construct has
    been committed to and cannot be completed. Parsing stops at the first
    such error.

    Attributes:
        message: The error description
        location: Where in the source the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The actual source text at the error location (optional)
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    @property
    def offset(self) -> Optional[int]:
        """Byte offset of the error, or None when no location is known."""
        return self.location.offset if self.location else None

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

            main.lua:2:9: error: unterminated string
                x = "abc
                    ^
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


class ExpectedTokenError(LuaSyntaxError):
    """
    Required token or construct is missing.

    Raised when a grammar alternative has been committed to (its keyword
    or opening token matched) and a later required piece is absent, e.g.
    a missing 'end', ')' or 'then'.
    """

    def __init__(
        self,
        expected: str,
        found: Optional[str] = None,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        hint: Optional[str] = None,
    ):
        self.expected = expected
        self.found = found
        message = f"expected {expected}"
        if found is not None:
            message += f" near '{found}'"
        super().__init__(
            message,
            location=location,
            hint=hint,
            source_line=source_line,
        )


class InvalidAssignmentError(LuaSyntaxError):
    """
    Invalid left-hand side of assignment.

    Only variables (names, indexed and field accesses) can be assigned.

    Examples of invalid targets:
        f(x) = 1
        (a) = 1
    """

    def __init__(
        self,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        super().__init__(
            "cannot assign to this expression",
            location=location,
            hint="left side of assignment must be a name, t[k] or t.k",
            source_line=source_line,
        )


class UnterminatedStringError(LuaSyntaxError):
    """
    Unterminated quoted string literal.

    Raised when a quoted string reaches a newline or end of input before
    its closing quote.
    """

    def __init__(
        self,
        quote: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.quote = quote
        super().__init__(
            "unterminated string",
            location=location,
            hint=f"add closing {quote} to complete the string",
            source_line=source_line,
        )


class UnterminatedLongBracketError(LuaSyntaxError):
    """
    Long string or long comment without a matching closing bracket.

    The closing bracket must have the same number of '=' signs as the
    opening one: [==[ ... ]==].
    """

    def __init__(
        self,
        level: int,
        what: str = "long string",
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.level = level
        super().__init__(
            f"unterminated {what}",
            location=location,
            hint=f"close it with ]{'=' * level}]",
            source_line=source_line,
        )


class InvalidEscapeError(LuaSyntaxError):
    """Unknown or malformed escape sequence in a quoted string."""

    def __init__(
        self,
        escape: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.escape = escape
        super().__init__(
            f"invalid escape sequence '{escape}'",
            location=location,
            source_line=source_line,
        )


class MalformedNumberError(LuaSyntaxError):
    """Numeral that starts correctly but cannot be completed (e.g. '1e', '3x')."""

    def __init__(
        self,
        text: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.text = text
        super().__init__(
            f"malformed number near '{text}'",
            location=location,
            source_line=source_line,
        )


class TrailingInputError(LuaSyntaxError):
    """Input remains after a complete chunk was parsed."""

    def __init__(
        self,
        found: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.found = found
        super().__init__(
            f"unexpected '{found}' after end of chunk",
            location=location,
            hint="expected end of input",
            source_line=source_line,
        )


class TooDeepError(LuaSyntaxError):
    """
    Nesting limit exceeded.

    Raised instead of overflowing the Python stack on deeply nested
    expressions or blocks.
    """

    def __init__(
        self,
        limit: int,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.limit = limit
        super().__init__(
            f"chunk nests too deeply (limit is {limit})",
            location=location,
            source_line=source_line,
        )
