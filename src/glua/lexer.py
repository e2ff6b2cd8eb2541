"""
GLUA Lexical Acceptors
======================

This module implements the terminal recognizers of the scannerless parser.
There is no token stream: the parser calls an acceptor at the point where
it expects a terminal, and the acceptor reads directly from the Cursor.

Every acceptor has the shape

    accept_xxx(cursor, ...) -> (Cursor, Optional[Token])

On success it returns a cursor positioned after the token. On no-match it
returns the cursor it was given, unchanged, and None; it never raises for a
plain mismatch. Once an opening delimiter has been consumed (a quote, a long
bracket, the digits of a numeral) a failure to complete the token is fatal
and raises a LuaSyntaxError subclass instead.

Token Categories
----------------
- Literal: an exact byte sequence, no boundary check
- Symbol: punctuation matched by maximal munch ('..' is never '.' + '.')
- Keyword: reserved word followed by a non-identifier byte or end of input
- Name: [A-Za-z_][A-Za-z0-9_]* that is not a reserved word
- Numeral: decimal or hexadecimal, integer or float
- LiteralString: 'quoted', "quoted" or [==[long bracket]==]

Trivia
------
Whitespace, short comments (-- to end of line) and long comments
(--[[ ... ]]) are skipped before every token.

Escape Sequences
----------------
\\a \\b \\f \\n \\r \\t \\v \\\\ \\" \\' , backslash-newline, \\z (skip
whitespace), \\xXX, \\ddd (decimal, up to 255), \\u{XXX} (UTF-8)

Example Usage
-------------
>>> from glua.cursor import Cursor
>>> from glua.lexer import accept_keyword, accept_name
>>> accept_keyword(Cursor(b"forward"), "for")[1] is None
True
>>> accept_name(Cursor(b"forward"))[1]
Token(NAME, 'forward', @0)
"""

import re
import string
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

from glua.cursor import Cursor
from glua.errors import (
    LuaSyntaxError,
    UnterminatedStringError,
    UnterminatedLongBracketError,
    InvalidEscapeError,
    MalformedNumberError,
)


# =============================================================================
# Token Type Enumeration
# =============================================================================

class TokenType(Enum):
    """Categories of terminals produced by the acceptors."""
    LITERAL = auto()    # exact byte sequence
    SYMBOL = auto()     # punctuation / operator
    KEYWORD = auto()    # reserved word
    NAME = auto()       # identifier
    NUMERAL = auto()    # numeric constant, kept as source text
    STRING = auto()     # string constant, decoded into Token.value


@dataclass(frozen=True)
class Token:
    """
    A terminal recognized by an acceptor.

    Attributes:
        type: The TokenType classification
        text: The token's source text (the full literal for strings)
        offset: Byte offset of the first byte of the token
        value: Decoded bytes for STRING tokens, None otherwise
    """
    type: TokenType
    text: str
    offset: int
    value: Optional[bytes] = None

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.text!r}, @{self.offset})"


# =============================================================================
# Character Classes and Tables
# =============================================================================

KEYWORDS = frozenset({
    "and", "break", "do", "else", "elseif", "end", "false", "for",
    "function", "goto", "if", "in", "local", "nil", "not", "or",
    "repeat", "return", "then", "true", "until", "while",
})

# Every punctuation token of the language
SYMBOLS = (
    "+", "-", "*", "/", "//", "%", "^", "#", "&", "~", "|", "<<", ">>",
    "==", "~=", "<=", ">=", "<", ">", "=",
    "(", ")", "{", "}", "[", "]", "::", ";", ":", ",", ".", "..", "...",
)

IDENT_START = frozenset((string.ascii_letters + "_").encode("ascii"))
IDENT_CHARS = frozenset((string.ascii_letters + string.digits + "_").encode("ascii"))
DIGITS = frozenset(string.digits.encode("ascii"))
HEX_DIGITS = frozenset(string.hexdigits.encode("ascii"))
WHITESPACE = frozenset(b" \t\n\v\f\r")

# Candidates grouped by first byte, longest first, for maximal munch
_SYMBOLS_BY_FIRST: dict[int, tuple[bytes, ...]] = {}
for _symbol in sorted(SYMBOLS, key=len, reverse=True):
    _key = _symbol.encode("ascii")
    _SYMBOLS_BY_FIRST[_key[0]] = _SYMBOLS_BY_FIRST.get(_key[0], ()) + (_key,)
del _symbol, _key

SIMPLE_ESCAPES = {
    ord("a"): b"\a",
    ord("b"): b"\b",
    ord("f"): b"\f",
    ord("n"): b"\n",
    ord("r"): b"\r",
    ord("t"): b"\t",
    ord("v"): b"\v",
    ord("\\"): b"\\",
    ord('"'): b'"',
    ord("'"): b"'",
}

_LINE_BREAK = re.compile(rb"\r\n|\n\r|\r|\n")

MAX_UTF8_ESCAPE = 0x7FFFFFFF


# =============================================================================
# Helpers
# =============================================================================

def _scan(source: bytes, pos: int, charset: frozenset) -> int:
    """Return the first position at or after pos whose byte is not in charset."""
    end = len(source)
    while pos < end and source[pos] in charset:
        pos += 1
    return pos


def _skip_line_break(source: bytes, pos: int) -> int:
    """Skip one line break ('\\n', '\\r', '\\r\\n' or '\\n\\r') at pos, if any."""
    if pos < len(source) and source[pos] in b"\r\n":
        first = source[pos]
        pos += 1
        if pos < len(source) and source[pos] in b"\r\n" and source[pos] != first:
            pos += 1
    return pos


def long_bracket_level(source: bytes, pos: int) -> Optional[int]:
    """
    Return the level of a long bracket opener '[' '='* '[' at pos.

    Returns None if pos does not start a well-formed opener.
    """
    if pos >= len(source) or source[pos] != ord("["):
        return None
    after = _scan(source, pos + 1, frozenset(b"="))
    if after < len(source) and source[after] == ord("["):
        return after - pos - 1
    return None


def _error_at(cursor: Cursor, offset: int) -> tuple:
    """Location and source line for an error raised at offset."""
    at = cursor.seek(offset)
    return at.location(), at.source_line()


def _utf8_escape(code_point: int) -> bytes:
    """
    Encode a code point the way Lua's \\u{XXX} escape does.

    Unlike str.encode('utf-8') this accepts surrogates and values up to
    2^31 using the original (up to six byte) UTF-8 scheme.
    """
    if code_point < 0x80:
        return bytes([code_point])
    encoded = []
    first_max = 0x3F
    while code_point > first_max:
        encoded.append(0x80 | (code_point & 0x3F))
        code_point >>= 6
        first_max >>= 1
    encoded.append(((~first_max << 1) & 0xFF) | code_point)
    return bytes(reversed(encoded))


# =============================================================================
# Trivia
# =============================================================================

def skip_trivia(cursor: Cursor) -> Cursor:
    """
    Skip whitespace and comments.

    Raises:
        UnterminatedLongBracketError: If a long comment is never closed
    """
    source = cursor.source
    end = len(source)
    pos = cursor.offset

    while pos < end:
        if source[pos] in WHITESPACE:
            pos += 1
            continue

        if not source.startswith(b"--", pos):
            break

        level = long_bracket_level(source, pos + 2)
        if level is None:
            # Short comment runs to end of line
            while pos < end and source[pos] not in b"\r\n":
                pos += 1
            continue

        closer = b"]" + b"=" * level + b"]"
        close = source.find(closer, pos + 2 + level + 2)
        if close < 0:
            location, line = _error_at(cursor, pos)
            raise UnterminatedLongBracketError(level, "long comment", location, line)
        pos = close + len(closer)

    return cursor.seek(pos)


# =============================================================================
# Literal, Symbol and Keyword Acceptors
# =============================================================================

def accept_literal(cursor: Cursor, text: str) -> tuple[Cursor, Optional[Token]]:
    """Match an exact byte sequence with no boundary check."""
    start = skip_trivia(cursor)
    if not start.startswith(text.encode("ascii")):
        return cursor, None
    return start.advance(len(text)), Token(TokenType.LITERAL, text, start.offset)


def peek_symbol(cursor: Cursor) -> Optional[str]:
    """
    Return the longest punctuation token at the cursor, without consuming it.

    A '[' that opens a long bracket ('[[' or '[=') is part of a string, not
    a symbol, so None is returned for it.
    """
    start = skip_trivia(cursor)
    first = start.peek()
    if first == ord("[") and start.peek(1) in (ord("["), ord("=")):
        return None
    for candidate in _SYMBOLS_BY_FIRST.get(first, ()):
        if start.startswith(candidate):
            return candidate.decode("ascii")
    return None


def accept_symbol(cursor: Cursor, text: str) -> tuple[Cursor, Optional[Token]]:
    """
    Match punctuation under maximal munch.

    accept_symbol(c, ".") fails on '..', accept_symbol(c, "=") fails on '=='.
    """
    if peek_symbol(cursor) != text:
        return cursor, None
    start = skip_trivia(cursor)
    return start.advance(len(text)), Token(TokenType.SYMBOL, text, start.offset)


def accept_keyword(cursor: Cursor, word: str) -> tuple[Cursor, Optional[Token]]:
    """
    Match a reserved word that is not the prefix of a longer identifier.

    'for' matches in 'for i' and 'for(' but not in 'forward'. A non-ASCII
    byte after the word also rejects the match.
    """
    after, literal = accept_literal(cursor, word)
    if literal is None or after.peek() in IDENT_CHARS or after.peek() >= 0x80:
        return cursor, None
    return after, Token(TokenType.KEYWORD, word, literal.offset)


# =============================================================================
# Name Acceptor
# =============================================================================

def accept_name(cursor: Cursor) -> tuple[Cursor, Optional[Token]]:
    """Match an identifier that is not a reserved word."""
    start = skip_trivia(cursor)
    if start.peek() not in IDENT_START:
        return cursor, None
    end = _scan(start.source, start.offset, IDENT_CHARS)
    text = start.source[start.offset:end].decode("ascii")
    if text in KEYWORDS:
        return cursor, None
    return start.seek(end), Token(TokenType.NAME, text, start.offset)


# =============================================================================
# Numeral Acceptor
# =============================================================================

def accept_numeral(cursor: Cursor) -> tuple[Cursor, Optional[Token]]:
    """
    Match the longest numeral at the cursor.

    Decimal:     digits ['.' [digits]] [('e'|'E') ['+'|'-'] digits]
                 '.' digits [exponent]
    Hexadecimal: ('0x'|'0X') hexdigits ['.' [hexdigits]] [('p'|'P') ['+'|'-'] digits]

    A '.' followed by another '.' is left alone, so '1..2' is a
    concatenation.

    Raises:
        MalformedNumberError: If a numeral has started but is invalid,
            e.g. '1e', '0x', '3x' or '1.2.3'
    """
    start = skip_trivia(cursor)
    source = start.source
    pos = start.offset
    first = start.peek()

    if first not in DIGITS and not (first == ord(".") and start.peek(1) in DIGITS):
        return cursor, None

    if source.startswith((b"0x", b"0X"), pos):
        digit_set, exponent_marks = HEX_DIGITS, b"pP"
        pos += 2
    else:
        digit_set, exponent_marks = DIGITS, b"eE"

    mantissa_start = pos
    pos = _scan(source, pos, digit_set)
    digit_count = pos - mantissa_start
    if _is_single_dot(source, pos):
        fraction_start = pos + 1
        pos = _scan(source, fraction_start, digit_set)
        digit_count += pos - fraction_start

    if digit_count == 0:
        _malformed(start, pos)

    if pos < len(source) and source[pos] in exponent_marks:
        pos += 1
        if pos < len(source) and source[pos] in b"+-":
            pos += 1
        exponent_start = pos
        pos = _scan(source, pos, DIGITS)
        if pos == exponent_start:
            _malformed(start, pos)

    # A numeral may not run straight into a name or another fraction
    if pos < len(source) and (source[pos] in IDENT_CHARS or _is_single_dot(source, pos)):
        _malformed(start, pos)

    text = source[start.offset:pos].decode("ascii")
    return start.seek(pos), Token(TokenType.NUMERAL, text, start.offset)


def _is_single_dot(source: bytes, pos: int) -> bool:
    """True if pos holds a '.' that is not the start of '..'."""
    return (
        pos < len(source)
        and source[pos] == ord(".")
        and not source.startswith(b"..", pos)
    )


def _malformed(start: Cursor, pos: int) -> None:
    """Raise MalformedNumberError for the numeral-like run beginning at start."""
    end = _scan(start.source, pos, IDENT_CHARS | frozenset(b"."))
    text = start.source[start.offset:end].decode("ascii", errors="replace")
    raise MalformedNumberError(text, start.location(), start.source_line())


# =============================================================================
# LiteralString Acceptor
# =============================================================================

def accept_literal_string(cursor: Cursor) -> tuple[Cursor, Optional[Token]]:
    """
    Match a quoted or long-bracket string literal.

    The token's value holds the decoded bytes; its text holds the literal
    exactly as written.

    Raises:
        UnterminatedStringError: Quoted string not closed on the same line
        UnterminatedLongBracketError: No ]=*] of the opener's level
        InvalidEscapeError: Bad escape sequence in a quoted string
        LuaSyntaxError: '[' followed by '=' signs but no second '['
    """
    start = skip_trivia(cursor)
    first = start.peek()

    if first in (ord('"'), ord("'")):
        return _read_quoted_string(start)

    if first == ord("["):
        level = long_bracket_level(start.source, start.offset)
        if level is not None:
            return _read_long_string(start, level)
        if start.peek(1) == ord("="):
            raise LuaSyntaxError(
                "invalid long string delimiter",
                start.location(),
                hint="long strings open with [[ or [=[ (any number of '=')",
                source_line=start.source_line(),
            )

    return cursor, None


def _read_long_string(start: Cursor, level: int) -> tuple[Cursor, Token]:
    """Read [=*[ ... ]=*] starting at start; the opener has been validated."""
    source = start.source
    body_start = _skip_line_break(source, start.offset + level + 2)

    closer = b"]" + b"=" * level + b"]"
    close = source.find(closer, body_start)
    if close < 0:
        raise UnterminatedLongBracketError(
            level, "long string", start.location(), start.source_line()
        )

    value = _LINE_BREAK.sub(b"\n", source[body_start:close])
    end = close + len(closer)
    text = source[start.offset:end].decode("utf-8", errors="replace")
    return start.seek(end), Token(TokenType.STRING, text, start.offset, value)


def _read_quoted_string(start: Cursor) -> tuple[Cursor, Token]:
    """Read a '...' or "..." literal starting at start, decoding escapes."""
    source = start.source
    end = len(source)
    quote = source[start.offset]
    quote_char = chr(quote)
    pos = start.offset + 1
    value = bytearray()

    while True:
        if pos >= end or source[pos] in b"\r\n":
            raise UnterminatedStringError(quote_char, start.location(), start.source_line())

        byte = source[pos]
        if byte == quote:
            pos += 1
            break
        if byte == ord("\\"):
            pos = _read_escape(start, pos, value)
        else:
            value.append(byte)
            pos += 1

    text = source[start.offset:pos].decode("utf-8", errors="replace")
    return start.seek(pos), Token(TokenType.STRING, text, start.offset, bytes(value))


def _read_escape(start: Cursor, pos: int, value: bytearray) -> int:
    """
    Decode the escape sequence whose backslash is at pos into value.

    Returns the position after the escape.
    """
    source = start.source
    end = len(source)
    if pos + 1 >= end:
        raise UnterminatedStringError(chr(source[start.offset]), start.location(), start.source_line())

    kind = source[pos + 1]

    if kind in SIMPLE_ESCAPES:
        value += SIMPLE_ESCAPES[kind]
        return pos + 2

    if kind in b"\r\n":
        value += b"\n"
        return _skip_line_break(source, pos + 1)

    if kind == ord("z"):
        return _scan(source, pos + 2, WHITESPACE)

    if kind == ord("x"):
        digits = source[pos + 2:pos + 4]
        if len(digits) != 2 or not all(d in HEX_DIGITS for d in digits):
            _invalid_escape(start, pos, pos + 2 + len(digits))
        value.append(int(digits, 16))
        return pos + 4

    if kind in DIGITS:
        digits_end = pos + 1
        while digits_end < min(end, pos + 4) and source[digits_end] in DIGITS:
            digits_end += 1
        number = int(source[pos + 1:digits_end])
        if number > 255:
            _invalid_escape(start, pos, digits_end)
        value.append(number)
        return digits_end

    if kind == ord("u"):
        if pos + 2 >= end or source[pos + 2] != ord("{"):
            _invalid_escape(start, pos, pos + 3)
        digits_end = _scan(source, pos + 3, HEX_DIGITS)
        if (
            digits_end == pos + 3
            or digits_end >= end
            or source[digits_end] != ord("}")
        ):
            _invalid_escape(start, pos, digits_end + 1)
        code_point = int(source[pos + 3:digits_end], 16)
        if code_point > MAX_UTF8_ESCAPE:
            _invalid_escape(start, pos, digits_end + 1)
        value += _utf8_escape(code_point)
        return digits_end + 1

    _invalid_escape(start, pos, pos + 2)


def _invalid_escape(start: Cursor, pos: int, stop: int) -> None:
    """Raise InvalidEscapeError for source[pos:stop]."""
    escape = start.source[pos:min(stop, len(start.source))].decode("utf-8", errors="replace")
    location, line = _error_at(start, pos)
    raise InvalidEscapeError(escape, location, line)


# =============================================================================
# Lookahead
# =============================================================================

def peek_word(cursor: Cursor) -> Optional[str]:
    """
    Return the identifier or reserved word at the cursor without consuming it.

    Used by the parser to pick a statement form from its leading keyword.
    """
    start = skip_trivia(cursor)
    if start.peek() not in IDENT_START:
        return None
    end = _scan(start.source, start.offset, IDENT_CHARS)
    return start.source[start.offset:end].decode("ascii")
